from __future__ import annotations


def to_number(value) -> float:
    """Coerce stored numeric fields; missing or malformed values become 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value or "").strip().replace("₹", "").replace(",", "")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if number != number or number in (float("inf"), float("-inf")):
        return 0.0
    return number


def group_indian(whole: int) -> str:
    """12345678 -> '1,23,45,678' (lakh/crore grouping)."""
    digits = str(abs(whole))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        digits = ",".join(pairs) + "," + tail
    return ("-" if whole < 0 else "") + digits


def format_inr(value) -> str:
    """Rupee amount without decimals, e.g. '₹1,25,000'."""
    amount = int(round(to_number(value)))
    sign = "-" if amount < 0 else ""
    return f"{sign}₹{group_indian(abs(amount))}"


def format_quantity(value) -> str:
    number = to_number(value)
    if number == int(number):
        return str(int(number))
    return f"{number:g}"
