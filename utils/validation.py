from __future__ import annotations

from typing import Iterable

from core.config import (
    MOBILE_PATTERN,
    STR_NUMBER_PATTERN,
    STR_STATUSES,
    VEHICLE_NUMBER_PATTERN,
    VEHICLE_TYPES,
)


def normalize_whitespace(value: str) -> str:
    return " ".join(str(value or "").strip().split())


def required_text(label: str, value: str, max_len: int = 100) -> str:
    cleaned = normalize_whitespace(value)
    if not cleaned:
        raise ValueError(f"{label} is required.")
    if len(cleaned) > max_len:
        raise ValueError(f"{label} must be {max_len} characters or fewer.")
    return cleaned


def optional_text(label: str, value: str, max_len: int = 200) -> str:
    cleaned = normalize_whitespace(value)
    if len(cleaned) > max_len:
        raise ValueError(f"{label} must be {max_len} characters or fewer.")
    return cleaned


def required_vehicle_number(value: str) -> str:
    cleaned = normalize_whitespace(value).upper().replace("—", "-").replace("–", "-")
    if not cleaned:
        raise ValueError("Vehicle number is required.")
    if not VEHICLE_NUMBER_PATTERN.fullmatch(cleaned):
        raise ValueError("Vehicle number must be 4-15 chars (A-Z, 0-9, dash, space).")
    return cleaned


def required_mobile(value: str) -> str:
    cleaned = normalize_whitespace(value).replace(" ", "").replace("-", "")
    if cleaned.startswith("+91"):
        cleaned = cleaned[3:]
    if not cleaned:
        raise ValueError("Mobile number is required.")
    if not MOBILE_PATTERN.fullmatch(cleaned):
        raise ValueError("Valid 10-digit mobile number is required.")
    return cleaned


def required_str_number(value: str) -> str:
    cleaned = normalize_whitespace(value).upper()
    if not cleaned:
        raise ValueError("STR number is required.")
    if not STR_NUMBER_PATTERN.fullmatch(cleaned):
        raise ValueError("STR number may only contain letters, digits, '-', '/' and spaces.")
    return cleaned


def vehicle_type(value: str) -> str:
    cleaned = normalize_whitespace(value).lower()
    if not cleaned:
        raise ValueError("Vehicle type is required.")
    if cleaned not in VEHICLE_TYPES:
        raise ValueError(f"Vehicle type must be one of: {', '.join(VEHICLE_TYPES)}.")
    return cleaned


def str_status(value: str) -> str:
    cleaned = normalize_whitespace(value)
    for status in STR_STATUSES:
        if cleaned.lower() == status.lower():
            return status
    raise ValueError(f"STR status must be one of: {', '.join(STR_STATUSES)}.")


def _parse_number(label: str, value) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    cleaned = normalize_whitespace(value).replace("₹", "").replace(",", "")
    if not cleaned:
        raise ValueError(f"{label} is required.")
    try:
        return float(cleaned)
    except ValueError:
        raise ValueError(f"{label} must be numeric.")


def positive_float(label: str, value) -> float:
    number = _parse_number(label, value)
    if number <= 0:
        raise ValueError(f"{label} must be greater than 0.")
    return number


def non_negative_float(label: str, value) -> float:
    """Blank counts as 0; negatives are rejected."""
    if not isinstance(value, (int, float)) and not normalize_whitespace(value):
        return 0.0
    number = _parse_number(label, value)
    if number < 0:
        raise ValueError(f"{label} cannot be negative.")
    return number


def parse_villages(value) -> list[str]:
    """
    Accept a comma/semicolon separated string or an iterable of names.

    Order is preserved and repeats are dropped case-insensitively.
    """
    if isinstance(value, str):
        raw: Iterable[str] = value.replace(";", ",").split(",")
    else:
        raw = value or []
    villages: list[str] = []
    seen: set[str] = set()
    for item in raw:
        name = normalize_whitespace(item)
        if name and name.lower() not in seen:
            seen.add(name.lower())
            villages.append(name)
    return villages


def required_villages(value) -> list[str]:
    villages = parse_villages(value)
    if not villages:
        raise ValueError("At least one village is required.")
    return villages
