"""
Advance aggregation.

Every stored advance is first normalized into a ``NormalizedAdvance`` whose
``kind`` says which bucket it belongs to; ``calculate_advance_totals`` then
only sums buckets. Records are accepted as ``Advance`` instances or as raw
mappings in either camelCase (``advanceAmount``) or snake_case
(``advance_amount``) spelling.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from core.config import ADVANCE_TYPE_ADDITIONAL, ADVANCE_TYPE_INITIAL
from data.models import Advance, pick
from utils.currency import to_number


class AdvanceKind(enum.Enum):
    INITIAL = ADVANCE_TYPE_INITIAL
    ADDITIONAL = ADVANCE_TYPE_ADDITIONAL


@dataclass(frozen=True)
class NormalizedAdvance:
    amount: float
    kind: AdvanceKind | None
    record: Any


@dataclass
class AdvanceTotals:
    initial_advances: list = field(default_factory=list)
    additional_advances: list = field(default_factory=list)
    initial: float = 0.0
    additional: float = 0.0
    total: float = 0.0
    # Length of the whole input, unclassified records included.
    count: int = 0
    initial_count: int = 0
    additional_count: int = 0


def _fields(record: Any) -> tuple[Any, Any, Any]:
    if isinstance(record, Advance):
        return record.advance_amount, record.advance_type, record.trip_id
    if isinstance(record, Mapping):
        return pick(record, "advance_amount", 0), pick(record, "advance_type"), pick(record, "trip_id")
    return 0, None, None


def normalize_advance(record: Any) -> NormalizedAdvance:
    """
    Classify one stored advance.

    Only the exact tags ``initial`` and ``additional`` are recognized. Untagged
    records that reference a trip predate the tag and count as additional;
    anything else stays unclassified (``kind is None``).
    """
    amount, advance_type, trip_id = _fields(record)
    if advance_type == ADVANCE_TYPE_INITIAL:
        kind = AdvanceKind.INITIAL
    elif advance_type == ADVANCE_TYPE_ADDITIONAL:
        kind = AdvanceKind.ADDITIONAL
    elif not advance_type and trip_id:
        kind = AdvanceKind.ADDITIONAL
    else:
        kind = None
    return NormalizedAdvance(amount=to_number(amount), kind=kind, record=record)


def calculate_advance_totals(advances: Sequence[Any] | None) -> AdvanceTotals:
    """Categorized totals for a trip's advances. Never raises and never mutates ``advances``."""
    if not isinstance(advances, (list, tuple)) or not advances:
        return AdvanceTotals()

    normalized = [normalize_advance(a) for a in advances]
    initial = [n for n in normalized if n.kind is AdvanceKind.INITIAL]
    additional = [n for n in normalized if n.kind is AdvanceKind.ADDITIONAL]

    initial_sum = sum(n.amount for n in initial)
    additional_sum = sum(n.amount for n in additional)
    return AdvanceTotals(
        initial_advances=[n.record for n in initial],
        additional_advances=[n.record for n in additional],
        initial=initial_sum,
        additional=additional_sum,
        total=initial_sum + additional_sum,
        count=len(advances),
        initial_count=len(initial),
        additional_count=len(additional),
    )
