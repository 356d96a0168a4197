from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Tuple


def day_span(start: date, end: date) -> int:
    """Inclusive number of calendar days between two dates."""
    return (end - start).days + 1


def partition_days(total_days: int, buckets: int) -> List[Tuple[int, int]]:
    """
    Split ``total_days`` into ``buckets`` contiguous (first, last) day offsets.
    Spans differ by at most one day; the remainder goes to the earliest buckets.
    """
    if total_days < 1 or buckets < 1:
        return []
    buckets = min(buckets, total_days)
    base, remainder = divmod(total_days, buckets)
    spans = []
    offset = 0
    for i in range(buckets):
        length = base + (1 if i < remainder else 0)
        spans.append((offset, offset + length - 1))
        offset += length
    return spans


def section_dates(start: date, total_days: int, buckets: int) -> List[Tuple[date, date]]:
    return [
        (start + timedelta(days=first), start + timedelta(days=last))
        for first, last in partition_days(total_days, buckets)
    ]


def format_date_range(start: date, end: date) -> str:
    """'Mar 3, 2025' for a single day, 'Mar 3 - Mar 5, 2025' otherwise."""
    if start == end:
        return f"{start:%b} {start.day}, {start.year}"
    return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
