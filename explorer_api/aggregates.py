"""
Derived series computed from game log counts.
"""

from typing import Dict, Iterable, List, Tuple


def accumulate_edits(day_counts: Iterable[Tuple[str, int]]) -> List[Tuple[str, int]]:
    """
    Turn per-day edit counts into a running total.

    The total for a day is the sum of the counts of every day up to and
    including it. Days without edits are not in the input and are not
    filled in; rows without a date are dropped.

    Args:
        day_counts: (date, count) pairs, in any order

    Returns:
        (date, running_total) pairs in ascending date order
    """
    per_day: Dict = {}
    for day, count in day_counts:
        if day is None:
            continue
        per_day[day] = per_day.get(day, 0) + count

    series = []
    total = 0
    for day in sorted(per_day):
        total += per_day[day]
        series.append((day, total))
    return series
