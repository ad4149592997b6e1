"""
promostudio/promotions/conflicts.py
-----------------------------------
Offline schedule review: which exclusive promotions have recurring windows
that overlap? Purely informational; runtime resolution always falls back
on priority whether or not a conflict was reported.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date
from itertools import combinations
from typing import Iterable, List, Optional, Tuple

from promostudio.promotions.schedule import MINUTES_PER_DAY, format_minutes, parse_time
from promostudio.promotions.types import Promotion, Schedule

log = logging.getLogger(__name__)

REVIEWABLE_STATUSES = ('active', 'scheduled')


@dataclass(frozen=True)
class ScheduleConflict:
    promotion_a:   Promotion
    promotion_b:   Promotion
    days:          Tuple[str, ...]   # Monday first
    overlap_start: int               # minutes since midnight
    overlap_end:   int

    @property
    def description(self) -> str:
        days = ', '.join(d.capitalize() for d in self.days)
        return f'{days} {format_minutes(self.overlap_start)}-{format_minutes(self.overlap_end)}'


def _window(schedule: Schedule) -> Tuple[int, int]:
    if schedule.has_time_window:
        return parse_time(schedule.start_time), parse_time(schedule.end_time)
    return 0, MINUTES_PER_DAY


def _dates_overlap(a: Schedule, b: Schedule) -> bool:
    a_start = a.start_date or date.min
    a_end   = a.end_date or date.max
    b_start = b.start_date or date.min
    b_end   = b.end_date or date.max
    return a_start <= b_end and b_start <= a_end


def schedule_overlap(a: Promotion, b: Promotion) -> Optional[ScheduleConflict]:
    """The overlap between two promotions' schedules, ignoring stackability."""
    if a.schedule is None or b.schedule is None:
        return None

    days = tuple(d for d in a.schedule.days if d in b.schedule.days)
    if not days:
        return None

    start_a, end_a = _window(a.schedule)
    start_b, end_b = _window(b.schedule)
    # Interval test: touching windows (12:00-13:00 vs 13:00-14:00) do not clash
    if not (end_a > start_b and end_b > start_a):
        return None

    if not _dates_overlap(a.schedule, b.schedule):
        return None

    return ScheduleConflict(
        promotion_a=a,
        promotion_b=b,
        days=days,
        overlap_start=max(start_a, start_b),
        overlap_end=min(end_a, end_b),
    )


def find_conflicts(catalog: Iterable[Promotion]) -> List[ScheduleConflict]:
    """Every unordered pair of promotions that could fight over the same slot."""
    reviewable = [p for p in catalog if p.status in REVIEWABLE_STATUSES]

    conflicts = []
    for a, b in combinations(reviewable, 2):
        # A stackable promo applies alongside anything, so it never competes
        if a.stackable or b.stackable:
            continue
        conflict = schedule_overlap(a, b)
        if conflict is not None:
            conflicts.append(conflict)

    log.debug('Schedule review: %d conflict(s) across %d promotion(s)',
              len(conflicts), len(reviewable))
    return conflicts
