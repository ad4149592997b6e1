"""
promostudio/promotions/schedule.py
----------------------------------
Time-window matching: is a promotion's schedule open at a given moment?

Every function takes the evaluation time as an argument; nothing here
reads the wall clock. Timestamps are naive local datetimes.
"""
from __future__ import annotations
from datetime import datetime, date, timedelta
from typing import Iterable, List, Optional

from promostudio.promotions.types import DAYS_OF_WEEK, Promotion, Schedule


MINUTES_PER_DAY = 24 * 60


def parse_time(value: str) -> int:
    """'HH:MM' → minutes since midnight."""
    hours, minutes = value.split(':')
    return int(hours) * 60 + int(minutes)


def format_minutes(minutes: int) -> str:
    """Minutes since midnight → 'HH:MM' (1440 renders as 24:00)."""
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def day_tag(at: datetime | date) -> str:
    return DAYS_OF_WEEK[at.weekday()]


def schedule_permits(schedule: Schedule, at: datetime) -> bool:
    """AND of the day, time-of-day and date-range constraints that are set."""
    if schedule.days_of_week and day_tag(at) not in schedule.days_of_week:
        return False

    if schedule.has_time_window:
        now   = at.hour * 60 + at.minute
        start = parse_time(schedule.start_time)
        end   = parse_time(schedule.end_time)
        if now < start or now > end:
            return False

    today = at.date()
    if schedule.start_date and today < schedule.start_date:
        return False
    if schedule.end_date and today > schedule.end_date:
        return False

    return True


def is_active_at(promotion: Promotion, at: datetime) -> bool:
    """Runtime activation check: only `active` promotions can match."""
    if promotion.status != 'active':
        return False
    if promotion.schedule is None:
        return True
    return schedule_permits(promotion.schedule, at)


def is_scheduled_at(promotion: Promotion, at: datetime) -> bool:
    """
    Forward-looking variant used by the schedule simulator: `scheduled`
    promotions count too, as long as their schedule is open at `at`.
    """
    if promotion.status not in ('active', 'scheduled'):
        return False
    if promotion.schedule is None:
        return promotion.status == 'active'
    return schedule_permits(promotion.schedule, at)


def promotions_active_at(catalog: Iterable[Promotion], at: datetime) -> List[Promotion]:
    """What a customer would see at `at`, highest priority first."""
    live = [p for p in catalog if is_scheduled_at(p, at)]
    return sorted(live, key=lambda p: -p.priority)


def exclusive_rank(promotion: Promotion):
    """Sort key: highest priority first, then lowest id."""
    return (-promotion.priority, promotion.id)


def winning_promotion(promotions: Iterable[Promotion]) -> Optional[Promotion]:
    """The single exclusive promotion that would win, or None if all stack."""
    exclusive = [p for p in promotions if not p.stackable]
    if not exclusive:
        return None
    return min(exclusive, key=exclusive_rank)


def format_schedule(promotion: Promotion) -> str:
    schedule = promotion.schedule
    if schedule is None:
        return 'Always active'

    parts = []
    days = schedule.days
    if len(days) < len(DAYS_OF_WEEK):
        parts.append(', '.join(d.capitalize() for d in days))
    else:
        parts.append('Every day')

    if schedule.has_time_window:
        parts.append(f'{schedule.start_time} - {schedule.end_time}')

    return ' • '.join(parts)


def next_schedule_window(promotion: Promotion, after: datetime) -> Optional[datetime]:
    """
    Next moment the promotion's time window opens, strictly after `after`.
    Looks one week ahead; None when the schedule has no start time or the
    date range rules out every candidate.
    """
    schedule = promotion.schedule
    if schedule is None or not schedule.start_time:
        return None

    start = parse_time(schedule.start_time)
    for offset in range(8):
        day = after.date() + timedelta(days=offset)
        if schedule.end_date and day > schedule.end_date:
            return None
        if schedule.start_date and day < schedule.start_date:
            continue
        if schedule.days_of_week and day_tag(day) not in schedule.days_of_week:
            continue
        candidate = datetime.combine(day, datetime.min.time()) + timedelta(minutes=start)
        if candidate > after:
            return candidate

    return None
