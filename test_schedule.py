"""
test_schedule.py — Tests for time-window matching and the schedule simulator.
Run: pytest test_schedule.py -v

2026-03-02 is a Monday; the week runs Mon 2nd … Sun 8th.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from promostudio.promotions.schedule import (
    format_schedule, is_active_at, is_scheduled_at, next_schedule_window,
    parse_time, promotions_active_at, winning_promotion,
)
from promostudio.promotions.types import DiscountCodePromotion, DiscountConfig, Schedule


def make_promo(**kwargs):
    defaults = dict(
        id='p1', name='Test Promo', status='active', priority=0, stackable=False,
        discount=DiscountConfig(type='percentage', value=Decimal('10')),
    )
    defaults.update(kwargs)
    return DiscountCodePromotion(**defaults)


LUNCH = Schedule(start_time='12:00', end_time='14:00')


# ── 1. No schedule ────────────────────────────────────────────────

@pytest.mark.parametrize('status', ['draft', 'scheduled', 'active', 'paused', 'expired'])
@pytest.mark.parametrize('at', [
    datetime(2026, 3, 2, 0, 0),
    datetime(2026, 3, 4, 13, 30),
    datetime(2026, 3, 8, 23, 59),
])
def test_no_schedule_follows_status(status, at):
    promo = make_promo(status=status)
    assert is_active_at(promo, at) == (status == 'active')


# ── 2. Time-of-day window (inclusive) ─────────────────────────────

@pytest.mark.parametrize('hh, mm, expected', [
    (11, 59, False),
    (12, 0,  True),    # exact start
    (13, 15, True),
    (14, 0,  True),    # exact end
    (14, 1,  False),
    (0, 0,   False),
])
def test_time_window_boundaries(hh, mm, expected):
    promo = make_promo(schedule=LUNCH)
    assert is_active_at(promo, datetime(2026, 3, 3, hh, mm)) is expected


def test_seconds_inside_end_minute_still_match():
    promo = make_promo(schedule=LUNCH)
    assert is_active_at(promo, datetime(2026, 3, 3, 14, 0, 59))


def test_window_crossing_midnight_never_matches():
    promo = make_promo(schedule=Schedule(start_time='22:00', end_time='02:00'))
    assert not is_active_at(promo, datetime(2026, 3, 3, 23, 0))
    assert not is_active_at(promo, datetime(2026, 3, 3, 1, 0))


def test_half_specified_window_is_ignored():
    promo = make_promo(schedule=Schedule(start_time='12:00'))
    assert is_active_at(promo, datetime(2026, 3, 3, 9, 0))


# ── 3. Days of week ───────────────────────────────────────────────

def test_day_of_week_membership():
    promo = make_promo(schedule=Schedule(days_of_week=frozenset({'mon', 'wed'})))
    assert is_active_at(promo, datetime(2026, 3, 2, 10, 0))       # Mon
    assert not is_active_at(promo, datetime(2026, 3, 3, 10, 0))   # Tue
    assert is_active_at(promo, datetime(2026, 3, 4, 10, 0))       # Wed


def test_sunday_maps_to_sun():
    promo = make_promo(schedule=Schedule(days_of_week=frozenset({'sun'})))
    assert is_active_at(promo, datetime(2026, 3, 8, 10, 0))
    assert not is_active_at(promo, datetime(2026, 3, 7, 10, 0))


def test_empty_day_set_means_every_day():
    promo = make_promo(schedule=Schedule(days_of_week=frozenset()))
    assert is_active_at(promo, datetime(2026, 3, 5, 10, 0))


# ── 4. Date range (inclusive, date-only) ──────────────────────────

def test_date_range_inclusive_on_both_ends():
    promo = make_promo(schedule=Schedule(start_date=date(2026, 3, 3), end_date=date(2026, 3, 5)))
    assert not is_active_at(promo, datetime(2026, 3, 2, 23, 59))
    assert is_active_at(promo, datetime(2026, 3, 3, 0, 0))
    assert is_active_at(promo, datetime(2026, 3, 5, 23, 59))
    assert not is_active_at(promo, datetime(2026, 3, 6, 0, 0))


def test_all_constraints_are_anded():
    schedule = Schedule(
        days_of_week=frozenset({'tue'}), start_time='12:00', end_time='14:00',
        start_date=date(2026, 3, 1), end_date=date(2026, 3, 31),
    )
    promo = make_promo(schedule=schedule)
    assert is_active_at(promo, datetime(2026, 3, 3, 12, 30))
    assert not is_active_at(promo, datetime(2026, 3, 4, 12, 30))   # wrong day
    assert not is_active_at(promo, datetime(2026, 3, 3, 15, 0))    # wrong time
    assert not is_active_at(promo, datetime(2026, 4, 7, 12, 30))   # past end date


# ── 5. Status handling ────────────────────────────────────────────

def test_scheduled_status_only_counts_for_simulator():
    promo = make_promo(status='scheduled', schedule=LUNCH)
    at = datetime(2026, 3, 3, 12, 30)
    assert not is_active_at(promo, at)
    assert is_scheduled_at(promo, at)


def test_scheduled_without_schedule_is_not_live():
    promo = make_promo(status='scheduled')
    assert not is_scheduled_at(promo, datetime(2026, 3, 3, 12, 30))


def test_paused_is_never_live():
    promo = make_promo(status='paused', schedule=LUNCH)
    assert not is_scheduled_at(promo, datetime(2026, 3, 3, 12, 30))


def test_parse_time():
    assert parse_time('00:00') == 0
    assert parse_time('13:05') == 13 * 60 + 5
    assert parse_time('23:59') == 1439


# ── 6. Simulator helpers ──────────────────────────────────────────

def test_promotions_active_at_sorted_by_priority():
    at = datetime(2026, 3, 3, 12, 30)
    low  = make_promo(id='low',  priority=1)
    high = make_promo(id='high', priority=9, status='scheduled', schedule=LUNCH)
    off  = make_promo(id='off',  priority=5, status='paused')
    result = promotions_active_at([low, high, off], at)
    assert [p.id for p in result] == ['high', 'low']


def test_winning_promotion_is_highest_priority_exclusive():
    a = make_promo(id='a', priority=10)
    b = make_promo(id='b', priority=20)
    s = make_promo(id='s', priority=99, stackable=True)
    assert winning_promotion([a, b, s]).id == 'b'


def test_winning_promotion_tie_broken_by_lowest_id():
    b = make_promo(id='promo_b', priority=10)
    a = make_promo(id='promo_a', priority=10)
    assert winning_promotion([b, a]).id == 'promo_a'


def test_winning_promotion_none_when_all_stack():
    assert winning_promotion([make_promo(stackable=True)]) is None
    assert winning_promotion([]) is None


# ── 7. Formatting / next window ───────────────────────────────────

def test_format_schedule():
    assert format_schedule(make_promo()) == 'Always active'
    assert format_schedule(make_promo(schedule=LUNCH)) == 'Every day • 12:00 - 14:00'
    tue_thu = Schedule(days_of_week=frozenset({'thu', 'tue'}), start_time='17:00', end_time='19:00')
    assert format_schedule(make_promo(schedule=tue_thu)) == 'Tue, Thu • 17:00 - 19:00'


def test_next_window_later_same_day():
    promo = make_promo(schedule=Schedule(days_of_week=frozenset({'mon'}),
                                         start_time='12:00', end_time='14:00'))
    assert next_schedule_window(promo, datetime(2026, 3, 2, 11, 0)) == datetime(2026, 3, 2, 12, 0)


def test_next_window_rolls_to_next_week():
    promo = make_promo(schedule=Schedule(days_of_week=frozenset({'mon'}),
                                         start_time='12:00', end_time='14:00'))
    assert next_schedule_window(promo, datetime(2026, 3, 2, 13, 0)) == datetime(2026, 3, 9, 12, 0)


def test_next_window_respects_end_date():
    promo = make_promo(schedule=Schedule(start_time='12:00', end_time='14:00',
                                         end_date=date(2026, 3, 2)))
    assert next_schedule_window(promo, datetime(2026, 3, 2, 13, 0)) is None


def test_next_window_needs_a_start_time():
    assert next_schedule_window(make_promo(), datetime(2026, 3, 2, 13, 0)) is None
