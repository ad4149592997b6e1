"""
promostudio/promotions/validators.py
------------------------------------
Write-path validation for promotion payloads (create / edit).
Returns a dict of field -> error_message.
An empty dict means the payload is valid.

The engine assumes well-formed promotions; this is where malformed ones
(half-open time windows, windows crossing midnight, zero BOGOF quantities,
mechanism payloads that don't match the type) are turned away.
"""
import json
import re
from datetime import date
from decimal import Decimal, InvalidOperation

from promostudio.promotions.serializers import MECHANISM_KEYS
from promostudio.promotions.types import (
    BOGOF_SCOPES, DAYS_OF_WEEK, DISCOUNT_TYPES, PROMO_STATUSES, PROMO_TYPE_CHOICES,
)

TIME_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


def _amount(raw, field, errors, required=False):
    """Parse a non-negative amount; record an error and return None if bad."""
    if raw is None or raw == '':
        if required:
            errors[field] = 'This amount is required.'
        return None
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        errors[field] = 'Must be a valid number.'
        return None
    if not value.is_finite():
        errors[field] = 'Must be a valid number.'
        return None
    if value < 0:
        errors[field] = 'Cannot be negative.'
        return None
    return value


def _positive_int(raw, field, errors):
    try:
        value = int(raw)
    except (TypeError, ValueError, OverflowError):
        errors[field] = 'Must be a whole number.'
        return None
    if value <= 0:
        errors[field] = 'Must be greater than zero.'
        return None
    return value


def _iso_date(raw, field, errors):
    if not raw:
        return None
    if not isinstance(raw, str):
        errors[field] = 'Must be a date in YYYY-MM-DD format.'
        return None
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError):
        errors[field] = 'Must be a date in YYYY-MM-DD format.'
        return None


def _validate_schedule(schedule: dict, errors: dict) -> None:
    if not isinstance(schedule, dict):
        errors['schedule'] = 'Schedule must be an object.'
        return

    days = schedule.get('days_of_week')
    if days is not None:
        if not isinstance(days, list) or not days:
            errors['schedule.days_of_week'] = 'Pick at least one day, or omit the list for every day.'
        elif any(not isinstance(d, str) or d not in DAYS_OF_WEEK for d in days):
            errors['schedule.days_of_week'] = f'Days must be among: {", ".join(DAYS_OF_WEEK)}.'

    start, end = schedule.get('start_time'), schedule.get('end_time')
    if bool(start) != bool(end):
        errors['schedule.time'] = 'Start and end time must be set together.'
    elif start and end:
        if not isinstance(start, str) or not isinstance(end, str) \
                or not TIME_RE.match(start) or not TIME_RE.match(end):
            errors['schedule.time'] = 'Times must be in HH:MM format.'
        elif start > end:
            errors['schedule.time'] = ('Windows crossing midnight are not supported. '
                                       'Split it into two promotions.')

    start_date = _iso_date(schedule.get('start_date'), 'schedule.start_date', errors)
    end_date   = _iso_date(schedule.get('end_date'), 'schedule.end_date', errors)
    if start_date and end_date and end_date < start_date:
        errors['schedule.end_date'] = 'End date cannot be before start date.'


def _validate_discount(discount, errors: dict) -> None:
    if not isinstance(discount, dict):
        errors['discount'] = 'Discount codes need a discount definition.'
        return
    dtype = discount.get('type')
    if dtype not in DISCOUNT_TYPES:
        errors['discount.type'] = f'Discount type must be one of: {", ".join(DISCOUNT_TYPES)}.'
        return
    if dtype in ('percentage', 'fixed'):
        value = _amount(discount.get('value'), 'discount.value', errors, required=True)
        if dtype == 'percentage' and value is not None and value > 100:
            errors['discount.value'] = 'Percentage cannot exceed 100.'
    _amount(discount.get('max_discount'), 'discount.max_discount', errors)
    if dtype == 'free_item' and not discount.get('free_item_id'):
        errors['discount.free_item_id'] = 'Choose the item to give away.'


def _validate_bogof(bogof, errors: dict) -> None:
    if not isinstance(bogof, dict):
        errors['bogof'] = 'BOGOF promotions need a bogof definition.'
        return
    _positive_int(bogof.get('buy_quantity'), 'bogof.buy_quantity', errors)
    _positive_int(bogof.get('get_quantity'), 'bogof.get_quantity', errors)
    scope = bogof.get('applicable_items', 'same')
    if scope not in BOGOF_SCOPES:
        errors['bogof.applicable_items'] = f'Must be one of: {", ".join(BOGOF_SCOPES)}.'
    elif scope == 'category' and not bogof.get('category_id'):
        errors['bogof.category_id'] = 'Category BOGOF needs a category.'
    elif scope == 'selected' and not bogof.get('selected_item_ids'):
        errors['bogof.selected_item_ids'] = 'Select at least one item.'


def _validate_bundle(bundle, errors: dict) -> None:
    if not isinstance(bundle, dict):
        errors['bundle'] = 'Bundles need a bundle definition.'
        return
    _amount(bundle.get('fixed_price'), 'bundle.fixed_price', errors, required=True)
    slots = bundle.get('slots') or []
    if not isinstance(slots, list):
        errors['bundle.slots'] = 'Slots must be a list.'
        return
    for i, slot in enumerate(slots):
        if not isinstance(slot, dict) or not slot.get('id') or not slot.get('allowed_item_ids'):
            errors[f'bundle.slots[{i}]'] = 'Each slot needs an id and at least one allowed item.'


def validate_promotion_payload(data: dict) -> dict:
    """
    Validate a JSON promotion payload (see serializers.py for its shape).

    Returns:
        dict of {field_name: error_message}, empty if all valid.
    """
    errors = {}

    # ── name ─────────────────────────────────────────────────────
    name = data.get('name') or ''
    name = name.strip() if isinstance(name, str) else ''
    if not name:
        errors['name'] = 'Promotion name is required.'
    elif len(name) > 200:
        errors['name'] = 'Promotion name must be 200 characters or fewer.'

    # ── type / status ─────────────────────────────────────────────
    promo_type = data.get('type')
    if promo_type not in PROMO_TYPE_CHOICES:
        errors['type'] = 'Invalid promotion type.'
    if data.get('status', 'draft') not in PROMO_STATUSES:
        errors['status'] = 'Invalid promotion status.'

    # ── priority ──────────────────────────────────────────────────
    try:
        int(data.get('priority', 0))
    except (TypeError, ValueError, OverflowError):
        errors['priority'] = 'Priority must be a whole number.'

    # ── basket rules ──────────────────────────────────────────────
    _amount(data.get('min_basket'), 'min_basket', errors)
    _amount(data.get('free_delivery_threshold'), 'free_delivery_threshold', errors)
    for field in ('eligible_category_ids', 'eligible_item_ids'):
        if not isinstance(data.get(field) or [], list):
            errors[field] = 'Must be a list of ids.'

    # ── schedule ──────────────────────────────────────────────────
    if data.get('schedule'):
        _validate_schedule(data['schedule'], errors)

    # ── mechanism ─────────────────────────────────────────────────
    if promo_type == 'discount_code':
        _validate_discount(data.get('discount'), errors)
    elif promo_type == 'bogof':
        _validate_bogof(data.get('bogof'), errors)
    elif promo_type == 'bundle':
        _validate_bundle(data.get('bundle'), errors)

    return errors


def parse_promotion_payload(data: dict) -> dict:
    """
    Convert a validated payload to PromotionRecord column values.
    Call only after validate_promotion_payload returns no errors.
    """
    promo_type = data['type']
    schedule   = data.get('schedule') or {}
    mechanism  = MECHANISM_KEYS.get(promo_type)

    def amount(key):
        raw = data.get(key)
        return Decimal(str(raw)) if raw not in (None, '') else None

    return {
        'name':                    data['name'].strip(),
        'promo_type':              promo_type,
        'status':                  data.get('status', 'draft'),
        'priority':                int(data.get('priority', 0)),
        'stackable':               bool(data.get('stackable', False)),
        'code':                    data.get('code') or None,
        'description':             data.get('description') or None,
        'params':                  json.dumps(data.get(mechanism) or {}) if mechanism else '{}',
        'days_of_week':            ','.join(schedule['days_of_week']) if schedule.get('days_of_week') else None,
        'start_time':              schedule.get('start_time') or None,
        'end_time':                schedule.get('end_time') or None,
        'start_date':              date.fromisoformat(schedule['start_date']) if schedule.get('start_date') else None,
        'end_date':                date.fromisoformat(schedule['end_date']) if schedule.get('end_date') else None,
        'min_basket':              amount('min_basket'),
        'free_delivery_threshold': amount('free_delivery_threshold'),
        'eligible_category_ids':   json.dumps([str(v) for v in data.get('eligible_category_ids') or []]),
        'eligible_item_ids':       json.dumps([str(v) for v in data.get('eligible_item_ids') or []]),
    }
