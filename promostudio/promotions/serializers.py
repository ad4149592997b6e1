"""
promostudio/promotions/serializers.py
-------------------------------------
JSON dict ↔ engine value conversion.

Payload shape for a promotion (snake_case, amounts as strings or numbers):

    {
      "id": "promo_lunch", "name": "Lunch 20%", "type": "discount_code",
      "status": "active", "priority": 10, "stackable": false,
      "schedule": {"days_of_week": ["mon", "tue"], "start_time": "12:00",
                   "end_time": "14:00", "start_date": "2026-01-01",
                   "end_date": null},
      "min_basket": "15.00", "eligible_category_ids": [], "eligible_item_ids": [],
      "free_delivery_threshold": null,
      "discount": {"type": "percentage", "value": 20, "max_discount": 5}
    }

BOGOF promotions carry "bogof" instead of "discount", bundles carry
"bundle". Free-delivery promotions carry no mechanism key.
"""
from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from promostudio.promotions.conflicts import ScheduleConflict
from promostudio.promotions.engine import PromoResult
from promostudio.promotions.types import (
    BogofDefinition, BogofPromotion, BundleDefinition, BundlePromotion,
    BundleSlot, Cart, CartItem, DiscountCodePromotion, DiscountConfig,
    PROMOTION_CLASSES, Promotion, Schedule,
)

# Which payload key holds the mechanism for each promo type
MECHANISM_KEYS = {
    'discount_code': 'discount',
    'bogof':         'bogof',
    'bundle':        'bundle',
}


def to_decimal(value) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    return Decimal(str(value))


def _date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _ids(values) -> tuple:
    return tuple(str(v) for v in (values or ()))


def parse_timestamp(value: str) -> datetime:
    """ISO-8601 local timestamp. Raises ValueError when malformed."""
    if not value:
        raise ValueError('timestamp is required')
    return datetime.fromisoformat(value)


# ── Dict → engine values ──────────────────────────────────────────

def schedule_from_dict(data: Optional[dict]) -> Optional[Schedule]:
    if not data:
        return None
    days = data.get('days_of_week')
    return Schedule(
        days_of_week=frozenset(days) if days else None,
        start_time=data.get('start_time') or None,
        end_time=data.get('end_time') or None,
        start_date=_date(data.get('start_date')),
        end_date=_date(data.get('end_date')),
    )


def discount_from_dict(data: dict) -> DiscountConfig:
    return DiscountConfig(
        type=data['type'],
        value=to_decimal(data.get('value')) or Decimal('0'),
        max_discount=to_decimal(data.get('max_discount')),
        free_item_id=data.get('free_item_id'),
    )


def bogof_from_dict(data: dict) -> BogofDefinition:
    return BogofDefinition(
        buy_quantity=int(data.get('buy_quantity', 1)),
        get_quantity=int(data.get('get_quantity', 1)),
        applicable_items=data.get('applicable_items', 'same'),
        category_id=data.get('category_id'),
        selected_item_ids=_ids(data.get('selected_item_ids')),
        lowest_priced_free=bool(data.get('lowest_priced_free', True)),
    )


def bundle_from_dict(data: dict) -> BundleDefinition:
    return BundleDefinition(
        fixed_price=to_decimal(data.get('fixed_price')) or Decimal('0'),
        slots=tuple(
            BundleSlot(id=str(s['id']), name=s.get('name', ''),
                       allowed_item_ids=_ids(s.get('allowed_item_ids')))
            for s in data.get('slots', ())
        ),
    )


def promotion_from_dict(data: dict) -> Promotion:
    """Build the right Promotion variant for data['type'] (KeyError if unknown)."""
    promo_type = data['type']
    cls = PROMOTION_CLASSES[promo_type]

    fields = dict(
        id=str(data['id']),
        name=data['name'],
        status=data.get('status', 'draft'),
        priority=int(data.get('priority', 0)),
        stackable=bool(data.get('stackable', False)),
        schedule=schedule_from_dict(data.get('schedule')),
        min_basket=to_decimal(data.get('min_basket')),
        eligible_category_ids=_ids(data.get('eligible_category_ids')),
        eligible_item_ids=_ids(data.get('eligible_item_ids')),
        free_delivery_threshold=to_decimal(data.get('free_delivery_threshold')),
        code=data.get('code'),
        description=data.get('description'),
    )

    if cls is DiscountCodePromotion:
        fields['discount'] = discount_from_dict(data['discount'])
    elif cls is BogofPromotion:
        fields['bogof'] = bogof_from_dict(data['bogof'])
    elif cls is BundlePromotion:
        fields['bundle'] = bundle_from_dict(data['bundle'])

    return cls(**fields)


def _cart_amount(value, what) -> Optional[Decimal]:
    """Finite, non-negative amount or None. Raises ValueError otherwise."""
    amount = to_decimal(value)
    if amount is not None and (not amount.is_finite() or amount < 0):
        raise ValueError(f'{what} must be a non-negative number, got {value!r}')
    return amount


def _cart_item(line: dict) -> CartItem:
    price = _cart_amount(line['price'], 'price')
    if price is None:
        raise ValueError('price is required')
    quantity = int(line.get('quantity', 1))
    if quantity < 1:
        raise ValueError(f'quantity must be at least 1, got {quantity}')
    return CartItem(
        id=str(line['id']),
        price=price,
        quantity=quantity,
        category_id=(str(line['category_id'])
                     if line.get('category_id') is not None else None),
        name=line.get('name', ''),
    )


def cart_from_dict(data: dict, default_delivery_fee=Decimal('0')) -> Cart:
    """
    Cart payload: {"items": [{"id", "price", "quantity", "category_id", "name"}],
    "is_delivery": bool, "delivery_fee": amount, "subtotal": amount}.
    `subtotal` is optional and computed from the lines when omitted.

    Raises ValueError (or KeyError / TypeError) for lines the engine cannot
    price: missing fields, non-finite or negative amounts, quantity below 1.
    """
    items = tuple(_cart_item(line) for line in data.get('items', ()))
    fee = _cart_amount(data.get('delivery_fee'), 'delivery_fee')
    cart = Cart.from_items(
        items,
        delivery_fee=default_delivery_fee if fee is None else fee,
        is_delivery=bool(data.get('is_delivery', False)),
    )
    subtotal = _cart_amount(data.get('subtotal'), 'subtotal')
    if subtotal is not None:
        cart = Cart(items=cart.items, subtotal=subtotal,
                    delivery_fee=cart.delivery_fee, is_delivery=cart.is_delivery)
    return cart


# ── Engine values → dict ──────────────────────────────────────────

def _str(amount: Optional[Decimal]) -> Optional[str]:
    return None if amount is None else str(amount)


def schedule_to_dict(schedule: Optional[Schedule]) -> Optional[dict]:
    if schedule is None:
        return None
    return {
        'days_of_week': list(schedule.days) if schedule.days_of_week else None,
        'start_time':   schedule.start_time,
        'end_time':     schedule.end_time,
        'start_date':   schedule.start_date.isoformat() if schedule.start_date else None,
        'end_date':     schedule.end_date.isoformat() if schedule.end_date else None,
    }


def promotion_to_dict(promo: Promotion) -> dict:
    data = {
        'id':                      promo.id,
        'name':                    promo.name,
        'type':                    promo.promo_type,
        'status':                  promo.status,
        'priority':                promo.priority,
        'stackable':               promo.stackable,
        'code':                    promo.code,
        'description':             promo.description,
        'schedule':                schedule_to_dict(promo.schedule),
        'min_basket':              _str(promo.min_basket),
        'eligible_category_ids':   list(promo.eligible_category_ids),
        'eligible_item_ids':       list(promo.eligible_item_ids),
        'free_delivery_threshold': _str(promo.free_delivery_threshold),
    }
    if isinstance(promo, DiscountCodePromotion):
        d = promo.discount
        data['discount'] = {
            'type': d.type, 'value': str(d.value),
            'max_discount': _str(d.max_discount), 'free_item_id': d.free_item_id,
        }
    elif isinstance(promo, BogofPromotion):
        b = promo.bogof
        data['bogof'] = {
            'buy_quantity': b.buy_quantity, 'get_quantity': b.get_quantity,
            'applicable_items': b.applicable_items, 'category_id': b.category_id,
            'selected_item_ids': list(b.selected_item_ids),
            'lowest_priced_free': b.lowest_priced_free,
        }
    elif isinstance(promo, BundlePromotion):
        data['bundle'] = {
            'fixed_price': str(promo.bundle.fixed_price),
            'slots': [
                {'id': s.id, 'name': s.name, 'allowed_item_ids': list(s.allowed_item_ids)}
                for s in promo.bundle.slots
            ],
        }
    return data


def result_to_dict(result: PromoResult) -> dict:
    return {
        'applied': [
            {
                'promo_id':        e.promo_id,
                'promo_name':      e.promo_name,
                'promo_type':      e.promo_type,
                'discount_amount': str(e.discount_amount),
                'description':     e.description,
                'stackable':       e.stackable,
            }
            for e in result.applied
        ],
        'total_discount':   str(result.total_discount),
        'original_total':   str(result.original_total),
        'discounted_total': str(result.discounted_total),
    }


def conflict_to_dict(conflict: ScheduleConflict) -> dict:
    return {
        'promo_a':     {'id': conflict.promotion_a.id, 'name': conflict.promotion_a.name,
                        'priority': conflict.promotion_a.priority},
        'promo_b':     {'id': conflict.promotion_b.id, 'name': conflict.promotion_b.name,
                        'priority': conflict.promotion_b.priority},
        'days':        list(conflict.days),
        'overlap':     conflict.description,
    }
