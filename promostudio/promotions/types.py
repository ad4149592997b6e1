"""
promostudio/promotions/types.py
-------------------------------
Immutable value types the promotion engine works on.

A promotion is a tagged union: the shared rule fields live on the
`Promotion` base class and each variant carries only the payload its
mechanism needs (a bundle can never accidentally hold a BOGOF definition).

    DiscountCodePromotion  → discount: DiscountConfig
    BogofPromotion         → bogof:    BogofDefinition
    BundlePromotion        → bundle:   BundleDefinition
    FreeDeliveryPromotion  → (no payload, waives cart.delivery_fee)

Carts are plain values too. Nothing in the engine mutates them.
"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from datetime import date
from typing import ClassVar, Iterable, Optional, Tuple


# Monday-first, matching datetime.weekday() (Monday=0 … Sunday=6)
DAYS_OF_WEEK = ('mon', 'tue', 'wed', 'thu', 'fri', 'sat', 'sun')

PROMO_STATUSES = ('draft', 'scheduled', 'active', 'paused', 'expired')
PROMO_TYPES = [
    ('discount_code', 'Discount Code'),
    ('bogof',         'BOGOF'),
    ('bundle',        'Bundle'),
    ('free_delivery', 'Free Delivery'),
]
PROMO_TYPE_CHOICES = [p[0] for p in PROMO_TYPES]

DISCOUNT_TYPES = ('percentage', 'fixed', 'free_item', 'free_delivery')
BOGOF_SCOPES = ('category', 'selected', 'same')


# ── Schedule ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Schedule:
    """Recurrence rule. Every absent constraint imposes no restriction."""
    days_of_week: Optional[frozenset] = None   # {'mon', 'wed', ...}
    start_time:   Optional[str] = None         # "HH:MM", inclusive
    end_time:     Optional[str] = None         # "HH:MM", inclusive
    start_date:   Optional[date] = None        # inclusive
    end_date:     Optional[date] = None        # inclusive

    @property
    def has_time_window(self) -> bool:
        return bool(self.start_time and self.end_time)

    @property
    def days(self) -> Tuple[str, ...]:
        """Days this schedule runs on, Monday first. Absent/empty = all week."""
        if not self.days_of_week:
            return DAYS_OF_WEEK
        return tuple(d for d in DAYS_OF_WEEK if d in self.days_of_week)


# ── Discount mechanisms ───────────────────────────────────────────

@dataclass(frozen=True)
class DiscountConfig:
    type:         str                       # see DISCOUNT_TYPES
    value:        Decimal = Decimal('0')
    max_discount: Optional[Decimal] = None  # cap, percentage only
    free_item_id: Optional[str] = None      # free_item only


@dataclass(frozen=True)
class BogofDefinition:
    buy_quantity:       int
    get_quantity:       int
    applicable_items:   str = 'same'        # see BOGOF_SCOPES
    category_id:        Optional[str] = None
    selected_item_ids:  Tuple[str, ...] = ()
    lowest_priced_free: bool = True


@dataclass(frozen=True)
class BundleSlot:
    id:               str
    name:             str
    allowed_item_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BundleDefinition:
    fixed_price: Decimal
    slots:       Tuple[BundleSlot, ...] = ()


# ── Promotion (tagged union) ──────────────────────────────────────

@dataclass(frozen=True, kw_only=True)
class Promotion:
    promo_type: ClassVar[str] = ''

    id:                      str
    name:                    str
    status:                  str = 'draft'
    priority:                int = 0
    stackable:               bool = False
    schedule:                Optional[Schedule] = None
    min_basket:              Optional[Decimal] = None
    eligible_category_ids:   Tuple[str, ...] = ()
    eligible_item_ids:       Tuple[str, ...] = ()
    free_delivery_threshold: Optional[Decimal] = None
    code:                    Optional[str] = None
    description:             Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class DiscountCodePromotion(Promotion):
    promo_type: ClassVar[str] = 'discount_code'
    discount: DiscountConfig


@dataclass(frozen=True, kw_only=True)
class BogofPromotion(Promotion):
    promo_type: ClassVar[str] = 'bogof'
    bogof: BogofDefinition


@dataclass(frozen=True, kw_only=True)
class BundlePromotion(Promotion):
    promo_type: ClassVar[str] = 'bundle'
    bundle: BundleDefinition


@dataclass(frozen=True, kw_only=True)
class FreeDeliveryPromotion(Promotion):
    promo_type: ClassVar[str] = 'free_delivery'


PROMOTION_CLASSES = {
    cls.promo_type: cls
    for cls in (DiscountCodePromotion, BogofPromotion, BundlePromotion, FreeDeliveryPromotion)
}


# ── Cart ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CartItem:
    id:          str
    price:       Decimal          # unit price
    quantity:    int = 1
    category_id: Optional[str] = None
    name:        str = ''

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class Cart:
    items:        Tuple[CartItem, ...] = ()
    subtotal:     Decimal = Decimal('0')
    delivery_fee: Decimal = Decimal('0')
    is_delivery:  bool = False

    @classmethod
    def from_items(cls, items: Iterable[CartItem], delivery_fee=Decimal('0'),
                   is_delivery: bool = False) -> 'Cart':
        """Build a cart whose subtotal is the sum of its line totals."""
        items = tuple(items)
        subtotal = sum((i.line_total for i in items), start=Decimal('0'))
        return cls(items=items, subtotal=subtotal,
                   delivery_fee=Decimal(delivery_fee), is_delivery=is_delivery)


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of an eligibility check; `reason` is shown to the customer."""
    valid:  bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid
