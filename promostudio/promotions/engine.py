"""
promostudio/promotions/engine.py
--------------------------------
Pure-Python promotion resolution engine.

Resolve which catalog promotions apply to a cart at a given moment and
return a PromoResult with the applied discounts, descriptions and the
discounted total.

No DB access happens here. The caller (checkout route, simulator, tests)
loads the catalog and decides how to act on the result.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from promostudio.promotions.discounts import describe_promotion, promotion_discount
from promostudio.promotions.eligibility import can_apply
from promostudio.promotions.schedule import winning_promotion
from promostudio.promotions.types import Cart, Promotion

log = logging.getLogger(__name__)

Q = Decimal('0.01')   # quantize target


def money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(Q, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class AppliedEntry:
    """One applied promo discount."""
    promo_id:        str
    promo_name:      str
    promo_type:      str
    discount_amount: Decimal
    description:     str
    stackable:       bool


@dataclass(frozen=True)
class PromoResult:
    """Result of resolving the catalog against one cart."""
    applied:          List[AppliedEntry] = field(default_factory=list)
    total_discount:   Decimal = Decimal('0')
    original_total:   Decimal = Decimal('0')
    discounted_total: Decimal = Decimal('0')


# ── Conflict resolution ───────────────────────────────────────────

def resolve(candidates: Iterable[Promotion], cart: Cart, at: datetime) -> List[Promotion]:
    """
    Return the promotions that actually apply to `cart` at `at`.

    Stacking rules:
    1. Only promotions passing both the schedule and basket checks count.
    2. Stackable promos all apply, in catalog order.
    3. Non-stackable promos compete; only the highest priority one is
       kept (equal priorities: lowest id wins).
    """
    applicable = [p for p in candidates if can_apply(p, cart, at).valid]
    stackable  = [p for p in applicable if p.stackable]

    winner = winning_promotion(applicable)
    if winner is None:
        return stackable
    return stackable + [winner]


# ── Main public function ──────────────────────────────────────────

def evaluate_promotions(catalog: Iterable[Promotion], cart: Cart, at: datetime) -> PromoResult:
    """
    Resolve `catalog` against `cart` and total up the discounts.

    Each applied promotion is priced independently against the original
    cart; discounts do not shrink the subtotal the next one sees. A
    promotion can apply and still be worth £0, in which case it is kept
    in `applied` with a zero amount.
    """
    original_total = money(cart.subtotal + (cart.delivery_fee if cart.is_delivery else 0))

    applied: List[AppliedEntry] = []
    for promo in resolve(catalog, cart, at):
        disc = money(promotion_discount(promo, cart))
        applied.append(AppliedEntry(
            promo_id=promo.id,
            promo_name=promo.name,
            promo_type=promo.promo_type,
            discount_amount=disc,
            description=describe_promotion(promo),
            stackable=promo.stackable,
        ))

    total_discount = sum((e.discount_amount for e in applied), start=Decimal('0'))
    # Cap discount at what the order costs to never produce negative totals
    total_discount = min(total_discount, original_total)

    log.debug('Resolved %d promotion(s) at %s: discount %s of %s',
              len(applied), at.isoformat(), total_discount, original_total)

    return PromoResult(
        applied=applied,
        total_discount=total_discount,
        original_total=original_total,
        discounted_total=money(original_total - total_discount),
    )
