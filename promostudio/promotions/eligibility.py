"""
promostudio/promotions/eligibility.py
-------------------------------------
Basket eligibility: does this cart qualify for this promotion?

Failures are returned as EligibilityResult(valid=False, reason=...) so the
checkout can show the customer why a promotion did not apply. Nothing in
here raises for an ineligible basket.
"""
from __future__ import annotations
from datetime import datetime

from promostudio.promotions.schedule import is_active_at
from promostudio.promotions.types import (
    Cart, EligibilityResult, FreeDeliveryPromotion, Promotion,
)


OK = EligibilityResult(valid=True)


def _matches_allow_lists(promotion: Promotion, cart: Cart) -> bool:
    """Any qualifying line unlocks the promo: category OR item match."""
    categories = set(promotion.eligible_category_ids)
    items      = set(promotion.eligible_item_ids)
    if not categories and not items:
        return True
    return any(
        line.category_id in categories or line.id in items
        for line in cart.items
    )


def check_basket(promotion: Promotion, cart: Cart) -> EligibilityResult:
    """Cart-level rules only (minimum spend, allow-lists, delivery)."""
    if promotion.min_basket is not None and cart.subtotal < promotion.min_basket:
        return EligibilityResult(False, f'Minimum basket £{promotion.min_basket} required')

    if not _matches_allow_lists(promotion, cart):
        return EligibilityResult(False, 'Basket does not contain eligible items')

    if isinstance(promotion, FreeDeliveryPromotion) and not cart.is_delivery:
        return EligibilityResult(False, 'Free delivery only applies to delivery orders')

    threshold = promotion.free_delivery_threshold
    if threshold is not None and cart.subtotal < threshold:
        return EligibilityResult(False, f'Spend £{threshold}+ for free delivery')

    return OK


def is_eligible(promotion: Promotion, cart: Cart) -> bool:
    return check_basket(promotion, cart).valid


def can_apply(promotion: Promotion, cart: Cart, at: datetime) -> EligibilityResult:
    """Schedule first, then basket."""
    if not is_active_at(promotion, at):
        return EligibilityResult(False, 'Promotion not currently active')
    return check_basket(promotion, cart)
