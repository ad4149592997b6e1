"""
promostudio/promotions/discounts.py
-----------------------------------
One pure calculator per discount mechanism.

Each takes a mechanism definition and a cart and returns a Decimal that is
never negative and never more than the cart can absorb. Amounts are left
unrounded here; the engine quantizes when it reports them.
"""
from __future__ import annotations
import logging
from collections import OrderedDict
from decimal import Decimal
from typing import List

from promostudio.promotions.types import (
    BogofDefinition, BogofPromotion, BundleDefinition, BundlePromotion,
    Cart, CartItem, DiscountCodePromotion, DiscountConfig,
    FreeDeliveryPromotion, Promotion,
)

log = logging.getLogger(__name__)

ZERO = Decimal('0')


# ── DiscountConfig mechanisms ─────────────────────────────────────

def percentage_discount(config: DiscountConfig, cart: Cart) -> Decimal:
    """`value`% off the subtotal, capped at `max_discount` when set."""
    amount = cart.subtotal * Decimal(config.value) / Decimal('100')
    if config.max_discount is not None:
        amount = min(amount, config.max_discount)
    return max(amount, ZERO)


def fixed_discount(config: DiscountConfig, cart: Cart) -> Decimal:
    return max(min(Decimal(config.value), cart.subtotal), ZERO)


def free_delivery_discount(cart: Cart) -> Decimal:
    return cart.delivery_fee if cart.is_delivery else ZERO


def free_item_discount(config: DiscountConfig, cart: Cart) -> Decimal:
    """Unit price of the named item, or 0 when it is not in the cart."""
    for line in cart.items:
        if line.id == config.free_item_id:
            return line.price
    return ZERO


def discount_config_amount(config: DiscountConfig, cart: Cart) -> Decimal:
    if config.type == 'percentage':
        return percentage_discount(config, cart)
    elif config.type == 'fixed':
        return fixed_discount(config, cart)
    elif config.type == 'free_delivery':
        return free_delivery_discount(cart)
    elif config.type == 'free_item':
        return free_item_discount(config, cart)
    log.warning('Unknown discount type %r, treated as zero', config.type)
    return ZERO


# ── Buy X get Y ───────────────────────────────────────────────────

def _bogof_lines(definition: BogofDefinition, cart: Cart) -> List[CartItem]:
    """Cart lines the BOGOF rule counts towards its quantity threshold."""
    if definition.applicable_items == 'category':
        if not definition.category_id:
            return []
        return [i for i in cart.items if i.category_id == definition.category_id]

    if definition.applicable_items == 'selected':
        selected = set(definition.selected_item_ids)
        return [i for i in cart.items if i.id in selected]

    if definition.applicable_items == 'same':
        # Only groups of one item that reach buy+get on their own count
        groups = OrderedDict()
        for line in cart.items:
            groups.setdefault(line.id, []).append(line)
        cycle = definition.buy_quantity + definition.get_quantity
        return [
            line
            for group in groups.values()
            if sum(i.quantity for i in group) >= cycle
            for line in group
        ]

    return []


def bogof_discount(definition: BogofDefinition, cart: Cart) -> Decimal:
    """
    Buy `buy_quantity`, get `get_quantity` free, per completed group.

    With lowest_priced_free the cheapest units are freed first (a
    multi-quantity line may be partly consumed). Otherwise every free unit
    is priced at the first eligible line's unit price, which is not
    price-optimal when eligible lines have different prices.
    """
    cycle = definition.buy_quantity + definition.get_quantity
    if cycle <= 0 or definition.get_quantity <= 0:
        return ZERO

    lines     = _bogof_lines(definition, cart)
    total_qty = sum(i.quantity for i in lines)
    if total_qty < cycle:
        return ZERO

    free_count = (total_qty // cycle) * definition.get_quantity

    if not definition.lowest_priced_free:
        return free_count * lines[0].price

    discount  = ZERO
    remaining = free_count
    for line in sorted(lines, key=lambda i: i.price):
        take      = min(remaining, line.quantity)
        discount += take * line.price
        remaining -= take
        if remaining <= 0:
            break
    return discount


# ── Fixed-price bundle ────────────────────────────────────────────

def _bundle_lines(definition: BundleDefinition, cart: Cart) -> List[CartItem]:
    """
    Lines priced into the bundle. Without slots the whole cart is the
    bundle; with slots, every slot must be filled or nothing qualifies.
    """
    if not definition.slots:
        return list(cart.items)

    cart_ids = {i.id for i in cart.items}
    for slot in definition.slots:
        if not cart_ids.intersection(slot.allowed_item_ids):
            return []

    allowed = {item_id for slot in definition.slots for item_id in slot.allowed_item_ids}
    return [i for i in cart.items if i.id in allowed]


def bundle_discount(definition: BundleDefinition, cart: Cart) -> Decimal:
    lines = _bundle_lines(definition, cart)
    if not lines:
        return ZERO
    items_total = sum((i.line_total for i in lines), start=ZERO)
    return max(ZERO, items_total - Decimal(definition.fixed_price))


# ── Dispatch ──────────────────────────────────────────────────────

def promotion_discount(promotion: Promotion, cart: Cart) -> Decimal:
    """Discount a single promotion is worth against the full original cart."""
    if isinstance(promotion, DiscountCodePromotion):
        return discount_config_amount(promotion.discount, cart)
    elif isinstance(promotion, BogofPromotion):
        return bogof_discount(promotion.bogof, cart)
    elif isinstance(promotion, BundlePromotion):
        return bundle_discount(promotion.bundle, cart)
    elif isinstance(promotion, FreeDeliveryPromotion):
        return free_delivery_discount(cart)
    log.warning('Promotion %s has no discount mechanism', promotion.id)
    return ZERO


def describe_promotion(promotion: Promotion) -> str:
    """Short customer-facing label for an applied promotion."""
    if isinstance(promotion, DiscountCodePromotion):
        d = promotion.discount
        if d.type == 'percentage':
            return f'{d.value}% off your order'
        if d.type == 'fixed':
            return f'£{d.value} off your order'
        if d.type == 'free_item':
            return f'Free {d.free_item_id}'
        return 'Free delivery'
    if isinstance(promotion, BogofPromotion):
        b = promotion.bogof
        return f'Buy {b.buy_quantity} Get {b.get_quantity} Free'
    if isinstance(promotion, BundlePromotion):
        return f'Bundle for £{promotion.bundle.fixed_price}'
    if isinstance(promotion, FreeDeliveryPromotion):
        return 'Free delivery'
    return promotion.name
