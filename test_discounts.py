"""
test_discounts.py — Tests for the individual discount calculators.
Run: pytest test_discounts.py -v
"""
from decimal import Decimal

from promostudio.promotions.discounts import (
    bogof_discount, bundle_discount, discount_config_amount, fixed_discount,
    free_delivery_discount, free_item_discount, percentage_discount, promotion_discount,
)
from promostudio.promotions.types import (
    BogofDefinition, BogofPromotion, BundleDefinition, BundleSlot, Cart, CartItem,
    DiscountConfig, FreeDeliveryPromotion,
)


def D(value):
    return Decimal(value)


def line(item_id, price, qty=1, category='mains'):
    return CartItem(id=item_id, price=D(price), quantity=qty, category_id=category)


def cart_of(*lines, fee='2.50', delivery=False):
    return Cart.from_items(lines, delivery_fee=D(fee), is_delivery=delivery)


TWENTY = cart_of(line('a', '20.00'))


# ── 1. percentage ─────────────────────────────────────────────────

def test_percentage_capped_at_max_discount():
    config = DiscountConfig(type='percentage', value=D('50'), max_discount=D('5'))
    assert percentage_discount(config, TWENTY) == D('5')


def test_percentage_without_cap():
    config = DiscountConfig(type='percentage', value=D('50'))
    assert percentage_discount(config, TWENTY) == D('10')


# ── 2. fixed ──────────────────────────────────────────────────────

def test_fixed_discount():
    assert fixed_discount(DiscountConfig(type='fixed', value=D('5')), TWENTY) == D('5')


def test_fixed_never_exceeds_subtotal():
    assert fixed_discount(DiscountConfig(type='fixed', value=D('30')), TWENTY) == D('20.00')


# ── 3. free delivery / free item ──────────────────────────────────

def test_free_delivery_equals_fee_on_delivery_orders():
    assert free_delivery_discount(cart_of(line('a', '10'), delivery=True)) == D('2.50')
    assert free_delivery_discount(cart_of(line('a', '10'), delivery=False)) == 0


def test_free_item_uses_unit_price():
    cart = cart_of(line('brownie', '4.50', qty=3), line('a', '20'))
    config = DiscountConfig(type='free_item', free_item_id='brownie')
    assert free_item_discount(config, cart) == D('4.50')


def test_free_item_missing_from_cart():
    config = DiscountConfig(type='free_item', free_item_id='brownie')
    assert free_item_discount(config, TWENTY) == 0


def test_config_dispatch():
    cart = cart_of(line('a', '20.00'), delivery=True)
    assert discount_config_amount(DiscountConfig(type='free_delivery'), cart) == D('2.50')
    assert discount_config_amount(DiscountConfig(type='fixed', value=D('3')), cart) == D('3')
    assert discount_config_amount(DiscountConfig(type='mystery', value=D('3')), cart) == 0


# ── 4. BOGOF ──────────────────────────────────────────────────────

def test_bogof_lowest_priced_free():
    bogof = BogofDefinition(buy_quantity=1, get_quantity=1, applicable_items='category',
                            category_id='pizza', lowest_priced_free=True)
    cart = cart_of(line('margherita', '10', category='pizza'), line('garlic', '6', category='pizza'))
    assert bogof_discount(bogof, cart) == D('6')


def test_bogof_first_line_price_when_not_lowest_priced():
    bogof = BogofDefinition(buy_quantity=1, get_quantity=1, applicable_items='category',
                            category_id='pizza', lowest_priced_free=False)
    cart = cart_of(line('margherita', '10', category='pizza'), line('garlic', '6', category='pizza'))
    # Known approximation: priced at whichever eligible line comes first
    assert bogof_discount(bogof, cart) == D('10')


def test_bogof_below_threshold_is_zero():
    bogof = BogofDefinition(buy_quantity=2, get_quantity=1, applicable_items='category',
                            category_id='pizza')
    cart = cart_of(line('margherita', '10', qty=2, category='pizza'))
    assert bogof_discount(bogof, cart) == 0


def test_bogof_category_ignores_other_categories():
    bogof = BogofDefinition(buy_quantity=1, get_quantity=1, applicable_items='category',
                            category_id='pizza')
    cart = cart_of(line('margherita', '10', category='pizza'), line('cola', '2', category='drinks'))
    assert bogof_discount(bogof, cart) == 0


def test_bogof_same_only_counts_groups_of_one_item():
    bogof = BogofDefinition(buy_quantity=2, get_quantity=1, applicable_items='same')
    cart = cart_of(line('burger', '8', qty=3), line('fries', '3', qty=2))
    # burger reaches 3 on its own, fries (2) do not join the pool
    assert bogof_discount(bogof, cart) == D('8')


def test_bogof_same_merges_split_lines_of_one_item():
    bogof = BogofDefinition(buy_quantity=1, get_quantity=1, applicable_items='same')
    cart = cart_of(line('burger', '8'), line('burger', '8'))
    assert bogof_discount(bogof, cart) == D('8')


def test_bogof_selected_partial_line_consumption():
    bogof = BogofDefinition(buy_quantity=1, get_quantity=1, applicable_items='selected',
                            selected_item_ids=('wings', 'ribs'))
    cart = cart_of(line('wings', '4', qty=3), line('ribs', '9'), line('salad', '1'))
    # 4 eligible units → 2 free, both taken from the 3 wings
    assert bogof_discount(bogof, cart) == D('8')


def test_bogof_multiple_groups():
    bogof = BogofDefinition(buy_quantity=2, get_quantity=1, applicable_items='selected',
                            selected_item_ids=('taco',))
    cart = cart_of(line('taco', '3.50', qty=7))
    # 7 // 3 = 2 groups → 2 free
    assert bogof_discount(bogof, cart) == D('7.00')


# ── 5. Bundle ─────────────────────────────────────────────────────

def test_bundle_discount_difference():
    bundle = BundleDefinition(fixed_price=D('12.00'))
    cart = cart_of(line('burger', '9.00'), line('fries', '3.50'), line('cola', '2.50'))
    assert bundle_discount(bundle, cart) == D('3.00')


def test_bundle_never_negative():
    bundle = BundleDefinition(fixed_price=D('12.00'))
    assert bundle_discount(bundle, cart_of(line('burger', '10.00'))) == 0


MEAL = BundleDefinition(fixed_price=D('12.00'), slots=(
    BundleSlot(id='main',  name='Burger', allowed_item_ids=('burger',)),
    BundleSlot(id='side',  name='Side',   allowed_item_ids=('fries', 'rings')),
    BundleSlot(id='drink', name='Drink',  allowed_item_ids=('cola',)),
))


def test_bundle_slots_price_only_bundle_items():
    cart = cart_of(line('burger', '9.00'), line('rings', '4.00'), line('cola', '2.50'),
                   line('cheesecake', '5.00'))
    assert bundle_discount(MEAL, cart) == D('3.50')


def test_bundle_unfilled_slot_is_zero():
    cart = cart_of(line('burger', '9.00'), line('fries', '3.50'))
    assert bundle_discount(MEAL, cart) == 0


# ── 6. Promotion dispatch ─────────────────────────────────────────

def test_promotion_dispatch():
    bogof = BogofPromotion(id='b', name='BOGOF',
                           bogof=BogofDefinition(buy_quantity=1, get_quantity=1))
    assert promotion_discount(bogof, cart_of(line('a', '5', qty=2))) == D('5')

    free = FreeDeliveryPromotion(id='f', name='Free delivery')
    assert promotion_discount(free, cart_of(line('a', '5'), delivery=True)) == D('2.50')
