"""
promostudio/seed.py
-------------------
Demo catalog loaded by `flask seed-demo`. Payloads use the same JSON shape
as POST /promotions/ and go through the same validator.
"""

DEMO_PROMOTIONS = [
    {
        'id': 'promo_lunch20',
        'name': 'Weekday Lunch 20% Off',
        'type': 'discount_code',
        'code': 'LUNCH20',
        'status': 'active',
        'priority': 20,
        'stackable': False,
        'min_basket': '15.00',
        'schedule': {
            'days_of_week': ['mon', 'tue', 'wed', 'thu', 'fri'],
            'start_time': '12:00',
            'end_time': '14:00',
        },
        'discount': {'type': 'percentage', 'value': '20', 'max_discount': '10.00'},
    },
    {
        'id': 'promo_happyhour',
        'name': 'Midweek Happy Hour £5 Off',
        'type': 'discount_code',
        'code': 'HAPPY5',
        'status': 'active',
        'priority': 10,
        'stackable': False,
        'min_basket': '20.00',
        'schedule': {
            'days_of_week': ['wed', 'thu', 'fri', 'sat'],
            'start_time': '13:00',
            'end_time': '15:00',
        },
        'discount': {'type': 'fixed', 'value': '5.00'},
    },
    {
        'id': 'promo_pizza_bogof',
        'name': 'Pizza Tuesday BOGOF',
        'type': 'bogof',
        'status': 'active',
        'priority': 15,
        'stackable': False,
        'eligible_category_ids': ['pizza'],
        'schedule': {'days_of_week': ['tue']},
        'bogof': {
            'buy_quantity': 1,
            'get_quantity': 1,
            'applicable_items': 'category',
            'category_id': 'pizza',
            'lowest_priced_free': True,
        },
    },
    {
        'id': 'promo_meal_deal',
        'name': 'Burger Meal Deal £12',
        'type': 'bundle',
        'status': 'active',
        'priority': 5,
        'stackable': False,
        'eligible_item_ids': ['classic_burger', 'cheese_burger'],
        'bundle': {
            'fixed_price': '12.00',
            'slots': [
                {'id': 'main',  'name': 'Burger', 'allowed_item_ids': ['classic_burger', 'cheese_burger']},
                {'id': 'side',  'name': 'Side',   'allowed_item_ids': ['fries', 'onion_rings']},
                {'id': 'drink', 'name': 'Drink',  'allowed_item_ids': ['cola', 'lemonade']},
            ],
        },
    },
    {
        'id': 'promo_free_delivery',
        'name': 'Free Delivery Over £25',
        'type': 'free_delivery',
        'status': 'active',
        'priority': 1,
        'stackable': True,
        'free_delivery_threshold': '25.00',
    },
    {
        'id': 'promo_weekend_dessert',
        'name': 'Weekend Free Brownie',
        'type': 'discount_code',
        'code': 'SWEET',
        'status': 'scheduled',
        'priority': 8,
        'stackable': True,
        'min_basket': '30.00',
        'schedule': {
            'days_of_week': ['sat', 'sun'],
            'start_time': '17:00',
            'end_time': '22:00',
        },
        'discount': {'type': 'free_item', 'free_item_id': 'brownie'},
    },
]
