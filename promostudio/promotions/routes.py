"""
promostudio/promotions/routes.py
--------------------------------
JSON routes for the promotion catalog and the three engine consumers:
checkout evaluation, the "what would a customer see right now" simulator,
and the schedule conflict review.
"""
from decimal import Decimal

from flask import abort, current_app, jsonify, request

from promostudio import db
from promostudio.promotions import promotions
from promostudio.promotions.conflicts import find_conflicts
from promostudio.promotions.engine import evaluate_promotions
from promostudio.promotions.models import PromotionRecord, list_catalog
from promostudio.promotions.schedule import (
    format_schedule, next_schedule_window, promotions_active_at, winning_promotion,
)
from promostudio.promotions.serializers import (
    cart_from_dict, conflict_to_dict, parse_timestamp, promotion_to_dict, result_to_dict,
)
from promostudio.promotions.types import PROMO_STATUSES
from promostudio.promotions.validators import parse_promotion_payload, validate_promotion_payload


# ── Helpers ───────────────────────────────────────────────────────

def _promo_json(promo, at=None) -> dict:
    data = promotion_to_dict(promo)
    data['schedule_text'] = format_schedule(promo)
    if at is not None:
        nxt = next_schedule_window(promo, at)
        data['next_window'] = nxt.isoformat() if nxt else None
    return data


def _timestamp_arg(raw):
    """Parse the `at` parameter or abort with a JSON 400."""
    try:
        return parse_timestamp(raw)
    except (TypeError, ValueError):
        abort(400, description='"at" must be an ISO-8601 timestamp, e.g. 2026-03-04T12:30')


def _get_record_or_404(promo_id: str) -> PromotionRecord:
    record = db.session.get(PromotionRecord, promo_id)
    if record is None:
        abort(404, description=f'Promotion {promo_id} not found')
    return record


# ── Catalog ───────────────────────────────────────────────────────

@promotions.route('/', methods=['GET'])
def index():
    return jsonify([_promo_json(p) for p in list_catalog()])


@promotions.route('/', methods=['POST'])
def create_promo():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Expected a JSON object'}), 400

    errors = validate_promotion_payload(data)
    if errors:
        return jsonify({'errors': errors}), 400

    record = PromotionRecord(**parse_promotion_payload(data))
    if data.get('id'):
        record.id = str(data['id'])
        if db.session.get(PromotionRecord, record.id) is not None:
            return jsonify({'error': f'Promotion {record.id} already exists'}), 409
    db.session.add(record)
    db.session.commit()
    current_app.logger.info(f'Promotion created: {record.id} {record.name!r} ({record.promo_type})')
    return jsonify(_promo_json(record.to_domain())), 201


@promotions.route('/<promo_id>', methods=['GET'])
def show_promo(promo_id):
    record = _get_record_or_404(promo_id)
    at = _timestamp_arg(request.args['at']) if request.args.get('at') else None
    return jsonify(_promo_json(record.to_domain(), at))


@promotions.route('/<promo_id>/status', methods=['POST'])
def set_status(promo_id):
    record = _get_record_or_404(promo_id)
    status = (request.get_json(silent=True) or {}).get('status')
    if status not in PROMO_STATUSES:
        return jsonify({'error': f'Status must be one of: {", ".join(PROMO_STATUSES)}'}), 400

    record.status = status
    db.session.commit()
    current_app.logger.info(f'Promotion {record.id} is now {status}')
    return jsonify(_promo_json(record.to_domain()))


@promotions.route('/<promo_id>', methods=['DELETE'])
def delete_promo(promo_id):
    record = _get_record_or_404(promo_id)
    name = record.name
    db.session.delete(record)
    db.session.commit()
    current_app.logger.info(f'Promotion deleted: {promo_id} {name!r}')
    return jsonify({'deleted': promo_id})


# ── Checkout ──────────────────────────────────────────────────────

@promotions.route('/checkout/evaluate', methods=['POST'])
def checkout_evaluate():
    """
    Body: {"cart": {...}, "at": "2026-03-04T12:30"}
    Returns the applied promotions and totals for that cart at that moment.
    """
    data = request.get_json(silent=True) or {}
    at = _timestamp_arg(data.get('at'))

    try:
        cart = cart_from_dict(
            data.get('cart') or {},
            default_delivery_fee=Decimal(str(current_app.config['DEFAULT_DELIVERY_FEE'])),
        )
    except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as e:
        current_app.logger.warning(f'Rejected checkout cart: {e!r}')
        return jsonify({'error': 'Malformed cart'}), 400

    result = evaluate_promotions(list_catalog(), cart, at)
    return jsonify(result_to_dict(result))


# ── Schedules ─────────────────────────────────────────────────────

@promotions.route('/schedules/simulate', methods=['GET'])
def simulate():
    """What promotions would be live at ?at=..., and which exclusive one wins."""
    at = _timestamp_arg(request.args.get('at'))
    active = promotions_active_at(list_catalog(), at)
    winner = winning_promotion(active)
    return jsonify({
        'at':     at.isoformat(),
        'active': [_promo_json(p) for p in active],
        'winner': _promo_json(winner) if winner else None,
    })


@promotions.route('/schedules/conflicts', methods=['GET'])
def conflicts():
    found = find_conflicts(list_catalog())
    if found:
        current_app.logger.warning(f'{len(found)} schedule conflict(s) in catalog')
    return jsonify([conflict_to_dict(c) for c in found])
