"""Customers blueprint - identity login resolution and rewards balance."""
from flask import Blueprint, request, jsonify, current_app
from boba_pos.database import get_session
from boba_pos.exceptions import ValidationError
from boba_pos.middleware import require_manager
from boba_pos.services import customer_service

customers_bp = Blueprint('customers', __name__, url_prefix='/api/customers')


@customers_bp.route('/identity', methods=['POST'])
def resolve_identity():
    """
    Resolve the customer behind an identity-provider login.

    Body: {identity, display_name}. The customer is created with 0 rewards
    points on first login.
    """
    data = request.get_json(silent=True) or {}
    customer, is_new = customer_service.find_or_create_from_identity(
        get_session(), data.get('identity'), data.get('display_name')
    )
    response = customer.to_dict()
    response['is_new'] = is_new
    return jsonify(response), 201 if is_new else 200


@customers_bp.route('/lookup/<path:username>', methods=['GET'])
def lookup(username: str):
    return jsonify(customer_service.find_by_identity(get_session(), username).to_dict())


@customers_bp.route('/<int:customer_id>', methods=['GET'])
def get_customer(customer_id: int):
    return jsonify(customer_service.get_customer(get_session(), customer_id).to_dict())


@customers_bp.route('/<int:customer_id>/rewards', methods=['POST'])
@require_manager
def add_rewards(customer_id: int):
    """Manual rewards credit (e.g. goodwill points)."""
    data = request.get_json(silent=True) or {}
    points = data.get('points')
    if isinstance(points, str) and points.strip().isdigit():
        points = int(points.strip())
    if points is None:
        raise ValidationError('Valid points amount required')

    new_balance = customer_service.increment_rewards(get_session(), customer_id, points)
    current_app.logger.info(f"[REWARDS] Manual credit of {points} points to customer {customer_id}")
    return jsonify({'custid': customer_id, 'rewards_points': new_balance, 'points_added': points})
