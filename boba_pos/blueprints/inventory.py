"""Inventory blueprint - ingredient stock management."""
from flask import Blueprint, request, jsonify, g, current_app
from boba_pos.database import get_session
from boba_pos.exceptions import ValidationError
from boba_pos.middleware import require_employee, require_manager
from boba_pos.services import inventory_service

inventory_bp = Blueprint('inventory', __name__, url_prefix='/api/inventory')


def _threshold() -> int:
    raw = request.args.get('threshold')
    if raw in (None, ''):
        return current_app.config.get('LOW_STOCK_THRESHOLD', 10)
    try:
        return int(raw)
    except ValueError:
        raise ValidationError('threshold must be an integer')


@inventory_bp.route('', methods=['GET'])
@require_employee
def list_inventory():
    items = inventory_service.list_inventory(get_session())
    return jsonify([item.to_dict() for item in items])


@inventory_bp.route('/low-stock', methods=['GET'])
@require_employee
def low_stock():
    threshold = _threshold()
    items = inventory_service.list_low_stock(get_session(), threshold)
    return jsonify({'threshold': threshold, 'items': [item.to_dict() for item in items]})


@inventory_bp.route('/menu-stock-status', methods=['GET'])
def menu_stock_status():
    """Per menu item stock status, used by the register to grey out drinks."""
    return jsonify(inventory_service.menu_stock_status(get_session(), _threshold()))


@inventory_bp.route('/<int:inventory_id>', methods=['GET'])
@require_employee
def get_item(inventory_id: int):
    return jsonify(inventory_service.get_inventory_item(get_session(), inventory_id).to_dict())


@inventory_bp.route('', methods=['POST'])
@require_manager
def create_item():
    data = request.get_json(silent=True) or {}
    item = inventory_service.create_inventory_item(get_session(), data.get('item_name'), data.get('quantity'))
    return jsonify(item.to_dict()), 201


@inventory_bp.route('/<int:inventory_id>', methods=['PUT'])
@require_manager
def update_item(inventory_id: int):
    data = request.get_json(silent=True) or {}
    item = inventory_service.update_inventory_item(
        get_session(), inventory_id, data.get('item_name'), data.get('quantity')
    )
    return jsonify(item.to_dict())


@inventory_bp.route('/<int:inventory_id>', methods=['DELETE'])
@require_manager
def delete_item(inventory_id: int):
    deleted = inventory_service.delete_inventory_item(get_session(), inventory_id)
    return jsonify({'message': 'Inventory item deleted successfully', 'deleted': deleted})


@inventory_bp.route('/restock/<int:inventory_id>', methods=['POST'])
@require_manager
def restock(inventory_id: int):
    data = request.get_json(silent=True) or {}
    if data.get('quantity') is None:
        raise ValidationError('Valid quantity required')
    item = inventory_service.restock(
        get_session(), inventory_id, data['quantity'], employee_id=g.employee_id, notes=data.get('notes')
    )
    return jsonify({'message': 'Inventory restocked successfully', 'item': item.to_dict()})


@inventory_bp.route('/adjust/<int:inventory_id>', methods=['POST'])
@require_manager
def adjust(inventory_id: int):
    """Signed quantity_change (or a counted new_quantity) with optional notes."""
    data = request.get_json(silent=True) or {}
    result = inventory_service.adjust(
        get_session(),
        inventory_id,
        quantity_change=data.get('quantity_change'),
        new_quantity=data.get('new_quantity'),
        notes=data.get('notes') or data.get('reason'),
        employee_id=g.employee_id,
    )
    result['success'] = True
    result['message'] = 'Inventory adjusted successfully'
    return jsonify(result)


@inventory_bp.route('/transactions/history', methods=['GET'])
@require_employee
def transaction_history():
    """Restock, adjustment and order movements, newest first."""
    inventory_id = request.args.get('inventory_id', type=int)
    limit = request.args.get('limit', inventory_service.DEFAULT_HISTORY_LIMIT, type=int)
    if limit < 1:
        raise ValidationError('limit must be a positive integer')
    limit = min(limit, inventory_service.MAX_HISTORY_LIMIT)
    return jsonify(inventory_service.list_transactions(get_session(), inventory_id, limit))
