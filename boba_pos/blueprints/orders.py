"""Orders blueprint - checkout and order lookups."""
from flask import Blueprint, request, jsonify, g, current_app
from boba_pos.blueprints.cart import get_cart, clear_cart
from boba_pos.database import get_session
from boba_pos.exceptions import ValidationError
from boba_pos.middleware import require_manager
from boba_pos.models import GUEST_CUSTOMER_ID, SELF_SERVICE_EMPLOYEE_ID
from boba_pos.services import order_query_service
from boba_pos.services.cart_service import CartLedger
from boba_pos.services.catalog_service import load_catalog
from boba_pos.services.line_item_service import build_line_item
from boba_pos.services.settlement_service import SqlOrderStore, SqlCustomerStore, submit_order

orders_bp = Blueprint('orders', __name__, url_prefix='/api/orders')


def _int_field(data, key: str, default: int) -> int:
    value = data.get(key)
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValidationError(f'{key} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{key} must be an integer')


def _settle(cart: CartLedger, data):
    """Run settlement for a cart and shape the HTTP response."""
    db_session = get_session()
    employee_default = g.employee_id if g.get('employee_id') else SELF_SERVICE_EMPLOYEE_ID

    receipt = submit_order(
        cart,
        customer_id=_int_field(data, 'customer_id', GUEST_CUSTOMER_ID),
        employee_id=_int_field(data, 'employee_id', employee_default),
        payment_method=data.get('payment_method'),
        notes=data.get('notes') or '',
        order_store=SqlOrderStore(db_session, current_app.config.get('ORDER_TIMEZONE', 'America/Chicago')),
        customer_store=SqlCustomerStore(db_session),
        idempotency_key=data.get('idempotency_key') or request.headers.get('Idempotency-Key'),
    )

    response = receipt.to_dict()
    if receipt.partial:
        response['warning'] = 'Order placed, but rewards points could not be recorded'
    return response


@orders_bp.route('/checkout', methods=['POST'])
def checkout():
    """Settle the session cart. The cart is cleared once the order exists."""
    data = request.get_json(silent=True) or {}
    response = _settle(get_cart(), data)
    clear_cart()
    return jsonify(response), 201


@orders_bp.route('', methods=['POST'])
def create_order():
    """
    Settle a list of items sent by the client.

    Each entry is {menu_item_id, quantity, selections}. Prices are rebuilt
    from the catalog; any client-side price is ignored.
    """
    data = request.get_json(silent=True) or {}
    items = data.get('items')
    if items is not None and not isinstance(items, list):
        raise ValidationError('items must be a list')

    cart = CartLedger()
    if items:
        catalog = load_catalog(get_session())
        for entry in items:
            if not isinstance(entry, dict) or entry.get('menu_item_id') is None:
                raise ValidationError('Each item needs a menu_item_id')
            cart.add(build_line_item(
                catalog, entry['menu_item_id'], entry.get('selections') or {}, entry.get('quantity', 1)
            ))

    return jsonify(_settle(cart, data)), 201


@orders_bp.route('/recent', methods=['GET'])
@require_manager
def recent():
    orders = order_query_service.recent_orders(
        get_session(),
        request.args.get('limit'),
        default_limit=current_app.config.get('RECENT_ORDERS_LIMIT', 50)
    )
    return jsonify(orders)


@orders_bp.route('/search', methods=['GET'])
@require_manager
def search():
    orders = order_query_service.search_orders(
        get_session(),
        order_id=request.args.get('orderId'),
        customer_username=request.args.get('customerUsername', '').strip() or None,
        employee_username=request.args.get('employeeUsername', '').strip() or None,
    )
    return jsonify(orders)


@orders_bp.route('/customer/<int:customer_id>', methods=['GET'])
def customer_orders(customer_id: int):
    return jsonify(order_query_service.customer_history(get_session(), customer_id, request.args.get('limit')))


@orders_bp.route('/<int:order_id>', methods=['GET'])
def get_order(order_id: int):
    return jsonify(order_query_service.get_order(get_session(), order_id).to_dict())
