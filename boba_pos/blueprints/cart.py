"""Cart blueprint - the in-progress order, held in the Flask session."""
from flask import Blueprint, request, jsonify, session, current_app
from boba_pos.database import get_session
from boba_pos.exceptions import ValidationError
from boba_pos.services.cart_service import CartLedger
from boba_pos.services.catalog_service import load_catalog
from boba_pos.services.line_item_service import build_line_item, rebuild_line_item

cart_bp = Blueprint('cart', __name__, url_prefix='/api/cart')

CART_SESSION_KEY = 'cart'


def get_cart() -> CartLedger:
    """Cart of the current browser session (empty if none yet)."""
    return CartLedger.from_dict(session.get(CART_SESSION_KEY))


def save_cart(cart: CartLedger) -> None:
    session[CART_SESSION_KEY] = cart.to_dict()
    session.modified = True


def clear_cart() -> None:
    session.pop(CART_SESSION_KEY, None)


def _item_payload():
    """menu_item_id / quantity / selections from a JSON body."""
    data = request.get_json(silent=True) or {}
    selections = data.get('selections') or {}
    if not isinstance(selections, dict):
        raise ValidationError('selections must be an object')
    return data, selections


@cart_bp.route('', methods=['GET'])
def view_cart():
    return jsonify(get_cart().summary())


@cart_bp.route('/items', methods=['POST'])
def add_item():
    """Price an item with its options and add it (merging identical drinks)."""
    data, selections = _item_payload()
    if data.get('menu_item_id') is None:
        raise ValidationError('menu_item_id is required')

    catalog = load_catalog(get_session())
    line_item = build_line_item(catalog, data['menu_item_id'], selections, data.get('quantity', 1))

    cart = get_cart()
    index = cart.add(line_item)
    save_cart(cart)

    current_app.logger.info(f"[CART] Added {line_item.quantity} x {line_item.display_name} at position {index}")
    response = cart.summary()
    response['index'] = index
    return jsonify(response), 201


@cart_bp.route('/items/<int:index>', methods=['PUT'])
def update_item(index: int):
    """Re-customize an entry in place (quantity kept unless given)."""
    data, selections = _item_payload()
    cart = get_cart()
    existing = cart[index]

    catalog = load_catalog(get_session())
    cart.replace_at(index, rebuild_line_item(catalog, existing, selections, data.get('quantity')))
    save_cart(cart)
    return jsonify(cart.summary())


@cart_bp.route('/items/<int:index>/increment', methods=['POST'])
def increment_item(index: int):
    cart = get_cart()
    cart.increment_at(index)
    save_cart(cart)
    return jsonify(cart.summary())


@cart_bp.route('/items/<int:index>/decrement', methods=['POST'])
def decrement_item(index: int):
    """Lower quantity by one; an entry at quantity 1 is removed."""
    cart = get_cart()
    cart.decrement_at(index)
    save_cart(cart)
    return jsonify(cart.summary())


@cart_bp.route('/items/<int:index>', methods=['DELETE'])
def remove_item(index: int):
    cart = get_cart()
    removed = cart.remove_at(index)
    save_cart(cart)
    current_app.logger.info(f"[CART] Removed {removed.display_name}")
    return jsonify(cart.summary())


@cart_bp.route('', methods=['DELETE'])
def cancel_cart():
    """Discard the whole in-progress order."""
    clear_cart()
    return jsonify(CartLedger().summary())
