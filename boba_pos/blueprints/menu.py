"""Menu blueprint - menu rows and their ingredient dependencies."""
from flask import Blueprint, request, jsonify, current_app
from boba_pos.database import get_session
from boba_pos.middleware import require_manager
from boba_pos.services import menu_service
from boba_pos.services.catalog_service import list_menu_grouped

menu_bp = Blueprint('menu', __name__, url_prefix='/api/menu')


@menu_bp.route('', methods=['GET'])
def list_menu():
    """All menu rows, by type then name."""
    items = menu_service.list_menu(get_session())
    return jsonify([item.to_dict() for item in items])


@menu_bp.route('/grouped', methods=['GET'])
def grouped():
    """Purchasable items grouped by category (customer kiosk view)."""
    return jsonify(list_menu_grouped(get_session()))


@menu_bp.route('/category/<item_type>', methods=['GET'])
def by_category(item_type: str):
    items = menu_service.list_by_type(get_session(), item_type)
    return jsonify([item.to_dict() for item in items])


@menu_bp.route('/dependencies/batch', methods=['GET'])
def dependencies_batch():
    """Ingredient lists for every menu item, keyed by menu id."""
    grouped_deps = menu_service.dependencies_batch(get_session())
    return jsonify({str(menu_id): deps for menu_id, deps in grouped_deps.items()})


@menu_bp.route('/<int:menu_id>', methods=['GET'])
def get_item(menu_id: int):
    return jsonify(menu_service.get_menu_item(get_session(), menu_id).to_dict())


@menu_bp.route('', methods=['POST'])
@require_manager
def create_item():
    data = request.get_json(silent=True) or {}
    item = menu_service.create_menu_item(get_session(), data)
    return jsonify(item.to_dict()), 201


@menu_bp.route('/<int:menu_id>', methods=['PUT'])
@require_manager
def update_item(menu_id: int):
    data = request.get_json(silent=True) or {}
    item = menu_service.update_menu_item(get_session(), menu_id, data)
    current_app.logger.info(f"[MENU] Updated '{item.name}' (id={item.id})")
    return jsonify(item.to_dict())


@menu_bp.route('/<int:menu_id>', methods=['DELETE'])
@require_manager
def delete_item(menu_id: int):
    deleted = menu_service.delete_menu_item(get_session(), menu_id)
    return jsonify({'message': 'Menu item deleted successfully', 'deleted': deleted})


# =====================================================
# INGREDIENT DEPENDENCIES
# =====================================================

@menu_bp.route('/<int:menu_id>/dependencies', methods=['GET'])
def get_dependencies(menu_id: int):
    return jsonify(menu_service.get_dependencies(get_session(), menu_id))


@menu_bp.route('/<int:menu_id>/dependencies', methods=['POST'])
@require_manager
def set_dependency(menu_id: int):
    data = request.get_json(silent=True) or {}
    mapping = menu_service.set_dependency(
        get_session(), menu_id, data.get('inventory_id'), data.get('quantity_needed')
    )
    return jsonify(mapping.to_dict()), 201


@menu_bp.route('/<int:menu_id>/dependencies/<int:inventory_id>', methods=['DELETE'])
@require_manager
def remove_dependency(menu_id: int, inventory_id: int):
    menu_service.remove_dependency(get_session(), menu_id, inventory_id)
    return jsonify({'message': 'Dependency removed successfully'})
