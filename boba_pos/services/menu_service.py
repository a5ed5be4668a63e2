"""Menu management service - menu rows and their ingredient dependencies."""
import logging
from typing import Any, Dict, List

from boba_pos.exceptions import NotFoundError, ValidationError
from boba_pos.models import MenuItem, MenuInventory, InventoryItem
from boba_pos.utils.number_format import parse_money, parse_quantity

logger = logging.getLogger(__name__)


def _validated_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate menu_name / price / item_type from a request payload."""
    name = (data.get('menu_name') or '').strip()
    item_type = (data.get('item_type') or '').strip()
    price = data.get('price')

    if not name or price is None or not item_type:
        raise ValidationError('Menu name, price, and item type are required')

    try:
        price = parse_money(price)
    except ValueError as e:
        raise ValidationError(str(e))

    return {'name': name, 'price': price, 'item_type': item_type}


def list_menu(session) -> List[MenuItem]:
    return session.query(MenuItem).order_by(MenuItem.item_type, MenuItem.name).all()


def list_by_type(session, item_type: str) -> List[MenuItem]:
    return session.query(MenuItem).filter(MenuItem.item_type == item_type).order_by(MenuItem.name).all()


def get_menu_item(session, menu_id: int) -> MenuItem:
    item = session.query(MenuItem).filter(MenuItem.id == menu_id).first()
    if not item:
        raise NotFoundError('Menu item not found')
    return item


def create_menu_item(session, data: Dict[str, Any]) -> MenuItem:
    item = MenuItem(**_validated_fields(data))
    session.add(item)
    session.commit()
    logger.info(f"[MENU] Added {item.item_type} '{item.name}' at {item.price}")
    return item


def update_menu_item(session, menu_id: int, data: Dict[str, Any]) -> MenuItem:
    fields = _validated_fields(data)
    item = get_menu_item(session, menu_id)
    for key, value in fields.items():
        setattr(item, key, value)
    session.commit()
    return item


def delete_menu_item(session, menu_id: int) -> Dict[str, Any]:
    item = get_menu_item(session, menu_id)
    data = item.to_dict()
    session.delete(item)
    session.commit()
    logger.info(f"[MENU] Deleted '{data['menu_name']}'")
    return data


# =====================================================
# INGREDIENT DEPENDENCIES
# =====================================================

def dependencies_batch(session) -> Dict[int, List[Dict[str, Any]]]:
    """Every menu item's ingredient list in one query, keyed by menu id."""
    rows = (
        session.query(MenuInventory, InventoryItem)
        .join(InventoryItem, InventoryItem.id == MenuInventory.inventory_id)
        .order_by(MenuInventory.menu_id, InventoryItem.item_name)
        .all()
    )

    grouped: Dict[int, List[Dict[str, Any]]] = {}
    for mapping, ingredient in rows:
        grouped.setdefault(mapping.menu_id, []).append({
            'inventory_id': ingredient.id,
            'name': ingredient.item_name,
            'quantity_needed': float(mapping.quantity),
        })
    return grouped


def get_dependencies(session, menu_id: int) -> Dict[str, Any]:
    item = get_menu_item(session, menu_id)
    rows = (
        session.query(MenuInventory, InventoryItem)
        .join(InventoryItem, InventoryItem.id == MenuInventory.inventory_id)
        .filter(MenuInventory.menu_id == menu_id)
        .order_by(InventoryItem.item_name)
        .all()
    )
    return {
        'menu_id': item.id,
        'menu_name': item.name,
        'dependencies': [
            {'inventory_id': ing.id, 'name': ing.item_name, 'quantity_needed': float(m.quantity)}
            for m, ing in rows
        ],
    }


def set_dependency(session, menu_id: int, inventory_id, quantity_needed) -> MenuInventory:
    """Add or update (upsert) how much of an ingredient one unit of a menu item consumes."""
    if not inventory_id or quantity_needed is None:
        raise ValidationError('inventory_id and quantity_needed are required')
    try:
        quantity = parse_quantity(quantity_needed)
    except ValueError:
        raise ValidationError('quantity_needed must be greater than 0')

    get_menu_item(session, menu_id)
    if not session.query(InventoryItem).filter(InventoryItem.id == inventory_id).first():
        raise NotFoundError('Inventory item not found')

    mapping = session.query(MenuInventory).filter(
        MenuInventory.menu_id == menu_id,
        MenuInventory.inventory_id == inventory_id
    ).first()

    if mapping:
        mapping.quantity = quantity
    else:
        mapping = MenuInventory(menu_id=menu_id, inventory_id=inventory_id, quantity=quantity)
        session.add(mapping)

    session.commit()
    return mapping


def remove_dependency(session, menu_id: int, inventory_id: int) -> None:
    deleted = session.query(MenuInventory).filter(
        MenuInventory.menu_id == menu_id,
        MenuInventory.inventory_id == inventory_id
    ).delete()
    if not deleted:
        session.rollback()
        raise NotFoundError('Dependency not found')
    session.commit()
