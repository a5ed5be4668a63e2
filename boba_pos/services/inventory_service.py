"""Inventory service - ingredient stock, restocking and menu stock status."""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from boba_pos.exceptions import BusinessLogicError, NotFoundError, ValidationError
from boba_pos.models import (
    Employee, InventoryItem, InventoryTransaction, MenuInventory, MenuItem, TransactionType
)
from boba_pos.utils.number_format import parse_quantity, parse_quantity_change

logger = logging.getLogger(__name__)

STATUS_NO_INVENTORY = 'NO_INVENTORY_REQUIRED'
STATUS_OUT_OF_STOCK = 'OUT_OF_STOCK'
STATUS_INSUFFICIENT = 'INSUFFICIENT_STOCK'
STATUS_LOW = 'LOW_STOCK'
STATUS_IN_STOCK = 'IN_STOCK'

DEFAULT_HISTORY_LIMIT = 100
MAX_HISTORY_LIMIT = 500

# Worst first
_STATUS_SEVERITY = [STATUS_OUT_OF_STOCK, STATUS_INSUFFICIENT, STATUS_LOW, STATUS_IN_STOCK]


def _quantity(value, allow_zero=False) -> Decimal:
    try:
        return parse_quantity(value, allow_zero=allow_zero)
    except ValueError as e:
        raise ValidationError(str(e))


def list_inventory(session) -> List[InventoryItem]:
    return session.query(InventoryItem).order_by(InventoryItem.item_name).all()


def list_low_stock(session, threshold: int) -> List[InventoryItem]:
    return (
        session.query(InventoryItem)
        .filter(InventoryItem.quantity <= threshold)
        .order_by(InventoryItem.quantity.asc(), InventoryItem.item_name.asc())
        .all()
    )


def get_inventory_item(session, inventory_id: int) -> InventoryItem:
    item = session.query(InventoryItem).filter(InventoryItem.id == inventory_id).first()
    if not item:
        raise NotFoundError('Inventory item not found')
    return item


def create_inventory_item(session, item_name: str, quantity) -> InventoryItem:
    name = (item_name or '').strip()
    if not name:
        raise ValidationError('Item name is required')

    item = InventoryItem(item_name=name, quantity=_quantity(quantity if quantity is not None else 0, allow_zero=True))
    try:
        session.add(item)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f"Inventory item '{name}' already exists", status_code=409)

    logger.info(f"[INVENTORY] Created {item.item_name} (qty {item.quantity})")
    return item


def update_inventory_item(session, inventory_id: int, item_name: Optional[str] = None, quantity=None) -> InventoryItem:
    item = get_inventory_item(session, inventory_id)

    if item_name is not None:
        name = item_name.strip()
        if not name:
            raise ValidationError('Item name cannot be empty')
        item.item_name = name
    if quantity is not None:
        item.quantity = _quantity(quantity, allow_zero=True)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f"Inventory item '{item_name}' already exists", status_code=409)
    return item


def delete_inventory_item(session, inventory_id: int) -> Dict[str, Any]:
    item = get_inventory_item(session, inventory_id)
    data = item.to_dict()
    session.query(MenuInventory).filter(MenuInventory.inventory_id == inventory_id).delete()
    session.query(InventoryTransaction).filter(InventoryTransaction.inventory_id == inventory_id).update(
        {InventoryTransaction.inventory_id: None}, synchronize_session=False
    )
    session.delete(item)
    session.commit()
    logger.info(f"[INVENTORY] Deleted {data['item_name']}")
    return data


def _record(session, inventory_id: int, change: Decimal, transaction_type: TransactionType,
            employee_id: Optional[int], notes: Optional[str]) -> None:
    session.add(InventoryTransaction(
        inventory_id=inventory_id,
        quantity_change=change,
        transaction_type=transaction_type.value,
        employee_id=employee_id,
        notes=(notes or '').strip() or None,
    ))


def restock(session, inventory_id: int, quantity, employee_id: Optional[int] = None,
            notes: Optional[str] = None) -> InventoryItem:
    """Add a positive quantity to an ingredient (server-side increment)."""
    amount = _quantity(quantity)

    updated = (
        session.query(InventoryItem)
        .filter(InventoryItem.id == inventory_id)
        .update({InventoryItem.quantity: InventoryItem.quantity + amount}, synchronize_session=False)
    )
    if not updated:
        session.rollback()
        raise NotFoundError('Inventory item not found')
    _record(session, inventory_id, amount, TransactionType.RESTOCK, employee_id, notes)
    session.commit()

    item = get_inventory_item(session, inventory_id)
    session.refresh(item)
    logger.info(f"[INVENTORY] Restocked {item.item_name}: +{amount} (new stock: {item.quantity}) "
                f"by employee {employee_id or 'N/A'}{f' - {notes}' if notes else ''}")
    return item


def adjust(session, inventory_id: int, quantity_change=None, new_quantity=None,
           notes: Optional[str] = None, employee_id: Optional[int] = None) -> Dict[str, Any]:
    """
    Correct an ingredient's stock (waste, spillage, stock count).

    Either a signed quantity_change (non-zero) or a counted new_quantity is
    given. The result may not go below zero. The movement is recorded as an
    adjustment transaction.
    """
    if quantity_change is None and new_quantity is None:
        raise ValidationError('quantity_change or new_quantity is required')
    if quantity_change is not None and new_quantity is not None:
        raise ValidationError('Send either quantity_change or new_quantity, not both')

    if quantity_change is not None:
        try:
            change = parse_quantity_change(quantity_change)
        except ValueError as e:
            raise ValidationError(str(e))
    else:
        target = _quantity(new_quantity, allow_zero=True)

    item = (
        session.query(InventoryItem)
        .filter(InventoryItem.id == inventory_id)
        .with_for_update()
        .first()
    )
    if not item:
        session.rollback()
        raise NotFoundError('Inventory item not found')

    previous = Decimal(str(item.quantity))
    if quantity_change is None:
        change = target - previous
        if change == 0:
            session.rollback()
            raise ValidationError('new_quantity matches the current stock; nothing to adjust')
    resulting = previous + change

    if resulting < 0:
        session.rollback()
        raise ValidationError('Adjustment would result in negative stock', payload={
            'current_quantity': float(previous),
            'requested_change': float(change),
            'resulting_quantity': float(resulting),
        })

    item.quantity = resulting
    _record(session, inventory_id, change, TransactionType.ADJUSTMENT, employee_id, notes)
    session.commit()

    logger.info(f"[INVENTORY] Adjusted {item.item_name}: {'+' if change > 0 else ''}{change} "
                f"(new stock: {resulting}) by employee {employee_id or 'N/A'}"
                f"{f' - {notes.strip()}' if notes and notes.strip() else ''}")
    return {
        'item': item.to_dict(),
        'previous_quantity': float(previous),
        'quantity_change': float(change),
        'notes': (notes or '').strip() or None,
    }


def list_transactions(session, inventory_id: Optional[int] = None,
                      limit: int = DEFAULT_HISTORY_LIMIT) -> List[Dict[str, Any]]:
    """Stock movements, newest first, with the ingredient and employee names."""
    query = (
        session.query(InventoryTransaction, InventoryItem.item_name, Employee)
        .outerjoin(InventoryItem, InventoryItem.id == InventoryTransaction.inventory_id)
        .outerjoin(Employee, Employee.id == InventoryTransaction.employee_id)
    )
    if inventory_id is not None:
        query = query.filter(InventoryTransaction.inventory_id == inventory_id)

    rows = (
        query.order_by(InventoryTransaction.transaction_date.desc(), InventoryTransaction.id.desc())
        .limit(limit)
        .all()
    )

    results = []
    for transaction, item_name, employee in rows:
        data = transaction.to_dict()
        data['item_name'] = item_name
        data['employee_username'] = employee.username if employee else None
        data['employee_first_name'] = employee.first_name if employee else None
        data['employee_last_name'] = employee.last_name if employee else None
        results.append(data)
    return results



def _ingredient_status(on_hand: Decimal, required: Decimal, threshold: int) -> str:
    if on_hand == 0:
        return STATUS_OUT_OF_STOCK
    if on_hand < required:
        return STATUS_INSUFFICIENT
    if on_hand <= threshold:
        return STATUS_LOW
    return STATUS_IN_STOCK


def menu_stock_status(session, threshold: int) -> List[Dict[str, Any]]:
    """Per menu item, the worst stock status among the ingredients it needs."""
    menu_items = session.query(MenuItem).order_by(MenuItem.item_type, MenuItem.name).all()
    mappings = (
        session.query(MenuInventory, InventoryItem)
        .join(InventoryItem, InventoryItem.id == MenuInventory.inventory_id)
        .all()
    )

    by_menu: Dict[int, List] = {}
    for mapping, ingredient in mappings:
        by_menu.setdefault(mapping.menu_id, []).append((mapping, ingredient))

    results = []
    for menu_item in menu_items:
        ingredients = by_menu.get(menu_item.id, [])
        if not ingredients:
            status = STATUS_NO_INVENTORY
        else:
            statuses = {
                _ingredient_status(Decimal(str(ing.quantity)), Decimal(str(m.quantity)), threshold)
                for m, ing in ingredients
            }
            status = next(s for s in _STATUS_SEVERITY if s in statuses)

        results.append({
            'menuid': menu_item.id,
            'menu_name': menu_item.name,
            'item_type': menu_item.item_type,
            'stock_status': status,
            'ingredients': [
                {
                    'inventory_id': ing.id,
                    'inventory_name': ing.item_name,
                    'current_stock': float(ing.quantity),
                    'required_per_item': float(m.quantity),
                }
                for m, ing in ingredients
            ],
        })
    return results
