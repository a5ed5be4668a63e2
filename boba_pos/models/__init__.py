"""Models package - exports all SQLAlchemy models."""
from boba_pos.models.menu_item import MenuItem, ITEM_TYPE_ADDON, ITEM_TYPE_CUSTOMIZATION, OPTION_ITEM_TYPES
from boba_pos.models.inventory_item import InventoryItem
from boba_pos.models.menu_inventory import MenuInventory
from boba_pos.models.inventory_transaction import InventoryTransaction, TransactionType
from boba_pos.models.employee import Employee, EmployeeLevel
from boba_pos.models.customer import Customer, GUEST_CUSTOMER_ID
from boba_pos.models.sales_order import (
    SalesOrder, PaymentMethod, OrderStatus, SELF_SERVICE_EMPLOYEE_ID, normalize_payment_method
)

__all__ = [
    # Catalog
    'MenuItem', 'ITEM_TYPE_ADDON', 'ITEM_TYPE_CUSTOMIZATION', 'OPTION_ITEM_TYPES',
    'InventoryItem', 'MenuInventory',
    'InventoryTransaction', 'TransactionType',
    # People
    'Employee', 'EmployeeLevel', 'Customer', 'GUEST_CUSTOMER_ID',
    # Orders
    'SalesOrder', 'PaymentMethod', 'OrderStatus', 'SELF_SERVICE_EMPLOYEE_ID', 'normalize_payment_method',
]
