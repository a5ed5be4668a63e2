"""Inventory transaction model - one row per stock movement."""
import enum
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, ForeignKey, func
from boba_pos.database import Base


class TransactionType(str, enum.Enum):
    RESTOCK = 'restock'
    ADJUSTMENT = 'adjustment'
    ORDER = 'order'


class InventoryTransaction(Base):
    """
    Signed quantity change of an ingredient.

    Rows outlive their ingredient: deleting an inventory item only clears
    inventory_id, so history keeps the movement.
    """

    __tablename__ = 'inventory_transactions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    inventory_id = Column(Integer, ForeignKey('inventory.id', ondelete='SET NULL'), nullable=True, index=True)
    order_id = Column(Integer, ForeignKey('sales_order.id', ondelete='SET NULL'), nullable=True)
    quantity_change = Column(Numeric(10, 2), nullable=False)
    transaction_type = Column(String(20), nullable=False)
    transaction_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    # Plain integer like sales_order.employee_id (0 = self-service)
    employee_id = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    def to_dict(self):
        return {
            'transaction_id': self.id,
            'inventory_id': self.inventory_id,
            'order_id': self.order_id,
            'quantity_change': float(self.quantity_change),
            'transaction_type': self.transaction_type,
            'transaction_date': self.transaction_date.isoformat() if self.transaction_date else None,
            'employee_id': self.employee_id,
            'notes': self.notes,
        }

    def __repr__(self):
        return (f"<InventoryTransaction(id={self.id}, inventory_id={self.inventory_id}, "
                f"change={self.quantity_change}, type='{self.transaction_type}')>")
