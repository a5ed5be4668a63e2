"""Inventory (ingredient) model."""
from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint
from boba_pos.database import Base


class InventoryItem(Base):
    """Ingredient stock on hand."""

    __tablename__ = 'inventory'
    __table_args__ = (
        CheckConstraint('quantity >= 0', name='ck_inventory_quantity_non_negative'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_name = Column(String(120), nullable=False, unique=True)
    quantity = Column(Numeric(10, 2), nullable=False, default=0)

    def to_dict(self):
        return {
            'ingredientid': self.id,
            'item_name': self.item_name,
            'quantity': float(self.quantity),
        }

    def __repr__(self):
        return f"<InventoryItem(id={self.id}, name='{self.item_name}', qty={self.quantity})>"
