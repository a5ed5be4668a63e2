"""Menu item -> ingredient dependency (units consumed per item sold)."""
from sqlalchemy import Column, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from boba_pos.database import Base


class MenuInventory(Base):

    __tablename__ = 'menu_inventory'

    menu_id = Column(Integer, ForeignKey('menu.id', ondelete='CASCADE'), primary_key=True)
    inventory_id = Column(Integer, ForeignKey('inventory.id', ondelete='CASCADE'), primary_key=True)
    quantity = Column(Numeric(10, 2), nullable=False)

    # Relationships
    menu_item = relationship('MenuItem', back_populates='ingredients')
    inventory_item = relationship('InventoryItem')

    def to_dict(self):
        return {
            'inventory_id': self.inventory_id,
            'name': self.inventory_item.item_name if self.inventory_item else None,
            'quantity_needed': float(self.quantity),
        }

    def __repr__(self):
        return f"<MenuInventory(menu_id={self.menu_id}, inventory_id={self.inventory_id}, qty={self.quantity})>"
