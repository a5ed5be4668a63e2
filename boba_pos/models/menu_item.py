"""Menu item model (drinks, snacks, add-ons and customizations share one table)."""
from sqlalchemy import Column, Integer, String, Numeric
from sqlalchemy.orm import relationship
from boba_pos.database import Base


ITEM_TYPE_ADDON = 'Add-On'
ITEM_TYPE_CUSTOMIZATION = 'Customization'

# Rows of these types are priced options, not purchasable drinks
OPTION_ITEM_TYPES = (ITEM_TYPE_ADDON, ITEM_TYPE_CUSTOMIZATION)


class MenuItem(Base):
    """Menu row."""

    __tablename__ = 'menu'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    item_type = Column(String(50), nullable=False, index=True)

    # Relationships
    ingredients = relationship('MenuInventory', back_populates='menu_item', cascade='all, delete-orphan')

    @property
    def is_option(self):
        return self.item_type in OPTION_ITEM_TYPES

    def to_dict(self):
        return {
            'menuid': self.id,
            'menu_name': self.name,
            'price': float(self.price),
            'item_type': self.item_type,
        }

    def __repr__(self):
        return f"<MenuItem(id={self.id}, name='{self.name}', type='{self.item_type}')>"
