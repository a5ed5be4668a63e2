"""
Cart ledger - the in-progress order of one session.

Totals are recomputed from the entries on every call so the figures shown
at the register and the figures submitted are always the same.
"""
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from boba_pos.exceptions import ValidationError
from boba_pos.services.line_item_service import LineItem
from boba_pos.utils.number_format import round2

TAX_RATE = Decimal('0.0825')


class CartLedger:
    """Ordered line items for one in-progress order (single writer, no locking)."""

    def __init__(self, items: Optional[List[LineItem]] = None):
        self._items: List[LineItem] = list(items or [])

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __getitem__(self, index: int) -> LineItem:
        return self._items[self._check_index(index)]

    @property
    def items(self) -> Tuple[LineItem, ...]:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def _check_index(self, index) -> int:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._items):
            raise ValidationError(f'No cart entry at position {index}')
        return index

    # Mutations

    def add(self, line_item: LineItem) -> int:
        """
        Append, or merge into a configuration-equal entry. Returns the entry's index.

        A merged entry is repriced at the incoming item's prices, so a menu
        price change between two adds never leaves the line half old, half new.
        """
        for index, existing in enumerate(self._items):
            if existing.is_configuration_equal(line_item):
                self._items[index] = line_item.with_quantity(existing.quantity + line_item.quantity)
                return index

        self._items.append(line_item)
        return len(self._items) - 1

    def remove_at(self, index: int) -> LineItem:
        return self._items.pop(self._check_index(index))

    def replace_at(self, index: int, line_item: LineItem) -> None:
        self._items[self._check_index(index)] = line_item

    def increment_at(self, index: int) -> LineItem:
        item = self._items[self._check_index(index)]
        self._items[index] = item.with_quantity(item.quantity + 1)
        return self._items[index]

    def decrement_at(self, index: int) -> Optional[LineItem]:
        """Lower the quantity by one; an entry at quantity 1 is removed (returns None)."""
        item = self._items[self._check_index(index)]
        if item.quantity <= 1:
            self._items.pop(index)
            return None
        self._items[index] = item.with_quantity(item.quantity - 1)
        return self._items[index]

    def clear(self) -> None:
        self._items.clear()

    # Derived totals

    def subtotal(self) -> Decimal:
        return round2(sum((item.line_total for item in self._items), Decimal('0')))

    def tax(self) -> Decimal:
        return round2(self.subtotal() * TAX_RATE)

    def total(self) -> Decimal:
        return round2(self.subtotal() + self.tax())

    def snapshot(self) -> Tuple[LineItem, ...]:
        """Immutable copy of the current entries (LineItem is frozen)."""
        return tuple(self._items)

    # Session (de)serialization

    def to_dict(self) -> Dict[str, Any]:
        return {'items': [item.to_dict() for item in self._items]}

    def summary(self) -> Dict[str, Any]:
        """JSON view with derived totals, as shown at the register."""
        return {
            'items': [dict(item.to_dict(), index=i) for i, item in enumerate(self._items)],
            'item_count': sum(item.quantity for item in self._items),
            'subtotal': str(self.subtotal()),
            'tax': str(self.tax()),
            'total': str(self.total()),
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'CartLedger':
        if not data:
            return cls()
        return cls([LineItem.from_dict(item) for item in data.get('items', [])])
