"""Line-item builder: base menu item + selected options -> priced line item."""
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from boba_pos.exceptions import ValidationError
from boba_pos.services.catalog_service import (
    Catalog, CustomizationOption, GROUP_ADDON, SINGLE_CHOICE_GROUPS,
)
from boba_pos.utils.number_format import round2

ADDONS_KEY = 'addons'
SELECTION_KEYS = SINGLE_CHOICE_GROUPS + (ADDONS_KEY,)


@dataclass(frozen=True)
class LineItem:
    """One configured, priced drink (or snack) in a cart."""
    menu_item_id: int
    display_name: str
    unit_base_price: Decimal
    selected_options: Tuple[CustomizationOption, ...]
    quantity: int
    line_total: Decimal

    @property
    def unit_price(self) -> Decimal:
        return self.unit_base_price + sum((o.price_delta for o in self.selected_options), Decimal('0'))

    @property
    def configuration_key(self) -> Tuple[int, FrozenSet[Tuple[str, Any]]]:
        """Identity used to merge duplicate drinks: base item + option ids, order-free."""
        return self.menu_item_id, frozenset((o.group, o.id) for o in self.selected_options)

    def is_configuration_equal(self, other: 'LineItem') -> bool:
        return self.configuration_key == other.configuration_key

    def with_quantity(self, quantity: int) -> 'LineItem':
        _check_quantity(quantity)
        return replace(self, quantity=quantity, line_total=price_line(self.unit_price, quantity))

    def selections(self) -> Dict[str, Any]:
        """Selections that would rebuild this line item."""
        result: Dict[str, Any] = {ADDONS_KEY: []}
        for option in self.selected_options:
            if option.group == GROUP_ADDON:
                result[ADDONS_KEY].append(option.id)
            else:
                result[option.group] = option.id
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            'menu_id': self.menu_item_id,
            'name': self.display_name,
            'base_price': str(self.unit_base_price),
            'quantity': self.quantity,
            'customizations': [
                {'id': o.id, 'name': o.name, 'price': str(o.price_delta), 'group': o.group}
                for o in self.selected_options
            ],
            'item_total': str(self.line_total),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'LineItem':
        options = tuple(
            CustomizationOption(c['id'], c['name'], Decimal(str(c['price'])), c['group'])
            for c in data.get('customizations', [])
        )
        return cls(
            menu_item_id=int(data['menu_id']),
            display_name=data['name'],
            unit_base_price=Decimal(str(data['base_price'])),
            selected_options=options,
            quantity=int(data['quantity']),
            line_total=Decimal(str(data['item_total'])),
        )


def price_line(unit_price: Decimal, quantity: int) -> Decimal:
    return round2(unit_price * quantity)


def _check_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError('Quantity must be a whole number')
    if quantity < 1:
        raise ValidationError('Quantity must be at least 1')


def _resolve_options(catalog: Catalog, selections: Optional[Mapping[str, Any]]) -> Tuple[CustomizationOption, ...]:
    selections = selections or {}
    unknown = set(selections) - set(SELECTION_KEYS)
    if unknown:
        raise ValidationError(f"Unknown customization group(s): {', '.join(sorted(unknown))}")

    chosen = []
    for group in SINGLE_CHOICE_GROUPS:
        option = catalog.option(group, selections.get(group))
        if not option.is_regular:
            chosen.append(option)

    addon_ids = selections.get(ADDONS_KEY) or []
    if isinstance(addon_ids, (str, bytes, int)):
        raise ValidationError('addons must be a list of option ids')

    seen = set()
    for addon_id in addon_ids:
        option = catalog.option(GROUP_ADDON, addon_id)
        if option.id not in seen:
            seen.add(option.id)
            chosen.append(option)

    return tuple(chosen)


def build_line_item(catalog: Catalog, menu_item_id, selections: Optional[Mapping[str, Any]] = None,
                    quantity: int = 1) -> LineItem:
    """
    Price a menu item with its selected options.

    selections may hold one option id per single-choice group
    (size / ice / sweetness; absent or 'regular' costs nothing) and a list
    of add-on ids under 'addons'.

    Raises:
        ValidationError: bad quantity, unknown item, or an option id that is
            not in the catalog for its group.
    """
    _check_quantity(quantity)
    item = catalog.item(menu_item_id)
    options = _resolve_options(catalog, selections)

    unit_price = item.base_price + sum((o.price_delta for o in options), Decimal('0'))
    return LineItem(
        menu_item_id=item.id,
        display_name=item.name,
        unit_base_price=item.base_price,
        selected_options=options,
        quantity=quantity,
        line_total=price_line(unit_price, quantity),
    )


def rebuild_line_item(catalog: Catalog, line_item: LineItem, selections: Optional[Mapping[str, Any]],
                      quantity: Optional[int] = None) -> LineItem:
    """Re-customize an existing line item; quantity is kept unless given."""
    return build_line_item(
        catalog,
        line_item.menu_item_id,
        selections,
        line_item.quantity if quantity is None else quantity,
    )
