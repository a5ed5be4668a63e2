"""
Catalog loader.

Reads the menu table once and splits it into purchasable items and the
priced options (size, ice, sweetness, add-ons) used to customize them.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from boba_pos.exceptions import ValidationError
from boba_pos.models import MenuItem, ITEM_TYPE_ADDON, ITEM_TYPE_CUSTOMIZATION, OPTION_ITEM_TYPES

logger = logging.getLogger(__name__)

GROUP_SIZE = 'size'
GROUP_ICE = 'ice'
GROUP_SWEETNESS = 'sweetness'
GROUP_ADDON = 'addon'

SINGLE_CHOICE_GROUPS = (GROUP_SIZE, GROUP_ICE, GROUP_SWEETNESS)
OPTION_GROUPS = SINGLE_CHOICE_GROUPS + (GROUP_ADDON,)

REGULAR_OPTION_ID = 'regular'


@dataclass(frozen=True)
class CatalogItem:
    """Purchasable menu item."""
    id: int
    name: str
    base_price: Decimal
    category: str


@dataclass(frozen=True)
class CustomizationOption:
    """Priced modifier belonging to exactly one group."""
    id: Any
    name: str
    price_delta: Decimal
    group: str

    @property
    def is_regular(self) -> bool:
        return self.id == REGULAR_OPTION_ID

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': float(self.price_delta),
            'group': self.group,
        }


REGULAR_OPTIONS = {
    GROUP_SIZE: CustomizationOption(REGULAR_OPTION_ID, 'Regular Size', Decimal('0.00'), GROUP_SIZE),
    GROUP_ICE: CustomizationOption(REGULAR_OPTION_ID, 'Regular Ice', Decimal('0.00'), GROUP_ICE),
    GROUP_SWEETNESS: CustomizationOption(REGULAR_OPTION_ID, 'Regular Sweet (100%)', Decimal('0.00'), GROUP_SWEETNESS),
}


def normalize_option_id(option_id):
    """Option ids arrive as ints or numeric strings from JSON; 'regular' stays as is."""
    if option_id is None or option_id == '' or option_id == REGULAR_OPTION_ID:
        return REGULAR_OPTION_ID
    if isinstance(option_id, bool):
        raise ValidationError(f'Invalid option id: {option_id!r}')
    try:
        return int(option_id)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid option id: {option_id!r}')


def classify_customization(name: str) -> Optional[str]:
    """Infer the option group of a 'Customization' row from its name."""
    name_lower = (name or '').lower()
    if 'ice' in name_lower:
        return GROUP_ICE
    if 'sweet' in name_lower or 'sugar' in name_lower:
        return GROUP_SWEETNESS
    if 'size' in name_lower:
        return GROUP_SIZE
    return None


@dataclass(frozen=True)
class Catalog:
    """Menu reference data for one session (read-only)."""
    items: Mapping[int, CatalogItem] = field(default_factory=dict)
    options: Mapping[str, Mapping[Any, CustomizationOption]] = field(default_factory=dict)

    def item(self, menu_item_id) -> CatalogItem:
        try:
            key = int(menu_item_id)
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid menu item id: {menu_item_id!r}')
        item = self.items.get(key)
        if item is None:
            raise ValidationError(f'Menu item {menu_item_id} is not on the menu')
        return item

    def option(self, group: str, option_id) -> CustomizationOption:
        """Resolve an option id within its group; 'regular' maps to the group's sentinel."""
        if group not in OPTION_GROUPS:
            raise ValidationError(f'Unknown customization group: {group}')

        key = normalize_option_id(option_id)
        if key == REGULAR_OPTION_ID:
            if group == GROUP_ADDON:
                raise ValidationError('Add-ons have no regular option')
            return REGULAR_OPTIONS[group]

        option = self.options.get(group, {}).get(key)
        if option is None:
            raise ValidationError(f'Option {option_id} is not a valid {group} choice')
        return option

    def options_for(self, group: str) -> List[CustomizationOption]:
        options = sorted(self.options.get(group, {}).values(), key=lambda o: (o.price_delta, o.name))
        if group in REGULAR_OPTIONS:
            return [REGULAR_OPTIONS[group]] + options
        return options


def build_catalog(rows) -> Catalog:
    """Split menu rows into catalog items and grouped options."""
    items: Dict[int, CatalogItem] = {}
    options: Dict[str, Dict[Any, CustomizationOption]] = {group: {} for group in OPTION_GROUPS}

    for row in rows:
        price = Decimal(str(row.price))
        if row.item_type == ITEM_TYPE_ADDON:
            options[GROUP_ADDON][row.id] = CustomizationOption(row.id, row.name, price, GROUP_ADDON)
        elif row.item_type == ITEM_TYPE_CUSTOMIZATION:
            group = classify_customization(row.name)
            if group is None:
                logger.warning(f"[CATALOG] Customization '{row.name}' (id={row.id}) matches no group, skipped")
                continue
            options[group][row.id] = CustomizationOption(row.id, row.name, price, group)
        else:
            items[row.id] = CatalogItem(row.id, row.name, price, row.item_type)

    return Catalog(items=items, options=options)


def load_catalog(session) -> Catalog:
    """Load the full catalog from the menu table."""
    rows = session.query(MenuItem).order_by(MenuItem.item_type, MenuItem.name).all()
    catalog = build_catalog(rows)
    logger.info(
        f"[CATALOG] Loaded {len(catalog.items)} items, "
        + ', '.join(f"{len(catalog.options[g])} {g}" for g in OPTION_GROUPS)
    )
    return catalog


def list_menu_grouped(session) -> List[Dict[str, Any]]:
    """Purchasable items grouped by category (category order, then name)."""
    rows = (
        session.query(MenuItem)
        .filter(MenuItem.item_type.notin_(OPTION_ITEM_TYPES))
        .order_by(MenuItem.item_type, MenuItem.name)
        .all()
    )

    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(row.item_type, []).append({
            'id': row.id,
            'name': row.name,
            'price': float(row.price),
            'type': row.item_type,
        })

    return [{'category': category, 'items': items} for category, items in grouped.items()]


def list_options_of_type(session, item_type: str) -> List[Dict[str, Any]]:
    """Add-On or Customization rows as {id, name, price}, by name."""
    rows = session.query(MenuItem).filter(MenuItem.item_type == item_type).order_by(MenuItem.name).all()
    return [{'id': r.id, 'name': r.name, 'price': float(r.price)} for r in rows]


def grouped_customizations(session) -> Dict[str, List[Dict[str, Any]]]:
    """Customization rows split into ice / sweetness / size, cheapest first."""
    rows = (
        session.query(MenuItem)
        .filter(MenuItem.item_type == ITEM_TYPE_CUSTOMIZATION)
        .order_by(MenuItem.price, MenuItem.name)
        .all()
    )

    grouped = {GROUP_ICE: [], GROUP_SWEETNESS: [], GROUP_SIZE: []}
    for row in rows:
        group = classify_customization(row.name)
        if group:
            grouped[group].append({'id': row.id, 'name': row.name, 'price': float(row.price)})
    return grouped
