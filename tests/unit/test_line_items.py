"""Unit tests for catalog classification and the line-item builder."""
import pytest
from decimal import Decimal

from boba_pos.exceptions import ValidationError
from boba_pos.services.catalog_service import (
    GROUP_ADDON, GROUP_ICE, GROUP_SIZE, GROUP_SWEETNESS, REGULAR_OPTION_ID, classify_customization,
)
from boba_pos.services.line_item_service import LineItem, build_line_item, rebuild_line_item


class TestCatalog:

    def test_options_are_split_from_purchasable_items(self, catalog):
        assert set(catalog.items) == {1, 2, 3}
        assert set(catalog.options[GROUP_ADDON]) == {10, 11}
        assert set(catalog.options[GROUP_SIZE]) == {20}
        assert set(catalog.options[GROUP_ICE]) == {21}
        assert set(catalog.options[GROUP_SWEETNESS]) == {22, 23}

    @pytest.mark.parametrize('name,group', [
        ('Less Ice', GROUP_ICE),
        ('No Sugar (0%)', GROUP_SWEETNESS),
        ('Half Sweet (50%)', GROUP_SWEETNESS),
        ('Large Size', GROUP_SIZE),
        ('Whipped Cream', None),
    ])
    def test_classify_customization(self, name, group):
        assert classify_customization(name) == group

    def test_regular_resolves_to_free_sentinel(self, catalog):
        option = catalog.option(GROUP_ICE, REGULAR_OPTION_ID)
        assert option.is_regular
        assert option.price_delta == Decimal('0.00')
        assert catalog.option(GROUP_SIZE, None).is_regular

    def test_option_from_another_group_is_rejected(self, catalog):
        with pytest.raises(ValidationError):
            catalog.option(GROUP_SIZE, 10)

    def test_regular_listed_first(self, catalog):
        sweetness = catalog.options_for(GROUP_SWEETNESS)
        assert sweetness[0].is_regular
        assert [o.id for o in sweetness[1:]] == [22, 24, 23]


class TestBuildLineItem:

    def test_plain_item(self, catalog):
        item = build_line_item(catalog, 1)
        assert item.display_name == 'Classic Milk Tea'
        assert item.quantity == 1
        assert item.selected_options == ()
        assert item.line_total == Decimal('4.00')

    def test_options_add_to_unit_price(self, catalog):
        item = build_line_item(catalog, 1, {'size': 20, 'addons': [10, 11]}, quantity=2)
        # (4.00 + 1.00 + 0.75 + 0.75) * 2
        assert item.unit_price == Decimal('6.50')
        assert item.line_total == Decimal('13.00')

    def test_numeric_string_ids_are_accepted(self, catalog):
        item = build_line_item(catalog, '2', {'sweetness': '23'})
        assert item.menu_item_id == 2
        assert item.line_total == Decimal('4.75')

    def test_regular_choices_are_not_recorded(self, catalog):
        item = build_line_item(catalog, 1, {'size': 'regular', 'ice': 'regular', 'sweetness': None})
        assert item.selected_options == ()

    def test_duplicate_addons_count_once(self, catalog):
        item = build_line_item(catalog, 1, {'addons': [10, 10]})
        assert item.line_total == Decimal('4.75')

    @pytest.mark.parametrize('quantity', [0, -1, 1.5, '2', True])
    def test_bad_quantity(self, catalog, quantity):
        with pytest.raises(ValidationError):
            build_line_item(catalog, 1, quantity=quantity)

    def test_unknown_menu_item(self, catalog):
        with pytest.raises(ValidationError):
            build_line_item(catalog, 999)

    def test_option_cannot_be_ordered_as_item(self, catalog):
        with pytest.raises(ValidationError):
            build_line_item(catalog, 10)

    def test_unknown_option_id(self, catalog):
        with pytest.raises(ValidationError):
            build_line_item(catalog, 1, {'ice': 999})

    def test_unknown_group(self, catalog):
        with pytest.raises(ValidationError):
            build_line_item(catalog, 1, {'toppings': [10]})

    def test_addons_must_be_a_list(self, catalog):
        with pytest.raises(ValidationError):
            build_line_item(catalog, 1, {'addons': 10})


class TestLineItemBehaviour:

    def test_configuration_equality_ignores_addon_order(self, catalog):
        a = build_line_item(catalog, 1, {'addons': [10, 11]})
        b = build_line_item(catalog, 1, {'addons': [11, 10]}, quantity=3)
        assert a.is_configuration_equal(b)

    def test_different_options_are_not_equal(self, catalog):
        a = build_line_item(catalog, 1, {'ice': 21})
        b = build_line_item(catalog, 1)
        assert not a.is_configuration_equal(b)

    def test_with_quantity_reprices(self, catalog):
        item = build_line_item(catalog, 1, {'addons': [10]})
        assert item.with_quantity(4).line_total == Decimal('19.00')

    def test_rebuild_keeps_quantity(self, catalog):
        item = build_line_item(catalog, 1, quantity=3)
        rebuilt = rebuild_line_item(catalog, item, {'size': 20})
        assert rebuilt.quantity == 3
        assert rebuilt.line_total == Decimal('15.00')

    def test_selections_rebuild_the_same_item(self, catalog):
        item = build_line_item(catalog, 2, {'size': 20, 'ice': 21, 'addons': [11]})
        again = build_line_item(catalog, 2, item.selections())
        assert again.is_configuration_equal(item)
        assert again.line_total == item.line_total

    def test_session_serialization(self, catalog):
        item = build_line_item(catalog, 1, {'size': 20, 'addons': [10]}, quantity=2)
        restored = LineItem.from_dict(item.to_dict())
        assert restored == item

    def test_line_item_is_immutable(self, catalog):
        item = build_line_item(catalog, 1)
        with pytest.raises(Exception):
            item.quantity = 5
