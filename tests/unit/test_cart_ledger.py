"""Unit tests for the cart ledger."""
import pytest
from decimal import Decimal

from boba_pos.exceptions import ValidationError
from boba_pos.services.cart_service import CartLedger
from boba_pos.services.line_item_service import build_line_item


@pytest.fixture
def cart():
    return CartLedger()


def test_empty_cart_totals(cart):
    assert cart.is_empty
    assert cart.subtotal() == Decimal('0.00')
    assert cart.tax() == Decimal('0.00')
    assert cart.total() == Decimal('0.00')


def test_identical_drinks_merge(cart, catalog):
    first = cart.add(build_line_item(catalog, 1, {'addons': [10]}))
    second = cart.add(build_line_item(catalog, 1, {'addons': [10]}))

    assert first == second == 0
    assert len(cart) == 1
    assert cart[0].quantity == 2
    assert cart[0].line_total == Decimal('9.50')


def test_large_no_sugar_drinks_merge(cart, catalog):
    selections = {'size': 20, 'sweetness': 24}
    cart.add(build_line_item(catalog, 1, selections))
    cart.add(build_line_item(catalog, 1, selections))

    assert len(cart) == 1
    assert cart[0].quantity == 2
    assert {o.name for o in cart[0].selected_options} == {'Large Size', 'No Sugar (0%)'}
    assert cart[0].line_total == Decimal('10.00')


def test_merge_after_price_change_uses_current_price(cart, catalog, repriced_catalog):
    cart.add(build_line_item(catalog, 1))
    cart.add(build_line_item(repriced_catalog, 1))

    merged = cart[0]
    assert merged.quantity == 2
    assert merged.unit_base_price == Decimal('5.00')
    assert merged.line_total == Decimal('10.00')

    cart.increment_at(0)
    assert cart[0].line_total == Decimal('15.00')


def test_different_configuration_appends(cart, catalog):
    cart.add(build_line_item(catalog, 1))
    index = cart.add(build_line_item(catalog, 1, {'ice': 21}))
    assert index == 1
    assert len(cart) == 2


def test_totals_use_fixed_tax_rate(cart, catalog):
    cart.add(build_line_item(catalog, 1, {'addons': [10]}, quantity=2))

    assert cart.subtotal() == Decimal('9.50')
    # 9.50 * 0.0825 = 0.78375
    assert cart.tax() == Decimal('0.78')
    assert cart.total() == Decimal('10.28')


def test_tax_rounds_half_up(cart, catalog):
    # 10.00 * 0.0825 = 0.825 -> 0.83
    cart.add(build_line_item(catalog, 1, {'size': 20}, quantity=2))
    assert cart.subtotal() == Decimal('10.00')
    assert cart.tax() == Decimal('0.83')
    assert cart.total() == Decimal('10.83')


def test_totals_follow_mutations(cart, catalog):
    cart.add(build_line_item(catalog, 1))
    cart.add(build_line_item(catalog, 2))
    assert cart.subtotal() == Decimal('8.50')

    cart.increment_at(0)
    assert cart.subtotal() == Decimal('12.50')

    cart.remove_at(1)
    assert cart.subtotal() == Decimal('8.00')


def test_decrement_at_one_removes_entry(cart, catalog):
    cart.add(build_line_item(catalog, 1, quantity=2))

    remaining = cart.decrement_at(0)
    assert remaining.quantity == 1
    assert remaining.line_total == Decimal('4.00')

    assert cart.decrement_at(0) is None
    assert cart.is_empty


def test_replace_at(cart, catalog):
    cart.add(build_line_item(catalog, 1))
    cart.replace_at(0, build_line_item(catalog, 1, {'size': 20}))
    assert cart.total() == Decimal('5.41')


@pytest.mark.parametrize('index', [-1, 1, 5, '0', True])
def test_bad_index(cart, catalog, index):
    cart.add(build_line_item(catalog, 1))
    with pytest.raises(ValidationError):
        cart.remove_at(index)


def test_snapshot_is_detached_from_later_changes(cart, catalog):
    cart.add(build_line_item(catalog, 1))
    snapshot = cart.snapshot()
    cart.clear()
    assert len(snapshot) == 1


def test_session_round_trip_keeps_totals(cart, catalog):
    cart.add(build_line_item(catalog, 1, {'size': 20, 'addons': [10, 11]}, quantity=2))
    cart.add(build_line_item(catalog, 3))

    restored = CartLedger.from_dict(cart.to_dict())
    assert restored.items == cart.items
    assert restored.total() == cart.total()


def test_summary(cart, catalog):
    cart.add(build_line_item(catalog, 1, quantity=2))
    cart.add(build_line_item(catalog, 2))

    summary = cart.summary()
    assert summary['item_count'] == 3
    assert [i['index'] for i in summary['items']] == [0, 1]
    assert summary['subtotal'] == '12.50'
    assert summary['tax'] == '1.03'
    assert summary['total'] == '13.53'
