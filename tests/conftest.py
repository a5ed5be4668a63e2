import pytest
from decimal import Decimal
from types import SimpleNamespace

from boba_pos import create_app
from boba_pos.database import db_session, get_session, create_all, drop_all
from boba_pos.models import (
    MenuItem, InventoryItem, MenuInventory, Customer, Employee, EmployeeLevel,
    ITEM_TYPE_ADDON, ITEM_TYPE_CUSTOMIZATION
)
from boba_pos.services.catalog_service import build_catalog


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite)."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(scope='function')
def session(app):
    """Fresh schema per test."""
    create_all()
    session = get_session()
    yield session
    db_session.remove()
    drop_all()


@pytest.fixture(scope='function')
def client(app, session):
    """Create test client (tables exist for the duration of the test)."""
    return app.test_client()


# =====================================================
# CATALOG
# =====================================================

MENU_ROWS = [
    (1, 'Classic Milk Tea', '4.00', 'Milk Tea'),
    (2, 'Taro Milk Tea', '4.50', 'Milk Tea'),
    (3, 'Mango Green Tea', '4.25', 'Fruit Tea'),
    (10, 'Tapioca Pearls', '0.75', ITEM_TYPE_ADDON),
    (11, 'Lychee Jelly', '0.75', ITEM_TYPE_ADDON),
    (20, 'Large Size', '1.00', ITEM_TYPE_CUSTOMIZATION),
    (21, 'Less Ice', '0.00', ITEM_TYPE_CUSTOMIZATION),
    (22, 'Half Sweet (50%)', '0.00', ITEM_TYPE_CUSTOMIZATION),
    (23, 'Extra Sugar', '0.25', ITEM_TYPE_CUSTOMIZATION),
    (24, 'No Sugar (0%)', '0.00', ITEM_TYPE_CUSTOMIZATION),
]


def _build_catalog(prices=None):
    prices = prices or {}
    rows = [
        SimpleNamespace(id=row_id, name=name, price=Decimal(prices.get(row_id, price)), item_type=item_type)
        for row_id, name, price, item_type in MENU_ROWS
    ]
    return build_catalog(rows)


@pytest.fixture
def catalog():
    """In-memory catalog; no database needed."""
    return _build_catalog()


@pytest.fixture
def repriced_catalog():
    """The same catalog after Classic Milk Tea went from 4.00 to 5.00."""
    return _build_catalog({1: '5.00'})


@pytest.fixture
def menu(session):
    """The same menu persisted; returns {name: id}."""
    for row_id, name, price, item_type in MENU_ROWS:
        session.add(MenuItem(id=row_id, name=name, price=Decimal(price), item_type=item_type))
    session.commit()
    return {name: row_id for row_id, name, _, _ in MENU_ROWS}


@pytest.fixture
def inventory(session, menu):
    """Ingredients with recipes for the milk teas and tapioca; returns {name: id}."""
    items = {
        'Black Tea Leaves': InventoryItem(item_name='Black Tea Leaves', quantity=Decimal('50')),
        'Milk': InventoryItem(item_name='Milk', quantity=Decimal('5')),
        'Tapioca': InventoryItem(item_name='Tapioca', quantity=Decimal('20')),
        'Cups': InventoryItem(item_name='Cups', quantity=Decimal('8')),
    }
    session.add_all(items.values())
    session.flush()

    recipes = [
        (menu['Classic Milk Tea'], 'Black Tea Leaves', '1'),
        (menu['Classic Milk Tea'], 'Milk', '1'),
        (menu['Classic Milk Tea'], 'Cups', '1'),
        (menu['Taro Milk Tea'], 'Milk', '1'),
        (menu['Taro Milk Tea'], 'Cups', '1'),
        (menu['Tapioca Pearls'], 'Tapioca', '2'),
    ]
    for menu_id, ingredient, quantity in recipes:
        session.add(MenuInventory(menu_id=menu_id, inventory_id=items[ingredient].id, quantity=Decimal(quantity)))
    session.commit()
    return {name: item.id for name, item in items.items()}


# =====================================================
# PEOPLE
# =====================================================

@pytest.fixture
def customer(session):
    customer = Customer(username='ada@example.com', first_name='Ada', last_name='Lovelace', rewards_points=100)
    session.add(customer)
    session.commit()
    return customer


def _make_employee(session, username, level):
    employee = Employee(first_name='Test', last_name=level, username=username, level=level, active=True)
    employee.set_password('password123')
    session.add(employee)
    session.commit()
    return employee


@pytest.fixture
def employee(session):
    return _make_employee(session, 'cashier', EmployeeLevel.EMPLOYEE.value)


@pytest.fixture
def manager(session):
    return _make_employee(session, 'boss', EmployeeLevel.MANAGER.value)


@pytest.fixture
def employee_client(client, employee):
    """Client logged in as a register employee."""
    response = client.post('/auth/employee', json={'username': 'cashier', 'password': 'password123'})
    assert response.status_code == 200
    return client


@pytest.fixture
def manager_client(client, manager):
    """Client logged in as a manager."""
    response = client.post('/auth/manager', json={'username': 'boss', 'password': 'password123'})
    assert response.status_code == 200
    return client
