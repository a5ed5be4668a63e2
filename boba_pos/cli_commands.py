"""
Flask CLI commands for shop setup.

Commands:
- flask init-db: Create the database tables
- flask seed-menu: Load a demo menu, customizations and inventory
- flask create-employee: Create a register or manager account
"""

import click
from decimal import Decimal
from boba_pos.database import db_session, create_all
from boba_pos.exceptions import PosError
from boba_pos.models import (
    MenuItem, InventoryItem, MenuInventory, EmployeeLevel, ITEM_TYPE_ADDON, ITEM_TYPE_CUSTOMIZATION
)
from boba_pos.services import employee_service

DEMO_MENU = [
    ('Classic Milk Tea', '4.00', 'Milk Tea'),
    ('Taro Milk Tea', '4.50', 'Milk Tea'),
    ('Brown Sugar Milk Tea', '5.25', 'Milk Tea'),
    ('Mango Green Tea', '4.25', 'Fruit Tea'),
    ('Passion Fruit Tea', '4.25', 'Fruit Tea'),
    ('Strawberry Slush', '5.00', 'Slush'),
    ('Tapioca Pearls', '0.75', ITEM_TYPE_ADDON),
    ('Lychee Jelly', '0.75', ITEM_TYPE_ADDON),
    ('Pudding', '0.90', ITEM_TYPE_ADDON),
    ('Large Size', '1.00', ITEM_TYPE_CUSTOMIZATION),
    ('Less Ice', '0.00', ITEM_TYPE_CUSTOMIZATION),
    ('No Ice', '0.00', ITEM_TYPE_CUSTOMIZATION),
    ('Half Sweet (50%)', '0.00', ITEM_TYPE_CUSTOMIZATION),
    ('No Sugar (0%)', '0.00', ITEM_TYPE_CUSTOMIZATION),
]

DEMO_INVENTORY = [
    ('Black Tea Leaves', '500'),
    ('Green Tea Leaves', '400'),
    ('Milk', '300'),
    ('Taro Powder', '150'),
    ('Brown Sugar Syrup', '120'),
    ('Mango Puree', '100'),
    ('Passion Fruit Puree', '100'),
    ('Strawberries', '80'),
    ('Tapioca', '200'),
    ('Lychee Jelly Cubes', '150'),
    ('Pudding Cups', '60'),
    ('Cups', '1000'),
]

# menu name -> [(ingredient, quantity per unit)]
DEMO_RECIPES = {
    'Classic Milk Tea': [('Black Tea Leaves', '1'), ('Milk', '1'), ('Cups', '1')],
    'Taro Milk Tea': [('Taro Powder', '1'), ('Milk', '1'), ('Cups', '1')],
    'Brown Sugar Milk Tea': [('Brown Sugar Syrup', '1'), ('Milk', '1'), ('Cups', '1')],
    'Mango Green Tea': [('Green Tea Leaves', '1'), ('Mango Puree', '1'), ('Cups', '1')],
    'Passion Fruit Tea': [('Green Tea Leaves', '1'), ('Passion Fruit Puree', '1'), ('Cups', '1')],
    'Strawberry Slush': [('Strawberries', '2'), ('Cups', '1')],
    'Tapioca Pearls': [('Tapioca', '1')],
    'Lychee Jelly': [('Lychee Jelly Cubes', '1')],
    'Pudding': [('Pudding Cups', '1')],
}


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables."""
        create_all()
        click.echo(click.style('✅ Database tables created', fg='green', bold=True))

    @app.cli.command('seed-menu')
    def seed_menu():
        """Load a demo menu with customizations, add-ons and ingredient recipes."""
        if db_session.query(MenuItem).first():
            click.echo(click.style('❌ The menu already has items; seed skipped.', fg='red'))
            return

        try:
            menu = {}
            for name, price, item_type in DEMO_MENU:
                menu[name] = MenuItem(name=name, price=Decimal(price), item_type=item_type)
                db_session.add(menu[name])

            inventory = {}
            for name, quantity in DEMO_INVENTORY:
                inventory[name] = InventoryItem(item_name=name, quantity=Decimal(quantity))
                db_session.add(inventory[name])

            db_session.flush()

            for menu_name, ingredients in DEMO_RECIPES.items():
                for ingredient, quantity in ingredients:
                    db_session.add(MenuInventory(
                        menu_id=menu[menu_name].id,
                        inventory_id=inventory[ingredient].id,
                        quantity=Decimal(quantity)
                    ))

            db_session.commit()
        except Exception as e:
            db_session.rollback()
            click.echo(click.style(f'❌ Error seeding menu: {str(e)}', fg='red'))
            return

        click.echo(click.style('\n✅ Demo menu loaded!', fg='green', bold=True))
        click.echo(f'   Menu rows: {len(DEMO_MENU)}')
        click.echo(f'   Ingredients: {len(DEMO_INVENTORY)}')

    @app.cli.command('create-employee')
    @click.option('--username', prompt=True, help='Login username')
    @click.option('--first-name', prompt=True, help='First name')
    @click.option('--last-name', prompt=True, help='Last name')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
    @click.option('--level', type=click.Choice([lvl.value for lvl in EmployeeLevel]),
                  default=EmployeeLevel.EMPLOYEE.value, show_default=True, help='Access level')
    def create_employee(username, first_name, last_name, password, level):
        """Create a register employee or manager."""
        if len(password) < 6:
            click.echo(click.style('❌ Password must be at least 6 characters.', fg='red'))
            return

        try:
            employee = employee_service.create_employee(db_session, {
                'username': username,
                'first_name': first_name,
                'last_name': last_name,
                'password': password,
                'level': level,
            })
        except PosError as e:
            click.echo(click.style(f'❌ {e.message}', fg='red'))
            return

        click.echo(click.style(f'\n✅ {employee.level} created!', fg='green', bold=True))
        click.echo(f'   Username: {employee.username}')
        click.echo(f'   ID: {employee.id}')
