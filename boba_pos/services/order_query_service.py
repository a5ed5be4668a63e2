"""Order lookups for the manager view and customer order history."""
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import aliased

from boba_pos.exceptions import NotFoundError, ValidationError
from boba_pos.models import SalesOrder, Customer, Employee

SEARCH_LIMIT = 100


def _orders_with_people(session):
    """sales_order LEFT JOIN customer / employee (0 ids match nothing)."""
    customer = aliased(Customer)
    employee = aliased(Employee)
    query = (
        session.query(SalesOrder, customer, employee)
        .outerjoin(customer, customer.id == SalesOrder.customer_id)
        .outerjoin(employee, employee.id == SalesOrder.employee_id)
    )
    return query, customer, employee


def _row_to_dict(order: SalesOrder, customer: Optional[Customer], employee: Optional[Employee]) -> Dict[str, Any]:
    data = order.to_dict()
    data.update({
        'customer_username': customer.username if customer else None,
        'customer_first_name': customer.first_name if customer else None,
        'customer_last_name': customer.last_name if customer else None,
        'employee_username': employee.username if employee else None,
        'employee_first_name': employee.first_name if employee else None,
        'employee_last_name': employee.last_name if employee else None,
    })
    return data


def _parse_limit(limit, default: int) -> int:
    if limit in (None, ''):
        return default
    try:
        value = int(limit)
    except (TypeError, ValueError):
        raise ValidationError('limit must be an integer')
    if value < 1:
        raise ValidationError('limit must be positive')
    return min(value, 500)


def recent_orders(session, limit=None, default_limit: int = 50) -> List[Dict[str, Any]]:
    query, customer, employee = _orders_with_people(session)
    rows = (
        query.order_by(SalesOrder.order_date.desc(), SalesOrder.id.desc())
        .limit(_parse_limit(limit, default_limit))
        .all()
    )
    return [_row_to_dict(*row) for row in rows]


def search_orders(session, order_id=None, customer_username: Optional[str] = None,
                  employee_username: Optional[str] = None) -> List[Dict[str, Any]]:
    """Exact match on order id; partial, case-insensitive match on usernames."""
    query, customer, employee = _orders_with_people(session)

    if order_id not in (None, ''):
        try:
            query = query.filter(SalesOrder.id == int(order_id))
        except (TypeError, ValueError):
            raise ValidationError('orderId must be an integer')

    if customer_username:
        query = query.filter(func.lower(customer.username).like(f'%{customer_username.lower()}%'))

    if employee_username:
        query = query.filter(func.lower(employee.username).like(f'%{employee_username.lower()}%'))

    rows = query.order_by(SalesOrder.order_date.desc(), SalesOrder.id.desc()).limit(SEARCH_LIMIT).all()
    return [_row_to_dict(*row) for row in rows]


def customer_history(session, customer_id: int, limit=None, default_limit: int = 50) -> List[Dict[str, Any]]:
    orders = (
        session.query(SalesOrder)
        .filter(SalesOrder.customer_id == customer_id)
        .order_by(SalesOrder.order_date.desc(), SalesOrder.id.desc())
        .limit(_parse_limit(limit, default_limit))
        .all()
    )
    return [o.to_dict() for o in orders]


def get_order(session, order_id: int) -> SalesOrder:
    order = session.query(SalesOrder).filter(SalesOrder.id == order_id).first()
    if not order:
        raise NotFoundError('Order not found')
    return order
