"""
Report service - X-report (mid-shift summary) and sales analytics.

Totals, counts and per-group sums run as SQL aggregates over sales_order.
Anything that needs the line items inside order_details (items sold, top
sellers) is aggregated in Python so it works on any backend.
"""
import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy import func

from boba_pos.exceptions import ValidationError
from boba_pos.models import SalesOrder, Employee, GUEST_CUSTOMER_ID, SELF_SERVICE_EMPLOYEE_ID
from boba_pos.services.settlement_service import points_for_total

logger = logging.getLogger(__name__)

SELF_SERVICE_LABEL = 'Self-Service Kiosk'
TOP_ITEMS_LIMIT = 10
DEFAULT_ANALYTICS_DAYS = 30
TREND_METRICS = ('revenue', 'volume', 'average')
DEFAULT_TIMEZONE = 'America/Chicago'


def _money(value) -> float:
    return float(Decimal(str(value or 0)).quantize(Decimal('0.01')))


def shop_today(timezone_name: str = DEFAULT_TIMEZONE) -> date:
    """Today on the shop's wall clock, the zone order_date is stored in."""
    return datetime.now(ZoneInfo(timezone_name)).date()


def parse_date(value: Optional[str], field_name: str = 'date') -> date:
    try:
        return datetime.strptime((value or '').strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f'{field_name} must be a date in YYYY-MM-DD format')


def parse_clock(value: Optional[str], field_name: str) -> Tuple[int, int]:
    """'14:30' -> (14, 30)."""
    try:
        parsed = datetime.strptime((value or '').strip(), '%H:%M')
    except ValueError:
        raise ValidationError(f'{field_name} must be a time in HH:MM format')
    return parsed.hour, parsed.minute


def shift_window(report_date: str, start_time: str, end_time: str) -> Tuple[datetime, datetime]:
    """[date start_time:00, date end_time:59] as naive store-local datetimes."""
    if not report_date or not start_time or not end_time:
        raise ValidationError('date, startTime, and endTime are required')

    day = parse_date(report_date)
    start_h, start_m = parse_clock(start_time, 'startTime')
    end_h, end_m = parse_clock(end_time, 'endTime')

    start = datetime.combine(day, time(start_h, start_m, 0))
    end = datetime.combine(day, time(end_h, end_m, 59, 999999))
    if end < start:
        raise ValidationError('endTime must not be before startTime')
    return start, end


def _in_window(query, start: datetime, end: datetime):
    return query.filter(SalesOrder.order_date >= start, SalesOrder.order_date <= end)


def x_report(session, report_date: str, start_time: str, end_time: str) -> Dict[str, Any]:
    """Mid-shift sales summary; reads only, resets nothing."""
    start, end = shift_window(report_date, start_time, end_time)
    logger.info(f"[REPORTS] Generating X Report for {start} to {end}")

    # 1. Sales summary
    summary = _in_window(
        session.query(
            func.count(SalesOrder.id),
            func.sum(SalesOrder.total),
            func.sum(SalesOrder.subtotal),
            func.sum(SalesOrder.tax),
        ),
        start, end
    ).one()
    total_orders, net_sales, gross_sales, total_tax = summary

    # 2. Payment methods
    payment_rows = _in_window(
        session.query(SalesOrder.payment_method, func.count(SalesOrder.id), func.sum(SalesOrder.total)),
        start, end
    ).group_by(SalesOrder.payment_method).order_by(SalesOrder.payment_method).all()

    # 3. Sales by employee
    employee_rows = _in_window(
        session.query(
            SalesOrder.employee_id, Employee.username,
            func.count(SalesOrder.id), func.sum(SalesOrder.total)
        ).outerjoin(Employee, Employee.id == SalesOrder.employee_id),
        start, end
    ).group_by(SalesOrder.employee_id, Employee.username).all()

    sales_by_employee = sorted(
        (
            {
                'employee': SELF_SERVICE_LABEL if employee_id == SELF_SERVICE_EMPLOYEE_ID else (username or 'Unknown'),
                'orders': int(count),
                'sales': _money(amount),
            }
            for employee_id, username, count, amount in employee_rows
        ),
        key=lambda row: row['sales'],
        reverse=True
    )

    # 4. Line-item, hourly and customer figures
    orders = _in_window(session.query(SalesOrder), start, end).all()

    items_sold = 0
    item_quantity: Dict[str, int] = defaultdict(int)
    item_revenue: Dict[str, Decimal] = defaultdict(Decimal)
    by_hour: Dict[int, List] = defaultdict(lambda: [0, Decimal('0')])
    guest_orders = registered_orders = rewards_points = 0

    for order in orders:
        for item in order.items:
            quantity = int(item.get('quantity') or 1)
            items_sold += quantity
            item_quantity[item.get('name')] += quantity
            item_revenue[item.get('name')] += Decimal(str(item.get('item_total') or 0))

        bucket = by_hour[order.order_date.hour]
        bucket[0] += 1
        bucket[1] += Decimal(str(order.total))

        if order.customer_id == GUEST_CUSTOMER_ID:
            guest_orders += 1
        else:
            registered_orders += 1
            rewards_points += points_for_total(order.total)

    top_items = sorted(item_quantity.items(), key=lambda kv: (-kv[1], kv[0] or ''))[:TOP_ITEMS_LIMIT]

    return {
        'report_type': 'X Report',
        'generated_at': datetime.now(timezone.utc).isoformat(),
        'period': {
            'start': start.strftime('%Y-%m-%d %H:%M:%S'),
            'end': end.strftime('%Y-%m-%d %H:%M:%S'),
        },
        'sales_summary': {
            'total_orders': int(total_orders or 0),
            'total_items_sold': items_sold,
            'gross_sales': _money(gross_sales),
            'sales_tax': _money(total_tax),
            'net_sales': _money(net_sales),
        },
        'payment_methods': [
            {'method': method, 'count': int(count), 'amount': _money(amount)}
            for method, count, amount in payment_rows
        ],
        'top_items': [
            {'item_name': name, 'quantity': qty, 'revenue': _money(item_revenue[name])}
            for name, qty in top_items
        ],
        'sales_by_employee': sales_by_employee,
        'sales_by_hour': [
            {'hour': hour, 'orders': values[0], 'revenue': _money(values[1])}
            for hour, values in sorted(by_hour.items())
        ],
        'customer_statistics': {
            'guest_orders': guest_orders,
            'registered_orders': registered_orders,
            'rewards_points_earned': rewards_points,
        },
    }


# =====================================================
# ANALYTICS
# =====================================================

def _date_range(start_date: Optional[str], end_date: Optional[str],
                today: Optional[date] = None) -> Tuple[date, date]:
    if start_date and end_date:
        start, end = parse_date(start_date, 'startDate'), parse_date(end_date, 'endDate')
    elif start_date or end_date:
        raise ValidationError('Start date and end date are required together')
    else:
        end = today or shop_today()
        start = end - timedelta(days=DEFAULT_ANALYTICS_DAYS)
    if end < start:
        raise ValidationError('endDate must not be before startDate')
    return start, end


def _orders_between(session, start: date, end: date) -> List[SalesOrder]:
    return (
        session.query(SalesOrder)
        .filter(
            SalesOrder.order_date >= datetime.combine(start, time.min),
            SalesOrder.order_date <= datetime.combine(end, time.max),
        )
        .order_by(SalesOrder.order_date)
        .all()
    )


def daily_sales(session, start_date: Optional[str] = None, end_date: Optional[str] = None,
                today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Order count and revenue per day (last 30 days by default)."""
    start, end = _date_range(start_date, end_date, today)

    days: Dict[date, List] = defaultdict(lambda: [0, Decimal('0')])
    for order in _orders_between(session, start, end):
        bucket = days[order.order_date.date()]
        bucket[0] += 1
        bucket[1] += Decimal(str(order.total))

    return [
        {'date': day.isoformat(), 'count': values[0], 'total': _money(values[1])}
        for day, values in sorted(days.items())
    ]


def sales_trends(session, metric: Optional[str] = None, start_date: Optional[str] = None,
                 end_date: Optional[str] = None, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Daily revenue (default), order volume, or average order value."""
    metric = (metric or 'revenue').lower()
    if metric not in TREND_METRICS:
        metric = 'revenue'

    result = []
    for row in daily_sales(session, start_date, end_date, today):
        if metric == 'volume':
            value = row['count']
        elif metric == 'average':
            value = _money(Decimal(str(row['total'])) / row['count']) if row['count'] else 0.0
        else:
            value = row['total']
        result.append({'date': row['date'], 'value': value})
    return result


def z_report(session, report_date: Optional[str] = None, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Order count and sales per employee for one day."""
    day = parse_date(report_date) if report_date else (today or shop_today())
    rows = (
        session.query(SalesOrder.employee_id, func.count(SalesOrder.id), func.sum(SalesOrder.total))
        .filter(
            SalesOrder.order_date >= datetime.combine(day, time.min),
            SalesOrder.order_date <= datetime.combine(day, time.max),
        )
        .group_by(SalesOrder.employee_id)
        .order_by(SalesOrder.employee_id)
        .all()
    )
    return [
        {'employeeid': employee_id, 'sales_count': int(count), 'total_sales': _money(total)}
        for employee_id, count, total in rows
    ]


def hourly_sales(session, report_date: Optional[str] = None, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Order count and sales per hour of one day (today by default)."""
    day = parse_date(report_date) if report_date else (today or shop_today())

    hours: Dict[int, List] = defaultdict(lambda: [0, Decimal('0')])
    for order in _orders_between(session, day, day):
        bucket = hours[order.order_date.hour]
        bucket[0] += 1
        bucket[1] += Decimal(str(order.total))

    return [
        {'hour': hour, 'transaction_count': values[0], 'total_sales': _money(values[1])}
        for hour, values in sorted(hours.items())
    ]
