"""X-report and analytics aggregation."""
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from boba_pos.exceptions import ValidationError
from boba_pos.models import SalesOrder
from boba_pos.services import report_service


def _order(session, when, total, subtotal, tax, items, customer_id=0, employee_id=0, payment_method='cash'):
    order = SalesOrder(
        customer_id=customer_id,
        employee_id=employee_id,
        order_details={'items': items, 'order_notes': ''},
        subtotal=Decimal(subtotal),
        tax=Decimal(tax),
        total=Decimal(total),
        payment_method=payment_method,
        order_date=when,
    )
    session.add(order)
    session.commit()
    return order


def _item(name, quantity, item_total):
    return {'menu_id': 1, 'name': name, 'base_price': '4.00', 'quantity': quantity,
            'customizations': [], 'item_total': item_total}


class _LateEveningUtc(datetime):
    """Clock pinned at 2024-05-02 01:30 UTC, still 2024-05-01 20:30 in Chicago."""

    @classmethod
    def now(cls, tz=None):
        return datetime(2024, 5, 2, 1, 30, tzinfo=timezone.utc).astimezone(tz)


@pytest.fixture
def late_evening(monkeypatch):
    monkeypatch.setattr(report_service, 'datetime', _LateEveningUtc)


@pytest.fixture
def shift(session, customer, employee):
    """Three orders on 2024-05-01 plus one the next day."""
    _order(session, datetime(2024, 5, 1, 9, 15), '10.28', '9.50', '0.78',
           [_item('Classic Milk Tea', 2, '9.50')], customer_id=customer.id, employee_id=employee.id)
    _order(session, datetime(2024, 5, 1, 9, 45), '4.87', '4.50', '0.37',
           [_item('Taro Milk Tea', 1, '4.50')], payment_method='credit_card')
    _order(session, datetime(2024, 5, 1, 13, 5), '8.66', '8.00', '0.66',
           [_item('Classic Milk Tea', 1, '4.00'), _item('Taro Milk Tea', 1, '4.00')], employee_id=employee.id)
    _order(session, datetime(2024, 5, 2, 10, 0), '4.33', '4.00', '0.33',
           [_item('Classic Milk Tea', 1, '4.00')])


class TestXReport:

    def test_full_day(self, session, shift):
        report = report_service.x_report(session, '2024-05-01', '00:00', '23:59')

        summary = report['sales_summary']
        assert summary['total_orders'] == 3
        assert summary['total_items_sold'] == 5
        assert summary['gross_sales'] == 22.0
        assert summary['sales_tax'] == 1.81
        assert summary['net_sales'] == 23.81

        methods = {m['method']: m for m in report['payment_methods']}
        assert methods['cash']['count'] == 2
        assert methods['credit_card']['amount'] == 4.87

        assert report['top_items'][0] == {'item_name': 'Classic Milk Tea', 'quantity': 3, 'revenue': 13.5}

        employees = {e['employee']: e for e in report['sales_by_employee']}
        assert employees['cashier']['orders'] == 2
        assert employees['Self-Service Kiosk']['sales'] == 4.87

        assert [h['hour'] for h in report['sales_by_hour']] == [9, 13]
        assert report['sales_by_hour'][0]['orders'] == 2

        stats = report['customer_statistics']
        assert stats == {'guest_orders': 2, 'registered_orders': 1, 'rewards_points_earned': 1028}

    def test_window_includes_end_minute(self, session, shift):
        report = report_service.x_report(session, '2024-05-01', '09:00', '09:45')
        assert report['sales_summary']['total_orders'] == 2
        assert report['period'] == {'start': '2024-05-01 09:00:00', 'end': '2024-05-01 09:45:59'}

    def test_empty_window(self, session, shift):
        report = report_service.x_report(session, '2024-05-01', '20:00', '21:00')
        assert report['sales_summary']['total_orders'] == 0
        assert report['sales_summary']['net_sales'] == 0.0
        assert report['top_items'] == []

    @pytest.mark.parametrize('args', [
        ('', '09:00', '10:00'),
        ('2024-13-01', '09:00', '10:00'),
        ('2024-05-01', '9am', '10:00'),
        ('2024-05-01', '11:00', '10:00'),
    ])
    def test_bad_parameters(self, session, args):
        with pytest.raises(ValidationError):
            report_service.x_report(session, *args)


class TestAnalytics:

    def test_daily_sales(self, session, shift):
        days = report_service.daily_sales(session, '2024-05-01', '2024-05-02')
        assert days == [
            {'date': '2024-05-01', 'count': 3, 'total': 23.81},
            {'date': '2024-05-02', 'count': 1, 'total': 4.33},
        ]

    def test_dates_must_come_together(self, session):
        with pytest.raises(ValidationError):
            report_service.daily_sales(session, '2024-05-01', None)

    def test_trends(self, session, shift):
        volume = report_service.sales_trends(session, 'volume', '2024-05-01', '2024-05-02')
        assert [row['value'] for row in volume] == [3, 1]

        average = report_service.sales_trends(session, 'average', '2024-05-01', '2024-05-01')
        assert average == [{'date': '2024-05-01', 'value': 7.94}]

        # Unknown metrics fall back to revenue
        revenue = report_service.sales_trends(session, 'bogus', '2024-05-02', '2024-05-02')
        assert revenue == [{'date': '2024-05-02', 'value': 4.33}]

    def test_z_report(self, session, shift, employee):
        rows = {r['employeeid']: r for r in report_service.z_report(session, '2024-05-01')}
        assert rows[employee.id] == {'employeeid': employee.id, 'sales_count': 2, 'total_sales': 18.94}
        assert rows[0]['sales_count'] == 1

    def test_hourly_sales(self, session, shift):
        assert report_service.hourly_sales(session, '2024-05-01') == [
            {'hour': 9, 'transaction_count': 2, 'total_sales': 15.15},
            {'hour': 13, 'transaction_count': 1, 'total_sales': 8.66},
        ]


class TestShopToday:

    def test_today_follows_shop_timezone(self, late_evening):
        assert report_service.shop_today('America/Chicago') == date(2024, 5, 1)
        assert report_service.shop_today('UTC') == date(2024, 5, 2)

    def test_reports_default_to_shop_today(self, session, shift, late_evening):
        assert sum(row['sales_count'] for row in report_service.z_report(session)) == 3
        assert [h['hour'] for h in report_service.hourly_sales(session)] == [9, 13]

        # 30 days ending 2024-05-01, so the 2024-05-02 order is outside
        assert [d['date'] for d in report_service.daily_sales(session)] == ['2024-05-01']

    def test_explicit_today(self, session, shift):
        rows = report_service.z_report(session, today=date(2024, 5, 2))
        assert [row['sales_count'] for row in rows] == [1]


class TestReportRoutes:

    def test_requires_manager(self, employee_client):
        assert employee_client.get('/api/reports/x?date=2024-05-01&startTime=09:00&endTime=10:00').status_code == 403

    def test_x_report_route(self, manager_client, shift):
        response = manager_client.get('/api/reports/x?date=2024-05-01&startTime=00:00&endTime=23:59')
        assert response.status_code == 200
        assert response.json['report_type'] == 'X Report'

    def test_x_report_missing_params(self, manager_client):
        response = manager_client.get('/api/reports/x?date=2024-05-01')
        assert response.status_code == 400

    def test_analytics_routes(self, manager_client, shift):
        sales = manager_client.get('/api/analytics/sales?startDate=2024-05-01&endDate=2024-05-02').json
        assert len(sales) == 2

        trends = manager_client.get('/api/analytics/trends?metric=volume&startDate=2024-05-01&endDate=2024-05-01').json
        assert trends == [{'date': '2024-05-01', 'value': 3}]

        z = manager_client.get('/api/analytics/zreport?date=2024-05-01').json
        assert sum(row['sales_count'] for row in z) == 3

    def test_default_dates_use_shop_clock(self, manager_client, shift, late_evening):
        z = manager_client.get('/api/analytics/zreport').json
        assert sum(row['sales_count'] for row in z) == 3

        sales = manager_client.get('/api/analytics/sales').json
        assert [row['date'] for row in sales] == ['2024-05-01']

    def test_hourly_xreport_route(self, manager_client, shift, late_evening):
        hours = manager_client.get('/api/analytics/xreport').json
        assert hours == [
            {'hour': 9, 'transaction_count': 2, 'total_sales': 15.15},
            {'hour': 13, 'transaction_count': 1, 'total_sales': 8.66},
        ]
        assert manager_client.get('/api/analytics/xreport?date=2024-05-02').json[0]['transaction_count'] == 1
        assert manager_client.get('/api/analytics/xreport?date=yesterday').status_code == 400
