"""Staff login and employee management."""
import pytest

from boba_pos.blueprints import metrics as metrics_blueprint
from boba_pos.exceptions import UnauthorizedError, ValidationError
from boba_pos.models import Employee
from boba_pos.services.employee_service import authenticate
from boba_pos.utils import metrics


class TestAuthenticate:

    def test_valid_credentials(self, session, employee):
        assert authenticate(session, 'cashier', 'password123').id == employee.id

    def test_wrong_password(self, session, employee):
        with pytest.raises(UnauthorizedError) as exc_info:
            authenticate(session, 'cashier', 'nope')
        assert exc_info.value.status_code == 401

    def test_employee_cannot_login_as_manager(self, session, employee):
        with pytest.raises(UnauthorizedError):
            authenticate(session, 'cashier', 'password123', require_manager=True)

    def test_inactive_employee(self, session, employee):
        session.query(Employee).filter(Employee.id == employee.id).update({Employee.active: False})
        session.commit()
        with pytest.raises(UnauthorizedError):
            authenticate(session, 'cashier', 'password123')

    def test_missing_fields(self, session):
        with pytest.raises(ValidationError):
            authenticate(session, '', 'x')

    def test_password_is_hashed(self, session, employee):
        stored = session.query(Employee.password_hash).filter(Employee.id == employee.id).scalar()
        assert stored != 'password123'
        assert stored.startswith('scrypt:')


class TestAuthRoutes:

    def test_manager_login_and_logout(self, client, manager):
        response = client.post('/auth/manager', json={'username': 'boss', 'password': 'password123'})
        assert response.status_code == 200
        assert response.json['employee']['level'] == 'Manager'
        assert client.get('/auth/me').json['employee']['username'] == 'boss'

        client.post('/auth/logout')
        assert client.get('/auth/me').json['employee'] is None

    def test_logout_keeps_cart(self, employee_client, menu):
        employee_client.post('/api/cart/items', json={'menu_item_id': menu['Classic Milk Tea'], 'quantity': 2})

        employee_client.post('/auth/logout')

        assert employee_client.get('/auth/me').json['employee'] is None
        assert employee_client.get('/api/cart').json['item_count'] == 2

    def test_manager_route_rejects_employee_level(self, client, employee):
        response = client.post('/auth/manager', json={'username': 'cashier', 'password': 'password123'})
        assert response.status_code == 401

    def test_employee_route_accepts_manager(self, client, manager):
        response = client.post('/auth/employee', json={'username': 'boss', 'password': 'password123'})
        assert response.status_code == 200


class TestEmployeeRoutes:

    def test_requires_manager(self, employee_client):
        assert employee_client.get('/api/employees').status_code == 403

    def test_crud(self, manager_client, manager):
        created = manager_client.post('/api/employees', json={
            'first_name': 'Sam', 'last_name': 'Lee', 'username': 'slee', 'password': 'tea-time', 'level': 'employee'
        })
        assert created.status_code == 201
        assert created.json['level'] == 'Employee'
        employee_id = created.json['employeeid']

        assert len(manager_client.get('/api/employees').json) == 2

        updated = manager_client.put(f'/api/employees/{employee_id}', json={
            'first_name': 'Sam', 'last_name': 'Lee', 'username': 'slee', 'level': 'Manager'
        })
        assert updated.json['level'] == 'Manager'

        assert manager_client.delete(f'/api/employees/{employee_id}').status_code == 200
        assert manager_client.get(f'/api/employees/{employee_id}').status_code == 404

    def test_duplicate_username(self, manager_client, manager):
        response = manager_client.post('/api/employees', json={
            'first_name': 'B', 'last_name': 'Oss', 'username': 'boss', 'password': 'x'
        })
        assert response.status_code == 409

    def test_missing_fields(self, manager_client, manager):
        response = manager_client.post('/api/employees', json={'username': 'nobody'})
        assert response.status_code == 400

    def test_invalid_level(self, manager_client, manager):
        response = manager_client.post('/api/employees', json={
            'first_name': 'A', 'last_name': 'B', 'username': 'ab', 'password': 'x', 'level': 'Owner'
        })
        assert response.status_code == 400

    def test_cannot_delete_self(self, manager_client, manager):
        assert manager_client.delete(f'/api/employees/{manager.id}').status_code == 400


class TestErrorResponses:

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        assert response.json['status'] == 'error'

    def test_wrong_method_is_json(self, client):
        response = client.patch('/api/cart')
        assert response.status_code == 405
        assert response.json['code'] == 'method_not_allowed'

    def test_metrics_endpoint(self, client):
        response = client.get('/metrics')
        assert response.status_code == 200
        assert b'http_requests_total' in response.data

    def test_metrics_endpoint_serves_order_counters(self, client):
        assert metrics_blueprint.orders_submitted_total is metrics.orders_submitted_total

        data = client.get('/metrics').data
        assert b'pos_rewards_accrual_failures_total' in data
        assert b'pos_orders_submitted' in data
