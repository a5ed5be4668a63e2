"""
Authentication blueprint for register staff.

Employees and managers log in with username and password; the employee id
is kept in the Flask session and loaded into g on each request.
"""
from flask import Blueprint, request, jsonify, session, g
from boba_pos.database import get_session
from boba_pos.services.employee_service import authenticate

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _login(require_manager: bool):
    data = request.get_json(silent=True) or {}
    employee = authenticate(
        get_session(), data.get('username'), data.get('password'), require_manager=require_manager
    )

    session['employee_id'] = employee.id
    session.permanent = True

    return jsonify({'success': True, 'employee': employee.to_dict()})


@auth_bp.route('/employee', methods=['POST'])
def employee_login():
    return _login(require_manager=False)


@auth_bp.route('/manager', methods=['POST'])
def manager_login():
    return _login(require_manager=True)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """End the staff login; an in-progress cart stays with the register."""
    session.pop('employee_id', None)
    return jsonify({'success': True})


@auth_bp.route('/me', methods=['GET'])
def me():
    """Currently logged-in staff member, or null at a kiosk."""
    employee = g.get('employee')
    return jsonify({'employee': employee.to_dict() if employee else None})
