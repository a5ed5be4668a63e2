"""Employees blueprint - staff management (managers only)."""
from flask import Blueprint, request, jsonify, g
from boba_pos.database import get_session
from boba_pos.exceptions import BusinessLogicError
from boba_pos.middleware import require_manager
from boba_pos.services import employee_service

employees_bp = Blueprint('employees', __name__, url_prefix='/api/employees')


@employees_bp.route('', methods=['GET'])
@require_manager
def list_employees():
    return jsonify([e.to_dict() for e in employee_service.list_employees(get_session())])


@employees_bp.route('/<int:employee_id>', methods=['GET'])
@require_manager
def get_employee(employee_id: int):
    return jsonify(employee_service.get_employee(get_session(), employee_id).to_dict())


@employees_bp.route('', methods=['POST'])
@require_manager
def create_employee():
    data = request.get_json(silent=True) or {}
    employee = employee_service.create_employee(get_session(), data)
    return jsonify(employee.to_dict()), 201


@employees_bp.route('/<int:employee_id>', methods=['PUT'])
@require_manager
def update_employee(employee_id: int):
    data = request.get_json(silent=True) or {}
    employee = employee_service.update_employee(get_session(), employee_id, data)
    return jsonify(employee.to_dict())


@employees_bp.route('/<int:employee_id>', methods=['DELETE'])
@require_manager
def delete_employee(employee_id: int):
    if employee_id == g.employee_id:
        raise BusinessLogicError('You cannot delete your own account')
    deleted = employee_service.delete_employee(get_session(), employee_id)
    return jsonify({'message': 'Employee deleted successfully', 'deleted': deleted})
