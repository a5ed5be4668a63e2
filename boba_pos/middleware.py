"""Middleware for staff authentication context."""
from functools import wraps
from flask import session, g, current_app
from boba_pos.database import get_session
from boba_pos.exceptions import UnauthorizedError
from boba_pos.models import Employee


def load_staff():
    """
    Load the logged-in employee into g (Flask's per-request global).

    Called before each request. Sets g.employee and g.employee_id when a
    staff member is logged in; both stay None at a self-service kiosk.
    """
    g.employee = None
    g.employee_id = None

    employee_id = session.get('employee_id')
    if not employee_id:
        return

    try:
        employee = get_session().query(Employee).filter_by(id=employee_id, active=True).first()
    except Exception as e:
        # Avoid crashing the whole app if context loading fails
        current_app.logger.error(f"Error in load_staff: {e}")
        return

    if employee:
        g.employee = employee
        g.employee_id = employee.id
    else:
        # Deactivated or deleted since login
        session.pop('employee_id', None)


def require_employee(f):
    """Decorator: require any logged-in, active employee."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('employee') is None:
            raise UnauthorizedError('Staff login required', status_code=401)
        return f(*args, **kwargs)
    return decorated_function


def require_manager(f):
    """
    Decorator: require a logged-in employee with the Manager level.

    Returns 401 when nobody is logged in and 403 for non-managers.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        employee = g.get('employee')
        if employee is None:
            raise UnauthorizedError('Manager login required', status_code=401)
        if not employee.is_manager:
            current_app.logger.warning(f"[AUTH] '{employee.username}' denied manager route")
            raise UnauthorizedError('Manager access required')
        return f(*args, **kwargs)
    return decorated_function
