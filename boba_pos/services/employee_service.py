"""Employee service - staff management and credential checks."""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from boba_pos.exceptions import BusinessLogicError, NotFoundError, UnauthorizedError, ValidationError
from boba_pos.models import Employee, EmployeeLevel

logger = logging.getLogger(__name__)

VALID_LEVELS = {level.value for level in EmployeeLevel}


def _normalize_level(level: Optional[str]) -> str:
    if not level:
        return EmployeeLevel.EMPLOYEE.value
    for valid in VALID_LEVELS:
        if level.strip().lower() == valid.lower():
            return valid
    raise ValidationError(f'Invalid level: {level}. Must be one of {sorted(VALID_LEVELS)}')


def _check_username_available(session, username: str, exclude_id: Optional[int] = None) -> None:
    query = session.query(Employee.id).filter(Employee.username == username)
    if exclude_id is not None:
        query = query.filter(Employee.id != exclude_id)
    if query.first():
        raise BusinessLogicError('Username already exists', status_code=409)


def list_employees(session) -> List[Employee]:
    return session.query(Employee).order_by(Employee.id).all()


def get_employee(session, employee_id: int) -> Employee:
    employee = session.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError('Employee not found')
    return employee


def create_employee(session, data: Dict[str, Any]) -> Employee:
    first_name = (data.get('first_name') or '').strip()
    last_name = (data.get('last_name') or '').strip()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not first_name or not last_name or not username or not password:
        raise ValidationError('First name, last name, username, and password are required')

    _check_username_available(session, username)

    employee = Employee(
        first_name=first_name,
        last_name=last_name,
        username=username,
        level=_normalize_level(data.get('level')),
        active=True
    )
    employee.set_password(password)

    try:
        session.add(employee)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError('Username already exists', status_code=409)

    logger.info(f"[EMPLOYEES] Created {employee.level} '{employee.username}' (id={employee.id})")
    return employee


def update_employee(session, employee_id: int, data: Dict[str, Any]) -> Employee:
    first_name = (data.get('first_name') or '').strip()
    last_name = (data.get('last_name') or '').strip()
    username = (data.get('username') or '').strip()

    if not first_name or not last_name or not username:
        raise ValidationError('First name, last name, and username are required')

    employee = get_employee(session, employee_id)
    _check_username_available(session, username, exclude_id=employee_id)

    employee.first_name = first_name
    employee.last_name = last_name
    employee.username = username
    employee.level = _normalize_level(data.get('level'))
    # Password is only changed when a new one is supplied
    if data.get('password'):
        employee.set_password(data['password'])

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError('Username already exists', status_code=409)
    return employee


def delete_employee(session, employee_id: int) -> Dict[str, Any]:
    employee = get_employee(session, employee_id)
    data = employee.to_dict()
    session.delete(employee)
    session.commit()
    logger.info(f"[EMPLOYEES] Deleted '{data['username']}'")
    return data


def authenticate(session, username: str, password: str, require_manager: bool = False) -> Employee:
    """
    Verify staff credentials.

    Raises:
        ValidationError: missing username or password.
        UnauthorizedError: bad credentials, inactive account, or not a manager
            when require_manager is set.
    """
    username = (username or '').strip()
    if not username or not password:
        raise ValidationError('Username and password are required')

    employee = session.query(Employee).filter(Employee.username == username, Employee.active == True).first()  # noqa: E712
    if not employee or not employee.check_password(password):
        logger.warning(f"[AUTH] Failed staff login for '{username}'")
        raise UnauthorizedError('Invalid credentials or insufficient permissions', status_code=401)

    if require_manager and not employee.is_manager:
        logger.warning(f"[AUTH] '{username}' attempted manager login with level {employee.level}")
        raise UnauthorizedError('Invalid credentials or insufficient permissions', status_code=401)

    logger.info(f"[AUTH] {employee.level} '{username}' logged in")
    return employee
