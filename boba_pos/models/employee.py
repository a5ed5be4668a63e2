"""Employee model - cashiers and managers."""
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from boba_pos.database import Base


class EmployeeLevel(str, enum.Enum):
    """Staff level."""
    EMPLOYEE = 'Employee'
    MANAGER = 'Manager'


class Employee(Base):
    """Employee model."""

    __tablename__ = 'employee'

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    username = Column(String(100), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    level = Column(String(20), nullable=False, default=EmployeeLevel.EMPLOYEE.value)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def set_password(self, password):
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_manager(self):
        return self.level == EmployeeLevel.MANAGER.value

    def to_dict(self):
        return {
            'employeeid': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'username': self.username,
            'level': self.level,
        }

    def __repr__(self):
        return f"<Employee(id={self.id}, username='{self.username}', level='{self.level}')>"
