"""Sales order model."""
import enum
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, JSON
from boba_pos.database import Base


# Employee id recorded on kiosk (self-service) orders
SELF_SERVICE_EMPLOYEE_ID = 0


class PaymentMethod(str, enum.Enum):
    """Accepted tender types."""
    CASH = 'cash'
    CREDIT_CARD = 'credit_card'


def normalize_payment_method(value) -> str:
    """
    Normalize payment method value to string for DB storage.

    Args:
        value: Can be None, PaymentMethod enum, or string ("cash", "Credit Card", "credit-card")

    Returns:
        str: 'cash' or 'credit_card'

    Raises:
        ValueError: If value is invalid
    """
    # Default to cash if None
    if value is None:
        return PaymentMethod.CASH.value

    if isinstance(value, PaymentMethod):
        return value.value

    normalized = str(value).strip().lower().replace('-', '_').replace(' ', '_')
    if normalized == 'card':
        normalized = PaymentMethod.CREDIT_CARD.value

    valid = {m.value for m in PaymentMethod}
    if normalized not in valid:
        raise ValueError(f"Invalid payment method: {value}. Must be one of {sorted(valid)}")
    return normalized


class OrderStatus(str, enum.Enum):
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class SalesOrder(Base):
    """
    Settled order.

    customer_id and employee_id are plain integers rather than foreign keys
    because 0 is a valid sentinel (guest / self-service).
    order_details holds the line-item snapshot as JSON.
    """

    __tablename__ = 'sales_order'

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, nullable=False, default=0, index=True)
    employee_id = Column(Integer, nullable=False, default=0, index=True)
    order_details = Column(JSON, nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)
    order_status = Column(String(20), nullable=False, default=OrderStatus.COMPLETED.value)
    # Wall-clock time in the store's timezone (ORDER_TIMEZONE)
    order_date = Column(DateTime, nullable=False, index=True)

    # Idempotency key to prevent duplicate orders on double-submit
    idempotency_key = Column(String(64), unique=True, nullable=True, index=True)

    @property
    def items(self):
        return (self.order_details or {}).get('items', [])

    def to_dict(self):
        return {
            'order_id': self.id,
            'customer_id': self.customer_id,
            'employee_id': self.employee_id,
            'order_date': self.order_date.isoformat() if self.order_date else None,
            'order_details': self.order_details,
            'subtotal': float(self.subtotal),
            'tax': float(self.tax),
            'total': float(self.total),
            'payment_method': self.payment_method,
            'order_status': self.order_status,
        }

    def __repr__(self):
        return f"<SalesOrder(id={self.id}, total={self.total}, customer_id={self.customer_id})>"
