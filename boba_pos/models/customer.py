"""Customer model (rewards members)."""
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.sql import func
from boba_pos.database import Base


# Customer id recorded on orders placed without an account
GUEST_CUSTOMER_ID = 0


class Customer(Base):
    """Customer identified by an external identity (email or kiosk username)."""

    __tablename__ = 'customer'
    __table_args__ = (
        CheckConstraint('rewards_points >= 0', name='ck_customer_rewards_non_negative'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False, default='')
    last_name = Column(String(100), nullable=False, default='')
    rewards_points = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def to_dict(self):
        return {
            'custid': self.id,
            'username': self.username,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'rewards_points': self.rewards_points,
        }

    def __repr__(self):
        return f"<Customer(id={self.id}, username='{self.username}', points={self.rewards_points})>"
