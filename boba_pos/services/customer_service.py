"""Customer service - identity lookup, auto-provisioning and rewards points."""
import logging
from typing import Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from boba_pos.exceptions import BusinessLogicError, NotFoundError, RewardAccrualError, ValidationError
from boba_pos.models import Customer

logger = logging.getLogger(__name__)


def _normalize_identity(identity) -> str:
    value = (identity or '').strip()
    if not value:
        raise ValidationError('Customer identity is required')
    return value


def split_display_name(display_name: str) -> Tuple[str, str]:
    """'Ada King Lovelace' -> ('Ada', 'King Lovelace')."""
    parts = (display_name or '').strip().split()
    if not parts:
        return '', ''
    return parts[0], ' '.join(parts[1:])


def get_customer(session, customer_id: int) -> Customer:
    customer = session.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise NotFoundError('Customer not found')
    return customer


def find_by_identity(session, identity: str) -> Customer:
    """Look up a customer by identity (email / username); NotFoundError if absent."""
    customer = session.query(Customer).filter(Customer.username == _normalize_identity(identity)).first()
    if not customer:
        raise NotFoundError('Customer not found')
    return customer


def find_or_create_from_identity(session, identity: str, display_name: str) -> Tuple[Customer, bool]:
    """
    Resolve the customer behind an identity-provider login, creating one on first login.

    New customers start with 0 rewards points. This function is idempotent and
    safe under concurrent first logins thanks to the unique constraint on username.

    Returns:
        (customer, is_new)
    """
    identity = _normalize_identity(identity)
    if not (display_name or '').strip():
        raise ValidationError('Display name is required')

    existing = session.query(Customer).filter(Customer.username == identity).first()
    if existing:
        logger.info(f"[CUSTOMERS] Existing customer found: {existing.id} - {existing.username}")
        return existing, False

    first_name, last_name = split_display_name(display_name)
    try:
        customer = Customer(
            username=identity,
            first_name=first_name,
            last_name=last_name,
            rewards_points=0
        )
        session.add(customer)
        session.commit()
        logger.info(f"[CUSTOMERS] New customer created: {customer.id} - {customer.username}")
        return customer, True

    except IntegrityError:
        # Race condition: another request created it simultaneously
        session.rollback()
        logger.warning(f"[CUSTOMERS] Duplicate customer detected for {identity}, fetching existing record")

        customer = session.query(Customer).filter(Customer.username == identity).first()
        if customer:
            return customer, False

        raise BusinessLogicError(f'Could not create or retrieve customer {identity}', status_code=500)


def increment_rewards(session, customer_id: int, points: int) -> int:
    """
    Atomically add rewards points to a customer and return the new balance.

    The increment is a single UPDATE evaluated by the database, so concurrent
    orders for the same customer cannot lose points.
    """
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise ValidationError('Valid points amount required')

    try:
        updated = (
            session.query(Customer)
            .filter(Customer.id == customer_id)
            .update({Customer.rewards_points: Customer.rewards_points + points}, synchronize_session=False)
        )
        if not updated:
            session.rollback()
            raise NotFoundError('Customer not found')

        new_balance = session.query(Customer.rewards_points).filter(Customer.id == customer_id).scalar()
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[REWARDS] Failed to add {points} points to customer {customer_id}: {e}")
        raise RewardAccrualError(f'Failed to add rewards: {e}')

    logger.info(f"[REWARDS] Added {points} points to customer {customer_id}. New balance: {new_balance}")
    return int(new_balance)
