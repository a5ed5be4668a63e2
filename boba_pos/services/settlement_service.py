"""
Settlement service - turns a cart into a persisted order, then accrues rewards.

Two independently-failable steps:
1. Order creation (all-or-nothing transaction, includes inventory deduction).
2. Rewards accrual for identified customers, attempted only after step 1
   succeeded. A failure here never reverses the order; it is reported on the
   receipt instead.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from boba_pos.utils.metrics import orders_submitted_total, order_failures_total, rewards_accrual_failures_total
from boba_pos.exceptions import (
    PosError, EmptyCartError, ValidationError, OrderStoreError, InsufficientStockError,
    RewardAccrualError, DuplicateOrderError,
)
from boba_pos.models import (
    SalesOrder, InventoryItem, MenuInventory, InventoryTransaction, TransactionType,
    GUEST_CUSTOMER_ID, normalize_payment_method,
)
from boba_pos.services import customer_service
from boba_pos.services.cart_service import CartLedger
from boba_pos.services.line_item_service import LineItem
from boba_pos.utils.number_format import to_cents

logger = logging.getLogger(__name__)

MAX_IDEMPOTENCY_KEY_LENGTH = 64


@dataclass(frozen=True)
class OrderPayload:
    """Immutable snapshot of a cart at submission time."""
    customer_id: int
    employee_id: int
    line_items: Tuple[LineItem, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    notes: str = ''
    idempotency_key: Optional[str] = None

    def order_details(self, transaction_time: Optional[datetime] = None) -> Dict[str, Any]:
        details = {
            'items': [item.to_dict() for item in self.line_items],
            'order_notes': self.notes,
        }
        if transaction_time is not None:
            details['transaction_time'] = transaction_time.strftime('%m/%d/%Y, %H:%M:%S')
        return details


@dataclass(frozen=True)
class OrderReceipt:
    order_id: int
    total: Decimal
    created_at: datetime
    points_earned: Optional[int] = None
    new_rewards_balance: Optional[int] = None
    rewards_error: Optional[RewardAccrualError] = None

    @property
    def partial(self) -> bool:
        """Order placed, rewards not recorded."""
        return self.rewards_error is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'order_id': self.order_id,
            'order_date': self.created_at.isoformat(),
            'total': str(self.total),
            'points_earned': self.points_earned,
            'new_rewards_balance': self.new_rewards_balance,
            'partial': self.partial,
        }
        if self.rewards_error is not None:
            data['rewards_error'] = self.rewards_error.to_dict()
        return data


def points_for_total(total: Decimal) -> int:
    """Rewards points earned for an order: one point per cent spent."""
    return to_cents(total)


# =====================================================
# STORES
# =====================================================

class SqlOrderStore:
    """Persists orders in sales_order and deducts ingredient inventory."""

    def __init__(self, session, timezone: str = 'America/Chicago'):
        self.session = session
        self.timezone = ZoneInfo(timezone)

    def _now(self) -> datetime:
        # Store wall-clock time in the shop's timezone (naive)
        return datetime.now(self.timezone).replace(tzinfo=None)

    def find_by_idempotency_key(self, key: str) -> Optional[SalesOrder]:
        return self.session.query(SalesOrder).filter(SalesOrder.idempotency_key == key).first()

    def create_order(self, payload: OrderPayload) -> Tuple[int, datetime]:
        """
        Insert the order and deduct inventory in one transaction.

        Raises:
            DuplicateOrderError: idempotency key already used.
            InsufficientStockError: an ingredient would go negative.
            OrderStoreError: any other persistence failure.
        """
        session = self.session
        try:
            if payload.idempotency_key:
                existing = self.find_by_idempotency_key(payload.idempotency_key)
                if existing:
                    raise DuplicateOrderError(existing.id)

            needs = _lock_and_check_inventory(session, payload.line_items)

            created_at = self._now()
            order = SalesOrder(
                customer_id=payload.customer_id,
                employee_id=payload.employee_id,
                order_details=payload.order_details(created_at),
                subtotal=payload.subtotal,
                tax=payload.tax,
                total=payload.total,
                payment_method=payload.payment_method,
                notes=payload.notes or None,
                order_date=created_at,
                idempotency_key=payload.idempotency_key,
            )
            session.add(order)
            session.flush()

            for inventory_id, info in needs.items():
                session.query(InventoryItem).filter(InventoryItem.id == inventory_id).update(
                    {InventoryItem.quantity: InventoryItem.quantity - info['needed']},
                    synchronize_session=False
                )
                session.add(InventoryTransaction(
                    inventory_id=inventory_id,
                    order_id=order.id,
                    quantity_change=-info['needed'],
                    transaction_type=TransactionType.ORDER.value,
                    employee_id=payload.employee_id,
                ))
                logger.info(f"[ORDERS] Decremented {info['name']}: -{info['needed']} "
                            f"(new stock: {info['current'] - info['needed']})")

            session.commit()
            logger.info(f"[ORDERS] Order {order.id} created "
                        f"({'with' if needs else 'without'} inventory tracking)")
            return order.id, created_at

        except PosError:
            session.rollback()
            raise
        except IntegrityError as e:
            session.rollback()
            # Two submissions with the same key raced; the other one won
            if payload.idempotency_key:
                existing = self.find_by_idempotency_key(payload.idempotency_key)
                if existing:
                    raise DuplicateOrderError(existing.id)
            logger.error(f"[ORDERS] Integrity error creating order: {e}")
            raise OrderStoreError(f'Failed to create order: {e.orig}')
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"[ORDERS] Database error creating order: {e}")
            raise OrderStoreError(f'Failed to create order: {e}')


class SqlCustomerStore:
    """Customer lookups and server-side rewards increments."""

    def __init__(self, session):
        self.session = session

    def find_by_identity(self, identity: str):
        return customer_service.find_by_identity(self.session, identity)

    def increment_rewards(self, customer_id: int, points: int) -> int:
        try:
            return customer_service.increment_rewards(self.session, customer_id, points)
        except RewardAccrualError:
            raise
        except PosError as e:
            raise RewardAccrualError(e.message)


def _menu_quantities(line_items) -> Dict[int, int]:
    """Units sold per menu row: the drink itself plus every option that is a menu row."""
    quantities: Dict[int, int] = defaultdict(int)
    for item in line_items:
        quantities[item.menu_item_id] += item.quantity
        for option in item.selected_options:
            if isinstance(option.id, int):
                quantities[option.id] += item.quantity
    return quantities


def _lock_and_check_inventory(session, line_items) -> Dict[int, Dict[str, Any]]:
    """Lock the ingredient rows an order consumes and verify there is enough of each."""
    menu_quantities = _menu_quantities(line_items)
    if not menu_quantities:
        return {}

    rows = (
        session.query(MenuInventory, InventoryItem)
        .join(InventoryItem, InventoryItem.id == MenuInventory.inventory_id)
        .filter(MenuInventory.menu_id.in_(list(menu_quantities)))
        .with_for_update(of=InventoryItem)
        .all()
    )

    needs: Dict[int, Dict[str, Any]] = {}
    for mapping, ingredient in rows:
        info = needs.setdefault(ingredient.id, {
            'name': ingredient.item_name,
            'current': Decimal(str(ingredient.quantity)),
            'needed': Decimal('0'),
        })
        info['needed'] += Decimal(str(mapping.quantity)) * menu_quantities[mapping.menu_id]

    shortages = [
        {'item': info['name'], 'available': float(info['current']), 'needed': float(info['needed'])}
        for info in needs.values()
        if info['current'] < info['needed']
    ]
    if shortages:
        logger.warning(f"[ORDERS] Insufficient inventory: {shortages}")
        raise InsufficientStockError(shortages)

    return needs


# =====================================================
# SUBMISSION
# =====================================================

def _check_actor_id(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f'{field_name} must be a non-negative integer')
    return value


def build_order_payload(cart: CartLedger, customer_id: int, employee_id: int, payment_method,
                        notes: str = '', idempotency_key: Optional[str] = None) -> OrderPayload:
    """Validate settlement inputs and snapshot the cart."""
    if cart is None or len(cart) == 0:
        raise EmptyCartError('Order must contain at least one item')

    _check_actor_id(customer_id, 'customer_id')
    _check_actor_id(employee_id, 'employee_id')

    try:
        method = normalize_payment_method(payment_method)
    except ValueError as e:
        raise ValidationError(str(e))

    if idempotency_key is not None:
        idempotency_key = str(idempotency_key).strip() or None
        if idempotency_key and len(idempotency_key) > MAX_IDEMPOTENCY_KEY_LENGTH:
            raise ValidationError('idempotency_key is too long')

    return OrderPayload(
        customer_id=customer_id,
        employee_id=employee_id,
        line_items=cart.snapshot(),
        subtotal=cart.subtotal(),
        tax=cart.tax(),
        total=cart.total(),
        payment_method=method,
        notes=(notes or '').strip(),
        idempotency_key=idempotency_key,
    )


def submit_order(cart: CartLedger, customer_id: int, employee_id: int, payment_method,
                 notes: str, order_store, customer_store,
                 idempotency_key: Optional[str] = None) -> OrderReceipt:
    """
    Settle a cart.

    Raises:
        EmptyCartError: nothing to settle (no store is called).
        ValidationError: bad ids or payment method.
        DuplicateOrderError: idempotency key already produced an order.
        OrderStoreError: the order was not persisted.

    A rewards failure is not raised: the receipt carries it in rewards_error.
    """
    try:
        payload = build_order_payload(cart, customer_id, employee_id, payment_method, notes, idempotency_key)
    except PosError as e:
        order_failures_total.labels(reason=e.code).inc()
        raise

    logger.info(f"[ORDERS] Submitting order: customer={customer_id}, employee={employee_id}, "
                f"items={len(payload.line_items)}, total={payload.total}")

    try:
        order_id, created_at = order_store.create_order(payload)
    except PosError as e:
        order_failures_total.labels(reason=e.code).inc()
        raise
    except Exception as e:
        # Timeouts and transport errors from the store count as a failed submission
        order_failures_total.labels(reason=OrderStoreError.code).inc()
        logger.error(f"[ORDERS] Order store failed: {e}")
        raise OrderStoreError(f'Failed to create order: {e}') from e

    orders_submitted_total.labels(payment_method=payload.payment_method).inc()

    if customer_id == GUEST_CUSTOMER_ID:
        return OrderReceipt(order_id=order_id, total=payload.total, created_at=created_at)

    points = points_for_total(payload.total)
    if points <= 0:
        return OrderReceipt(order_id=order_id, total=payload.total, created_at=created_at, points_earned=0)

    try:
        new_balance = customer_store.increment_rewards(customer_id, points)
    except Exception as e:
        error = e if isinstance(e, RewardAccrualError) else RewardAccrualError(f'Failed to add rewards: {e}')
        rewards_accrual_failures_total.inc()
        logger.error(f"[REWARDS] Order {order_id} completed but rewards were not recorded "
                     f"for customer {customer_id}: {error.message}")
        return OrderReceipt(
            order_id=order_id,
            total=payload.total,
            created_at=created_at,
            points_earned=points,
            rewards_error=error,
        )

    return OrderReceipt(
        order_id=order_id,
        total=payload.total,
        created_at=created_at,
        points_earned=points,
        new_rewards_balance=new_balance,
    )
