"""Custom exceptions for the boba POS application."""


class PosError(Exception):
    """Base exception for all application errors."""
    code = 'internal_error'

    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['code'] = self.code
        rv['status'] = 'error'
        return rv


class ValidationError(PosError):
    """Bad input to the line-item builder, the cart or a management form."""
    code = 'validation_error'

    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class EmptyCartError(PosError):
    """Raised when settlement is attempted on a cart with no line items."""
    code = 'empty_cart'

    def __init__(self, message="Cart is empty"):
        super().__init__(message, 400)


class BusinessLogicError(PosError):
    """Exception raised for business logic violations."""
    code = 'business_rule'

    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class DuplicateOrderError(BusinessLogicError):
    """A settlement with this idempotency key already created an order."""
    code = 'duplicate_order'

    def __init__(self, order_id):
        super().__init__(
            f'This order was already placed (ID: {order_id})',
            status_code=409,
            payload={'order_id': order_id}
        )
        self.order_id = order_id


class NotFoundError(PosError):
    """Exception raised when a resource is not found."""
    code = 'not_found'

    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class UnauthorizedError(PosError):
    """Raised when a staff member lacks permission for an action."""
    code = 'unauthorized'

    def __init__(self, message="Unauthorized access", status_code=403):
        super().__init__(message, status_code)


class OrderStoreError(PosError):
    """Persisting the order failed; nothing was charged."""
    code = 'order_store_error'

    def __init__(self, message="Failed to create order", status_code=502, payload=None):
        super().__init__(message, status_code, payload)


class InsufficientStockError(OrderStoreError):
    """Raised when an order needs more of an ingredient than is on hand."""
    code = 'insufficient_stock'

    def __init__(self, shortages):
        self.shortages = shortages
        names = ', '.join(s['item'] for s in shortages)
        super().__init__(
            f'Insufficient inventory for: {names}',
            status_code=409,
            payload={'insufficient_items': shortages}
        )


class RewardAccrualError(PosError):
    """The order stands, but its rewards points were not recorded."""
    code = 'reward_accrual_error'

    def __init__(self, message="Failed to record rewards points", payload=None):
        super().__init__(message, 502, payload)
