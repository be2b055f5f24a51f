"""
Custom exceptions for the order and billing lifecycle.

Every exception carries an HTTP status and a stable code so the API layer can
translate it without knowing which service raised it.
"""


class BillingError(Exception):
    """Base exception for order/billing errors."""

    status_code = 400
    code = "BILLING_ERROR"

    def __init__(self, message=None):
        self.message = message or self.__class__.__doc__
        super().__init__(self.message)


class InvalidOrder(BillingError):
    """The order request is invalid."""

    code = "INVALID_ORDER"


class NotFound(BillingError):
    """Raised when an order, table or item does not exist for the restaurant."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, kind, identifier, message=None):
        self.kind = kind
        self.identifier = identifier
        if message is None:
            message = f"{kind} '{identifier}' not found"
        super().__init__(message)


class AlreadyClosed(BillingError):
    """Raised when an operation targets an order that is closed or cancelled."""

    status_code = 409
    code = "ALREADY_CLOSED"

    def __init__(self, order, message=None):
        self.order = order
        if message is None:
            message = f"Order #{order.order_number} is already {order.get_status_display().lower()}"
        super().__init__(message)


class InvalidAmount(BillingError):
    """Raised for non-positive payments or payments larger than the amount due."""

    code = "INVALID_AMOUNT"

    def __init__(self, amount, amount_due=None, message=None):
        self.amount = amount
        self.amount_due = amount_due
        if message is None:
            if amount_due is not None and amount > amount_due:
                message = f"Payment of {amount} exceeds amount due {amount_due}"
            else:
                message = f"Payment amount must be positive, got {amount}"
        super().__init__(message)


class ConcurrentModification(BillingError):
    """
    Raised when the order changed between read and write.

    retryable is False when the caller pinned an expected_version, because
    re-reading fresh state would silently discard what the caller saw.
    """

    status_code = 409
    code = "CONCURRENT_MODIFICATION"

    def __init__(self, order_id, expected_version=None, retryable=True, message=None):
        self.order_id = order_id
        self.expected_version = expected_version
        self.retryable = retryable
        if message is None:
            message = "Order was modified by another terminal, reload and try again"
        super().__init__(message)
