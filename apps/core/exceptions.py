"""
Custom exceptions for the NexCart commerce backend.

Every business-rule failure raised by the order, payment and shipping
services derives from CommerceException and carries a stable ``kind``
(returned to API callers) and the HTTP status the API layer maps it to.
"""


class CommerceException(Exception):
    """Base exception for all NexCart errors"""
    kind = "Internal"
    http_status = 500

    def __init__(self, message: str, code: str = "COMMERCE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "code": self.code,
            "message": self.message,
        }


class ValidationException(CommerceException):
    """Malformed or missing input"""
    kind = "ValidationError"
    http_status = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(
            message=message,
            code="VALIDATION_ERROR"
        )


class InvalidChargeException(ValidationException):
    """Raised when a delivery charge would lower the grand total"""
    kind = "InvalidCharge"

    def __init__(self, charge):
        self.charge = charge
        super().__init__(
            message=f"Delivery charge cannot be negative (got {charge}).",
            field="delivery_charge"
        )


class NotFoundException(CommerceException):
    """Order, product or customer absent"""
    kind = "NotFound"
    http_status = 404

    def __init__(self, message: str, code: str = "NOT_FOUND"):
        super().__init__(message=message, code=code)


class OrderNotFoundException(NotFoundException):
    kind = "OrderNotFound"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}", code="ORDER_NOT_FOUND")


class ProductNotFoundException(NotFoundException):
    kind = "ProductNotFound"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}", code="PRODUCT_NOT_FOUND")


class CustomerNotFoundException(NotFoundException):
    kind = "CustomerNotFound"

    def __init__(self, customer_id=None):
        self.customer_id = customer_id
        super().__init__(
            "Customer associated with this order not found.",
            code="CUSTOMER_NOT_FOUND"
        )


class ConflictException(CommerceException):
    """Raised when a write collides with existing state"""
    kind = "Conflict"
    http_status = 409

    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message=message, code=code)


class DuplicateTransactionException(ConflictException):
    kind = "DuplicateTransaction"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(
            "This Transaction ID has already been used.",
            code="DUPLICATE_TRANSACTION"
        )


class AlreadyVerifiedException(ConflictException):
    kind = "AlreadyVerified"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(
            f"The payment for order {order_id} has already been verified.",
            code="ALREADY_VERIFIED"
        )


class AlreadyCancelledException(ConflictException):
    kind = "AlreadyCancelled"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(
            f"Order {order_id} has already been cancelled.",
            code="ALREADY_CANCELLED"
        )


class IdGenerationExhaustedException(ConflictException):
    kind = "IdGenerationExhausted"

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Failed to generate a unique order ID after {attempts} attempts. Please try again.",
            code="ID_GENERATION_EXHAUSTED"
        )


class InvalidStateTransitionException(CommerceException):
    """Operation not legal in the order's current state"""
    kind = "InvalidStateTransition"
    http_status = 409

    def __init__(self, message: str, current_status: str = None, code: str = "INVALID_STATE_TRANSITION"):
        self.current_status = current_status
        super().__init__(message=message, code=code)


class OrderNotPendingException(InvalidStateTransitionException):
    kind = "OrderNotPending"

    def __init__(self, order_id: str, current_status: str):
        self.order_id = order_id
        super().__init__(
            f"Order {order_id} cannot be paid for. Status: {current_status}",
            current_status=current_status,
            code="ORDER_NOT_PENDING"
        )


class NotCancellableException(InvalidStateTransitionException):
    kind = "NotCancellable"

    def __init__(self, order_id: str, current_status: str):
        self.order_id = order_id
        super().__init__(
            f"Cannot cancel order {order_id}. It is already {current_status}.",
            current_status=current_status,
            code="NOT_CANCELLABLE"
        )


class PriceMismatchException(CommerceException):
    """Declared payment amount does not match the server-side total"""
    kind = "PriceMismatch"
    http_status = 400

    def __init__(self, declared, expected):
        self.declared = declared
        self.expected = expected
        super().__init__(
            message=f"Payment amount {declared} does not match the order total {expected}.",
            code="AMOUNT_MISMATCH"
        )


class InsufficientStockException(CommerceException):
    kind = "InsufficientStock"
    http_status = 409

    def __init__(self, product_name: str, requested: int, available: int = None):
        self.product_name = product_name
        self.requested = requested
        self.available = available
        message = f"Not enough stock for {product_name}."
        if available is not None:
            message = f"{message} Available: {available}, requested: {requested}."
        super().__init__(message=message, code="INSUFFICIENT_STOCK")


class ForbiddenException(CommerceException):
    """Ownership or role check failed"""
    kind = "Forbidden"
    http_status = 403

    def __init__(self, message: str = "You do not have permission to perform this action."):
        super().__init__(message=message, code="FORBIDDEN")


class InternalException(CommerceException):
    """Persistence or unexpected failure; the message never carries internals"""
    kind = "Internal"
    http_status = 500

    def __init__(self, message: str = "An unexpected error occurred. Please try again."):
        super().__init__(message=message, code="INTERNAL_ERROR")
