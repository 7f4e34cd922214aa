"""Domain exceptions raised by the service layer.

Each exception carries the HTTP status the API layer answers with and a
stable ``code`` that clients can branch on.
"""


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code = 400
    code = "ServiceError"

    def __init__(self, message: str = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class ValidationError(ServiceError):
    """Malformed or inconsistent input."""
    code = "ValidationError"


class NotFoundError(ServiceError):
    """Referenced entity does not exist."""
    status_code = 404
    code = "NotFound"


class ProductNotFoundError(NotFoundError):
    """Exception raised when the requested product doesn't exist."""
    code = "ProductNotFound"


class CouponNotFoundError(NotFoundError):
    """Coupon code does not resolve to an active coupon."""
    code = "CouponNotFound"


class ConflictError(ServiceError):
    """Uniqueness or state conflict."""
    status_code = 409
    code = "Conflict"


class InsufficientStockError(ServiceError):
    """Exception raised when there's not enough stock to fulfill an order."""
    code = "InsufficientStock"


class CouponExpiredError(ServiceError):
    """Coupon is outside its validity window."""
    code = "Expired"


class UsageLimitExceededError(ServiceError):
    """Coupon has reached its usage limit."""
    code = "UsageLimitExceeded"


class MinimumPurchaseNotMetError(ServiceError):
    """Purchase total is below the coupon minimum."""
    code = "MinimumPurchaseNotMet"


class UnauthorizedError(ServiceError):
    """Missing or invalid credentials."""
    status_code = 401
    code = "Unauthorized"


class ForbiddenError(ServiceError):
    """Caller is not allowed to perform this action."""
    status_code = 403
    code = "Forbidden"
