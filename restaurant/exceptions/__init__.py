"""Custom exceptions for the restaurant application."""


class RestaurantError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class ValidationError(RestaurantError):
    """Raised for malformed input (missing fields, wrong types, negative stock)."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class EmptyCartError(ValidationError):
    """Raised when an order is placed with nothing in the cart."""
    def __init__(self, message="Cart is empty"):
        super().__init__(message)


class NotFoundError(RestaurantError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class OrderBackendError(RestaurantError):
    """Raised when the order backend is unreachable or answers with an error."""
    def __init__(self, message="Order backend request failed", upstream_status=None):
        payload = {'upstream_status': upstream_status} if upstream_status else None
        super().__init__(message, 502, payload)
        self.upstream_status = upstream_status
