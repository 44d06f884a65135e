# campuslink/domain/errors.py
"""
Bledy domenowe.
Kazdy blad ma status HTTP i kod maszynowy, handler w main.py zamienia je na JSON.
"""


class DomainError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.__class__.__doc__ or self.code
        super().__init__(self.detail)


class AuthenticationRequired(DomainError):
    """Authentication required"""
    status_code = 401
    code = "authentication_required"


class InvalidInput(DomainError, ValueError):
    """Invalid input"""
    status_code = 400
    code = "invalid_input"


class InvalidPhone(InvalidInput):
    """Invalid phone number"""
    code = "invalid_phone"


class InvalidCode(InvalidInput):
    """Verification code must be 6 digits"""
    code = "invalid_code"


class InvalidQuantity(InvalidInput):
    """Quantity must be at least 1"""
    code = "invalid_quantity"


class PermissionDenied(DomainError, PermissionError):
    """Access denied"""
    status_code = 403
    code = "permission_denied"


class NotFound(DomainError):
    """Not found"""
    status_code = 404
    code = "not_found"


class IllegalTransition(DomainError):
    """Status transition not allowed"""
    status_code = 409
    code = "illegal_transition"


class Conflict(DomainError):
    """Concurrent modification"""
    status_code = 409
    code = "conflict"


class RateLimited(DomainError):
    """Too many verification requests, try again later"""
    status_code = 429
    code = "rate_limited"


class EmptySelection(DomainError):
    """No items selected for this order"""
    status_code = 422
    code = "empty_selection"


class IncompleteContactInfo(DomainError):
    """First name, last name, delivery location and phone are required"""
    status_code = 422
    code = "incomplete_contact_info"


class NoContactChannel(DomainError):
    """Merchant has no WhatsApp contact configured"""
    status_code = 422
    code = "no_contact_channel"


class ExternalUnavailable(DomainError):
    """External messaging service unavailable"""
    status_code = 503
    code = "external_unavailable"


class OutOfStock(InvalidInput):
    """Product out of stock"""
    code = "out_of_stock"
