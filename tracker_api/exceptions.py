"""
Exception hierarchy
Domain errors raised by the store, routers and services. Each one carries the
HTTP status the API answers with; the handlers in main.py turn them into
``{"error": "<message>"}`` bodies.
"""


class DomainException(Exception):
    """Base exception for all domain errors"""
    status_code = 400

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class AuthenticationException(DomainException):
    """Authentication failed"""
    status_code = 401


class AuthorizationException(DomainException):
    """User not authorized for this operation"""
    status_code = 403


class ValidationException(DomainException):
    """Data validation failed"""
    status_code = 400


class ResourceNotFoundException(DomainException):
    """Requested resource not found (or not owned by the caller)"""
    status_code = 404

    def __init__(self, resource_type: str):
        self.resource_type = resource_type
        super().__init__(f"{resource_type} not found")


class DuplicateResourceException(DomainException):
    """Resource already exists"""
    status_code = 400


class RateLimitException(DomainException):
    """Rate limit exceeded"""
    status_code = 429


class MailDeliveryException(DomainException):
    """Outbound email could not be sent"""
    status_code = 502
