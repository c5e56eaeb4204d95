"""
Domain exceptions for the loyalty registry.

Every error is an HTTPException subclass so the same object can be raised from
the registry core and rendered by the global exception handler in main.py.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Token (or other resource) was never created (404)."""
    def __init__(self, resource_type: str, identifier, details: dict | None = None):
        message = f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class ValidationError(DomainError):
    """Validation error (400)."""
    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class InvalidRecipientError(ValidationError):
    """Null or zero address given where a holder is required (400)."""
    def __init__(self, recipient: str | None = None, details: dict | None = None):
        super().__init__(
            f"invalid recipient {recipient!r}",
            field="recipient",
            details=details,
        )


class UnauthorizedError(DomainError):
    """Caller lacks the standing the operation needs (403)."""
    def __init__(self, message: str = "Unauthorized", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class ConflictError(DomainError):
    """Resource conflict (409)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, details=details)


class AlreadyBurntError(ConflictError):
    """Token identifier is already burnt (409)."""
    def __init__(self, token_id: int, details: dict | None = None):
        super().__init__(f"Token {token_id} is already burnt", details=details)
        self.token_id = token_id


class TransfersDisabledError(DomainError):
    """Transfer attempted while the transferability gate is closed (403)."""
    def __init__(self, gate_state: str, details: dict | None = None):
        super().__init__(
            f"Transfers are disabled ({gate_state})",
            status_code=status.HTTP_403_FORBIDDEN,
            details={"gate_state": gate_state, **(details or {})},
        )
        self.gate_state = gate_state


class RateLimitError(DomainError):
    """Rate limit exceeded (429)."""
    def __init__(self, message: str = "Rate limit exceeded", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_429_TOO_MANY_REQUESTS, details=details)
