"""
Custom exception classes for the Persona mock verification engine.
"""
from typing import Any, Dict, Optional


class PersonaMockException(Exception):
    """Base exception for the verification engine."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(PersonaMockException):
    """Raised when a referenced inquiry, verification or customer does not exist."""

    def __init__(self, resource_type: str, resource_id: str, **kwargs):
        message = f"{resource_type.capitalize()} {resource_id} not found"
        details = {"resource_type": resource_type, "resource_id": resource_id}
        details.update(kwargs)
        super().__init__(message, "NOT_FOUND", details)


class InvalidInputError(PersonaMockException):
    """Raised when required evidence is empty or missing."""

    def __init__(self, message: str, field: str = None, **kwargs):
        details = {"field": field} if field else {}
        details.update(kwargs)
        super().__init__(message, "INVALID_INPUT", details)


class InvalidStateError(PersonaMockException):
    """Raised when an inquiry's status forbids the requested action."""

    def __init__(self, current_status: str, action: str, **kwargs):
        message = f"Cannot submit {action} for {current_status} inquiry"
        details = {"current_status": current_status, "action": action}
        details.update(kwargs)
        super().__init__(message, "INVALID_STATE", details)


class BusinessLogicError(PersonaMockException):
    """Raised when business logic rules are violated."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, "BUSINESS_LOGIC_ERROR", kwargs)


class ServiceError(PersonaMockException):
    """Raised when an orchestration step fails for an unexpected reason."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, "SERVICE_ERROR", kwargs)
