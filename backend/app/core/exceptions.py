"""Custom exceptions for the application."""

from typing import Any, Dict, Optional


class ApplicationError(Exception):
    """Base exception for all application errors."""

    code = "APPLICATION_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Payload used as the HTTP error detail."""
        payload: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.field = field
        if field:
            self.details["field"] = field


class NotFoundError(ApplicationError):
    """Raised when a requested resource is not found."""

    code = "NOT_FOUND"
    status_code = 404


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    code = "NOT_AUTHENTICATED"
    status_code = 401


class AuthorizationError(ApplicationError):
    """Raised when the caller lacks access to the company owning a resource."""

    code = "NOT_AUTHORIZED"
    status_code = 403


class ConflictError(ApplicationError):
    """Raised when there's a conflict with existing data."""

    code = "CONFLICT"
    status_code = 409


class PersistenceError(ApplicationError):
    """Raised when a storage operation or transaction fails.

    The original driver message is kept in ``details`` so operators can see
    what went wrong.
    """

    code = "PERSISTENCE_ERROR"
    status_code = 500

    def __init__(self, message: str, operation: str, original: Optional[BaseException] = None):
        details: Dict[str, Any] = {"operation": operation}
        if original is not None:
            details["original_error"] = str(original)
        super().__init__(message, details)
        self.operation = operation


class BusinessLogicError(ApplicationError):
    """Raised when business logic constraints are violated."""

    code = "DOMAIN_INVARIANT_VIOLATION"
    status_code = 500


class EmptyAssessmentError(BusinessLogicError):
    """Raised when an assessment is scored or finalized without any answers."""

    def __init__(self, assessment_id: Optional[str] = None):
        details = {"assessment_id": assessment_id} if assessment_id else None
        super().__init__("No answers to finalize", details)
