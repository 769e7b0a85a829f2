from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    STORAGE = "storage"


class ServiceError(RuntimeError):
    """Base class for service-layer errors."""
    kind: ErrorKind = ErrorKind.STORAGE
    retryable: bool = False

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.kind.value.upper()

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "code": self.code, "message": self.message, "retryable": self.retryable}


class NotFoundError(ServiceError):
    """A recipe, product or order does not exist."""
    kind = ErrorKind.NOT_FOUND


class TransientError(ServiceError):
    """Simulated network failure from an external collaborator; safe to retry."""
    kind = ErrorKind.TRANSIENT
    retryable = True


class ValidationError(ServiceError):
    """Malformed input: non-positive servings, negative quantity, zero pack size."""
    kind = ErrorKind.VALIDATION


class BusinessRuleError(ServiceError):
    """Request is well-formed but not allowed in the current state."""
    kind = ErrorKind.BUSINESS_RULE


class RepoError(ServiceError):
    """Errors from repositories (I/O, parse, schema)."""
    kind = ErrorKind.STORAGE
