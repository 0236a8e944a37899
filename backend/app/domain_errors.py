"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Use-case level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class _TaxonomyError(DomainError):
    default_code = "DOMAIN_ERROR"
    status = 400

    def __init__(self, message: str, *, code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            code=code or self.default_code,
            http_status=self.status,
            message=message,
            details=details,
        )


class NotFoundError(_TaxonomyError):
    """Entity absent."""

    default_code = "NOT_FOUND"
    status = 404


class ConflictError(_TaxonomyError):
    """Uniqueness violation."""

    default_code = "CONFLICT"
    status = 409


class InvalidInputError(_TaxonomyError):
    """Policy or shape failure; the message is shown to the caller as-is."""

    default_code = "INVALID_INPUT"
    status = 400


class InvalidRoleError(_TaxonomyError):
    default_code = "INVALID_ROLE"
    status = 400


class UnauthenticatedError(_TaxonomyError):
    """Missing or malformed credential."""

    default_code = "UNAUTHENTICATED"
    status = 401


class InvalidTokenError(_TaxonomyError):
    """Bad signature, wrong algorithm, garbled claims or expired token."""

    default_code = "INVALID_TOKEN"
    status = 401


class ForbiddenError(_TaxonomyError):
    default_code = "FORBIDDEN"
    status = 403


class StorageError(_TaxonomyError):
    """Opaque persistence failure, wrapped with the operation that failed."""

    default_code = "STORAGE_ERROR"
    status = 500


class StaleWriteError(_TaxonomyError):
    """Row changed by someone else between read and write."""

    default_code = "STALE_WRITE"
    status = 409
