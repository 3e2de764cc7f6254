"""Error types shared by the HTTP layer of every plugin."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping


@dataclass(slots=True)
class AppError(Exception):
    """Base application error with a JSON friendly payload."""

    message: str
    code: str = "error"
    status_code: int = 400
    details: Mapping[str, Any] | None = None

    def to_dict(self) -> Mapping[str, Any]:
        payload: MutableMapping[str, Any] = {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details or {}),
        }
        return payload


@dataclass(slots=True)
class ValidationAppError(AppError):
    """Malformed request payload or script input."""

    code: str = "validation_error"
    status_code: int = 400


@dataclass(slots=True)
class NotFoundAppError(AppError):
    """Unknown operation name or object id."""

    code: str = "not_found"
    status_code: int = 404


@dataclass(slots=True)
class OperationAppError(AppError):
    """A well-formed request whose numeric operation did not succeed.

    ``details["status"]`` carries the failure kind reported by the
    linear-algebra library (``Singular``, ``NotIn3D`` ...).
    """

    code: str = "operation_failed"
    status_code: int = 400

    @classmethod
    def from_status(cls, status: str, message: str, *, prefix: str) -> "OperationAppError":
        return cls(message=message, code=f"{prefix}.{status}", details={"status": status})


@dataclass(slots=True)
class InternalAppError(AppError):
    """Generic internal error wrapper to avoid leaking implementation details."""

    code: str = "internal_error"
    status_code: int = 500


def ensure_app_error(error: AppError | Exception, *, fallback_code: str) -> AppError:
    """Coerce arbitrary exceptions into :class:`AppError` instances."""

    if isinstance(error, AppError):
        return error
    return InternalAppError(code=fallback_code, message=str(error))


__all__ = [
    "AppError",
    "ValidationAppError",
    "NotFoundAppError",
    "OperationAppError",
    "InternalAppError",
    "ensure_app_error",
]
