"""Error taxonomy shared by every Loadboard component."""

from typing import Optional


class ErrorCode:
    VALIDATION_ERROR  = "VALIDATION_ERROR"
    NOT_FOUND         = "NOT_FOUND"
    DUPLICATE_KEY     = "DUPLICATE_KEY"
    CONFLICT          = "CONFLICT"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    AUTH_ERROR        = "AUTH_ERROR"
    FORBIDDEN         = "FORBIDDEN"


class LoadboardError(Exception):
    """
    Base exception for all Loadboard errors.

    Carries a machine-readable code and a human-readable message so that
    outer surfaces (API, CLI) can render it without inspecting the type.
    """

    code = "LOADBOARD_ERROR"

    def __init__(self, message: str, details: Optional[list] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "error": {"code": self.code, "details": self.details},
        }


class ValidationError(LoadboardError):
    """Malformed or missing input. Caller-fixable, never retried."""

    code = ErrorCode.VALIDATION_ERROR


class NotFound(LoadboardError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str = "Resource", key: Optional[str] = None):
        message = f"{resource} not found" if key is None else f"{resource} '{key}' not found"
        super().__init__(message)
        self.resource = resource
        self.key = key


class DuplicateKey(LoadboardError):
    code = ErrorCode.DUPLICATE_KEY


class Conflict(LoadboardError):
    """A conditional write matched no row because the state moved underneath."""

    code = ErrorCode.CONFLICT


class PersistenceError(LoadboardError):
    """Store unreachable or write rejected. Propagated, not retried."""

    code = ErrorCode.PERSISTENCE_ERROR


class AuthError(LoadboardError):
    code = ErrorCode.AUTH_ERROR


class Forbidden(AuthError):
    """Authenticated caller lacks the role or ownership for the action."""

    code = ErrorCode.FORBIDDEN


def validation_error_from(exc, message: str = "Invalid input") -> ValidationError:
    """Convert a pydantic ValidationError into ours, one detail per field."""
    details = []
    for error in exc.errors():
        loc = error.get("loc", ())
        details.append({
            "field": ".".join(str(part) for part in loc) if loc else "unknown",
            "message": error.get("msg", "Invalid value"),
        })
    fields = ", ".join(d["field"] for d in details)
    return ValidationError(f"{message}: {fields}" if fields else message, details=details)
