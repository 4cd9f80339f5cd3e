"""Error taxonomy shared by every casework component."""

from __future__ import annotations


class CaseworkError(RuntimeError):
    """Base error for casework operations; each one is scoped to a single request."""

    kind = "error"
    retryable = False


class ValidationError(CaseworkError):
    """Raised for malformed input such as an empty reason or message body."""

    kind = "validation_error"


class PermissionDenied(CaseworkError):
    """Raised when the caller's role does not allow the operation."""

    kind = "permission_denied"


class InvalidTransition(CaseworkError):
    """Raised when an entity is not in a state that allows the requested change."""

    kind = "invalid_transition"


class Conflict(CaseworkError):
    """Raised when a row lock could not be acquired in time; callers may retry."""

    kind = "conflict"
    retryable = True


class NotFound(CaseworkError):
    """Raised when a case, listing, user or setting does not exist."""

    kind = "not_found"


def require_text(value: str | None, field: str) -> str:
    """Return ``value`` stripped, raising :class:`ValidationError` if it is blank."""

    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} must not be empty")
    return cleaned
