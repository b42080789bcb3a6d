"""
Error taxonomy for rundown operations.

Every rejection carries a stable machine-readable ``kind`` and a human-readable
message. Use cases raise these; the unit of work rolls back the transaction and
the HTTP and CLI layers translate them for the caller. None of them is fatal.
"""


class VidpodError(Exception):
    """Base exception for all VidPOD errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class NotFoundError(VidpodError):
    """Raised when an entity is absent or invisible to the caller."""

    kind = "not_found"


class AccessDeniedError(VidpodError):
    """Raised when the entity exists but the caller lacks the required relationship."""

    kind = "access_denied"


class UnauthenticatedError(VidpodError):
    """Raised when a bearer credential cannot be resolved to an actor."""

    kind = "unauthenticated"


class InvalidArgumentError(VidpodError):
    """Raised for malformed input (bad role string, missing title, ...)."""

    kind = "invalid_argument"


class ConflictError(VidpodError):
    """Raised for duplicate names, duplicate story attachments and pinned segment deletes."""

    kind = "conflict"


class LimitReachedError(VidpodError):
    """Raised when the talent roster is full."""

    kind = "limit_reached"


class InvalidReorderSetError(VidpodError):
    """Raised when a supplied ordering is not a permutation of the current siblings."""

    kind = "invalid_reorder_set"

    def __init__(self, message: str, missing: list[str] | None = None, unexpected: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []
        self.unexpected = unexpected or []

    def __str__(self) -> str:
        details = []
        if self.missing:
            details.append(f"missing: {', '.join(self.missing)}")
        if self.unexpected:
            details.append(f"unexpected: {', '.join(self.unexpected)}")
        if details:
            return f"{self.message} ({'; '.join(details)})"
        return self.message
