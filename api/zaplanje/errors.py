"""Content store error taxonomy and reader-facing messages."""

from __future__ import annotations

GENERIC_ERROR_MESSAGE = "Došlo je do greške. Molimo pokušajte ponovo."

# Substring of the raw store message -> message shown to readers.
_KNOWN_ERRORS: tuple[tuple[str, str], ...] = (
    ("duplicate key", "Ovaj sadržaj već postoji."),
    ("foreign key", "Povezani sadržaj ne postoji."),
    ("not found", "Sadržaj nije pronađen."),
    ("permission denied", "Nemate dozvolu za ovu akciju."),
)


class StoreError(Exception):
    """Failure reported by the content store."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StoreError):
    status_code = 404


class ConstraintViolation(StoreError):
    """Unique, foreign-key or check constraint rejected the write."""

    status_code = 409


class PermissionDenied(StoreError):
    status_code = 403


def describe_error(error: BaseException | str | None) -> str:
    """Turn a store or transport failure into one human-readable message."""
    if error is None:
        return GENERIC_ERROR_MESSAGE
    message = error if isinstance(error, str) else getattr(error, "message", None) or str(error)
    if not message:
        return GENERIC_ERROR_MESSAGE
    lowered = message.lower()
    for needle, friendly in _KNOWN_ERRORS:
        if needle in lowered:
            return friendly
    return message
