"""
Error taxonomy for the back-office core.

Services raise these exceptions; ``main.py`` renders them as JSON responses
using ``code`` and ``status_code``. Catch ``BackofficeError`` to handle every
failure the core reports on purpose. Store errors (SQLAlchemy / driver
exceptions) are not wrapped here: they propagate untouched and the HTTP layer
reports connectivity failures as ``StoreUnavailable``.
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError


class BackofficeError(Exception):
    """
    Base exception for all errors raised by the core.

    Example
    -------
    >>> try:
    ...     await stock_ledger.apply_movement(db, part_id, movement)
    ... except BackofficeError as e:
    ...     log(e.code, e.message)
    """

    #: Stable identifier for programmatic handling.
    code: str = "backoffice_error"
    #: HTTP status the presentation layer answers with.
    status_code: int = 500

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "An unspecified back-office error occurred."
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


class NotFound(BackofficeError):
    """A warehouse entry, vehicle, part or campaign does not exist."""

    code = "not_found"
    status_code = 404


class InsufficientStock(NotFound):
    """
    Raised when an outgoing movement asks for more than is on hand.

    It is a ``NotFound`` specialization: the stock row matching the request
    was not updated. Callers tell the two apart by type (or ``code``). This is
    a normal outcome, never a transient one, and must not be retried.
    """

    code = "insufficient_stock"


class Conflict(BackofficeError):
    """A uniqueness rule rejected the write (e.g. a second entry for a part)."""

    code = "conflict"
    status_code = 409


class ValidationFailure(BackofficeError):
    """Input was rejected before any store interaction."""

    code = "validation_failed"
    status_code = 422


class StoreUnavailable(BackofficeError):
    """The backing store could not be reached."""

    code = "store_unavailable"
    status_code = 503


_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


def integrity_violation(exc: IntegrityError) -> Optional[str]:
    """Classify an IntegrityError as "unique", "foreign_key" or None."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == _UNIQUE_VIOLATION:
        return "unique"
    if sqlstate == _FOREIGN_KEY_VIOLATION:
        return "foreign_key"
    return None
