"""
Typed store errors.

SQLAlchemy wraps every driver failure in generic exception classes; callers
that need to react to a specific constraint (an unknown shift_id on a booking)
would otherwise have to inspect driver-specific codes. The helpers here turn
an IntegrityError into a ConstraintViolationError that names the violated
constraint kind, so the booking transaction can branch on exception type.

Classification order:
1. SQLSTATE from the driver (asyncpg/psycopg, also looked up on __cause__)
2. SQLite error message (local development and tests)
"""

from sqlalchemy.exc import IntegrityError

# PostgreSQL SQLSTATE codes (class 23 - integrity constraint violation)
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"
CHECK_VIOLATION = "23514"

CONSTRAINT_KINDS = {
    NOT_NULL_VIOLATION: "not_null",
    FOREIGN_KEY_VIOLATION: "foreign_key",
    UNIQUE_VIOLATION: "unique",
    CHECK_VIOLATION: "check",
}

SQLITE_MESSAGES = {
    "FOREIGN KEY constraint failed": "foreign_key",
    "UNIQUE constraint failed": "unique",
    "NOT NULL constraint failed": "not_null",
    "CHECK constraint failed": "check",
}


class StoreError(Exception):
    """
    Base exception for relational store failures.

    Attributes:
        message: Error message
        original_error: SQLAlchemy exception that caused the failure
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


class ConstraintViolationError(StoreError):
    """Raised when a write violates a database constraint."""

    def __init__(
        self,
        kind: str,
        detail: str,
        constraint: str | None = None,
        original_error: Exception | None = None,
    ):
        self.kind = kind
        self.detail = detail
        self.constraint = constraint
        super().__init__(f"{kind} constraint violated: {detail}", original_error)


class ForeignKeyViolationError(ConstraintViolationError):
    """Raised when a referenced row (e.g. the shift) does not exist."""

    def __init__(
        self,
        detail: str,
        constraint: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__("foreign_key", detail, constraint, original_error)


def _driver_errors(orig: BaseException | None):
    """Yield the DBAPI error and the chain of native driver errors behind it."""
    seen = set()
    while orig is not None and id(orig) not in seen:
        seen.add(id(orig))
        yield orig
        orig = orig.__cause__


def _sqlstate(orig: BaseException | None) -> str | None:
    for err in _driver_errors(orig):
        code = getattr(err, "sqlstate", None) or getattr(err, "pgcode", None)
        if code:
            return str(code)
    return None


def _constraint_name(orig: BaseException | None) -> str | None:
    for err in _driver_errors(orig):
        name = getattr(err, "constraint_name", None)
        if name:
            return str(name)
        diag = getattr(err, "diag", None)
        if diag is not None and getattr(diag, "constraint_name", None):
            return str(diag.constraint_name)
    return None


def _detail(orig: BaseException | None) -> str:
    for err in _driver_errors(orig):
        detail = getattr(err, "detail", None)
        if detail:
            return str(detail)
        diag = getattr(err, "diag", None)
        if diag is not None and getattr(diag, "message_detail", None):
            return str(diag.message_detail)
    return str(orig) if orig is not None else "constraint violation"


def classify_constraint(exc: IntegrityError) -> str:
    """
    Return the violated constraint kind for an IntegrityError.

    One of "foreign_key", "unique", "not_null", "check" or "unknown".
    """
    code = _sqlstate(exc.orig)
    if code in CONSTRAINT_KINDS:
        return CONSTRAINT_KINDS[code]

    message = str(exc.orig)
    for prefix, kind in SQLITE_MESSAGES.items():
        if prefix in message:
            return kind

    return "unknown"


def translate_integrity_error(exc: IntegrityError) -> ConstraintViolationError:
    """Build the typed error for a store IntegrityError."""
    kind = classify_constraint(exc)
    detail = _detail(exc.orig)
    constraint = _constraint_name(exc.orig)

    if kind == "foreign_key":
        return ForeignKeyViolationError(detail, constraint=constraint, original_error=exc)
    return ConstraintViolationError(kind, detail, constraint=constraint, original_error=exc)
