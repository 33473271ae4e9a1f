"""
Exception classes for celldesk.

These exceptions are used throughout the celldesk package to signal error
conditions during addressing, formula evaluation, and persistence. Errors that
belong to a single cell (evaluation failures) are absorbed by the formula
bridge and surfaced as cell-level signals; only addressing and persistence
errors propagate to callers.
"""


class AddressError(ValueError):
    """Raised when a cell identifier or coordinate is invalid.

    This error is fatal to the calling operation. Malformed identifiers are
    never silently coerced. Examples:
        - Lowercase or mixed-case identifiers ("a1")
        - Missing row or column part ("A", "12")
        - Row numbers with leading zeros or a zero row ("A01", "A0")
        - Coordinates outside the configured grid
    """
    pass


class FormulaEvaluationError(Exception):
    """Raised when the formula engine rejects or fails to evaluate a formula.

    The formula bridge catches this error and records the cell's computed
    value as the ``#ERROR!`` sentinel, flagging the cell as errored for a
    short period. The cell's value and formula are left untouched.
    """
    pass


class PersistenceError(Exception):
    """Raised when a call to the workbook repository fails.

    This error wraps exceptions from the storage backend (via gspread) and
    provides context about which operation failed. Common causes include:
        - Rate limiting (HTTP 429)
        - Network connectivity issues
        - Invalid spreadsheet IDs or permission errors
    """
    pass


class NotAuthenticatedError(PersistenceError):
    """Raised when no valid session is available for the repository.

    The host shell is expected to redirect the user to sign in.
    """
    pass


class WorkbookNotFoundError(PersistenceError):
    """Raised when a workbook does not exist or has been soft-deleted."""
    pass
