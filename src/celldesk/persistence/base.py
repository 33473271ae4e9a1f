"""
Abstract repository interface for workbook storage backends.

The WorkbookRepository protocol defines the contract every storage backend
must satisfy. Concrete implementations include SheetsWorkbookRepository
(Google Sheets via gspread) and InMemoryWorkbookRepository (process-local,
no credentials required).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from celldesk.grid.model import Sheet, Workbook

DEFAULT_TITLE = "Untitled spreadsheet"


@dataclass(frozen=True)
class Session:
    """An authenticated storage session.

    Attributes:
        account: Identity the backend acts as (e-mail or user id)
        expires_at: When the current credentials expire, if known
    """
    account: str
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class WorkbookSummary:
    """One entry of a workbook listing."""
    id: str
    title: str
    created_at: Optional[datetime] = None


class WorkbookRepository(Protocol):
    """Protocol for workbook storage backends.

    All methods raise PersistenceError (or a subclass) on failure; they never
    return partial results.
    """

    def get_session(self) -> Session:
        """Return the current session.

        Raises:
            NotAuthenticatedError: If no valid session is available
        """
        ...

    def list_workbooks(self) -> list[WorkbookSummary]:
        """List the account's workbooks, newest first, skipping deleted ones."""
        ...

    def create_workbook(self, title: str = DEFAULT_TITLE) -> Workbook:
        """Create a workbook holding a single empty sheet numbered 1."""
        ...

    def fetch_workbook(self, workbook_id: str) -> Workbook:
        """Load a workbook with all of its sheets and cell data.

        Raises:
            WorkbookNotFoundError: If the workbook is missing or soft-deleted
        """
        ...

    def create_sheet(self, workbook_id: str, sheet_number: int) -> Sheet:
        """Create an empty sheet with the given number."""
        ...

    def save_sheet(self, workbook_id: str, sheet: Sheet, title: str) -> None:
        """Persist one sheet's cells and the workbook title."""
        ...

    def rename_workbook(self, workbook_id: str, title: str) -> None:
        """Change the workbook title without touching any sheet."""
        ...

    def delete_workbook(self, workbook_id: str) -> None:
        """Soft-delete a workbook; it can no longer be fetched afterwards."""
        ...
