"""
In-process workbook repository.

Keeps workbooks in a dictionary. Saved sheets are stored as serialized
snapshots, so later in-memory edits never leak into what was persisted.
Useful for local sessions and tests; no credentials are required.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone

from celldesk.exceptions import (
    NotAuthenticatedError,
    PersistenceError,
    WorkbookNotFoundError,
)
from celldesk.grid.model import Sheet, Workbook
from celldesk.persistence.base import DEFAULT_TITLE, Session, WorkbookSummary
from celldesk.utils.serialization import sheet_from_dict, sheet_to_dict


class InMemoryWorkbookRepository:
    """Dictionary-backed WorkbookRepository.

    Usage::

        repo = InMemoryWorkbookRepository()
        wb = repo.create_workbook("Budget")
        repo.save_sheet(wb.id, wb.sheets[0], "Budget 2024")
        repo.fetch_workbook(wb.id).title  # "Budget 2024"
    """

    def __init__(self, account: str | None = "local") -> None:
        self.account = account
        self._workbooks: dict[str, Workbook] = {}
        self._created_at: dict[str, datetime] = {}
        self._deleted_at: dict[str, datetime] = {}

    def get_session(self) -> Session:
        if not self.account:
            raise NotAuthenticatedError("No local account configured")
        return Session(account=self.account)

    def list_workbooks(self) -> list[WorkbookSummary]:
        # Insertion order is creation order.
        return [
            WorkbookSummary(id=wid, title=wb.title, created_at=self._created_at[wid])
            for wid, wb in reversed(self._workbooks.items())
            if wid not in self._deleted_at
        ]

    def create_workbook(self, title: str = DEFAULT_TITLE) -> Workbook:
        workbook = Workbook(id=uuid.uuid4().hex, title=title)
        workbook.add_sheet(Sheet(id=uuid.uuid4().hex, sheet_number=1))
        self._workbooks[workbook.id] = workbook
        self._created_at[workbook.id] = datetime.now(timezone.utc)
        return copy.deepcopy(workbook)

    def fetch_workbook(self, workbook_id: str) -> Workbook:
        return copy.deepcopy(self._get(workbook_id))

    def create_sheet(self, workbook_id: str, sheet_number: int) -> Sheet:
        workbook = self._get(workbook_id)
        try:
            sheet = workbook.add_sheet(Sheet(id=uuid.uuid4().hex, sheet_number=sheet_number))
        except ValueError as e:
            raise PersistenceError(f"Cannot create sheet {sheet_number}: {e}") from e
        return copy.deepcopy(sheet)

    def save_sheet(self, workbook_id: str, sheet: Sheet, title: str) -> None:
        workbook = self._get(workbook_id)
        try:
            stored = workbook.sheet_by_id(sheet.id)
        except KeyError as e:
            raise PersistenceError(f"Workbook {workbook_id!r} has no sheet {sheet.id!r}") from e
        stored.data = sheet_from_dict(sheet_to_dict(sheet))
        stored.updated_at = sheet.updated_at
        if title:
            workbook.title = title

    def rename_workbook(self, workbook_id: str, title: str) -> None:
        self._get(workbook_id).title = title

    def delete_workbook(self, workbook_id: str) -> None:
        self._get(workbook_id)
        self._deleted_at[workbook_id] = datetime.now(timezone.utc)

    def _get(self, workbook_id: str) -> Workbook:
        if workbook_id in self._deleted_at or workbook_id not in self._workbooks:
            raise WorkbookNotFoundError(f"Workbook {workbook_id!r} not found")
        return self._workbooks[workbook_id]
