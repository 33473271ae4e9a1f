"""
Workbook editing session.

A WorkbookSession owns everything needed to edit one workbook: the cell
store, the formula engine and bridge, the selection, fill and edit engines,
the input adapter and, optionally, a repository to save to.

Usage::

    repo = InMemoryWorkbookRepository()
    session = WorkbookSession.create(repo, "Budget")
    session.input.double_click(Coordinate(0, 0))
    session.editor.set_text("=SUM(1, 2)")
    session.input.key_down(KeyEvent("Enter"))
    session.save()
"""

from __future__ import annotations

import copy
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable

import pandas as pd

from celldesk.config import EditorSettings, get_settings
from celldesk.editor.edit_machine import EditStateMachine
from celldesk.editor.fill import FillEngine
from celldesk.editor.input_adapter import InputAdapter
from celldesk.editor.selection import CellMark, SelectionEngine
from celldesk.engine.base import FormulaEngine
from celldesk.engine.bridge import FormulaBridge
from celldesk.engine.formualizer_engine import FormualizerEngine
from celldesk.exceptions import PersistenceError
from celldesk.grid.address import Coordinate
from celldesk.grid.model import Cell, Sheet, Workbook
from celldesk.grid.store import CellStore
from celldesk.persistence.base import DEFAULT_TITLE, WorkbookRepository
from celldesk.utils.debounce import Debouncer
from celldesk.utils.frames import frame_to_entries, sheet_to_frame

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


def _log_notification(message: str) -> None:
    logger.warning("%s", message)


class WorkbookSession:
    """Editing session for a single workbook.

    Attributes:
        workbook: The workbook being edited
        active_sheet: Sheet that receives edits
        repository: Storage backend, or None for an unsaved local session
        settings: Grid and timing settings
        store, engine, bridge: Cell storage and formula evaluation
        selection, fill, editor: Interaction engines
        input: Adapter routing UI events into the engines
        dirty: Whether any sheet has changes not yet saved
        last_saved_at: Time of the last successful save (UTC)
    """

    def __init__(
        self,
        workbook: Workbook,
        repository: WorkbookRepository | None = None,
        engine: FormulaEngine | None = None,
        settings: EditorSettings | None = None,
        notify: Notifier | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not workbook.sheets:
            raise ValueError("A workbook needs at least one sheet")

        self.settings = settings or get_settings()
        self.workbook = workbook
        self.repository = repository
        self.notify = notify or _log_notification

        bounds = self.settings.bounds
        self.store = CellStore(bounds)
        self.engine = engine if engine is not None else FormualizerEngine()
        self.bridge = FormulaBridge(
            self.engine, self.store, self.settings.error_flash_seconds, clock=clock
        )
        self.selection = SelectionEngine(bounds)
        self.fill = FillEngine(self.bridge)
        self.editor = EditStateMachine(self.bridge, self.selection)
        self.input = InputAdapter(self)

        for sheet in workbook.sheets:
            self.bridge.load_sheet(sheet)
        self.active_sheet = workbook.sheets[0]

        self._dirty_sheets: set[str] = set()
        self.last_saved_at: datetime | None = None
        self._title_debouncer = Debouncer(self.settings.title_debounce_seconds, self._persist_title)
        self.store.subscribe(self._on_cell_changed)

    @classmethod
    def load(cls, repository: WorkbookRepository, workbook_id: str, **kwargs) -> WorkbookSession:
        """Open a stored workbook.

        Raises:
            NotAuthenticatedError: If the repository has no valid session
            WorkbookNotFoundError: If the workbook is missing or deleted
        """
        repository.get_session()
        workbook = repository.fetch_workbook(workbook_id)
        logger.info("Loaded workbook %s with %d sheet(s)", workbook.id, len(workbook.sheets))
        return cls(workbook, repository=repository, **kwargs)

    @classmethod
    def create(cls, repository: WorkbookRepository, title: str = DEFAULT_TITLE, **kwargs) -> WorkbookSession:
        repository.get_session()
        workbook = repository.create_workbook(title)
        return cls(workbook, repository=repository, **kwargs)

    @property
    def dirty(self) -> bool:
        return bool(self._dirty_sheets)

    def is_sheet_dirty(self, sheet_id: str) -> bool:
        return sheet_id in self._dirty_sheets

    @property
    def saved(self) -> bool:
        """Whether the "saved" indicator should show."""
        return self.last_saved_at is not None and not self.dirty

    def cell(self, coord: Coordinate) -> Cell:
        return self.store.get(self.active_sheet, coord)

    def is_errored(self, coord: Coordinate) -> bool:
        return self.bridge.is_errored(self.active_sheet, coord)

    def cell_marks(self) -> dict[Coordinate, CellMark]:
        """Visual marks for every highlighted cell of the active sheet."""
        marks = self.selection.marks()
        for coord in self.fill.preview_cells:
            marks[coord] = marks.get(coord, CellMark.NONE) | CellMark.FILL_PREVIEW
        return marks

    def add_sheet(self) -> Sheet:
        """Create the next sheet (highest number + 1) and switch to it."""
        self.editor.commit()
        number = self.workbook.next_sheet_number()
        if self.repository is not None:
            sheet = self.repository.create_sheet(self.workbook.id, number)
        else:
            sheet = Sheet(id=uuid.uuid4().hex, sheet_number=number)
        self.workbook.add_sheet(sheet)
        self.bridge.register_sheet(sheet)
        logger.info("Added %s to workbook %s", sheet.title, self.workbook.id)
        return self.switch_sheet(sheet.id)

    def switch_sheet(self, sheet_id: str) -> Sheet:
        """Make another sheet active.

        Any edit in progress is committed to the sheet it belongs to, and
        selection and fill state start over on the new sheet.

        Raises:
            KeyError: If the workbook has no sheet with that id
        """
        sheet = self.workbook.sheet_by_id(sheet_id)
        self.editor.commit()
        self.fill.cancel()
        self.input.dragging = False
        self.selection.reset()
        self.active_sheet = sheet
        return sheet

    def clear_selection(self) -> int:
        """Empty every selected cell, keeping styles.

        Returns:
            Number of cells cleared
        """
        sheet = self.active_sheet
        cells = sorted(self.selection.selected_cells())
        for coord in cells:
            self.bridge.apply(sheet, coord, "")
        self.bridge.recompute_dependents(sheet)
        return len(cells)

    def set_title(self, title: str) -> None:
        """Rename the workbook.

        The new title applies at once; storing it waits until typing pauses
        and only renames the stored workbook, leaving sheet contents and the
        saved state alone.
        """
        self.workbook.title = title
        if self.repository is not None:
            self._title_debouncer.call(self.workbook.id, title)

    def flush_title(self) -> bool:
        """Store a pending title change now rather than after the delay."""
        return self._title_debouncer.flush()

    def save(self) -> bool:
        """Save the active sheet and the workbook title.

        The sheet is snapshotted when this is called; edits made afterwards
        are not part of this save. Only the active sheet stops being dirty;
        unsaved edits on other sheets keep the session unsaved. Failures are
        reported through ``notify`` and in-memory edits are kept.

        Returns:
            True if the repository accepted the save
        """
        self._title_debouncer.cancel()

        if self.repository is None:
            self.notify("Nothing to save to: this workbook has no storage")
            return False

        snapshot = copy.deepcopy(self.active_sheet)
        title = self.workbook.title
        try:
            self.repository.save_sheet(self.workbook.id, snapshot, title)
        except PersistenceError as e:
            logger.error("Saving workbook %s failed: %s", self.workbook.id, e)
            self.notify(f"Could not save changes: {e}")
            return False

        self._dirty_sheets.discard(snapshot.id)
        self.last_saved_at = datetime.now(timezone.utc)
        logger.info("Saved %s of workbook %s", snapshot.title, self.workbook.id)
        return True

    def delete(self) -> None:
        """Soft-delete the workbook in the repository."""
        if self.repository is None:
            raise PersistenceError("This workbook has no storage")
        self._title_debouncer.cancel()
        self.repository.delete_workbook(self.workbook.id)

    def import_frame(
        self,
        frame: pd.DataFrame,
        origin: Coordinate = Coordinate(0, 0),
        include_header: bool = False,
    ) -> int:
        """Write a DataFrame into the active sheet as ordinary edits.

        Values falling outside the grid are dropped.

        Returns:
            Number of cells written
        """
        sheet = self.active_sheet
        written = 0
        for coord, text in frame_to_entries(frame, origin, include_header):
            if not self.store.bounds.contains(coord):
                continue
            self.bridge.apply(sheet, coord, text)
            written += 1
        self.bridge.recompute_dependents(sheet)
        return written

    def export_frame(self, field: str = "computed") -> pd.DataFrame:
        rows, cols = self.store.bounds
        return sheet_to_frame(self.active_sheet, rows, cols, field)

    def close(self) -> None:
        """Flush a pending title save and commit any open edit."""
        self.editor.commit()
        self.flush_title()

    def _persist_title(self, workbook_id: str, title: str) -> None:
        # Runs on the debouncer's timer thread unless flushed; it touches
        # nothing but the repository.
        try:
            self.repository.rename_workbook(workbook_id, title)
        except PersistenceError as e:
            logger.error("Renaming workbook %s failed: %s", workbook_id, e)
            self.notify(f"Could not save the title: {e}")
            return
        logger.info("Renamed workbook %s to %r", workbook_id, title)

    def _on_cell_changed(self, sheet: Sheet, coord: Coordinate, cell: Cell) -> None:
        self._dirty_sheets.add(sheet.id)
