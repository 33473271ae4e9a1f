"""
Cell edit state machine.

States:
- VIEWING: no cell is being edited
- EDITING: one cell holds editable text
- EDITING_WITH_AUTOCOMPLETE: editing a formula with the function candidate
  list open

Only one cell is ever in an editing state. Starting an edit on another cell
commits the current one first. Committing hands the final text to the
formula bridge and recomputes dependents.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence

from celldesk.editor.autocomplete import (
    DEFAULT_FUNCTIONS,
    CandidateList,
    completion_for,
    matching_functions,
)
from celldesk.editor.keys import Key, KeyEvent
from celldesk.editor.selection import SelectionEngine
from celldesk.engine.bridge import FormulaBridge
from celldesk.grid.address import Coordinate
from celldesk.grid.model import Cell, Sheet

logger = logging.getLogger(__name__)


class EditState(Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    EDITING_WITH_AUTOCOMPLETE = "editing_with_autocomplete"


class EditStateMachine:
    """Per-cell edit mode with a formula-autocomplete sub-state.

    Attributes:
        state: Current EditState
        sheet: Sheet of the cell being edited
        coord: Cell being edited, or None when viewing
        text: Current editor text
        caret: Caret offset into text
        candidates: Autocomplete candidates (empty unless autocompleting)
    """

    def __init__(
        self,
        bridge: FormulaBridge,
        selection: SelectionEngine,
        functions: Sequence[str] = DEFAULT_FUNCTIONS,
    ) -> None:
        self.bridge = bridge
        self.selection = selection
        self.functions = tuple(functions)
        self.state = EditState.VIEWING
        self.sheet: Sheet | None = None
        self.coord: Coordinate | None = None
        self.text = ""
        self.caret = 0
        self.candidates = CandidateList()

    @property
    def is_editing(self) -> bool:
        return self.state is not EditState.VIEWING

    def is_editing_cell(self, coord: Coordinate) -> bool:
        return self.is_editing and self.coord == coord

    def begin_edit(self, sheet: Sheet, coord: Coordinate, typed: str | None = None) -> None:
        """Enter EDITING on a cell.

        Without ``typed`` the editor is seeded with the cell's formula (or
        value); with it the previous content is replaced by the typed text.
        An edit in progress on another cell is committed first.
        """
        if self.is_editing:
            if self.coord == coord and self.sheet is sheet and typed is None:
                return
            self.commit()

        store = self.bridge.store
        store.bounds.require(coord)
        self.sheet = sheet
        self.coord = coord
        self.state = EditState.EDITING
        seed = typed if typed is not None else store.get(sheet, coord).editable_text
        self.set_text(seed)
        logger.debug("Editing %s%s", sheet.title, tuple(coord))

    def set_text(self, text: str, caret: int | None = None) -> None:
        """Replace the editor text (the host reports every keystroke here)."""
        if not self.is_editing:
            raise ValueError("No cell is being edited")
        self.text = text
        self.caret = len(text) if caret is None else caret
        self._refresh_candidates()

    def move_highlight(self, step: int) -> int:
        """Move the candidate highlight; a no-op unless autocompleting."""
        if self.state is not EditState.EDITING_WITH_AUTOCOMPLETE:
            return -1
        return self.candidates.move(step)

    def accept(self) -> bool:
        """Insert the highlighted (or first) candidate as ``=NAME()``."""
        if self.state is not EditState.EDITING_WITH_AUTOCOMPLETE:
            return False
        name = self.candidates.choice()
        if name is None:
            return False
        self.text, self.caret = completion_for(name)
        self._close_candidates()
        return True

    def escape(self) -> EditState:
        """Dismiss the candidate list, or discard a plain edit.

        With the list open only the list closes. In plain EDITING the edit
        is abandoned without committing and the cell keeps its old content.
        """
        if self.state is EditState.EDITING_WITH_AUTOCOMPLETE:
            self._close_candidates()
        elif self.state is EditState.EDITING:
            self.cancel()
        return self.state

    def commit(self, move: Key | None = None, reverse: bool = False) -> Cell | None:
        """Apply the edit and return to VIEWING.

        Args:
            move: Key.ENTER or Key.TAB to move the active cell afterwards
            reverse: Move up/left instead of down/right

        Returns:
            The committed cell, or None when nothing was being edited
        """
        if not self.is_editing:
            return None
        sheet, coord, text = self.sheet, self.coord, self.text
        self._reset()

        cell = self.bridge.apply(sheet, coord, text)
        self.bridge.recompute_dependents(sheet)
        if move is not None:
            self.selection.select_single(coord)
            self.selection.advance(move, reverse)
        return cell

    def blur(self) -> Cell | None:
        """Focus left the editor: commit without moving."""
        return self.commit()

    def cancel(self) -> None:
        """Leave editing without applying the text."""
        self._reset()

    def handle_key(self, event: KeyEvent) -> bool:
        """React to a key pressed while editing.

        Returns:
            True when the key was consumed by the editor
        """
        key = event.named
        if self.state is EditState.EDITING_WITH_AUTOCOMPLETE:
            if key is Key.ARROW_DOWN:
                self.move_highlight(1)
                return True
            if key is Key.ARROW_UP:
                self.move_highlight(-1)
                return True
            if key in (Key.TAB, Key.ENTER):
                self.accept()
                return True
            if key is Key.ESCAPE:
                self.escape()
                return True
            return False

        if self.state is EditState.EDITING:
            if key in (Key.ENTER, Key.TAB):
                self.commit(move=key, reverse=event.shift)
                return True
            if key is Key.ESCAPE:
                self.escape()
                return True
        return False

    def _refresh_candidates(self) -> None:
        matches = matching_functions(self.text, self.functions)
        if matches:
            self.candidates.reset(matches)
            self.state = EditState.EDITING_WITH_AUTOCOMPLETE
        else:
            self._close_candidates()

    def _close_candidates(self) -> None:
        self.candidates.reset([])
        self.state = EditState.EDITING

    def _reset(self) -> None:
        self.state = EditState.VIEWING
        self.sheet = None
        self.coord = None
        self.text = ""
        self.caret = 0
        self.candidates.reset([])
