"""
Input adapter.

Translates pointer and keyboard events from the UI shell into calls on the
selection, fill and edit engines of a workbook session. All interaction
state lives on the adapter instance.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from celldesk.editor.keys import ARROW_DELTAS, Key, KeyEvent, PointerEvent
from celldesk.grid.address import Coordinate

if TYPE_CHECKING:
    from celldesk.session import WorkbookSession

logger = logging.getLogger(__name__)


class InputAdapter:
    """Event router for one workbook session.

    Attributes:
        session: Session whose engines receive the events
        dragging: A plain selection drag is in progress
    """

    def __init__(self, session: WorkbookSession) -> None:
        self.session = session
        self.dragging = False

    def pointer_down(self, event: PointerEvent) -> None:
        s = self.session
        if event.on_fill_handle:
            s.editor.commit()
            s.fill.begin(event.coord)
            return

        if s.editor.is_editing and not s.editor.is_editing_cell(event.coord):
            s.editor.commit()

        if event.shift:
            if s.selection.anchor is None:
                s.selection.anchor = s.selection.active
            s.selection.extend_to(event.coord)
            return

        s.selection.select_single(event.coord)
        self.dragging = True

    def pointer_move(self, coord: Coordinate) -> None:
        s = self.session
        if s.fill.in_progress:
            if s.store.bounds.contains(coord):
                s.fill.drag_to(coord)
            return
        if self.dragging and s.store.bounds.contains(coord):
            s.selection.extend_to(coord)

    def pointer_up(self, coord: Coordinate | None = None) -> list[Coordinate]:
        """End a drag. A fill drag is committed here.

        Returns:
            Coordinates written by a fill, empty otherwise
        """
        s = self.session
        self.dragging = False
        if not s.fill.in_progress:
            return []
        if coord is not None and s.store.bounds.contains(coord):
            s.fill.drag_to(coord)
        return s.fill.finish(s.active_sheet)

    def double_click(self, coord: Coordinate) -> None:
        s = self.session
        s.selection.select_single(coord)
        s.editor.begin_edit(s.active_sheet, coord)

    def key_down(self, event: KeyEvent) -> bool:
        """Route a key press.

        Returns:
            True when the key was handled (the shell should suppress its
            default action)
        """
        s = self.session
        if event.ctrl and event.key.lower() == "s":
            s.save()
            return True

        if s.editor.is_editing:
            return s.editor.handle_key(event)

        key = event.named
        if key in ARROW_DELTAS:
            s.selection.navigate(key, event.shift)
            return True
        if key in (Key.TAB, Key.ENTER):
            s.selection.advance(key, event.shift)
            return True
        if key in (Key.DELETE, Key.BACKSPACE):
            s.clear_selection()
            return True
        if event.is_printable:
            s.editor.begin_edit(s.active_sheet, s.selection.active, typed=event.key)
            return True
        return False

    def blur(self) -> None:
        self.session.editor.blur()
