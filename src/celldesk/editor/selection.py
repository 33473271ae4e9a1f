"""
Selection engine.

Tracks the active cell and the selection anchor. The selected rectangle is
never stored: it is always derived from the anchor and the active cell, so
dragging in any direction yields the same canonical rectangle.
"""

from __future__ import annotations

import logging
from enum import Flag, auto

from celldesk.editor.keys import ARROW_DELTAS, Key
from celldesk.grid.address import Coordinate, GridBounds, Rect
from celldesk.grid.model import Sheet
from celldesk.grid.store import CellStore

logger = logging.getLogger(__name__)


class CellMark(Flag):
    """Visual states a cell can be in."""
    NONE = 0
    SELECTED = auto()
    ACTIVE = auto()
    FILL_PREVIEW = auto()


class SelectionEngine:
    """Anchor/active selection over a bounded grid.

    Attributes:
        bounds: Grid dimensions used for clamping
        active: The most recently reached cell
        anchor: Fixed corner the selection grows around, or None
    """

    def __init__(self, bounds: GridBounds, start: Coordinate = Coordinate(0, 0)) -> None:
        self.bounds = bounds
        self.active = bounds.require(start)
        self.anchor: Coordinate | None = self.active

    def select_single(self, coord: Coordinate) -> None:
        """Select exactly one cell, dropping any multi-cell highlight."""
        self.bounds.require(coord)
        self.active = coord
        self.anchor = coord

    def extend_to(self, coord: Coordinate) -> Rect:
        """Grow the selection from the anchor to coord.

        The active cell becomes coord.

        Raises:
            ValueError: If no anchor has been set
        """
        if self.anchor is None:
            raise ValueError("Cannot extend a selection without an anchor")
        self.bounds.require(coord)
        self.active = coord
        return self.rect

    @property
    def rect(self) -> Rect:
        return Rect.from_corners(self.anchor or self.active, self.active)

    @property
    def is_multi(self) -> bool:
        return not self.rect.is_single

    def selected_cells(self) -> frozenset[Coordinate]:
        return frozenset(self.rect.cells())

    def is_selected(self, coord: Coordinate) -> bool:
        return self.rect.contains(coord)

    def is_active(self, coord: Coordinate) -> bool:
        return coord == self.active

    def marks(self) -> dict[Coordinate, CellMark]:
        """Selected cells with their marks; the active cell is also ACTIVE."""
        result = {coord: CellMark.SELECTED for coord in self.rect.cells()}
        result[self.active] = CellMark.SELECTED | CellMark.ACTIVE
        return result

    def name_box_label(self) -> str:
        """"B3" for a single cell, "A1:B2" (top-left first) for a region."""
        return self.rect.to_a1()

    def formula_bar_text(self, store: CellStore, sheet: Sheet) -> str:
        """The active cell's formula, or its value when it has none."""
        return store.get(sheet, self.active).editable_text

    def navigate(self, key: Key, shift: bool = False) -> Coordinate:
        """Move the active cell one step with an arrow key.

        With shift the selection extends from the anchor (set to the
        pre-move active cell if missing); without it the selection collapses
        to the new cell. Movement is clamped to the grid.
        """
        if key not in ARROW_DELTAS:
            raise ValueError(f"Not an arrow key: {key}")
        d_row, d_col = ARROW_DELTAS[key]
        target = self.bounds.clamp(self.active.row + d_row, self.active.col + d_col)

        if shift:
            if self.anchor is None:
                self.anchor = self.active
            self.extend_to(target)
        else:
            self.anchor = None
            self.select_single(target)
        return self.active

    def advance(self, key: Key, reverse: bool = False) -> Coordinate:
        """Move after committing with Tab (right) or Enter (down).

        Tab wraps to the start of the next row at the last column; reverse
        (Shift) moves left/up and wraps to the end of the previous row.
        """
        row, col = self.active
        if key is Key.TAB:
            next_col = max(0, col - 1) if reverse else min(self.bounds.cols - 1, col + 1)
            next_row = row
            if next_col == col:
                next_row = max(0, row - 1) if reverse else min(self.bounds.rows - 1, row + 1)
                next_col = self.bounds.cols - 1 if reverse else 0
        elif key is Key.ENTER:
            next_col = col
            next_row = max(0, row - 1) if reverse else min(self.bounds.rows - 1, row + 1)
        else:
            raise ValueError(f"advance() expects Tab or Enter, got {key}")

        self.select_single(Coordinate(next_row, next_col))
        return self.active

    def reset(self) -> None:
        self.select_single(Coordinate(0, 0))
