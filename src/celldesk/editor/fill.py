"""
Drag-fill extrapolation.

A fill drags a single source cell's value along one axis:
- numeric sources produce a +1-per-cell linear series (signed by direction)
- empty sources clear the targets
- any other text, formulas included, is copied verbatim; formula references
  are not shifted relative to the target

Every target write goes through the formula bridge as a normal edit, and
dependents are recomputed once after the whole fill.
"""

from __future__ import annotations

import logging
from enum import Enum

from celldesk.engine.bridge import FormulaBridge
from celldesk.grid.address import Coordinate, GridBounds
from celldesk.grid.model import Sheet, format_number, parse_number

logger = logging.getLogger(__name__)


class FillAxis(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def compute_axis(source: Coordinate, drag: Coordinate) -> FillAxis:
    """Horizontal only when the column delta strictly exceeds the row delta.

    Equal deltas (a diagonal drag) fill vertically.
    """
    if abs(drag.col - source.col) > abs(drag.row - source.row):
        return FillAxis.HORIZONTAL
    return FillAxis.VERTICAL


def fill_span(source: Coordinate, drag: Coordinate) -> list[Coordinate]:
    """Target coordinates between source and drag along the fill axis.

    The drag end is included, the source itself is not. Targets stay in the
    source's row (horizontal) or column (vertical).
    """
    if compute_axis(source, drag) is FillAxis.HORIZONTAL:
        lo, hi = sorted((source.col, drag.col))
        return [Coordinate(source.row, c) for c in range(lo, hi + 1) if c != source.col]
    lo, hi = sorted((source.row, drag.row))
    return [Coordinate(r, source.col) for r in range(lo, hi + 1) if r != source.row]


class FillEngine:
    """Fill-handle drag state plus preview and commit.

    Attributes:
        bridge: Bridge used for every target write
        source: Cell the drag started from, while a drag is in progress
        drag: Cell the pointer is currently over, while a drag is in progress
        preview_cells: Cells currently marked as fill preview
    """

    def __init__(self, bridge: FormulaBridge) -> None:
        self.bridge = bridge
        self.source: Coordinate | None = None
        self.drag: Coordinate | None = None
        self.preview_cells: frozenset[Coordinate] = frozenset()

    @property
    def bounds(self) -> GridBounds:
        return self.bridge.store.bounds

    @property
    def in_progress(self) -> bool:
        return self.source is not None

    def begin(self, source: Coordinate) -> None:
        """Start a fill drag from source."""
        self.bounds.require(source)
        self.cancel()
        self.source = source

    def drag_to(self, drag: Coordinate) -> frozenset[Coordinate]:
        """Track the pointer during a fill drag and refresh the preview."""
        if self.source is None:
            raise ValueError("No fill drag in progress")
        self.drag = drag
        return self.preview(self.source, drag)

    def finish(self, sheet: Sheet) -> list[Coordinate]:
        """Commit the drag in progress (if it moved) and clear fill state."""
        source, drag = self.source, self.drag
        try:
            if source is None or drag is None:
                return []
            return self.commit(sheet, source, drag)
        finally:
            self.cancel()

    def cancel(self) -> None:
        self.source = None
        self.drag = None
        self.preview_cells = frozenset()

    def preview(self, source: Coordinate, drag: Coordinate) -> frozenset[Coordinate]:
        """Replace any previous preview with the span from source to drag."""
        self.preview_cells = frozenset(
            target for target in fill_span(source, drag) if self.bounds.contains(target)
        )
        return self.preview_cells

    def commit(self, sheet: Sheet, source: Coordinate, drag: Coordinate) -> list[Coordinate]:
        """Write extrapolated values into every in-grid target.

        Returns:
            The coordinates that were written, in span order
        """
        source_value = self.bridge.store.get(sheet, source).value
        start = parse_number(source_value)
        axis = compute_axis(source, drag)

        written: list[Coordinate] = []
        for target in fill_span(source, drag):
            if not self.bounds.contains(target):
                continue
            if start is not None:
                if axis is FillAxis.HORIZONTAL:
                    offset = target.col - source.col
                else:
                    offset = target.row - source.row
                text = format_number(start + offset)
            else:
                # empty sources clear, other text is copied as-is
                text = source_value
            self.bridge.apply(sheet, target, text)
            written.append(target)

        self.bridge.recompute_dependents(sheet)
        self.preview_cells = frozenset()
        logger.debug("Filled %d cell(s) from %s along %s", len(written), tuple(source), axis.value)
        return written
