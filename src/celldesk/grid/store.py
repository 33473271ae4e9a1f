"""
Per-sheet cell storage.

The CellStore is the single source of truth for cell records. Rendering,
persistence and the formula bridge all read from it; it never evaluates
formulas itself.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from celldesk.grid.address import Coordinate, GridBounds, decode, encode
from celldesk.grid.model import Cell, Sheet, StyleKey, StyleValue

logger = logging.getLogger(__name__)

CellListener = Callable[[Sheet, Coordinate, Cell], None]

_UNSET = object()


class CellStore:
    """Coordinate-addressed access to the cells of a sheet.

    Cells are created lazily the first time a coordinate is addressed and are
    never deleted, only cleared. Every coordinate is checked against the grid
    bounds.

    Usage::

        store = CellStore(GridBounds(rows=50, cols=26))
        store.set(sheet, Coordinate(0, 0), value="5", computed="5")
        store.get(sheet, Coordinate(0, 0)).computed  # "5"
    """

    def __init__(self, bounds: GridBounds) -> None:
        self.bounds = bounds
        self._listeners: list[CellListener] = []

    def get(self, sheet: Sheet, coord: Coordinate) -> Cell:
        """Return the cell at coord, creating an empty one on first access.

        Raises:
            AddressError: If coord is outside the grid
        """
        self.bounds.require(coord)
        cell_id = encode(coord.row, coord.col)
        cell = sheet.data.get(cell_id)
        if cell is None:
            cell = Cell()
            sheet.data[cell_id] = cell
        return cell

    def set(
        self,
        sheet: Sheet,
        coord: Coordinate,
        *,
        value: str | object = _UNSET,
        formula: str | object = _UNSET,
        computed: str | object = _UNSET,
        styles: dict[StyleKey, StyleValue] | object = _UNSET,
    ) -> Cell:
        """Merge the given fields into the cell at coord.

        Unspecified fields keep their current values; in particular styles
        survive value edits.

        Raises:
            AddressError: If coord is outside the grid
            ValueError: If the merged record would break the formula invariant
        """
        current = self.get(sheet, coord)
        updated = Cell(
            value=current.value if value is _UNSET else value,
            formula=current.formula if formula is _UNSET else formula,
            computed=current.computed if computed is _UNSET else computed,
            styles=dict(current.styles) if styles is _UNSET else dict(styles),
        )
        sheet.data[encode(coord.row, coord.col)] = updated
        sheet.touch()
        self._notify(sheet, coord, updated)
        return updated

    def clear(self, sheet: Sheet, coord: Coordinate, styles: bool = False) -> Cell:
        """Reset value, formula and computed to empty strings.

        Args:
            sheet: Target sheet
            coord: Target coordinate
            styles: Also drop the cell's styles (kept by default)
        """
        fields: dict = {"value": "", "formula": "", "computed": ""}
        if styles:
            fields["styles"] = {}
        return self.set(sheet, coord, **fields)

    def set_style(
        self,
        sheet: Sheet,
        coord: Coordinate,
        key: StyleKey,
        value: StyleValue | None,
    ) -> Cell:
        """Set one style attribute, or remove it when value is None."""
        styles = dict(self.get(sheet, coord).styles)
        if value is None:
            styles.pop(key, None)
        else:
            styles[key] = value
        return self.set(sheet, coord, styles=styles)

    def initialize(self, sheet: Sheet) -> None:
        """Materialise an empty cell for every grid coordinate not yet present."""
        for row in range(self.bounds.rows):
            for col in range(self.bounds.cols):
                sheet.data.setdefault(encode(row, col), Cell())

    def formula_cells(self, sheet: Sheet) -> Iterator[tuple[Coordinate, Cell]]:
        """Yield (coordinate, cell) for every cell holding a formula."""
        for cell_id, cell in list(sheet.data.items()):
            if cell.formula:
                yield decode(cell_id), cell

    def subscribe(self, listener: CellListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, sheet: Sheet, coord: Coordinate, cell: Cell) -> None:
        for listener in list(self._listeners):
            listener(sheet, coord, cell)
