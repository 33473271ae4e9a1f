"""
Formula bridge between the cell store and the formula engine.

Edited text is pushed into the engine's coordinate space and computed results
are read back into the store. The bridge never does arithmetic of its own;
numeric and error semantics belong to the engine.

Formula text is only submitted once it looks complete (see
``is_formula_complete``) so that half-typed formulas do not flash errors.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from celldesk.engine.base import FormulaEngine
from celldesk.exceptions import FormulaEvaluationError
from celldesk.grid.address import Coordinate, decode
from celldesk.grid.model import Cell, Sheet, format_number
from celldesk.grid.store import CellStore

logger = logging.getLogger(__name__)

ERROR_SENTINEL = "#ERROR!"

# A formula ending in one of these is still being typed
_TRAILING_OPERATORS = frozenset("+-*/^&=<>,(:")


def is_formula_complete(text: str) -> bool:
    """Decide whether '='-prefixed text is plausibly complete.

    This is a lightweight scan, not a parser. Text is incomplete when the
    body is empty, a string literal or a parenthesis is still open, or it
    ends with an operator, comma or open parenthesis. A surplus ')' is left
    for the engine to reject.

    Examples:
        "=SUM(A1"   -> False
        "=SUM(A1)"  -> True
        "=A1+1"     -> True
        "=A1+"      -> False
    """
    body = text[1:].strip() if text.startswith("=") else text.strip()
    if not body:
        return False

    depth = 0
    in_string = False
    for ch in body:
        if in_string:
            if ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1

    if in_string or depth > 0:
        return False
    return body[-1] not in _TRAILING_OPERATORS


def format_result(value: Any) -> str:
    """Render an engine result as the cell's computed string."""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


class FormulaBridge:
    """Routes cell edits through the formula engine into the cell store.

    Sheets map to engine sheets by ``engine_index = sheet_number - 1``; the
    bridge creates engine sheets on demand so the mapping holds whichever
    order sheets are created, loaded or switched in.

    Attributes:
        engine: The formula evaluation backend
        store: The cell store results are written to
        error_flash_seconds: How long a cell stays flagged after a raised
            evaluation error
    """

    def __init__(
        self,
        engine: FormulaEngine,
        store: CellStore,
        error_flash_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.engine = engine
        self.store = store
        self.error_flash_seconds = error_flash_seconds
        self._clock = clock
        self._error_until: dict[tuple[str, Coordinate], float] = {}

    def register_sheet(self, sheet: Sheet) -> int:
        """Make sure the engine has a sheet at this sheet's engine index.

        Returns:
            The sheet's engine index
        """
        index = sheet.engine_index
        while self.engine.sheet_count <= index:
            self.engine.add_sheet(f"Sheet{self.engine.sheet_count + 1}")
        return index

    def load_sheet(self, sheet: Sheet) -> None:
        """Push every stored cell of a loaded sheet into the engine.

        Literal values go in first so that formulas see their inputs, then
        formula results are refreshed.
        """
        index = self.register_sheet(sheet)
        formulas: list[tuple[Coordinate, str]] = []
        for cell_id, cell in sheet.data.items():
            coord = decode(cell_id)
            if cell.formula:
                formulas.append((coord, cell.formula))
            elif cell.value:
                try:
                    self._submit(index, coord, cell.value)
                except FormulaEvaluationError as e:
                    logger.warning("Could not load literal %r: %s", cell.value, e)

        for coord, formula in formulas:
            if not is_formula_complete(formula):
                continue
            try:
                self._submit(index, coord, formula)
            except FormulaEvaluationError as e:
                logger.warning("Could not load formula %r: %s", formula, e)
                self._empty_engine_cell(index, coord)

        self.recompute_dependents(sheet)

    def apply(self, sheet: Sheet, coord: Coordinate, text: str) -> Cell:
        """Apply edited text to a cell.

        Plain text is written to both the engine and the store. Incomplete
        formulas are stored verbatim without evaluation. Complete formulas
        are evaluated; failures leave ``#ERROR!`` as the computed value.

        Raises:
            AddressError: If coord is outside the grid
        """
        self.store.bounds.require(coord)
        index = self.register_sheet(sheet)
        self._error_until.pop((sheet.id, coord), None)

        if not text.startswith("="):
            try:
                self._submit(index, coord, text)
            except FormulaEvaluationError as e:
                logger.warning("Engine rejected literal %r: %s", text, e)
            logger.debug("Set %s%s to literal", sheet.title, tuple(coord))
            return self.store.set(sheet, coord, value=text, formula="", computed=text)

        if not is_formula_complete(text):
            self._empty_engine_cell(index, coord)
            return self.store.set(sheet, coord, value=text, formula=text, computed=text)

        try:
            self._submit(index, coord, text)
        except FormulaEvaluationError as e:
            logger.warning("Formula %r rejected by engine: %s", text, e)
            self._empty_engine_cell(index, coord)
            self._flag_error(sheet, coord)
            computed = ERROR_SENTINEL
        else:
            computed = self._evaluate(sheet, index, coord)

        logger.debug("Set %s%s to formula %r -> %r", sheet.title, tuple(coord), text, computed)
        return self.store.set(sheet, coord, value=text, formula=text, computed=computed)

    def recompute_dependents(self, sheet: Sheet) -> int:
        """Re-read every complete formula cell of the sheet from the engine.

        Safe to call repeatedly; cells whose result is unchanged are not
        rewritten.

        Returns:
            Number of cells whose computed value changed
        """
        index = self.register_sheet(sheet)
        changed = 0
        for coord, cell in self.store.formula_cells(sheet):
            if not is_formula_complete(cell.formula):
                continue
            computed = self._evaluate(sheet, index, coord)
            if computed != cell.computed:
                self.store.set(sheet, coord, computed=computed)
                changed += 1
        if changed:
            logger.debug("Recompute refreshed %d cell(s) on %s", changed, sheet.title)
        return changed

    def is_errored(self, sheet: Sheet, coord: Coordinate) -> bool:
        """Whether the cell is still inside its error flash window."""
        key = (sheet.id, coord)
        deadline = self._error_until.get(key)
        if deadline is None:
            return False
        if self._clock() >= deadline:
            del self._error_until[key]
            return False
        return True

    def _submit(self, index: int, coord: Coordinate, text: str) -> None:
        self.engine.set_cell_contents(index, coord.row, coord.col, text)

    def _empty_engine_cell(self, index: int, coord: Coordinate) -> None:
        try:
            self._submit(index, coord, "")
        except FormulaEvaluationError as e:
            logger.warning("Could not empty engine cell %s: %s", tuple(coord), e)

    def _evaluate(self, sheet: Sheet, index: int, coord: Coordinate) -> str:
        try:
            value = self.engine.get_cell_value(index, coord.row, coord.col)
        except FormulaEvaluationError as e:
            logger.warning("Evaluation failed at %s%s: %s", sheet.title, tuple(coord), e)
            self._flag_error(sheet, coord)
            return ERROR_SENTINEL
        if value is None:
            return ERROR_SENTINEL
        return format_result(value)

    def _flag_error(self, sheet: Sheet, coord: Coordinate) -> None:
        self._error_until[(sheet.id, coord)] = self._clock() + self.error_flash_seconds
