"""
Formula engine backed by formualizer.

Keeps an in-memory formualizer Workbook in step with the edited sheets and
evaluates formulas on demand. formualizer evaluates lazily and tracks
dependencies itself, so reading a formula cell after one of its inputs
changed yields the refreshed result.

formualizer addresses cells 1-indexed; this adapter accepts the 0-indexed
coordinates used everywhere else in celldesk.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import formualizer as fz

from celldesk.exceptions import FormulaEvaluationError
from celldesk.grid.model import parse_number

logger = logging.getLogger(__name__)

_ERROR_CODES = frozenset({
    "#NULL!", "#DIV/0!", "#VALUE!", "#REF!", "#NAME?",
    "#NUM!", "#N/A", "#SPILL!", "#CALC!",
})


class FormualizerEngine:
    """In-process formula engine using formualizer.

    Usage::

        engine = FormualizerEngine()
        index = engine.add_sheet("Sheet1")
        engine.set_cell_contents(index, 0, 0, "1")
        engine.set_cell_contents(index, 0, 1, "=A1+1")
        engine.get_cell_value(index, 0, 1)  # 2.0
    """

    def __init__(self) -> None:
        self.wb = fz.Workbook()
        self._sheet_names: list[str] = []

    @property
    def sheet_count(self) -> int:
        return len(self._sheet_names)

    def add_sheet(self, name: str) -> int:
        self.wb.add_sheet(name)
        self._sheet_names.append(name)
        logger.debug("Added engine sheet %r at index %d", name, len(self._sheet_names) - 1)
        return len(self._sheet_names) - 1

    def set_cell_contents(self, sheet_index: int, row: int, col: int, text: str) -> None:
        sheet_name = self._sheet_name(sheet_index)
        r = row + 1  # formualizer is 1-indexed
        c = col + 1
        try:
            if text.startswith("="):
                self.wb.set_formula(sheet_name, r, c, text)
            else:
                self.wb.sheet(sheet_name).set_value(r, c, _to_literal(text))
        except Exception as e:
            raise FormulaEvaluationError(
                f"Engine rejected contents {text!r} for {sheet_name}!R{r}C{c}: {e}"
            ) from e

    def get_cell_value(self, sheet_index: int, row: int, col: int) -> Any | None:
        sheet_name = self._sheet_name(sheet_index)
        try:
            value = self.wb.evaluate_cell(sheet_name, row + 1, col + 1)
        except Exception as e:
            raise FormulaEvaluationError(
                f"Evaluation failed for {sheet_name}!R{row + 1}C{col + 1}: {e}"
            ) from e
        return _normalize(value)

    def _sheet_name(self, sheet_index: int) -> str:
        if not 0 <= sheet_index < len(self._sheet_names):
            raise FormulaEvaluationError(f"Unknown engine sheet index {sheet_index}")
        return self._sheet_names[sheet_index]


def _to_literal(text: str) -> fz.LiteralValue:
    """Convert cell text to a formualizer LiteralValue.

    Numeric text becomes a number so that formulas can do arithmetic on it.
    """
    if text == "":
        return fz.LiteralValue.empty()
    number = parse_number(text)
    if number is not None:
        return fz.LiteralValue.number(number)
    return fz.LiteralValue.text(text)


def _normalize(value: Any) -> Any | None:
    """Normalise a cell value returned by formualizer.

    * Error dicts and error-code strings → ``None``
    * ``NaN`` → ``None``
    """
    if value is None:
        return None
    if isinstance(value, dict):
        return None
    if isinstance(value, str) and value in _ERROR_CODES:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value
