"""
Abstract formula engine interface.

The FormulaEngine protocol defines the contract the formula bridge needs from
an evaluation backend. Sheets are addressed by 0-based engine index and cells
by 0-based (row, col). The concrete implementation is FormualizerEngine
(in-process evaluation via formualizer).
"""

from typing import Any, Optional, Protocol


class FormulaEngine(Protocol):
    """Protocol for formula evaluation backends.

    An engine accepts either literal text or formula text for a cell and
    returns evaluated results on demand, taking care of dependency
    propagation between cells.
    """

    def add_sheet(self, name: str) -> int:
        """Create a sheet and return its 0-based engine index."""
        ...

    @property
    def sheet_count(self) -> int:
        """Number of sheets known to the engine."""
        ...

    def set_cell_contents(self, sheet_index: int, row: int, col: int, text: str) -> None:
        """Store literal text, or formula text when it starts with '='.

        Raises:
            FormulaEvaluationError: If the engine rejects the contents
        """
        ...

    def get_cell_value(self, sheet_index: int, row: int, col: int) -> Optional[Any]:
        """Evaluate and return the cell's value, or None on evaluation failure.

        Raises:
            FormulaEvaluationError: If evaluation raises inside the engine
        """
        ...
