"""
Engine module for celldesk.

This module connects the cell store to a formula evaluation backend.
``FormualizerEngine`` evaluates formulas in-process via formualizer and
``FormulaBridge`` routes edits through it.
"""

from celldesk.engine.base import FormulaEngine
from celldesk.engine.bridge import (
    ERROR_SENTINEL,
    FormulaBridge,
    format_result,
    is_formula_complete,
)
from celldesk.engine.formualizer_engine import FormualizerEngine

__all__ = [
    "FormulaEngine",
    "FormualizerEngine",
    "FormulaBridge",
    "ERROR_SENTINEL",
    "format_result",
    "is_formula_complete",
]
