"""
Editor module for celldesk.

This module holds the interaction engines: selection, drag-fill, the cell
edit state machine with formula autocomplete, and the input adapter that
routes UI events into them.
"""

from celldesk.editor.autocomplete import (
    DEFAULT_FUNCTIONS,
    Box,
    CandidateList,
    Placement,
    completion_for,
    matching_functions,
    place_panel,
)
from celldesk.editor.edit_machine import EditState, EditStateMachine
from celldesk.editor.fill import FillAxis, FillEngine, compute_axis, fill_span
from celldesk.editor.input_adapter import InputAdapter
from celldesk.editor.keys import Key, KeyEvent, PointerEvent
from celldesk.editor.selection import CellMark, SelectionEngine

__all__ = [
    "DEFAULT_FUNCTIONS",
    "Box",
    "CandidateList",
    "Placement",
    "completion_for",
    "matching_functions",
    "place_panel",
    "EditState",
    "EditStateMachine",
    "FillAxis",
    "FillEngine",
    "compute_axis",
    "fill_span",
    "InputAdapter",
    "Key",
    "KeyEvent",
    "PointerEvent",
    "CellMark",
    "SelectionEngine",
]
