"""
celldesk - The editing core of a browser-style spreadsheet.

This package keeps per-sheet cell state, routes edits through a formula
engine (formualizer), and implements the interaction engines a grid UI
needs: selection, drag-fill, per-cell editing with formula autocomplete.
Workbooks are saved through a repository, by default Google Sheets.

Usage:
    >>> import celldesk
    >>> session = celldesk.local_session("Budget")
    >>> sheet = session.active_sheet
    >>> _ = session.bridge.apply(sheet, celldesk.Coordinate(0, 0), "2")
    >>> _ = session.bridge.apply(sheet, celldesk.Coordinate(0, 1), "=A1+1")
    >>> session.cell(celldesk.Coordinate(0, 1)).computed
    '3'

Key components:
- CellStore: per-sheet cell records, the single source of truth
- FormulaBridge: pushes edits into the engine and reads results back
- SelectionEngine, FillEngine, EditStateMachine: interaction engines
- WorkbookSession: ties the above to a workbook and a repository
"""

from .config import EditorSettings, get_settings, reset_settings
from .exceptions import *
from .grid import Cell, CellStore, Coordinate, GridBounds, Rect, Sheet, StyleKey, Workbook, decode, encode
from .engine import FormualizerEngine, FormulaBridge
from .editor import EditState, EditStateMachine, FillEngine, InputAdapter, KeyEvent, PointerEvent, SelectionEngine
from .persistence import InMemoryWorkbookRepository, SheetsWorkbookRepository, WorkbookSummary
from .session import WorkbookSession
from .utils import configure_logging

# Version
__version__ = "0.1.0"

__all__ = [
    'EditorSettings',
    'get_settings',
    'reset_settings',
    'Cell',
    'CellStore',
    'Coordinate',
    'GridBounds',
    'Rect',
    'Sheet',
    'StyleKey',
    'Workbook',
    'decode',
    'encode',
    'FormualizerEngine',
    'FormulaBridge',
    'EditState',
    'EditStateMachine',
    'FillEngine',
    'InputAdapter',
    'KeyEvent',
    'PointerEvent',
    'SelectionEngine',
    'InMemoryWorkbookRepository',
    'SheetsWorkbookRepository',
    'WorkbookSummary',
    'WorkbookSession',
    'configure_logging',
    'local_session',
]


def local_session(title: str = "Untitled spreadsheet", **kwargs) -> WorkbookSession:
    """Start a session on a new workbook kept in process memory.

    Args:
        title: Workbook title
        **kwargs: Passed to WorkbookSession (settings, engine, notify, ...)

    Returns:
        A WorkbookSession saving to an InMemoryWorkbookRepository
    """
    return WorkbookSession.create(InMemoryWorkbookRepository(), title, **kwargs)
