"""
Grid module.

This module provides cell addressing, the spreadsheet data model and the
per-sheet cell store.
"""

from celldesk.grid.address import (
    Coordinate,
    GridBounds,
    Rect,
    column_index,
    column_label,
    decode,
    encode,
)
from celldesk.grid.model import (
    Cell,
    Sheet,
    StyleKey,
    Workbook,
    engine_index,
    format_number,
    parse_number,
)
from celldesk.grid.store import CellStore

__all__ = [
    "Coordinate",
    "GridBounds",
    "Rect",
    "column_index",
    "column_label",
    "decode",
    "encode",
    "Cell",
    "Sheet",
    "StyleKey",
    "Workbook",
    "engine_index",
    "format_number",
    "parse_number",
    "CellStore",
]
