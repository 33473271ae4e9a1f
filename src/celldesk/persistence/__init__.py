"""
Persistence module for celldesk.

This module provides workbook storage backends behind the WorkbookRepository
protocol:
- SheetsWorkbookRepository stores workbooks in Google Sheets via gspread
- InMemoryWorkbookRepository keeps them in process memory
"""

from celldesk.persistence.base import DEFAULT_TITLE, Session, WorkbookRepository, WorkbookSummary
from celldesk.persistence.memory import InMemoryWorkbookRepository
from celldesk.persistence.sheets_store import (
    SheetsWorkbookRepository,
    cell_from_grid,
    format_to_style,
    style_to_format,
)

__all__ = [
    "DEFAULT_TITLE",
    "Session",
    "WorkbookRepository",
    "WorkbookSummary",
    "InMemoryWorkbookRepository",
    "SheetsWorkbookRepository",
    "cell_from_grid",
    "format_to_style",
    "style_to_format",
]
