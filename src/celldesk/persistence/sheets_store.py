"""
Google Sheets workbook repository.

Stores workbooks as Google spreadsheets through gspread:
- a workbook is a spreadsheet; its title is the spreadsheet title
- sheets are worksheets ordered by tab index (sheet_number = index + 1)
- cells are written as user-entered text so formulas stay formulas (other
  literals are apostrophe-quoted so the parser keeps them as typed), and
  read back from grid metadata (user-entered value, formatted value and
  user-entered format)
- soft delete moves the spreadsheet file to the Drive trash

API calls are retried with exponential backoff; anything that still fails
is raised as PersistenceError.
"""

import logging
import re
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import gspread
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from gspread.exceptions import APIError, SpreadsheetNotFound, WorksheetNotFound
from gspread.urls import DRIVE_FILES_API_V3_URL

from celldesk.exceptions import (
    NotAuthenticatedError,
    PersistenceError,
    WorkbookNotFoundError,
)
from celldesk.grid.address import Coordinate, GridBounds, Rect, encode
from celldesk.grid.model import Cell, Sheet, StyleKey, StyleValue, Workbook, format_number, parse_number
from celldesk.persistence.base import DEFAULT_TITLE, Session, WorkbookSummary

logger = logging.getLogger(__name__)

_ALIGNMENTS = {"left": "LEFT", "center": "CENTER", "right": "RIGHT"}
_TEXT_FLAGS = {
    StyleKey.BOLD: "bold",
    StyleKey.ITALIC: "italic",
    StyleKey.UNDERLINE: "underline",
    StyleKey.STRIKETHROUGH: "strikethrough",
}
_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_FONT_SIZE = re.compile(r"^\s*(\d+(?:\.\d+)?)")
_SPREADSHEET_QUERY = "mimeType='application/vnd.google-apps.spreadsheet' and trashed=false"


def _hex_to_color(value: str) -> Optional[Dict[str, float]]:
    """Convert "#rgb"/"#rrggbb" to a Sheets color; other notations give None."""
    match = _HEX_COLOR.match(value)
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    red, green, blue = (int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))
    return {"red": red, "green": green, "blue": blue}


def _color_to_hex(color: Dict[str, float]) -> str:
    # The API omits zero channels
    channels = (color.get("red", 0.0), color.get("green", 0.0), color.get("blue", 0.0))
    return "#" + "".join(f"{round(c * 255):02x}" for c in channels)


def style_to_format(styles: Dict[StyleKey, StyleValue]) -> Dict[str, Any]:
    """Build a Sheets CellFormat from cell styles.

    Colors that are not hex notation and unknown alignments are skipped.
    """
    fmt: Dict[str, Any] = {}
    text: Dict[str, Any] = {}

    for key, field in _TEXT_FLAGS.items():
        if key in styles:
            text[field] = bool(styles[key])
    if StyleKey.FONT_FAMILY in styles:
        text["fontFamily"] = str(styles[StyleKey.FONT_FAMILY])
    if StyleKey.FONT_SIZE in styles:
        match = _FONT_SIZE.match(str(styles[StyleKey.FONT_SIZE]))
        if match:
            text["fontSize"] = round(float(match.group(1)))
    if StyleKey.COLOR in styles:
        color = _hex_to_color(str(styles[StyleKey.COLOR]))
        if color is not None:
            text["foregroundColor"] = color
    if text:
        fmt["textFormat"] = text

    if StyleKey.BACKGROUND in styles:
        color = _hex_to_color(str(styles[StyleKey.BACKGROUND]))
        if color is not None:
            fmt["backgroundColor"] = color
    if StyleKey.ALIGN in styles:
        alignment = _ALIGNMENTS.get(str(styles[StyleKey.ALIGN]).lower())
        if alignment is not None:
            fmt["horizontalAlignment"] = alignment
    return fmt


def format_to_style(fmt: Dict[str, Any]) -> Dict[StyleKey, StyleValue]:
    """Read cell styles back from a Sheets CellFormat."""
    styles: Dict[StyleKey, StyleValue] = {}
    text = fmt.get("textFormat") or {}

    for key, field in _TEXT_FLAGS.items():
        if text.get(field):
            styles[key] = True
    if text.get("fontFamily"):
        styles[StyleKey.FONT_FAMILY] = text["fontFamily"]
    if text.get("fontSize"):
        styles[StyleKey.FONT_SIZE] = str(text["fontSize"])
    if text.get("foregroundColor"):
        styles[StyleKey.COLOR] = _color_to_hex(text["foregroundColor"])
    if fmt.get("backgroundColor"):
        styles[StyleKey.BACKGROUND] = _color_to_hex(fmt["backgroundColor"])
    alignment = fmt.get("horizontalAlignment")
    if alignment:
        styles[StyleKey.ALIGN] = alignment.lower()
    return styles


def entered_text(text: str) -> str:
    """Text to send as a user-entered value so Sheets stores it unchanged.

    Writes go through the USER_ENTERED parser, which would turn "007" into 7,
    "50%" into 0.5 and "1/2" into a date. Formulas and numbers already in
    canonical form are sent as they are; everything else gets a leading
    apostrophe, which Sheets strips and stores the rest as a string.
    """
    if text == "" or text.startswith("="):
        return text
    number = parse_number(text)
    if number is not None and format_number(number) == text:
        return text
    return "'" + text


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # Drive returns RFC 3339 with a trailing Z
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def cell_from_grid(data: Dict[str, Any]) -> Cell:
    """Convert one CellData entry of grid metadata to a Cell."""
    entered = data.get("userEnteredValue") or {}
    styles = format_to_style(data.get("userEnteredFormat") or {})

    if "formulaValue" in entered:
        formula = entered["formulaValue"]
        return Cell(
            value=formula,
            formula=formula,
            computed=data.get("formattedValue", ""),
            styles=styles,
        )

    if "stringValue" in entered:
        value = entered["stringValue"]
    elif "numberValue" in entered:
        value = format_number(entered["numberValue"])
    elif "boolValue" in entered:
        value = "TRUE" if entered["boolValue"] else "FALSE"
    else:
        value = ""
    return Cell(value=value, formula="", computed=value, styles=styles)


class SheetsWorkbookRepository:
    """WorkbookRepository backed by Google Sheets.

    Usage::

        gc = gspread.service_account()
        repo = SheetsWorkbookRepository(gc, GridBounds(rows=50, cols=26))
        wb = repo.create_workbook("Budget")

    Attributes:
        gc: Authenticated gspread client
        bounds: Grid region that is read and written
        max_retries: Maximum number of retry attempts for transient failures
        base_delay: Base delay in seconds for exponential backoff
    """

    def __init__(
        self,
        gc: gspread.Client,
        bounds: GridBounds = GridBounds(rows=50, cols=26),
        max_retries: int = 3,
        base_delay: float = 1.0,
    ):
        self.gc = gc
        self.bounds = bounds
        self.max_retries = max_retries
        self.base_delay = base_delay

    def get_session(self) -> Session:
        """Return the session of the client's credentials, refreshing them if stale.

        Raises:
            NotAuthenticatedError: If there are no credentials or they cannot
                be refreshed
        """
        creds = getattr(self.gc.http_client, "auth", None)
        if creds is None:
            raise NotAuthenticatedError("No credentials configured for the Sheets client")

        if not creds.valid:
            try:
                creds.refresh(Request())
            except RefreshError as e:
                raise NotAuthenticatedError(f"Credentials could not be refreshed: {e}") from e

        account = (
            getattr(creds, "service_account_email", None)
            or getattr(creds, "account", None)
            or "unknown"
        )
        return Session(account=account, expires_at=creds.expiry)

    def create_workbook(self, title: str = DEFAULT_TITLE) -> Workbook:
        spreadsheet = self._retry(lambda: self.gc.create(title), f"create workbook '{title}'")
        worksheet = self._retry(lambda: spreadsheet.sheet1, "read the first worksheet")
        logger.info("Created workbook %s", spreadsheet.id)
        return Workbook(
            id=spreadsheet.id,
            title=title,
            sheets=[Sheet(id=str(worksheet.id), sheet_number=1)],
        )

    def fetch_workbook(self, workbook_id: str) -> Workbook:
        """Load a workbook with grid data for every worksheet.

        Raises:
            WorkbookNotFoundError: If the spreadsheet is missing or in the trash
            PersistenceError: If the API calls fail after all retries
        """
        self._ensure_not_trashed(workbook_id)
        spreadsheet = self._open(workbook_id)
        metadata = self._retry(
            lambda: spreadsheet.fetch_sheet_metadata(params={"includeGridData": "true"}),
            f"fetch workbook {workbook_id}",
        )

        sheets: List[Sheet] = []
        ordered = sorted(metadata.get("sheets", []), key=lambda s: s["properties"].get("index", 0))
        for sheet_meta in ordered:
            props = sheet_meta["properties"]
            sheet = Sheet(id=str(props["sheetId"]), sheet_number=props.get("index", 0) + 1)
            sheet.data = self._read_grid(sheet_meta.get("data", []))
            sheets.append(sheet)

        title = metadata.get("properties", {}).get("title", DEFAULT_TITLE)
        return Workbook(id=workbook_id, title=title, sheets=sheets)

    def create_sheet(self, workbook_id: str, sheet_number: int) -> Sheet:
        spreadsheet = self._open(workbook_id)
        worksheet = self._retry(
            lambda: spreadsheet.add_worksheet(
                title=f"Sheet{sheet_number}",
                rows=self.bounds.rows,
                cols=self.bounds.cols,
            ),
            f"add Sheet{sheet_number}",
        )
        return Sheet(id=str(worksheet.id), sheet_number=sheet_number)

    def save_sheet(self, workbook_id: str, sheet: Sheet, title: str) -> None:
        """Write a sheet's cells, styles and the workbook title.

        The whole grid region is written so cleared cells are cleared
        remotely too. Formats in the region are reset before styled cells
        are re-applied.
        """
        spreadsheet = self._open(workbook_id)
        if title and title != spreadsheet.title:
            self._retry(lambda: spreadsheet.update_title(title), f"rename workbook to '{title}'")

        try:
            worksheet = self._retry(
                lambda: spreadsheet.get_worksheet_by_id(int(sheet.id)),
                f"open {sheet.title}",
            )
        except (WorksheetNotFound, ValueError) as e:
            raise PersistenceError(f"Worksheet {sheet.id!r} not found in {workbook_id}") from e

        rows, cols = self.bounds
        values = [
            [self._editable_text(sheet, row, col) for col in range(cols)]
            for row in range(rows)
        ]
        region = Rect(0, 0, rows - 1, cols - 1).to_a1()
        self._retry(
            lambda: worksheet.update(values, range_name=region, raw=False),
            f"write {region} of {sheet.title}",
        )

        reset = {
            "repeatCell": {
                "range": {
                    "sheetId": worksheet.id,
                    "startRowIndex": 0,
                    "endRowIndex": rows,
                    "startColumnIndex": 0,
                    "endColumnIndex": cols,
                },
                "cell": {"userEnteredFormat": {}},
                "fields": "userEnteredFormat",
            }
        }
        self._retry(
            lambda: spreadsheet.batch_update({"requests": [reset]}),
            f"reset formats of {sheet.title}",
        )

        formats = [
            {"range": cell_id, "format": style_to_format(cell.styles)}
            for cell_id, cell in sorted(sheet.data.items())
            if cell.styles
        ]
        formats = [f for f in formats if f["format"]]
        if formats:
            self._retry(
                lambda: worksheet.batch_format(formats),
                f"format {len(formats)} cell(s) of {sheet.title}",
            )
        logger.info("Saved %s of workbook %s", sheet.title, workbook_id)

    def rename_workbook(self, workbook_id: str, title: str) -> None:
        spreadsheet = self._open(workbook_id)
        if title != spreadsheet.title:
            self._retry(lambda: spreadsheet.update_title(title), f"rename workbook to '{title}'")

    def list_workbooks(self) -> List[WorkbookSummary]:
        """List spreadsheets visible to the client, newest first.

        Trashed spreadsheets are left out.
        """
        params: Dict[str, Any] = {
            "q": _SPREADSHEET_QUERY,
            "orderBy": "createdTime desc",
            "fields": "nextPageToken, files(id, name, createdTime)",
            "pageSize": 1000,
            "supportsAllDrives": True,
            "includeItemsFromAllDrives": True,
        }
        summaries: List[WorkbookSummary] = []
        while True:
            response = self._retry(
                lambda: self.gc.http_client.request("get", DRIVE_FILES_API_V3_URL, params=dict(params)),
                "list workbooks",
            )
            payload = response.json()
            for entry in payload.get("files", []):
                summaries.append(WorkbookSummary(
                    id=entry["id"],
                    title=entry.get("name", DEFAULT_TITLE),
                    created_at=_parse_timestamp(entry.get("createdTime")),
                ))
            page_token = payload.get("nextPageToken")
            if not page_token:
                return summaries
            params["pageToken"] = page_token

    def delete_workbook(self, workbook_id: str) -> None:
        """Move the spreadsheet to the Drive trash."""
        url = f"{DRIVE_FILES_API_V3_URL}/{workbook_id}"
        self._retry(
            lambda: self.gc.http_client.request(
                "patch", url, params={"supportsAllDrives": True}, json={"trashed": True}
            ),
            f"delete workbook {workbook_id}",
        )
        logger.info("Moved workbook %s to trash", workbook_id)

    def _open(self, workbook_id: str) -> gspread.Spreadsheet:
        try:
            return self._retry(lambda: self.gc.open_by_key(workbook_id), f"open workbook {workbook_id}")
        except SpreadsheetNotFound as e:
            raise WorkbookNotFoundError(f"Workbook {workbook_id} not found") from e

    def _ensure_not_trashed(self, workbook_id: str) -> None:
        url = f"{DRIVE_FILES_API_V3_URL}/{workbook_id}"
        response = self._retry(
            lambda: self.gc.http_client.request(
                "get", url, params={"fields": "trashed", "supportsAllDrives": True}
            ),
            f"look up workbook {workbook_id}",
        )
        if response.json().get("trashed"):
            raise WorkbookNotFoundError(f"Workbook {workbook_id} has been deleted")

    def _read_grid(self, grids: List[Dict[str, Any]]) -> Dict[str, Cell]:
        cells: Dict[str, Cell] = {}
        for grid in grids:
            start_row = grid.get("startRow", 0)
            start_col = grid.get("startColumn", 0)
            for r_offset, row_data in enumerate(grid.get("rowData", [])):
                for c_offset, cell_data in enumerate(row_data.get("values", [])):
                    coord = Coordinate(start_row + r_offset, start_col + c_offset)
                    if not self.bounds.contains(coord):
                        continue
                    cell = cell_from_grid(cell_data)
                    if not cell.is_empty or cell.styles:
                        cells[encode(coord.row, coord.col)] = cell
        return cells

    @staticmethod
    def _editable_text(sheet: Sheet, row: int, col: int) -> str:
        cell = sheet.data.get(encode(row, col))
        return entered_text(cell.editable_text) if cell is not None else ""

    def _retry(self, operation: Callable[[], Any], description: str) -> Any:
        """Execute an operation with retry logic and exponential backoff.

        Not-found (404) and unauthorized (401) responses are not retried.

        Raises:
            WorkbookNotFoundError: On a 404 response
            NotAuthenticatedError: On a 401 response
            PersistenceError: If the operation fails after all retries
        """
        last_error: Optional[APIError] = None

        for attempt in range(self.max_retries + 1):
            try:
                return operation()
            except APIError as e:
                code = getattr(e, "code", None)
                if code == 404:
                    raise WorkbookNotFoundError(f"Failed to {description}: not found") from e
                if code == 401:
                    raise NotAuthenticatedError(f"Failed to {description}: {e}") from e
                last_error = e

                if attempt < self.max_retries:
                    delay = self.base_delay * (2 ** attempt)
                    logger.warning(
                        "Attempt %d to %s failed (%s); retrying in %.1fs",
                        attempt + 1, description, e, delay,
                    )
                    time.sleep(delay)

        logger.error("Failed to %s after %d attempts", description, self.max_retries + 1)
        raise PersistenceError(
            f"Failed to {description} after {self.max_retries + 1} attempts: {last_error}"
        ) from last_error
