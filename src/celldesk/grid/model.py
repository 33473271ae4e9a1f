"""
Spreadsheet data model classes.

This module provides the records the rest of the package operates on:
- Cell: raw value, formula, computed display string and optional styles
- StyleKey: the closed set of style attributes a cell may carry
- Sheet: one tab of a workbook, keyed by CellId
- Workbook: a titled, ordered collection of sheets

It also owns the two small conversions every component must agree on:
``engine_index`` (sheet number to formula-engine sheet index) and the
numeric parse/format pair used by fill and formula read-back.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

StyleValue = Union[bool, str]


class StyleKey(Enum):
    """Style attributes a cell may carry. Values are the persisted names."""
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    FONT_FAMILY = "fontFamily"
    FONT_SIZE = "fontSize"
    COLOR = "color"
    BACKGROUND = "background"
    ALIGN = "align"


# Keys whose values are flags rather than strings
TOGGLE_STYLES = frozenset({
    StyleKey.BOLD,
    StyleKey.ITALIC,
    StyleKey.UNDERLINE,
    StyleKey.STRIKETHROUGH,
})


def engine_index(sheet_number: int) -> int:
    """Map a 1-based persisted sheet number to the engine's 0-based index.

    Raises:
        ValueError: If sheet_number is not a positive integer
    """
    if sheet_number < 1:
        raise ValueError(f"Sheet numbers start at 1, got {sheet_number}")
    return sheet_number - 1


def parse_number(text: str) -> Optional[float]:
    """Parse text as a finite number, or return None if it is not numeric.

    Surrounding whitespace is ignored. Empty text, digit separators and
    non-finite values ("inf", "nan") are not numeric.
    """
    stripped = text.strip()
    if not stripped or "_" in stripped:
        return None
    try:
        number = float(stripped)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def format_number(number: float) -> str:
    """Render a number the way cells display it: integral values drop ".0"."""
    if float(number).is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(float(number))


def _text_field(data: Dict[str, Any], name: str) -> Any:
    # null reads as empty; any other non-string is left for Cell to reject
    value = data.get(name)
    return "" if value is None else value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Cell:
    """A single grid cell.

    Attributes:
        value: Raw text as entered
        formula: Equal to value when value starts with '=', otherwise ""
        computed: Display string; only the formula bridge derives it from
            the formula
        styles: Style attributes keyed by StyleKey
    """
    value: str = ""
    formula: str = ""
    computed: str = ""
    styles: Dict[StyleKey, StyleValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("value", "formula", "computed"):
            if not isinstance(getattr(self, name), str):
                raise ValueError(
                    f"Cell {name} must be a string, got {type(getattr(self, name)).__name__}"
                )
        if not isinstance(self.styles, dict):
            raise ValueError("Cell styles must be a mapping")
        if self.formula and not self.value.startswith("="):
            raise ValueError(
                f"Cell formula {self.formula!r} requires a value starting with '='"
            )

    @property
    def is_empty(self) -> bool:
        return not (self.value or self.formula or self.computed)

    @property
    def editable_text(self) -> str:
        """Text shown in the formula bar and seeded into the editor."""
        return self.formula or self.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted cell shape."""
        data: Dict[str, Any] = {
            "value": self.value,
            "formula": self.formula,
            "computed": self.computed,
        }
        if self.styles:
            data["styles"] = {key.value: val for key, val in self.styles.items()}
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cell":
        """Create from the persisted cell shape.

        Raises:
            ValueError: If a style name is unknown or a field has the wrong type
        """
        raw_styles = data.get("styles") or {}
        if not isinstance(raw_styles, dict):
            raise ValueError("Cell styles must be an object")
        styles: Dict[StyleKey, StyleValue] = {}
        for name, val in raw_styles.items():
            try:
                styles[StyleKey(name)] = val
            except ValueError:
                raise ValueError(f"Unknown style attribute: {name!r}") from None
        return cls(
            value=_text_field(data, "value"),
            formula=_text_field(data, "formula"),
            computed=_text_field(data, "computed"),
            styles=styles,
        )


@dataclass
class Sheet:
    """One tab of a workbook.

    Attributes:
        id: Storage identifier of the sheet
        sheet_number: 1-based persisted ordering key
        data: Cells keyed by CellId
        created_at: Creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """
    id: str
    sheet_number: int
    data: Dict[str, Cell] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.sheet_number < 1:
            raise ValueError("Sheet numbers must be positive integers")

    @property
    def title(self) -> str:
        return f"Sheet{self.sheet_number}"

    @property
    def engine_index(self) -> int:
        return engine_index(self.sheet_number)

    def touch(self) -> None:
        self.updated_at = _utcnow()


@dataclass
class Workbook:
    """A titled workbook whose sheets are kept ordered by sheet number."""
    id: str
    title: str
    sheets: List[Sheet] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.sheets.sort(key=lambda s: s.sheet_number)

    def next_sheet_number(self) -> int:
        return max((s.sheet_number for s in self.sheets), default=0) + 1

    def add_sheet(self, sheet: Sheet) -> Sheet:
        """Insert a sheet, keeping sheet-number order.

        Raises:
            ValueError: If the sheet number or id is already taken
        """
        for existing in self.sheets:
            if existing.sheet_number == sheet.sheet_number:
                raise ValueError(f"Duplicate sheet number: {sheet.sheet_number}")
            if existing.id == sheet.id:
                raise ValueError(f"Duplicate sheet id: {sheet.id!r}")
        self.sheets.append(sheet)
        self.sheets.sort(key=lambda s: s.sheet_number)
        return sheet

    def sheet_by_id(self, sheet_id: str) -> Sheet:
        for sheet in self.sheets:
            if sheet.id == sheet_id:
                return sheet
        raise KeyError(f"No sheet with id {sheet_id!r}")

    def sheet_by_number(self, sheet_number: int) -> Sheet:
        for sheet in self.sheets:
            if sheet.sheet_number == sheet_number:
                return sheet
        raise KeyError(f"No sheet numbered {sheet_number}")
