"""
Formula autocomplete.

Provides the function-name candidate list shown while a formula is being
typed, highlight navigation over it, and placement of the candidate panel
next to the edited cell.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

# Function names offered while typing a formula
DEFAULT_FUNCTIONS: tuple[str, ...] = (
    "ABS", "AND", "AVERAGE", "AVERAGEIF", "CEILING", "CHOOSE", "CONCAT",
    "CONCATENATE", "COUNT", "COUNTA", "COUNTBLANK", "COUNTIF", "COUNTIFS",
    "DATE", "DAY", "EXACT", "FALSE", "FIND", "FLOOR", "HLOOKUP", "IF",
    "IFERROR", "INDEX", "INT", "ISBLANK", "ISERROR", "ISNUMBER", "ISTEXT",
    "LEFT", "LEN", "LOWER", "MATCH", "MAX", "MEDIAN", "MID", "MIN", "MOD",
    "MONTH", "NOT", "NOW", "OR", "POWER", "PRODUCT", "PROPER", "RAND",
    "RIGHT", "ROUND", "ROUNDDOWN", "ROUNDUP", "SQRT", "SUBSTITUTE", "SUM",
    "SUMIF", "SUMIFS", "SUMPRODUCT", "TEXT", "TODAY", "TRIM", "TRUE",
    "UPPER", "VALUE", "VLOOKUP", "XLOOKUP", "YEAR",
)


def matching_functions(text: str, functions: Sequence[str] = DEFAULT_FUNCTIONS) -> list[str]:
    """Function names containing the text after '=' (case-insensitive).

    Returns an empty list when text is not a formula.
    """
    if not text.startswith("="):
        return []
    query = text[1:].strip().upper()
    return [name for name in functions if query in name.upper()]


class CandidateList:
    """A candidate list with a clamped highlight.

    The highlight starts at -1 (nothing highlighted). Moving down from -1
    lands on the first item and moving up from -1 lands on the last; after
    that the highlight is clamped at both ends.
    """

    def __init__(self, items: Sequence[str] = ()) -> None:
        self.items: list[str] = list(items)
        self.highlighted = -1

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def reset(self, items: Sequence[str]) -> None:
        self.items = list(items)
        self.highlighted = -1

    def move(self, step: int) -> int:
        """Move the highlight by step (+1 down, -1 up) and return it."""
        if not self.items:
            self.highlighted = -1
        elif self.highlighted == -1:
            self.highlighted = 0 if step > 0 else len(self.items) - 1
        else:
            self.highlighted = min(max(self.highlighted + step, 0), len(self.items) - 1)
        return self.highlighted

    def choice(self) -> str | None:
        """The highlighted item, or the first item when none is highlighted."""
        if not self.items:
            return None
        if self.highlighted == -1:
            return self.items[0]
        return self.items[self.highlighted]


def completion_for(name: str) -> tuple[str, int]:
    """Text inserted for an accepted function, and the caret position.

    The caret lands just before the closing parenthesis.
    """
    text = f"={name}()"
    return text, len(text) - 1


@dataclass(frozen=True)
class Box:
    """A screen rectangle in viewport pixels."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class Placement:
    """Where the candidate panel goes.

    Attributes:
        left: Panel left edge
        top: Panel top edge
        vertical: "below" or "above" the cell
        horizontal: "right" (panel extends rightwards) or "left"
        max_height: Height limit; smaller than the panel when scrollable
        scrollable: Neither side had room, the panel scrolls
    """
    left: float
    top: float
    vertical: str
    horizontal: str
    max_height: float
    scrollable: bool


def place_panel(cell: Box, panel_width: float, panel_height: float,
                viewport_width: float, viewport_height: float) -> Placement:
    """Position the candidate panel next to the edited cell.

    Below-right is preferred. When the panel does not fit below it goes
    above; when it fits on neither side it is placed in the roomier side
    and made scrollable. Horizontally the panel extends leftwards from the
    cell's right edge when it would overflow the right side of the viewport.
    """
    space_right = viewport_width - cell.left
    if panel_width <= space_right or cell.right < panel_width:
        horizontal = "right"
        left = cell.left
    else:
        horizontal = "left"
        left = cell.right - panel_width

    space_below = viewport_height - cell.bottom
    space_above = cell.top
    if panel_height <= space_below:
        return Placement(left, cell.bottom, "below", horizontal, panel_height, False)
    if panel_height <= space_above:
        return Placement(left, cell.top - panel_height, "above", horizontal, panel_height, False)

    if space_below >= space_above:
        return Placement(left, cell.bottom, "below", horizontal, space_below, True)
    return Placement(left, 0.0, "above", horizontal, space_above, True)
