"""
Keyboard and pointer event types delivered by the UI shell.

Key names follow the DOM ``KeyboardEvent.key`` values so a browser shell can
forward them unchanged.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from celldesk.grid.address import Coordinate


class Key(Enum):
    """Named keys the editor reacts to."""
    ARROW_UP = "ArrowUp"
    ARROW_DOWN = "ArrowDown"
    ARROW_LEFT = "ArrowLeft"
    ARROW_RIGHT = "ArrowRight"
    TAB = "Tab"
    ENTER = "Enter"
    ESCAPE = "Escape"
    DELETE = "Delete"
    BACKSPACE = "Backspace"

    @classmethod
    def parse(cls, name: str) -> Optional["Key"]:
        """Return the Key for a DOM key name, or None for other keys."""
        try:
            return cls(name)
        except ValueError:
            return None


ARROW_DELTAS = {
    Key.ARROW_UP: (-1, 0),
    Key.ARROW_DOWN: (1, 0),
    Key.ARROW_LEFT: (0, -1),
    Key.ARROW_RIGHT: (0, 1),
}


@dataclass(frozen=True)
class KeyEvent:
    """A key press.

    Attributes:
        key: DOM key name ("ArrowUp", "a", "Enter", ...)
        shift: Shift modifier held
        ctrl: Control (or Command) modifier held
    """
    key: str
    shift: bool = False
    ctrl: bool = False

    @property
    def named(self) -> Optional[Key]:
        return Key.parse(self.key)

    @property
    def is_printable(self) -> bool:
        """Single printable character typed without Ctrl."""
        return len(self.key) == 1 and self.key.isprintable() and not self.ctrl


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event on a cell.

    Attributes:
        coord: Cell under the pointer
        shift: Shift modifier held
        on_fill_handle: The pointer went down on the cell's fill handle
    """
    coord: Coordinate
    shift: bool = False
    on_fill_handle: bool = False
