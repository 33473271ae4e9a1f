"""
Cell addressing.

This module converts between textual cell identifiers and 0-indexed
coordinates, and provides the rectangle algebra used by selection and fill:
- Coordinate: a (row, col) pair, 0-indexed
- encode / decode: Coordinate <-> CellId ("A1", "AA12")
- Rect: a rectangular cell region with canonical min/max corners
- GridBounds: the configured grid dimensions
"""

import re
from typing import Iterator, NamedTuple, Optional

from celldesk.exceptions import AddressError

_CELL_ID_RE = re.compile(r"^([A-Z]+)([1-9][0-9]*)$")
_LABEL_RE = re.compile(r"^[A-Z]+$")


class Coordinate(NamedTuple):
    """A 0-indexed (row, col) cell coordinate."""

    row: int
    col: int


def column_label(col: int) -> str:
    """Convert a column number (0-indexed) to its letter label.

    Args:
        col: Column number (0 = A, 25 = Z, 26 = AA, etc.)

    Returns:
        Column letter(s)

    Raises:
        AddressError: If col is negative
    """
    if col < 0:
        raise AddressError(f"Column must be non-negative, got {col}")
    # bijective base-26: there is no zero digit
    col_1indexed = col + 1
    result = ""
    while col_1indexed > 0:
        col_1indexed -= 1
        result = chr(65 + (col_1indexed % 26)) + result
        col_1indexed //= 26
    return result


def column_index(label: str) -> int:
    """Convert column letter(s) to a column number (0-indexed).

    Args:
        label: Uppercase column letter(s) (A, Z, AA, etc.)

    Returns:
        Column number (A = 0, Z = 25, AA = 26, etc.)

    Raises:
        AddressError: If label is not made of uppercase letters
    """
    if not isinstance(label, str) or not _LABEL_RE.fullmatch(label):
        raise AddressError(f"Invalid column label: {label!r}")
    col_1indexed = 0
    for char in label:
        col_1indexed = col_1indexed * 26 + (ord(char) - 64)
    return col_1indexed - 1


def encode(row: int, col: int) -> str:
    """Encode a 0-indexed coordinate as a CellId.

    Args:
        row: Row (0-indexed, non-negative)
        col: Column (0-indexed, non-negative)

    Returns:
        CellId such as "A1" or "AA12"

    Raises:
        AddressError: If row or col is negative
    """
    if row < 0:
        raise AddressError(f"Row must be non-negative, got {row}")
    return f"{column_label(col)}{row + 1}"


def decode(cell_id: str) -> Coordinate:
    """Decode a CellId into a 0-indexed coordinate.

    The alphabetic prefix and numeric suffix are split by pattern match, so
    multi-letter columns decode correctly.

    Args:
        cell_id: Canonical CellId (uppercase letters, 1-based row)

    Returns:
        Coordinate with 0-indexed row and column

    Raises:
        AddressError: If cell_id is not a well-formed CellId
    """
    if not isinstance(cell_id, str):
        raise AddressError(f"CellId must be a string, got {type(cell_id).__name__}")
    match = _CELL_ID_RE.fullmatch(cell_id)
    if not match:
        raise AddressError(f"Invalid cell id: {cell_id!r}")
    letters, digits = match.groups()
    return Coordinate(int(digits) - 1, column_index(letters))


class GridBounds(NamedTuple):
    """Grid dimensions (number of rows and columns)."""

    rows: int
    cols: int

    def contains(self, coord: Coordinate) -> bool:
        return 0 <= coord.row < self.rows and 0 <= coord.col < self.cols

    def clamp(self, row: int, col: int) -> Coordinate:
        """Clamp a (possibly out-of-range) position onto the grid."""
        return Coordinate(
            min(max(row, 0), self.rows - 1),
            min(max(col, 0), self.cols - 1),
        )

    def require(self, coord: Coordinate) -> Coordinate:
        """Return coord unchanged, or raise AddressError if it is off-grid."""
        if not self.contains(coord):
            raise AddressError(
                f"Coordinate {tuple(coord)} is outside the {self.rows}x{self.cols} grid"
            )
        return coord


class Rect:
    """A rectangular cell region with canonical corners.

    IMPORTANT: Rect always stores its top-left corner in (row, col) and its
    bottom-right corner in (row_end, col_end), whatever order the corners were
    given in. Two rectangles spanning the same cells compare equal and render
    the same A1 label.

    Attributes:
        row: Top row (0-indexed)
        col: Left column (0-indexed)
        row_end: Bottom row (0-indexed, inclusive)
        col_end: Right column (0-indexed, inclusive)
    """

    def __init__(
        self,
        row: int,
        col: int,
        row_end: Optional[int] = None,
        col_end: Optional[int] = None
    ) -> None:
        if row < 0 or col < 0:
            raise AddressError("Row and column must be non-negative (0-indexed)")

        self.row = row
        self.col = col
        self.row_end = row_end if row_end is not None else row
        self.col_end = col_end if col_end is not None else col

        if self.row_end < self.row or self.col_end < self.col:
            raise AddressError("End coordinates must be >= start coordinates")

    @classmethod
    def from_corners(cls, a: Coordinate, b: Coordinate) -> "Rect":
        """Build the rectangle spanned by two corners given in any order."""
        return cls(
            row=min(a.row, b.row),
            col=min(a.col, b.col),
            row_end=max(a.row, b.row),
            col_end=max(a.col, b.col),
        )

    @classmethod
    def from_a1(cls, notation: str) -> "Rect":
        """Parse "A1" or "A1:B10" notation.

        Raises:
            AddressError: If notation is invalid
        """
        notation = notation.strip()
        if not notation:
            raise AddressError("Empty range notation")

        parts = notation.split(":")
        if len(parts) > 2:
            raise AddressError(f"Invalid range notation: {notation}")
        start = decode(parts[0])
        end = decode(parts[1]) if len(parts) == 2 else start
        return cls.from_corners(start, end)

    @property
    def top_left(self) -> Coordinate:
        return Coordinate(self.row, self.col)

    @property
    def bottom_right(self) -> Coordinate:
        return Coordinate(self.row_end, self.col_end)

    @property
    def is_single(self) -> bool:
        return self.row == self.row_end and self.col == self.col_end

    def to_a1(self) -> str:
        """Render as "A1" for a single cell or "A1:B2" for a region."""
        start_cell = encode(self.row, self.col)
        if self.is_single:
            return start_cell
        return f"{start_cell}:{encode(self.row_end, self.col_end)}"

    def contains(self, coord: Coordinate) -> bool:
        return (
            self.row <= coord.row <= self.row_end
            and self.col <= coord.col <= self.col_end
        )

    def cells(self) -> Iterator[Coordinate]:
        """Iterate over contained coordinates in row-major order."""
        for r in range(self.row, self.row_end + 1):
            for c in range(self.col, self.col_end + 1):
                yield Coordinate(r, c)

    def intersect(self, other: "Rect") -> Optional["Rect"]:
        """Compute the intersection of two rectangles, or None if disjoint."""
        row_start = max(self.row, other.row)
        col_start = max(self.col, other.col)
        row_end = min(self.row_end, other.row_end)
        col_end = min(self.col_end, other.col_end)

        if row_start > row_end or col_start > col_end:
            return None

        return Rect(row=row_start, col=col_start, row_end=row_end, col_end=col_end)

    def union(self, other: "Rect") -> "Rect":
        """Compute the bounding box of two rectangles."""
        return Rect(
            row=min(self.row, other.row),
            col=min(self.col, other.col),
            row_end=max(self.row_end, other.row_end),
            col_end=max(self.col_end, other.col_end),
        )

    def offset(self, row_offset: int = 0, col_offset: int = 0) -> "Rect":
        """Create a new Rect shifted by the given amounts.

        Raises:
            AddressError: If the shift would produce negative coordinates
        """
        if self.row + row_offset < 0 or self.col + col_offset < 0:
            raise AddressError("Offset results in invalid coordinates (< 0)")
        return Rect(
            row=self.row + row_offset,
            col=self.col + col_offset,
            row_end=self.row_end + row_offset,
            col_end=self.col_end + col_offset,
        )

    def __len__(self) -> int:
        return (self.row_end - self.row + 1) * (self.col_end - self.col + 1)

    def __repr__(self) -> str:
        return f"Rect({self.to_a1()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rect):
            return NotImplemented
        return (
            self.row == other.row
            and self.col == other.col
            and self.row_end == other.row_end
            and self.col_end == other.col_end
        )

    def __hash__(self) -> int:
        return hash((self.row, self.col, self.row_end, self.col_end))
