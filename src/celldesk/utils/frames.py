"""
pandas interop for sheets.

``sheet_to_frame`` exposes a sheet region as a DataFrame labelled the way
the grid is (column letters, 1-based row numbers). ``frame_to_entries``
turns a DataFrame into cell texts that can be applied through the formula
bridge like ordinary edits.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Iterator

import pandas as pd

from celldesk.grid.address import Coordinate, column_label, encode
from celldesk.grid.model import Sheet, format_number

_FIELDS = ("value", "formula", "computed")


def sheet_to_frame(sheet: Sheet, rows: int, cols: int, field: str = "computed") -> pd.DataFrame:
    """Read a rows x cols region starting at A1 into a DataFrame.

    Args:
        sheet: Source sheet
        rows: Number of rows to read
        cols: Number of columns to read
        field: Cell field to read: "value", "formula" or "computed"

    Returns:
        A DataFrame of strings; missing cells read as ""
    """
    if field not in _FIELDS:
        raise ValueError(f"field must be one of {_FIELDS}, got {field!r}")

    body = []
    for row in range(rows):
        line = []
        for col in range(cols):
            cell = sheet.data.get(encode(row, col))
            line.append(getattr(cell, field) if cell is not None else "")
        body.append(line)

    return pd.DataFrame(
        body,
        columns=[column_label(c) for c in range(cols)],
        index=pd.RangeIndex(1, rows + 1),
        dtype=object,
    )


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, numbers.Real):
        if math.isnan(value):
            return ""
        return format_number(value)
    if pd.isna(value):
        return ""
    return str(value)


def frame_to_entries(
    frame: pd.DataFrame,
    origin: Coordinate = Coordinate(0, 0),
    include_header: bool = False,
) -> Iterator[tuple[Coordinate, str]]:
    """Yield (coordinate, text) for every value of a DataFrame.

    Args:
        frame: Data to import
        origin: Grid coordinate of the top-left value
        include_header: Write the column names as the first row

    Numbers are rendered as cells display them (integral floats drop
    ".0"); NaN and None become empty text.
    """
    row = origin.row
    if include_header:
        for offset, name in enumerate(frame.columns):
            yield Coordinate(row, origin.col + offset), _cell_text(name)
        row += 1

    for values in frame.itertuples(index=False, name=None):
        for offset, value in enumerate(values):
            yield Coordinate(row, origin.col + offset), _cell_text(value)
        row += 1
