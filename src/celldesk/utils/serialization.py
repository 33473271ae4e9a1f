"""
Sheet serialization utilities.

Provides JSON serialization and deserialization for sheet cell data. The
persisted shape is a mapping of CellId to cell record::

    {"A1": {"value": "5", "formula": "", "computed": "5"},
     "B1": {"value": "=A1+1", "formula": "=A1+1", "computed": "6",
            "styles": {"bold": true}}}

Cells with no content and no styles are omitted when serializing.
"""

import json
from typing import Any, Dict, Optional

from ..grid.address import GridBounds, decode
from ..grid.model import Cell, Sheet


def sheet_to_dict(sheet: Sheet) -> Dict[str, Dict[str, Any]]:
    """Serialize a sheet's cells to the persisted shape.

    Args:
        sheet: The sheet to serialize

    Returns:
        Dictionary that can be serialized to JSON, keyed by CellId

    Example:
        >>> sheet = Sheet(id="s1", sheet_number=1)
        >>> sheet.data["A1"] = Cell(value="5", computed="5")
        >>> sheet_to_dict(sheet)
        {'A1': {'value': '5', 'formula': '', 'computed': '5'}}
    """
    return {
        cell_id: cell.to_dict()
        for cell_id, cell in sheet.data.items()
        if not cell.is_empty or cell.styles
    }


def sheet_from_dict(
    data: Dict[str, Any],
    bounds: Optional[GridBounds] = None,
) -> Dict[str, Cell]:
    """Deserialize persisted cell data.

    Args:
        data: Mapping of CellId to cell record
        bounds: When given, ids outside the grid are rejected

    Returns:
        Cells keyed by CellId

    Raises:
        TypeError: If data is not a dictionary
        AddressError: If a key is not a valid CellId (or is outside bounds)
        ValueError: If a record is malformed or carries an unknown style
    """
    if not isinstance(data, dict):
        raise TypeError(f"Expected dict, got {type(data)}")

    cells: Dict[str, Cell] = {}
    for cell_id, record in data.items():
        coord = decode(cell_id)
        if bounds is not None:
            bounds.require(coord)
        if not isinstance(record, dict):
            raise ValueError(f"Cell {cell_id} must be an object, got {type(record).__name__}")
        try:
            cells[cell_id] = Cell.from_dict(record)
        except ValueError as e:
            raise ValueError(f"Invalid cell {cell_id}: {e}") from e
    return cells


def to_json(sheet: Sheet, **kwargs) -> str:
    """Serialize a sheet's cells to a JSON string.

    Args:
        sheet: The sheet to serialize
        **kwargs: Additional arguments to pass to json.dumps (e.g., indent=2)
    """
    return json.dumps(sheet_to_dict(sheet), **kwargs)


def from_json(json_str: str, bounds: Optional[GridBounds] = None) -> Dict[str, Cell]:
    """Deserialize cell data from a JSON string.

    Raises:
        ValueError: If JSON is invalid or a cell record is invalid
    """
    if not isinstance(json_str, str):
        raise TypeError(f"Expected str, got {type(json_str)}")

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e

    return sheet_from_dict(data, bounds)
