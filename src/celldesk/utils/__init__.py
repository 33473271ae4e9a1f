"""
Utility functions for celldesk.

This module provides:
- serialization: JSON serialization/deserialization of sheet cell data
- frames: pandas DataFrame import/export
- debounce: trailing-edge call debouncing
- logging: package logging setup
"""

from .debounce import Debouncer
from .frames import frame_to_entries, sheet_to_frame
from .logging import configure_logging
from .serialization import from_json, sheet_from_dict, sheet_to_dict, to_json

__all__ = [
    'Debouncer',
    'frame_to_entries',
    'sheet_to_frame',
    'configure_logging',
    'from_json',
    'sheet_from_dict',
    'sheet_to_dict',
    'to_json',
]
