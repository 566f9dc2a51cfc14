"""
Persistence for learned action-value tables.

Tables are stored as JSON objects keyed by state id, each holding one
value per heading keyed by the heading in degrees::

    {"state-35-0": {"360": 0.0, "90": -200.0, "180": 12.5, "270": 0.0}}
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from airspace.exceptions import ValueTableError


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def save_value_table(path: PathLike, table: Mapping[str, Mapping[Any, float]]) -> Path:
    """
    Write a value table to disk as JSON.

    Args:
        path: Destination file; parent directories are created
        table: Mapping of state id to {heading: value}

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    serializable = {
        str(state_id): {str(int(action)): float(value) for action, value in row.items()}
        for state_id, row in table.items()
    }

    with open(path, 'w') as f:
        json.dump(serializable, f, indent=2, sort_keys=True)

    logger.info(f"Saved value table with {len(serializable)} states to {path}")
    return path


def load_value_table(path: PathLike) -> Dict[str, Dict[str, float]]:
    """
    Read a value table written by :func:`save_value_table`.

    Heading keys are left as strings; the learner parses them.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueTableError: If the file is not a JSON object of objects
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Value table not found: {path}")

    try:
        with open(path, 'r') as f:
            table = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueTableError(f"Value table {path} is not valid JSON: {e}") from e

    if not isinstance(table, dict):
        raise ValueTableError(f"Value table {path} must be a JSON object")

    for state_id, row in table.items():
        if not isinstance(row, dict):
            raise ValueTableError(f"Row for state {state_id} must be a JSON object")

    logger.info(f"Loaded value table with {len(table)} states from {path}")
    return table
