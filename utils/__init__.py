"""Utility modules"""

from .logger import Logger, load_metrics
from .value_table_io import save_value_table, load_value_table

__all__ = ["Logger", "load_metrics", "save_value_table", "load_value_table"]
