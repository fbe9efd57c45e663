# productstore/utils/__init__.py
# Makes 'utils' a package. Exports utility functions/classes.

from .logger import logger
from .data_conversion import safe_int, safe_float

__all__ = [
    "logger",
    "safe_int",
    "safe_float",
]
