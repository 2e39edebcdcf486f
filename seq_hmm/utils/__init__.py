"""
Numeric utilities.
"""

from .numeric import sum_values, normalize, normalize_rows, ZERO_ROW_POLICIES

__all__ = [
    "sum_values",
    "normalize",
    "normalize_rows",
    "ZERO_ROW_POLICIES"
]
