"""
Input/output module.

Read and write labeled sample collections as JSON.
"""

from .samples import load_samples, save_samples

__all__ = [
    "load_samples",
    "save_samples"
]
