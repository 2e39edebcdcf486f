"""
Cumulative-distribution construction and inverse-transform sampling.
"""

import numpy as np


def log_to_cdf(log_probs: np.ndarray) -> np.ndarray:
    """
    Turn log-probabilities into a cumulative distribution.
    
    Works on a single row or row-wise on a matrix. The last entry of every row
    is pinned to exactly 1.0 so rounding drift can never leave a gap at the top.
    
    Args:
        log_probs: Log-probability row [n] or matrix [rows, n]
    
    Returns:
        Non-decreasing cumulative sums with the same shape, ending at 1.0
    """
    log_probs = np.asarray(log_probs, dtype=np.float64)
    if log_probs.shape[-1] == 0:
        raise ValueError("Cannot build a CDF from an empty row")
    
    cdf = np.cumsum(np.exp(log_probs), axis=-1)
    cdf[..., -1] = 1.0
    # Drift can push an interior sum above 1.0
    np.minimum(cdf, 1.0, out=cdf)
    return cdf


def draw_from(cdf: np.ndarray, rng: np.random.Generator) -> int:
    """
    Draw an index from a cumulative distribution.
    
    Returns the smallest i with cdf[i] > r for r ~ U[0, 1), so a draw landing
    exactly on a boundary goes to the index whose cumulative sum exceeds it.
    """
    r = rng.random()
    return int(np.searchsorted(cdf, r, side='right'))
