"""
Summation and normalization helpers for count-based probability estimates.
"""

from typing import Iterable, Optional, Union

import numpy as np

from ..config import get_config
from ..exceptions import DegenerateDistributionError

ZERO_ROW_POLICIES = ('uniform', 'zero', 'raise')


def sum_values(values: Union[Iterable[float], np.ndarray]) -> float:
    """
    Sum a flat collection of numbers.
    
    Integer input yields an integer total; anything else is summed in float64.
    """
    arr = np.asarray(list(values) if not isinstance(values, np.ndarray) else values)
    if arr.size == 0:
        return 0
    if np.issubdtype(arr.dtype, np.integer):
        return int(arr.sum())
    return float(arr.astype(np.float64).sum())


def _resolve_policy(policy: Optional[str]) -> str:
    if policy is None:
        policy = get_config('hmm', 'zero_row_policy') or 'uniform'
    if policy not in ZERO_ROW_POLICIES:
        raise ValueError(f"Unknown zero-row policy '{policy}', expected one of {ZERO_ROW_POLICIES}")
    return policy


def normalize(freq: np.ndarray, policy: Optional[str] = None) -> np.ndarray:
    """
    Normalize a frequency vector into a probability distribution.
    
    Args:
        freq: Non-negative counts [n]
        policy: How to treat an all-zero vector ('uniform', 'zero' or 'raise').
            Defaults to the 'hmm.zero_row_policy' config value.
    
    Returns:
        New float64 array summing to 1 (or all zeros under the 'zero' policy)
    
    Raises:
        DegenerateDistributionError: If the total is zero and policy is 'raise'
        ValueError: If policy is not a known zero-row policy
    """
    policy = _resolve_policy(policy)
    freq = np.asarray(freq, dtype=np.float64)
    total = sum_values(freq)
    
    if total > 0:
        return freq / total
    
    if policy == 'raise':
        raise DegenerateDistributionError("Cannot normalize a vector whose counts sum to zero")
    if policy == 'zero':
        return np.zeros_like(freq)
    return np.full_like(freq, 1.0 / len(freq))


def normalize_rows(counts: np.ndarray, policy: Optional[str] = None) -> np.ndarray:
    """
    Normalize every row of a count matrix independently.
    
    Args:
        counts: Non-negative counts [n_rows, n_cols]
        policy: Zero-total row handling, see normalize()
    
    Returns:
        Row-stochastic float64 matrix [n_rows, n_cols]
    
    Raises:
        DegenerateDistributionError: If a row sums to zero and policy is 'raise'
    """
    counts = np.asarray(counts, dtype=np.float64)
    policy = _resolve_policy(policy)
    
    result = np.empty_like(counts)
    for i in range(counts.shape[0]):
        try:
            result[i] = normalize(counts[i], policy)
        except DegenerateDistributionError:
            raise DegenerateDistributionError(f"Row {i} has no observed counts")
    return result
