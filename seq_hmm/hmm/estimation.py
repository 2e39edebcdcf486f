"""
Supervised maximum-likelihood estimation from labeled trajectories.

All functions here operate on plain sample collections and count arrays so
models of any order can share them.
"""

from typing import Iterable, List, Optional, Tuple

import numpy as np

from .types import Sample
from ..exceptions import InvalidSampleError
from ..utils.numeric import normalize, normalize_rows


def prepare_samples(samples: Iterable) -> List[Sample]:
    """
    Coerce and validate every sample before any estimation happens.
    
    Args:
        samples: Sample objects, [observations, states] pairs or dict records
    
    Returns:
        List of validated Sample objects
    
    Raises:
        InvalidSampleError: If any sample is malformed
    """
    prepared = []
    for idx, raw in enumerate(samples):
        try:
            sample = Sample.from_pair(raw)
            sample.validate()
        except InvalidSampleError as e:
            raise InvalidSampleError(f"Invalid sample at index {idx}: {e}")
        except (TypeError, ValueError) as e:
            raise InvalidSampleError(f"Invalid sample at index {idx}: {e}")
        prepared.append(sample)
    return prepared


def infer_dimensions(samples: List[Sample],
                     n_states: Optional[int] = None,
                     n_symbols: Optional[int] = None) -> Tuple[int, int]:
    """
    Derive (n_states, n_symbols) as one past the largest observed index.
    
    Explicit dimensions are honoured but must cover every observed index.
    """
    max_state = max(int(s.states.max()) for s in samples)
    max_symbol = max(int(s.observations.max()) for s in samples)
    
    if n_states is None:
        n_states = max_state + 1
    elif n_states <= max_state:
        raise InvalidSampleError(f"n_states={n_states} but samples use state index {max_state}")
    
    if n_symbols is None:
        n_symbols = max_symbol + 1
    elif n_symbols <= max_symbol:
        raise InvalidSampleError(f"n_symbols={n_symbols} but samples use symbol index {max_symbol}")
    
    return n_states, n_symbols


def count_start(samples: List[Sample], n_states: int) -> np.ndarray:
    """Count how often each state opens a trajectory."""
    counts = np.zeros(n_states, dtype=np.int64)
    for sample in samples:
        counts[sample.states[0]] += 1
    return counts


def count_transitions(samples: List[Sample], n_states: int) -> np.ndarray:
    """Count adjacent (state[t-1], state[t]) pairs."""
    counts = np.zeros((n_states, n_states), dtype=np.int64)
    for sample in samples:
        np.add.at(counts, (sample.states[:-1], sample.states[1:]), 1)
    return counts


def count_emissions(samples: List[Sample], n_states: int, n_symbols: int) -> np.ndarray:
    """Count (state[t], observation[t]) pairs."""
    counts = np.zeros((n_states, n_symbols), dtype=np.int64)
    for sample in samples:
        np.add.at(counts, (sample.states, sample.observations), 1)
    return counts


def estimate_parameters(samples: List[Sample],
                        n_states: int,
                        n_symbols: int,
                        zero_row_policy: Optional[str] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Maximum-likelihood start, transition and emission distributions.
    
    Args:
        samples: Validated samples
        n_states: Number of hidden states
        n_symbols: Number of observation symbols
        zero_row_policy: Handling of rows with no counts (see utils.numeric.normalize)
    
    Returns:
        Tuple of linear-space (pi, A, B)
    """
    pi = normalize(count_start(samples, n_states), zero_row_policy)
    A = normalize_rows(count_transitions(samples, n_states), zero_row_policy)
    B = normalize_rows(count_emissions(samples, n_states, n_symbols), zero_row_policy)
    return pi, A, B
