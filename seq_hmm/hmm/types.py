"""
Labeled trajectory type shared by the generator and the estimator.
"""

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from ..exceptions import InvalidSampleError


def as_index_array(values, field: str) -> np.ndarray:
    """Flatten to int64, refusing values that are not whole numbers."""
    arr = np.asarray(values).reshape(-1)
    if arr.size == 0 or np.issubdtype(arr.dtype, np.integer):
        return arr.astype(np.int64)
    if np.issubdtype(arr.dtype, np.bool_) or not np.issubdtype(arr.dtype, np.number):
        raise InvalidSampleError(f"{field} must be integer indices, got dtype {arr.dtype}")
    if not np.all(np.isfinite(arr)) or np.any(arr != np.round(arr)):
        raise InvalidSampleError(f"{field} contain non-integer values")
    return arr.astype(np.int64)


@dataclass
class Sample:
    """
    One fully labeled trajectory.
    
    observations[t] is the symbol emitted at time t and states[t] the hidden
    state that emitted it. Both are 1-D integer arrays of equal length.
    """
    observations: np.ndarray
    states: np.ndarray
    
    def __post_init__(self):
        self.observations = as_index_array(self.observations, "Observations")
        self.states = as_index_array(self.states, "States")
    
    def __len__(self) -> int:
        return len(self.observations)
    
    @classmethod
    def from_pair(cls, pair: Union["Sample", Sequence[Sequence[int]]]) -> "Sample":
        """
        Build a Sample from a `[observations, states]` pair.
        
        Raises:
            InvalidSampleError: If the input does not hold exactly two sequences
        """
        if isinstance(pair, Sample):
            return pair
        if isinstance(pair, dict):
            try:
                return cls(pair['observations'], pair['states'])
            except KeyError as e:
                raise InvalidSampleError(f"Sample record is missing key {e}")
        if len(pair) != 2:
            raise InvalidSampleError(f"Expected [observations, states] pair, got {len(pair)} sequences")
        return cls(pair[0], pair[1])
    
    def validate(self) -> None:
        """
        Check the sample can be used for supervised estimation.
        
        Raises:
            InvalidSampleError: On length mismatch, empty sequences or negative indices
        """
        if len(self.observations) != len(self.states):
            raise InvalidSampleError(
                f"Observation and state sequences differ in length: "
                f"{len(self.observations)} != {len(self.states)}"
            )
        if len(self.states) == 0:
            raise InvalidSampleError("Sample sequences are empty")
        if np.any(self.observations < 0) or np.any(self.states < 0):
            raise InvalidSampleError("Sample contains negative indices")
    
    def to_dict(self) -> dict:
        """JSON-friendly representation."""
        return {
            'observations': self.observations.tolist(),
            'states': self.states.tolist()
        }
