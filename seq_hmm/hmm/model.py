"""
Discrete Hidden Markov Model base class.

This module holds the parameter storage shared by every model order: the
start, transition and emission distributions, conversion between linear and
log representation, supervised estimation and model comparison. Subclasses
supply the order-specific generate/predict algorithms.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .types import Sample
from .estimation import prepare_samples, infer_dimensions, estimate_parameters
from ..config import get_config
from ..exceptions import DegenerateDistributionError, ModelStateError
from ..logger import get_logger

logger = get_logger(__name__)


def check_stochastic(pi: np.ndarray, A: np.ndarray, B: np.ndarray,
                     tolerance: Optional[float] = None) -> None:
    """
    Check linear-space parameters are non-negative and sum to one row-wise.

    Raises:
        DegenerateDistributionError: If any tensor violates stochastic properties
    """
    if tolerance is None:
        tolerance = get_config('hmm', 'validation_tolerance') or 1e-4

    if np.any(pi < 0):
        raise DegenerateDistributionError("Initial probabilities contain negative values")
    if not np.isclose(pi.sum(), 1.0, atol=tolerance):
        raise DegenerateDistributionError(f"Initial probabilities sum to {pi.sum()}, expected 1.0")

    if np.any(A < 0):
        raise DegenerateDistributionError("Transition matrix contains negative values")
    row_sums_A = A.sum(axis=1)
    if not np.allclose(row_sums_A, 1.0, atol=tolerance):
        raise DegenerateDistributionError(f"Transition matrix rows don't sum to 1.0: {row_sums_A}")

    if np.any(B < 0):
        raise DegenerateDistributionError("Emission matrix contains negative values")
    row_sums_B = B.sum(axis=1)
    if not np.allclose(row_sums_B, 1.0, atol=tolerance):
        raise DegenerateDistributionError(f"Emission matrix rows don't sum to 1.0: {row_sums_B}")


class HiddenMarkovModel(ABC):
    """
    Discrete HMM parameter store.

    The three tensors are always in the same representation: either linear
    probabilities (`is_log` False) or their natural logarithms (`is_log` True).
    Every public entry point that fills the parameters leaves the model in
    log mode.

    Attributes:
        pi: Start distribution [n_states]
        A: Transition matrix [n_states, n_states], A[i,j] = P(q_t+1=j | q_t=i)
        B: Emission matrix [n_states, n_symbols], B[i,k] = P(o_t=k | q_t=i)
    """

    def __init__(self,
                 start_probability: Optional[np.ndarray] = None,
                 transition_probability: Optional[np.ndarray] = None,
                 emission_probability: Optional[np.ndarray] = None,
                 random_state: Optional[int] = None):
        """
        Initialize the model, either empty or from linear-space parameters.

        Args:
            start_probability: Initial state probabilities [n_states]
            transition_probability: Transition matrix [n_states, n_states]
            emission_probability: Emission matrix [n_states, n_symbols]
            random_state: Seed for the model's random generator

        Raises:
            ValueError: If only some of the three tensors are given
            DegenerateDistributionError: If the given tensors are not valid distributions
        """
        self.pi = None
        self.A = None
        self.B = None
        self.is_log = False
        self.rng = np.random.default_rng(random_state)

        supplied = [p is not None for p in (start_probability, transition_probability, emission_probability)]
        if all(supplied):
            self.set_parameters(start_probability, transition_probability, emission_probability)
        elif any(supplied):
            raise ValueError("start, transition and emission probabilities must be given together")
        else:
            logger.debug(f"Created empty {self.__class__.__name__}")

    @property
    def n_states(self) -> int:
        return 0 if self.pi is None else len(self.pi)

    @property
    def n_symbols(self) -> int:
        return 0 if self.B is None else self.B.shape[1]

    @property
    def is_empty(self) -> bool:
        return self.pi is None or self.A is None or self.B is None

    def set_parameters(self, pi: np.ndarray, A: np.ndarray, B: np.ndarray) -> None:
        """
        Replace the parameters with validated linear-space tensors.

        The model ends in log mode.

        Args:
            pi: Initial state probabilities [n_states]
            A: Transition matrix [n_states, n_states]
            B: Emission matrix [n_states, n_symbols]

        Raises:
            DegenerateDistributionError: On shape mismatch or non-stochastic rows
        """
        pi = np.array(pi, dtype=np.float64)
        A = np.array(A, dtype=np.float64)
        B = np.array(B, dtype=np.float64)

        if pi.ndim != 1 or len(pi) == 0:
            raise DegenerateDistributionError(f"pi must be a non-empty vector, got shape {pi.shape}")
        n_states = len(pi)
        if A.shape != (n_states, n_states):
            raise DegenerateDistributionError(
                f"A shape {A.shape} doesn't match expected ({n_states}, {n_states})"
            )
        if B.ndim != 2 or B.shape[0] != n_states or B.shape[1] == 0:
            raise DegenerateDistributionError(
                f"B shape {B.shape} doesn't match expected ({n_states}, n_symbols)"
            )

        check_stochastic(pi, A, B)

        self.pi, self.A, self.B = pi, A, B
        self.is_log = False
        self.to_log()

        logger.debug(f"Parameters set: {n_states} states, {B.shape[1]} symbols")

    def get_parameters(self, log: bool = False) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Get copies of the parameters.

        Args:
            log: Return log-probabilities instead of probabilities

        Returns:
            Tuple of (pi, A, B)
        """
        self._require_parameters()
        if log:
            return self._log_parameters(copy=True)
        return self._linear_parameters()

    def validate_stochastic_matrices(self) -> bool:
        """
        Validate that every distribution is non-negative and sums to one.

        Returns:
            bool: True if all tensors are valid distributions

        Raises:
            DegenerateDistributionError: If any tensor violates stochastic properties
        """
        self._require_parameters()
        check_stochastic(*self._linear_parameters())
        logger.debug("All stochastic matrix properties validated successfully")
        return True

    def to_log(self) -> None:
        """
        Convert all three tensors from probabilities to log-probabilities in place.

        Zero probabilities become -inf. Does nothing on an empty model.

        Raises:
            ModelStateError: If the model is already in log mode
        """
        if self.is_empty:
            return
        if self.is_log:
            raise ModelStateError("Model is already in log mode")

        with np.errstate(divide='ignore'):
            self.pi = np.log(self.pi)
            self.A = np.log(self.A)
            self.B = np.log(self.B)
        self.is_log = True

    def un_log(self) -> None:
        """
        Convert all three tensors from log-probabilities back to probabilities in place.

        Raises:
            ModelStateError: If the model is empty or not in log mode
        """
        self._require_parameters()
        if not self.is_log:
            raise ModelStateError("Model is not in log mode")

        self.pi = np.exp(self.pi)
        self.A = np.exp(self.A)
        self.B = np.exp(self.B)
        self.is_log = False

    def train(self,
              samples: Iterable,
              n_states: Optional[int] = None,
              n_symbols: Optional[int] = None,
              zero_row_policy: Optional[str] = None) -> None:
        """
        Estimate parameters from fully labeled trajectories by maximum likelihood.

        Every sample is validated before the model is touched, so a bad sample
        leaves the previous parameters intact. Rows without any counts follow
        the 'hmm.zero_row_policy' setting.

        Args:
            samples: Sample objects, [observations, states] pairs or dict records
            n_states: Number of hidden states (default: 1 + largest observed state)
            n_symbols: Number of symbols (default: 1 + largest observed symbol)
            zero_row_policy: Override for 'hmm.zero_row_policy'

        Raises:
            InvalidSampleError: If any sample is malformed
            DegenerateDistributionError: If a row has no counts under the 'raise' policy
        """
        prepared = prepare_samples(samples)
        if not prepared:
            logger.warning("train() called with no samples; model left unchanged")
            return

        n_states, n_symbols = infer_dimensions(prepared, n_states, n_symbols)
        pi, A, B = estimate_parameters(prepared, n_states, n_symbols, zero_row_policy)

        self.pi, self.A, self.B = pi, A, B
        self.is_log = False
        self.to_log()

        total_length = sum(len(s) for s in prepared)
        logger.info(f"Trained {self.__class__.__name__} on {len(prepared)} samples "
                    f"({total_length} steps): {n_states} states, {n_symbols} symbols")

    def similar(self, other: "HiddenMarkovModel", tolerance: Optional[float] = None) -> bool:
        """
        Element-wise approximate comparison of two models in probability space.

        Args:
            other: Model to compare with
            tolerance: Maximum absolute difference (default: 'hmm.similarity_tolerance')

        Returns:
            True if every start, transition and emission entry is within tolerance
        """
        if tolerance is None:
            tolerance = get_config('hmm', 'similarity_tolerance')

        if self.is_empty or other.is_empty:
            return self.is_empty and other.is_empty

        mine = self._linear_parameters()
        theirs = other._linear_parameters()

        for a, b in zip(mine, theirs):
            if a.shape != b.shape:
                return False

        if not np.all(np.abs(mine[0] - theirs[0]) <= tolerance):
            return False
        for i in range(self.n_states):
            if not np.all(np.abs(mine[1][i] - theirs[1][i]) <= tolerance):
                return False
            if not np.all(np.abs(mine[2][i] - theirs[2][i]) <= tolerance):
                return False
        return True

    @abstractmethod
    def generate(self, length: int, rng: Optional[np.random.Generator] = None) -> Sample:
        """Sample one labeled trajectory of the given length."""

    @abstractmethod
    def predict(self, observations, states: Optional[np.ndarray] = None) -> Tuple[np.ndarray, float]:
        """Decode the most likely state path and its log-probability."""

    def generate_samples(self,
                         min_length: int,
                         max_length: int,
                         size: int,
                         rng: Optional[np.random.Generator] = None) -> List[Sample]:
        """
        Sample `size` independent trajectories.

        Each length is drawn uniformly from [min_length, max_length); if the
        two bounds are equal every trajectory has exactly that length.

        Raises:
            ValueError: If the bounds or size are invalid
        """
        if min_length < 0 or max_length < min_length:
            raise ValueError(f"Invalid length range [{min_length}, {max_length})")
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")

        rng = self._resolve_rng(rng)
        samples = []
        for _ in range(size):
            if max_length == min_length:
                length = min_length
            else:
                length = int(rng.integers(min_length, max_length))
            samples.append(self.generate(length, rng=rng))

        logger.debug(f"Generated {size} samples with lengths in [{min_length}, {max_length})")
        return samples

    def _resolve_rng(self, rng: Optional[np.random.Generator]) -> np.random.Generator:
        return self.rng if rng is None else rng

    def _require_parameters(self) -> None:
        if self.is_empty:
            raise ModelStateError(f"{self.__class__.__name__} has no parameters; train it first")

    def _linear_parameters(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        if self.is_log:
            return np.exp(self.pi), np.exp(self.A), np.exp(self.B)
        return self.pi.copy(), self.A.copy(), self.B.copy()

    def _log_parameters(self, copy: bool = False) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        if self.is_log:
            if copy:
                return self.pi.copy(), self.A.copy(), self.B.copy()
            return self.pi, self.A, self.B
        with np.errstate(divide='ignore'):
            return np.log(self.pi), np.log(self.A), np.log(self.B)

    def __repr__(self) -> str:
        mode = 'log' if self.is_log else 'linear'
        return (f"{self.__class__.__name__}(n_states={self.n_states}, "
                f"n_symbols={self.n_symbols}, mode={mode})")
