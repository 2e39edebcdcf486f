"""
First-order discrete Hidden Markov Model.

The hidden chain depends only on the previous state and each observation
only on the state at its own time step. Sampling is ancestral and decoding
uses the Viterbi algorithm in log space.
"""

from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .model import HiddenMarkovModel
from .sampling import log_to_cdf, draw_from
from .types import Sample, as_index_array
from ..logger import get_logger

logger = get_logger(__name__)


class FirstOrderHMM(HiddenMarkovModel):
    """
    First-order HMM with discrete emissions.

    Example:
        >>> model = FirstOrderHMM([0.6, 0.4],
        ...                       [[0.7, 0.3], [0.4, 0.6]],
        ...                       [[0.5, 0.4, 0.1], [0.1, 0.3, 0.6]])
        >>> path, log_prob = model.predict([0, 1, 2])
        >>> path.tolist()
        [0, 0, 1]
    """

    def generate(self, length: int, rng: Optional[np.random.Generator] = None) -> Sample:
        """
        Sample one trajectory by walking the chain for `length` steps.

        The first state is drawn from pi, each later state from the transition
        row of its predecessor, and every observation from the emission row
        of its own state.

        Args:
            length: Number of time steps (0 gives empty sequences)
            rng: Random generator (default: the model's own)

        Returns:
            Sample with observations and states of exactly `length` entries

        Raises:
            ValueError: If length is negative
            ModelStateError: If the model has no parameters
        """
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        self._require_parameters()
        rng = self._resolve_rng(rng)

        observations = np.zeros(length, dtype=np.int64)
        states = np.zeros(length, dtype=np.int64)
        if length == 0:
            return Sample(observations, states)

        log_pi, log_A, log_B = self._log_parameters()
        pi_cdf = log_to_cdf(log_pi)
        A_cdf = log_to_cdf(log_A)
        B_cdf = log_to_cdf(log_B)

        states[0] = draw_from(pi_cdf, rng)
        observations[0] = draw_from(B_cdf[states[0]], rng)
        for t in range(1, length):
            states[t] = draw_from(A_cdf[states[t - 1]], rng)
            observations[t] = draw_from(B_cdf[states[t]], rng)

        return Sample(observations, states)

    def predict(self,
                observations: Union[Sequence[int], np.ndarray],
                states: Optional[np.ndarray] = None) -> Tuple[np.ndarray, float]:
        """
        Find the most likely hidden state path with the Viterbi algorithm.

        Ties go to the lowest state index, both for back-pointers and for the
        final state. Impossible transitions or emissions (-inf) are handled
        exactly.

        Args:
            observations: Sequence of observation indices [T]
            states: Optional pre-allocated integer buffer [T], filled in place

        Returns:
            Tuple of:
            - path: Most likely state sequence [T] (the `states` buffer if given)
            - log_probability: Joint log-probability of the path and observations

        Raises:
            ValueError: If observations are empty, out of range, or the buffer length differs
            ModelStateError: If the model has no parameters
        """
        self._require_parameters()
        observations = self._check_observations(observations)
        T = len(observations)

        if states is not None and len(states) != T:
            raise ValueError(f"State buffer length {len(states)} doesn't match observations length {T}")

        log_pi, log_A, log_B = self._log_parameters()
        n_states = self.n_states
        columns = np.arange(n_states)

        # back[t, s] is the best predecessor of state s at time t
        back = np.zeros((T, n_states), dtype=np.int64)

        score = log_pi + log_B[:, observations[0]]
        for t in range(1, T):
            # candidates[f, s] = score[f] + log A[f, s]
            candidates = score[:, np.newaxis] + log_A
            # argmax keeps the first maximiser, so the lowest source index wins ties
            back[t] = np.argmax(candidates, axis=0)
            score = candidates[back[t], columns] + log_B[:, observations[t]]

        best_state = int(np.argmax(score))
        log_probability = float(score[best_state])

        path = states if states is not None else np.zeros(T, dtype=np.int64)
        for t in range(T - 1, -1, -1):
            path[t] = best_state
            best_state = back[t, best_state]

        logger.debug(f"Viterbi decoded T={T}, log_probability={log_probability:.6f}")

        return path, log_probability

    def log_likelihood(self,
                       observations: Union[Sequence[int], np.ndarray],
                       states: Union[Sequence[int], np.ndarray]) -> float:
        """
        Joint log-probability of a labeled trajectory under the model.

        Args:
            observations: Observation indices [T]
            states: Hidden state indices [T]

        Returns:
            log P(observations, states)
        """
        self._require_parameters()
        observations = self._check_observations(observations)
        states = as_index_array(states, "States")

        if len(states) != len(observations):
            raise ValueError(f"States length {len(states)} doesn't match observations length {len(observations)}")
        if np.any(states < 0) or np.any(states >= self.n_states):
            raise ValueError(f"States must be in range [0, {self.n_states - 1}]")

        log_pi, log_A, log_B = self._log_parameters()
        total = log_pi[states[0]]
        total += log_A[states[:-1], states[1:]].sum()
        total += log_B[states, observations].sum()
        return float(total)

    def _check_observations(self, observations) -> np.ndarray:
        observations = as_index_array(observations, "Observations")
        if len(observations) == 0:
            raise ValueError("Observation sequence is empty")
        if np.any(observations < 0) or np.any(observations >= self.n_symbols):
            raise ValueError(f"Observations must be in range [0, {self.n_symbols - 1}]")
        return observations
