"""
Hidden Markov Model module.

Discrete HMM parameter store, first-order sampling and Viterbi decoding,
and supervised maximum-likelihood estimation.
"""

from .types import Sample
from .model import HiddenMarkovModel
from .first_order import FirstOrderHMM
from .sampling import log_to_cdf, draw_from

__all__ = [
    "Sample",
    "HiddenMarkovModel",
    "FirstOrderHMM",
    "log_to_cdf",
    "draw_from"
]
