"""
SeqHMM: first-order discrete Hidden Markov Models.

Ancestral sampling, Viterbi decoding and supervised maximum-likelihood
estimation over labeled (observation, state) sequences.
"""

__version__ = "0.1.0"

from .config import get_config, set_config
from .logger import get_logger
from .hmm import FirstOrderHMM, HiddenMarkovModel, Sample

__all__ = [
    "FirstOrderHMM",
    "HiddenMarkovModel",
    "Sample",
    "get_config",
    "set_config",
    "get_logger",
    "__version__"
]
