"""
Exception hierarchy for SeqHMM.
"""


class SeqHMMError(Exception):
    """Base exception for SeqHMM."""
    pass


class InvalidSampleError(SeqHMMError, ValueError):
    """Malformed labeled training sample."""
    pass


class DegenerateDistributionError(SeqHMMError, ValueError):
    """Probability rows that cannot form a valid distribution."""
    pass


class ModelStateError(SeqHMMError):
    """Operation not allowed in the model's current representation."""
    pass


class ModelPersistenceError(SeqHMMError):
    """Model save or load failures."""
    pass
