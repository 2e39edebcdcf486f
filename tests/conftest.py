"""
Test configuration and fixtures for SeqHMM.

This file contains pytest configuration and shared fixtures
for testing the SeqHMM package.
"""

import math
import tempfile
from pathlib import Path

import numpy as np
import pytest

from seq_hmm.config import reset_config
from seq_hmm.hmm.first_order import FirstOrderHMM


# Hidden states {Healthy, Fever}, observed symbols {normal, cold, dizzy}
HEALTHY, FEVER = 0, 1
NORMAL, COLD, DIZZY = 0, 1, 2

START_PROBABILITY = [0.6, 0.4]
TRANSITION_PROBABILITY = [
    [0.7, 0.3],
    [0.4, 0.6],
]
EMISSION_PROBABILITY = [
    [0.5, 0.4, 0.1],
    [0.1, 0.3, 0.6],
]

# Best path for [normal, cold, dizzy] is Healthy -> Healthy -> Fever:
# 0.6*0.5 * 0.7*0.4 * 0.3*0.6
EXPECTED_LOG_PROBABILITY = math.log(0.6 * 0.5 * 0.7 * 0.4 * 0.3 * 0.6)


@pytest.fixture(autouse=True)
def clean_config():
    """Restore default configuration around every test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def health_parameters():
    """Linear-space parameters of the healthy/fever example."""
    return (
        np.array(START_PROBABILITY),
        np.array(TRANSITION_PROBABILITY),
        np.array(EMISSION_PROBABILITY),
    )


@pytest.fixture
def health_model(health_parameters):
    """Seeded healthy/fever model."""
    return FirstOrderHMM(*health_parameters, random_state=42)


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


@pytest.fixture
def expected_log_probability():
    """Viterbi log-probability of [normal, cold, dizzy] under the health model."""
    return EXPECTED_LOG_PROBABILITY
