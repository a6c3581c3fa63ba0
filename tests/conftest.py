"""Configuration for pytest test suite."""

import os
import sys

import numpy as np
import pytest

# Add the parent directory to sys.path to enable imports from the embedax package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from embedax.core.dense_callbacks import from_array  # noqa: E402


def pytest_addoption(parser):
    """Add command-line options to pytest."""
    parser.addoption("--run-slow", action="store_true", default=False, help="run slow tests")


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is specified."""
    if config.getoption("--run-slow"):
        # --run-slow given in cli: do not skip slow tests
        return

    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def blob_data():
    """40 samples in 5 dimensions with one dominant direction."""
    rng = np.random.default_rng(0)
    X = rng.normal(size=(40, 5))
    X[:, 0] *= 5.0
    X[:, 1] *= 2.0
    return X


@pytest.fixture
def swiss_roll():
    """60 samples on a noiseless swiss roll in R^3."""
    rng = np.random.default_rng(1)
    t = 1.5 * np.pi * (1.0 + 2.0 * rng.uniform(size=60))
    height = 10.0 * rng.uniform(size=60)
    return np.column_stack([t * np.cos(t), height, t * np.sin(t)])


@pytest.fixture
def blob_callbacks(blob_data):
    """Data range and array-backed callbacks over ``blob_data``."""
    return from_array(blob_data)
