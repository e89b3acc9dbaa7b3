"""Shared test fixtures for biokey tests."""

import numpy as np
import pytest


@pytest.fixture
def rng():
    """Seeded generator so property tests are reproducible."""
    return np.random.default_rng(1234)
