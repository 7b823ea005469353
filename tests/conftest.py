"""Pytest configuration and shared fixtures."""

import jax
import numpy as np
import pytest

# Local solves are checked to ~1e-10, which needs float64
jax.config.update("jax_enable_x64", True)


@pytest.fixture
def rng():
    """Seeded generator for scattered sample coordinates."""
    return np.random.default_rng(42)
