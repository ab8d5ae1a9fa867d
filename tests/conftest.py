"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def community(rng):
    """
    Small vegetation dataset: 30 samples x 12 species, two attributes.

    The second attribute has two missing species values. ``gradient`` is
    an environmental variable correlated with the first attribute's
    weighted means through the species composition.
    """
    n, s = 30, 12
    gradient = np.linspace(0.0, 1.0, n)
    optima = np.linspace(0.0, 1.0, s)
    abundance = np.exp(-((gradient[:, None] - optima[None, :]) ** 2) / 0.05) * 100
    abundance += rng.uniform(0, 5, size=(n, s))
    attributes = np.column_stack([
        optima * 8 + 1,
        rng.uniform(1, 9, size=s),
    ])
    attributes[[2, 7], 1] = np.nan
    return abundance, attributes, gradient
