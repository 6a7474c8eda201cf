"""
Shared fixtures for the logoextrude test suite.

Images are built from small 0/1 grids: 1 becomes an opaque black pixel and 0
an opaque white one, so with the default settings the thresholded mask equals
the grid.
"""

import numpy as np
import pytest

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def rgba_from_grid(grid):
    """Opaque black/white RGBA image, shape (H, W, 4), from a 0/1 grid."""
    grid = np.asarray(grid, dtype=bool)
    image = np.empty(grid.shape + (4,), dtype=np.uint8)
    image[grid] = BLACK
    image[~grid] = WHITE
    return image


@pytest.fixture
def make_rgba():
    return rgba_from_grid


@pytest.fixture
def random_grid():
    rng = np.random.default_rng(7)
    return rng.integers(0, 2, size=(13, 17)).astype(np.uint8)
