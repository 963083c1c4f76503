"""
Shared fixtures for simplicial_markov test suite.
"""

import numpy as np
import pytest
import sys
import os

# Ensure project root is on path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from simplicial_markov.triangulation import Triangulation


def grid_triangulation(n_cells, forward_map):
    """Unit square cut into n_cells x n_cells squares, each split into two triangles."""
    ticks = np.linspace(0.0, 1.0, n_cells + 1)
    xx, yy = np.meshgrid(ticks, ticks, indexing='ij')
    points = np.column_stack([xx.ravel(), yy.ravel()])

    def vid(a, b):
        return a * (n_cells + 1) + b

    simplex_inds = []
    for a in range(n_cells):
        for b in range(n_cells):
            simplex_inds.append([vid(a, b), vid(a + 1, b), vid(a + 1, b + 1)])
            simplex_inds.append([vid(a, b), vid(a + 1, b + 1), vid(a, b + 1)])

    t = Triangulation(points=points,
                      impoints=forward_map(points),
                      simplex_inds=np.array(simplex_inds))
    return t.ensure_volumes()


@pytest.fixture
def rng():
    """Fixed random state for reproducibility."""
    return np.random.RandomState(42)


@pytest.fixture
def square_points():
    return np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])


@pytest.fixture
def identity_pair(square_points):
    """Unit square split along its diagonal, under the identity map."""
    t = Triangulation(points=square_points,
                      impoints=square_points.copy(),
                      simplex_inds=np.array([[0, 1, 2], [0, 2, 3]]))
    return t.ensure_volumes()


@pytest.fixture
def reflected_pair(square_points):
    """Same two triangles under the reflection (x, y) -> (y, x), which swaps them."""
    t = Triangulation(points=square_points,
                      impoints=square_points[:, ::-1].copy(),
                      simplex_inds=np.array([[0, 1, 2], [0, 2, 3]]))
    return t.ensure_volumes()


@pytest.fixture
def contracting_grid():
    """
    4 x 4 grid (32 triangles) under x -> 0.5 x + 0.2371.

    The shift keeps image sample points off the target facets, so no grid
    point is counted in two targets.
    """
    return grid_triangulation(4, lambda x: 0.5 * x + 0.2371)


@pytest.fixture
def degenerate_triangulation():
    """Two good triangles plus a flat one along the bottom edge, identity map."""
    points = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [0.5, 0.0]])
    t = Triangulation(points=points,
                      impoints=points.copy(),
                      simplex_inds=np.array([[0, 1, 2], [0, 2, 3], [0, 1, 4]]))
    return t.ensure_volumes()
