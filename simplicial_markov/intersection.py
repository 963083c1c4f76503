"""
Exact volume of the intersection of two simplices.

The exact Markov matrix builder only needs the contract of this
primitive: the result is symmetric in its arguments, zero for disjoint
(or merely touching) simplices, and never exceeds the smaller of the two
volumes. VolumeIntersector captures that contract so the builder can be
exercised with any implementation; HalfspaceIntersector is the default.
"""

import logging

import numpy as np
from scipy.optimize import linprog
from scipy.spatial import ConvexHull, HalfspaceIntersection, QhullError
from typing import Optional, Protocol

from .config import DEFAULT_CONFIG
from .containment import is_flat
from .triangulation import simplex_volume

logger = logging.getLogger(__name__)


class VolumeIntersector(Protocol):
    """Anything that can measure the overlap of two simplices."""

    def intersection_volume(self, a: np.ndarray, b: np.ndarray) -> float:
        """Volume of the intersection of simplices a and b, each (dim + 1, dim)."""
        ...


def simplex_halfspaces(vertices: np.ndarray,
                       degenerate_tol: float = DEFAULT_CONFIG.degenerate_tol
                       ) -> Optional[np.ndarray]:
    """
    Half-space representation of a simplex.

    Barycentric coordinates are affine in the point,
    lambda_k(x) = B[0, k] + x . B[1:, k] with B = inv([1, V]), and the
    simplex is the set where every lambda_k >= 0.

    Returns:
        Array of shape (dim + 1, dim + 1) in scipy's [normal, offset]
        convention (normal . x + offset <= 0) with unit normals, or None
        for a simplex that is flat relative to its size.
    """
    vertices = np.asarray(vertices, dtype=float)
    n_vertices = vertices.shape[0]
    A = np.ones((n_vertices, n_vertices))
    A[:, 1:] = vertices
    if is_flat(vertices, np.linalg.det(A), degenerate_tol):
        return None

    B = np.linalg.inv(A)
    halfspaces = -B.T  # row k: [-B[0, k], -B[1:, k]]
    halfspaces = np.hstack([halfspaces[:, 1:], halfspaces[:, :1]])
    norms = np.linalg.norm(halfspaces[:, :-1], axis=1)
    return halfspaces / norms[:, None]


def chebyshev_center(halfspaces: np.ndarray):
    """
    Centre and radius of the largest ball inside a polytope.

    Args:
        halfspaces: Array (m, dim + 1) in [unit normal, offset] form.

    Returns:
        Tuple (centre, radius); centre is None if the LP is infeasible.
    """
    normals = halfspaces[:, :-1]
    offsets = halfspaces[:, -1]
    dim = normals.shape[1]

    c = np.zeros(dim + 1)
    c[-1] = -1.0
    A_ub = np.hstack([normals, np.ones((normals.shape[0], 1))])
    b_ub = -offsets
    bounds = [(None, None)] * dim + [(0, None)]

    res = linprog(c, A_ub=A_ub, b_ub=b_ub, bounds=bounds, method='highs')
    if res.status != 0:
        return None, 0.0
    return res.x[:-1], float(res.x[-1])


class HalfspaceIntersector:
    """
    Intersection volume by half-space clipping.

    Both simplices are shifted and scaled so that their joint bounding box
    has unit extent, then written as half-space systems. A strictly
    interior point of the combined system is found with a Chebyshev-centre
    LP, qhull enumerates the vertices of the intersection polytope, and the
    convex hull of those vertices gives the volume, scaled back.

    Args:
        tol: Intersections whose inscribed ball radius is below tol times
            the joint extent are treated as empty (touching facets).
        degenerate_tol: Simplices flat relative to their size (see
            containment.is_flat) have zero intersection with anything.
    """

    def __init__(self, tol: float = DEFAULT_CONFIG.convex_params_tol,
                 degenerate_tol: float = DEFAULT_CONFIG.degenerate_tol):
        self.tol = tol
        self.degenerate_tol = degenerate_tol

    def intersection_volume(self, a: np.ndarray, b: np.ndarray) -> float:
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
        if a.shape != b.shape:
            raise ValueError(f"Simplices must have matching shapes, got {a.shape} and {b.shape}")

        dim = a.shape[1]
        if dim == 1:
            lo = max(a.min(), b.min())
            hi = min(a.max(), b.max())
            return float(max(hi - lo, 0.0))

        # Disjoint bounding boxes
        if np.any(a.max(axis=0) < b.min(axis=0)) or np.any(b.max(axis=0) < a.min(axis=0)):
            return 0.0

        both = np.vstack([a, b])
        origin = both.min(axis=0)
        scale = np.ptp(both, axis=0).max()
        if scale <= 0:
            return 0.0

        # The LP and qhull work with absolute tolerances, so they see the
        # pair at unit size whatever the size of the domain.
        hs_a = simplex_halfspaces((a - origin) / scale, self.degenerate_tol)
        hs_b = simplex_halfspaces((b - origin) / scale, self.degenerate_tol)
        if hs_a is None or hs_b is None:
            return 0.0
        halfspaces = np.vstack([hs_a, hs_b])

        centre, radius = chebyshev_center(halfspaces)
        if centre is None or radius <= self.tol:
            return 0.0

        try:
            polytope = HalfspaceIntersection(halfspaces, centre)
            volume = ConvexHull(polytope.intersections).volume * scale ** dim
        except QhullError as exc:
            logger.debug("Treating numerically flat intersection as empty: %s", exc)
            return 0.0

        return float(min(max(volume, 0.0), simplex_volume(a), simplex_volume(b)))


def intersection_volume(a: np.ndarray, b: np.ndarray,
                        tol: float = DEFAULT_CONFIG.convex_params_tol) -> float:
    """Functional shortcut for HalfspaceIntersector(tol).intersection_volume(a, b)."""
    return HalfspaceIntersector(tol=tol).intersection_volume(a, b)
