"""
Point-in-simplex tests based on barycentric coordinates.

Replacing vertex k of a simplex by a test point gives a sub-simplex whose
signed volume, divided by the signed volume of the full simplex, is the
k-th barycentric coordinate of the point. The point lies inside (or on
the boundary of) the simplex iff all these ratios are non-negative. All
of them come out of one inverse of the homogeneous vertex matrix
[1, V], which is applied to every test point at once.
"""

from typing import Optional

import numpy as np

from .config import DEFAULT_CONFIG


def is_flat(vertices: np.ndarray, det: float,
            degenerate_tol: float = DEFAULT_CONFIG.degenerate_tol) -> bool:
    """
    Whether a simplex is degenerate relative to its own size.

    Args:
        vertices: Simplex vertices, shape (dim + 1, dim).
        det: Determinant of the homogeneous matrix [1, V], i.e. dim! times
            the signed volume.
        degenerate_tol: Threshold on |det| / diameter**dim, where diameter
            is the largest coordinate extent of the vertices.
    """
    scale = np.ptp(vertices, axis=0).max()
    return abs(det) <= degenerate_tol * scale ** vertices.shape[1]


class ContainmentScratch:
    """
    Caller-owned work buffers for point location.

    Point location runs once per (image, candidate) pair, so the buffers
    are allocated once per worker and reused. Every call overwrites the
    part it reads, so no state carries over between calls.

    Args:
        dim: Dimension of the simplices that will be tested.
        n_points: Expected number of test points per call. The point
            buffers grow if a call brings more.
    """

    def __init__(self, dim: int, n_points: int = 1):
        if dim < 1:
            raise ValueError(f"dim must be at least 1, got {dim}")
        self.dim = dim
        # Rows are homogeneous vertex coordinates [1, v_0], ..., [1, v_dim]
        self.orientation = np.empty((dim + 1, dim + 1))
        self.homogeneous = np.empty((max(n_points, 1), dim + 1))
        self.coords = np.empty_like(self.homogeneous)

    def point_buffers(self, n: int):
        """Views of the first n rows of the homogeneous point and coordinate buffers."""
        if n > self.homogeneous.shape[0]:
            self.homogeneous = np.empty((n, self.dim + 1))
            self.coords = np.empty_like(self.homogeneous)
        return self.homogeneous[:n], self.coords[:n]


def barycentric_coordinates(vertices: np.ndarray, points: np.ndarray,
                            scratch: Optional[ContainmentScratch] = None,
                            degenerate_tol: float = DEFAULT_CONFIG.degenerate_tol
                            ) -> Optional[np.ndarray]:
    """
    Barycentric coordinates of many points with respect to one simplex.

    Args:
        vertices: Simplex vertices, shape (dim + 1, dim).
        points: Points, shape (n, dim).
        scratch: Reusable buffers; allocated on the fly if None. When given,
            the result is a view into it and is overwritten by the next call.
        degenerate_tol: Relative flatness threshold, see is_flat().

    Returns:
        Array of shape (n, dim + 1), or None if the simplex is degenerate.
    """
    vertices = np.asarray(vertices, dtype=float)
    points = np.atleast_2d(np.asarray(points, dtype=float))
    dim = vertices.shape[1]
    if scratch is None:
        scratch = ContainmentScratch(dim, points.shape[0])
    elif scratch.dim != dim:
        raise ValueError(f"Scratch buffers are for dim={scratch.dim}, simplex has dim={dim}")

    A = scratch.orientation
    A[:, 0] = 1.0
    A[:, 1:] = vertices
    if is_flat(vertices, np.linalg.det(A), degenerate_tol):
        return None

    # [1, p] = lambda @ A
    P, lam = scratch.point_buffers(points.shape[0])
    P[:, 0] = 1.0
    P[:, 1:] = points
    np.matmul(P, np.linalg.inv(A), out=lam)
    return lam


def contains_points(vertices: np.ndarray, points: np.ndarray,
                    scratch: Optional[ContainmentScratch] = None,
                    tol: float = DEFAULT_CONFIG.containment_tol,
                    degenerate_tol: float = DEFAULT_CONFIG.degenerate_tol) -> np.ndarray:
    """
    Check which points lie in a closed simplex.

    Args:
        vertices: Simplex vertices, shape (dim + 1, dim).
        points: Test points, shape (n, dim).
        scratch: Reusable buffers; allocated on the fly if None.
        tol: Slack allowed on each barycentric coordinate.
        degenerate_tol: A flat simplex contains nothing, see is_flat().

    Returns:
        Boolean mask of shape (n,), True for points inside or on the boundary.
    """
    points = np.atleast_2d(np.asarray(points, dtype=float))
    lam = barycentric_coordinates(vertices, points, scratch=scratch,
                                  degenerate_tol=degenerate_tol)
    if lam is None:
        return np.zeros(points.shape[0], dtype=bool)
    return np.all(lam >= -tol, axis=1)


def contains_point(vertices: np.ndarray,
                   point: np.ndarray,
                   scratch: Optional[ContainmentScratch] = None,
                   tol: float = DEFAULT_CONFIG.containment_tol,
                   degenerate_tol: float = DEFAULT_CONFIG.degenerate_tol) -> bool:
    """Single-point contains_points()."""
    point = np.asarray(point, dtype=float).reshape(1, -1)
    return bool(contains_points(vertices, point, scratch=scratch, tol=tol,
                                degenerate_tol=degenerate_tol)[0])
