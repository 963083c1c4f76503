"""
Triangulated state space paired with a forward map.

A Triangulation stores vertex coordinates, the images of those vertices
under the forward map, and the vertex index tuple of every simplex. The
exact Markov matrix builder additionally needs the volume of every
simplex and of its image; these can be supplied or computed here.
"""

from dataclasses import dataclass
from math import factorial
from typing import Callable, Optional

import numpy as np
from scipy.spatial import Delaunay


def simplex_volume(vertices: np.ndarray) -> float:
    """
    Unsigned volume of a simplex.

    Args:
        vertices: Array of shape (dim + 1, dim).

    Returns:
        |det(V[1:] - V[0])| / dim!
    """
    vertices = np.asarray(vertices, dtype=float)
    dim = vertices.shape[1]
    return float(abs(np.linalg.det(vertices[1:] - vertices[0])) / factorial(dim))


def simplex_volumes(simplices: np.ndarray) -> np.ndarray:
    """Vectorized simplex_volume() over an array of shape (n, dim + 1, dim)."""
    simplices = np.asarray(simplices, dtype=float)
    dim = simplices.shape[2]
    edges = simplices[:, 1:, :] - simplices[:, :1, :]
    return np.abs(np.linalg.det(edges)) / factorial(dim)


@dataclass
class Triangulation:
    """
    Simplicial partition of a domain together with the image of every vertex.

    Args:
        points: Vertex coordinates, shape (n_vertices, dim).
        impoints: Images of the vertices under the forward map, same shape.
        simplex_inds: Vertex indices of each simplex, shape (n_simplices, dim + 1).
        volumes: Optional volume of each simplex, shape (n_simplices,).
        volumes_im: Optional volume of each image simplex, shape (n_simplices,).
    """
    points: np.ndarray
    impoints: np.ndarray
    simplex_inds: np.ndarray
    volumes: Optional[np.ndarray] = None
    volumes_im: Optional[np.ndarray] = None

    def __post_init__(self):
        self.points = np.asarray(self.points, dtype=float)
        self.impoints = np.asarray(self.impoints, dtype=float)
        self.simplex_inds = np.asarray(self.simplex_inds)

        if self.points.ndim != 2 or self.points.shape[1] < 1:
            raise ValueError(
                f"points must have shape (n_vertices, dim), got {self.points.shape}")
        if self.impoints.shape != self.points.shape:
            raise ValueError(
                f"impoints shape {self.impoints.shape} does not match "
                f"points shape {self.points.shape}")
        if self.simplex_inds.ndim != 2 or self.simplex_inds.shape[0] < 1:
            raise ValueError(
                f"simplex_inds must have shape (n_simplices, dim + 1), "
                f"got {self.simplex_inds.shape}")
        if not np.issubdtype(self.simplex_inds.dtype, np.integer):
            raise ValueError("simplex_inds must contain integer vertex indices")
        if self.simplex_inds.shape[1] != self.dim + 1:
            raise ValueError(
                f"Simplices in {self.dim} dimensions need {self.dim + 1} vertices, "
                f"got {self.simplex_inds.shape[1]}")
        if self.simplex_inds.min() < 0 or self.simplex_inds.max() >= self.points.shape[0]:
            raise ValueError("simplex_inds refers to vertices outside the vertex table")

        self.volumes = self._check_volume_table(self.volumes, 'volumes')
        self.volumes_im = self._check_volume_table(self.volumes_im, 'volumes_im')

    def _check_volume_table(self, table, name):
        if table is None:
            return None
        table = np.asarray(table, dtype=float).ravel()
        if table.shape[0] != self.n_simplices:
            raise ValueError(
                f"{name} has {table.shape[0]} entries for {self.n_simplices} simplices")
        if np.any(table < 0):
            raise ValueError(f"{name} must be non-negative")
        return table

    @property
    def n_simplices(self) -> int:
        return self.simplex_inds.shape[0]

    @property
    def dim(self) -> int:
        return self.points.shape[1]

    @property
    def simplices(self) -> np.ndarray:
        """Vertex coordinates per simplex, shape (n_simplices, dim + 1, dim)."""
        return self.points[self.simplex_inds]

    @property
    def imsimplices(self) -> np.ndarray:
        """Image vertex coordinates per simplex, shape (n_simplices, dim + 1, dim)."""
        return self.impoints[self.simplex_inds]

    def ensure_volumes(self) -> 'Triangulation':
        """Fill in missing volume tables from the vertex coordinates."""
        if self.volumes is None:
            self.volumes = simplex_volumes(self.simplices)
        if self.volumes_im is None:
            self.volumes_im = simplex_volumes(self.imsimplices)
        return self

    @classmethod
    def from_points(cls, points: np.ndarray,
                    forward_map: Callable[[np.ndarray], np.ndarray],
                    compute_volumes: bool = True) -> 'Triangulation':
        """
        Delaunay-triangulate a point cloud and push its vertices forward.

        Args:
            points: Array of shape (n_vertices, dim), dim >= 2.
            forward_map: Callable mapping an (n, dim) array to an (n, dim) array.
            compute_volumes: Whether to fill volumes and volumes_im.

        Returns:
            A Triangulation of the convex hull of the points.
        """
        points = np.asarray(points, dtype=float)
        delaunay = Delaunay(points)
        impoints = np.asarray(forward_map(points), dtype=float)
        t = cls(points=points, impoints=impoints, simplex_inds=delaunay.simplices)
        if compute_volumes:
            t.ensure_volumes()
        return t
