"""
Candidate pruning for simplex-simplex interactions.

Testing every image simplex against every target simplex is quadratic.
The filter here returns, for one source simplex, a conservative superset
of the targets that can intersect its image: no true intersection is
ever dropped, but some returned targets may not intersect.
"""

import numpy as np
from scipy.spatial import cKDTree

from .triangulation import Triangulation


def _bounding_spheres(simplices: np.ndarray):
    centroids = simplices.mean(axis=1)
    radii = np.linalg.norm(simplices - centroids[:, None, :], axis=2).max(axis=1)
    return centroids, radii


class CandidateFilter:
    """
    Bounding-volume filter over the simplices of a triangulation.

    Targets are indexed by a KD-tree over their centroids. A query first
    collects all targets whose bounding sphere can reach the bounding
    sphere of the query simplex, then keeps those whose axis-aligned
    bounding boxes overlap the query's box.

    Args:
        triangulation: The triangulation whose simplices are the targets.
        pad: Relative padding applied to boxes and spheres, so that
            simplices sharing only a facet are still reported.
    """

    def __init__(self, triangulation: Triangulation, pad: float = 1e-9):
        self.triangulation = triangulation

        simplices = triangulation.simplices
        imsimplices = triangulation.imsimplices

        self._lo = simplices.min(axis=1)
        self._hi = simplices.max(axis=1)
        self._im_lo = imsimplices.min(axis=1)
        self._im_hi = imsimplices.max(axis=1)

        self._centroids, self._radii = _bounding_spheres(simplices)
        self._im_centroids, self._im_radii = _bounding_spheres(imsimplices)
        self._max_radius = float(self._radii.max())

        extent = np.ptp(np.vstack([triangulation.points, triangulation.impoints]), axis=0)
        self._pad = pad * max(float(extent.max()), 1.0)

        self._tree = cKDTree(self._centroids)

    def candidates(self, i: int, image: bool = True) -> np.ndarray:
        """
        Targets that may intersect simplex i or its image.

        Args:
            i: Source simplex index.
            image: Query with the image of simplex i (True) or simplex i itself.

        Returns:
            Sorted array of unique target indices.
        """
        if image:
            centre, radius = self._im_centroids[i], self._im_radii[i]
            lo, hi = self._im_lo[i], self._im_hi[i]
        else:
            centre, radius = self._centroids[i], self._radii[i]
            lo, hi = self._lo[i], self._hi[i]

        near = self._tree.query_ball_point(
            centre, r=radius + self._max_radius + self._pad)
        if len(near) == 0:
            return np.empty(0, dtype=int)
        near = np.asarray(near, dtype=int)

        overlap = np.all(
            (self._lo[near] <= hi + self._pad) & (self._hi[near] >= lo - self._pad),
            axis=1)
        return np.sort(near[overlap])


def potentially_intersecting_simplices(triangulation: Triangulation, i: int) -> np.ndarray:
    """Targets whose simplices may intersect the image of simplex i."""
    return CandidateFilter(triangulation).candidates(i, image=True)
