"""
Markov matrix builders for triangulated dynamical systems.

Both builders estimate how much of the image of each simplex falls into
every other simplex:

- markov_matrix_approx(): dense matrix from points sampled inside each
  image simplex (regular grid or random), counted by point location.
- markov_matrix_exact(): sparse matrix from exact intersection volumes,
  with a volume-ratio pre-filter bounding the discarded mass.

Both return M[i, j] = fraction of the image of simplex i lying in
simplex j, so rows sum to 1 and a row distribution p advances as p @ M.
"""

import logging

import numpy as np
from joblib import Parallel, delayed, effective_n_jobs
from scipy.sparse import csr_matrix
from typing import Callable, List, Optional

from .candidates import CandidateFilter
from .config import DEFAULT_CONFIG, MarkovConfig
from .containment import ContainmentScratch, contains_points
from .intersection import HalfspaceIntersector, VolumeIntersector
from .sampling import subsample_coeffs
from .triangulation import Triangulation, simplex_volumes

logger = logging.getLogger(__name__)


def _map_sources(fn: Callable, n_simplices: int, n_jobs: Optional[int]) -> List:
    """
    Evaluate fn over contiguous blocks of source indices.

    fn takes a block of source indices and returns one result per source.
    Each block runs on a single worker, which owns any buffers fn sets up
    for it, and the per-source results are concatenated in source order.
    Sources never share an accumulator, so threads need no locking.
    """
    if n_jobs is None or n_jobs == 1:
        return fn(range(n_simplices))
    n_blocks = max(min(effective_n_jobs(n_jobs), n_simplices), 1)
    blocks = np.array_split(np.arange(n_simplices), n_blocks)
    results = Parallel(n_jobs=n_jobs, prefer='threads')(
        delayed(fn)(block) for block in blocks)
    return [r for block_results in results for r in block_results]


def markov_matrix_approx(triangulation: Triangulation,
                         n_randpts: int = 100,
                         sample_randomly: bool = False,
                         random_state=None,
                         candidate_filter: Optional[CandidateFilter] = None,
                         config: Optional[MarkovConfig] = None,
                         n_jobs: Optional[int] = None) -> np.ndarray:
    """
    Approximate Markov matrix from points pushed forward in time.

    Each simplex is represented by a set of points (convex combinations of
    its vertices). Their images are the same convex combinations of the
    image vertices; the fraction of them landing in simplex j estimates
    the transition probability into j.

    Args:
        triangulation: Triangulation with vertex images.
        n_randpts: Requested points per simplex. The grid may use more.
        sample_randomly: Random points (True) or a regular grid (False).
        random_state: None, int seed or RandomState for random sampling.
            One coefficient set is drawn and shared by all simplices.
        candidate_filter: Prebuilt filter, reused across calls if given.
        config: Containment tolerances.
        n_jobs: Number of worker threads (None or 1 runs serially).

    Returns:
        Dense array of shape (n_simplices, n_simplices) with rows summing
        to approximately 1.
    """
    if n_randpts < 1:
        raise ValueError(f"n_randpts must be positive, got {n_randpts}")
    config = config if config is not None else DEFAULT_CONFIG

    n_simplices = triangulation.n_simplices
    dim = triangulation.dim

    convex_coeffs = subsample_coeffs(dim, n_randpts, sample_randomly,
                                     random_state=random_state)
    # The grid depends only on (dim, n_randpts) and may hold more points
    # than requested.
    n_coeffs = convex_coeffs.shape[0]

    simplices = triangulation.simplices
    imsimplices = triangulation.imsimplices
    if candidate_filter is None:
        candidate_filter = CandidateFilter(triangulation)

    def count_hits(block):
        scratch = ContainmentScratch(dim, n_coeffs)
        block_hits = []
        for i in block:
            pts = convex_coeffs @ imsimplices[i]
            hits = np.zeros(n_simplices)
            for j in candidate_filter.candidates(i, image=True):
                inside = contains_points(simplices[j], pts, scratch=scratch,
                                         tol=config.containment_tol,
                                         degenerate_tol=config.degenerate_tol)
                hits[j] = np.count_nonzero(inside)
            block_hits.append(hits)
        return block_hits

    logger.debug("Sampling %d points in each of %d image simplices", n_coeffs, n_simplices)

    # counts[j, i]: samples from the image of i that landed in j
    counts = np.column_stack(_map_sources(count_hits, n_simplices, n_jobs))
    return counts.T / n_coeffs


def markov_matrix_exact(triangulation: Triangulation,
                        config: Optional[MarkovConfig] = None,
                        intersector: Optional[VolumeIntersector] = None,
                        candidate_filter: Optional[CandidateFilter] = None,
                        n_jobs: Optional[int] = None) -> csr_matrix:
    """
    Exact sparse Markov matrix from simplex intersection volumes.

    Entry (i, j) is vol(simplex j ∩ image of simplex i) / vol(image of i).
    Pairs with a degenerate simplex, or with vol(j) / vol(image i) at or
    below voltol = delta / n_simplices, are skipped: the intersection is
    at most vol(j), so at most delta of mass per row is discarded.

    Args:
        triangulation: Triangulation with vertex images. Missing volume
            tables are computed from the vertices.
        config: Tolerances; delta bounds the discarded mass per row.
        intersector: Intersection volume primitive (default HalfspaceIntersector).
        candidate_filter: Prebuilt filter, reused across calls if given.
        n_jobs: Number of worker threads (None or 1 runs serially).

    Returns:
        scipy.sparse.csr_matrix of shape (n_simplices, n_simplices).
    """
    config = config if config is not None else DEFAULT_CONFIG
    if intersector is None:
        intersector = HalfspaceIntersector(tol=config.convex_params_tol,
                                           degenerate_tol=config.degenerate_tol)

    n_simplices = triangulation.n_simplices
    simplices = triangulation.simplices
    imsimplices = triangulation.imsimplices

    volumes = triangulation.volumes
    if volumes is None:
        volumes = simplex_volumes(simplices)
    volumes_im = triangulation.volumes_im
    if volumes_im is None:
        volumes_im = simplex_volumes(imsimplices)

    voltol = config.voltol(n_simplices)
    if candidate_filter is None:
        candidate_filter = CandidateFilter(triangulation)

    def intersect_images(block):
        block_rows = []
        for i in block:
            logger.debug("Image #%d/%d", i + 1, n_simplices)
            imvol = volumes_im[i]
            cols, vals = [], []
            for j in candidate_filter.candidates(i, image=True):
                vol = volumes[j]
                if vol > 0 and imvol > 0 and vol / imvol > voltol:
                    intvol = intersector.intersection_volume(simplices[j], imsimplices[i]) / imvol
                    if intvol > 0:
                        cols.append(j)
                        vals.append(intvol)
            block_rows.append((cols, vals))
        return block_rows

    rows, cols, vals = [], [], []
    for i, (row_cols, row_vals) in enumerate(_map_sources(intersect_images, n_simplices, n_jobs)):
        rows.extend([i] * len(row_cols))
        cols.extend(row_cols)
        vals.extend(row_vals)

    M = csr_matrix((np.asarray(vals, dtype=float),
                    (np.asarray(rows, dtype=int), np.asarray(cols, dtype=int))),
                   shape=(n_simplices, n_simplices))
    logger.info("Exact Markov matrix: %d simplices, %d nonzero transitions",
                n_simplices, M.nnz)
    return M
