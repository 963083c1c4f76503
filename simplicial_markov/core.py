"""
Core transfer operator pipeline.

Provides the main TransferOperator class and the transfer_operator()
function for building a Markov matrix from a triangulation and
estimating its invariant distribution.
"""

import numpy as np
from typing import Dict, Optional

from .config import DEFAULT_CONFIG, MarkovConfig
from .invariant import InvariantDistribution, estimate_invariant_distribution
from .markov import markov_matrix_approx, markov_matrix_exact
from .triangulation import Triangulation

METHODS = ('approx', 'exact')


def transfer_operator(triangulation: Triangulation,
                      method: str = 'approx',
                      n_randpts: int = 100,
                      sample_randomly: bool = False,
                      N: int = 100,
                      tolerance: float = 1e-5,
                      random_state=None) -> Dict:
    """
    Full transfer operator pipeline (functional interface).

    Args:
        triangulation: Triangulation with vertex images.
        method: 'approx' (sampled, dense) or 'exact' (intersection volumes, sparse).
        n_randpts: Points per simplex for the approximate method.
        sample_randomly: Random instead of grid points (approximate method).
        N: Iteration cap for the invariant distribution.
        tolerance: Convergence tolerance for the invariant distribution.
        random_state: Seed for sampling and for the power-iteration start.

    Returns:
        Dictionary with:
            - matrix: The Markov matrix (rows sum to 1)
            - invariant: InvariantDistribution
            - support: Indices of simplices with positive invariant measure
    """
    op = TransferOperator(method=method, n_randpts=n_randpts,
                          sample_randomly=sample_randomly,
                          random_state=random_state)
    op.fit(triangulation)
    invdist = op.invariant_distribution(N=N, tolerance=tolerance)
    return {
        'matrix': op.get_matrix(),
        'invariant': invdist,
        'support': invdist.nonzero_inds,
    }


class TransferOperator:
    """
    Discrete transfer operator of a map acting on a triangulated domain.

    This is the main public API for the simplicial_markov package.

    Args:
        method: Matrix construction method. One of:
            - 'approx': Count sampled image points per target simplex (dense)
            - 'exact': Exact intersection volumes (sparse)
        n_randpts: Requested points per simplex for 'approx'.
        sample_randomly: Random points instead of a regular grid for 'approx'.
        config: Numerical tolerances (MarkovConfig).
        random_state: Seed for sampling and for the power-iteration start.
        n_jobs: Worker threads for matrix construction.

    Example:
        >>> from simplicial_markov import Triangulation, TransferOperator
        >>> t = Triangulation.from_points(points, forward_map)
        >>> op = TransferOperator(method='exact').fit(t)
        >>> M = op.get_matrix()
        >>> invdist = op.invariant_distribution()
    """

    def __init__(self,
                 method: str = 'approx',
                 n_randpts: int = 100,
                 sample_randomly: bool = False,
                 config: Optional[MarkovConfig] = None,
                 random_state=None,
                 n_jobs: Optional[int] = None):
        if method not in METHODS:
            raise ValueError(f"Unknown method: {method}. Supported: {', '.join(METHODS)}")
        self.method = method
        self.n_randpts = n_randpts
        self.sample_randomly = sample_randomly
        self.config = config if config is not None else DEFAULT_CONFIG
        self.random_state = random_state
        self.n_jobs = n_jobs

        # Results (populated after fit)
        self._triangulation = None
        self._matrix = None

    def fit(self, triangulation: Triangulation) -> 'TransferOperator':
        """
        Build the Markov matrix of a triangulation.

        Args:
            triangulation: Triangulation with vertex images.

        Returns:
            self (for method chaining).
        """
        if self.method == 'approx':
            self._matrix = markov_matrix_approx(
                triangulation,
                n_randpts=self.n_randpts,
                sample_randomly=self.sample_randomly,
                random_state=self.random_state,
                config=self.config,
                n_jobs=self.n_jobs)
        else:
            self._matrix = markov_matrix_exact(
                triangulation, config=self.config, n_jobs=self.n_jobs)
        self._triangulation = triangulation
        return self

    def get_matrix(self):
        """
        Get the Markov matrix.

        Returns:
            Dense array for 'approx', scipy.sparse.csr_matrix for 'exact'.
            Entry (i, j) is the fraction of the image of simplex i in simplex j.
        """
        self._check_fitted()
        return self._matrix

    def get_triangulation(self) -> Triangulation:
        self._check_fitted()
        return self._triangulation

    def invariant_distribution(self,
                               N: int = 100,
                               tolerance: float = 1e-5,
                               delta: Optional[float] = None,
                               initial: Optional[np.ndarray] = None) -> InvariantDistribution:
        """
        Estimate the invariant distribution of the fitted matrix.

        Args:
            N: Iteration cap.
            tolerance: Convergence tolerance on the relative change.
            delta: Allowed mass drift (defaults to config.delta).
            initial: Optional starting distribution.

        Returns:
            InvariantDistribution.
        """
        self._check_fitted()
        return estimate_invariant_distribution(
            self._matrix, N=N, tolerance=tolerance,
            delta=delta if delta is not None else self.config.delta,
            initial=initial, random_state=self.random_state)

    def _check_fitted(self):
        if self._matrix is None:
            raise RuntimeError("TransferOperator has not been fitted yet. Call .fit() first.")
