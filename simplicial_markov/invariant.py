"""
Invariant distribution of a Markov matrix by power iteration.

Starting from a random probability vector, the matrix is applied
repeatedly (p <- p @ M) until the relative change between iterates drops
below a tolerance or an iteration cap is reached. Floating-point drift of
the total mass is corrected by renormalizing at regularly spaced
checkpoints and once more at the end.
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy.sparse import issparse
from sklearn.utils import check_random_state
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvariantDistribution:
    """
    Distribution over the simplices of a triangulation.

    Attributes:
        dist: Probability of each simplex, shape (n_simplices,).
        nonzero_inds: Indices of simplices with strictly positive measure.
        n_iterations: Number of applications of the Markov matrix.
        distance: Relative change in the last iteration.
        converged: Whether the change dropped below the tolerance.
    """
    dist: np.ndarray
    nonzero_inds: np.ndarray
    n_iterations: int = 0
    distance: float = np.inf
    converged: bool = False


def _renormalize(distribution: np.ndarray, delta: float) -> np.ndarray:
    total = distribution.sum()
    if abs(total - 1.0) > delta and total > 0:
        return distribution / total
    return distribution


def checkpoint_interval(delta: float) -> int:
    """Number of iterations between mass-drift checks."""
    # 1 / 1e-5 evaluates to 99999.99999999999
    return max(int(np.floor(1.0 / delta + 1e-9)), 1)


def estimate_invariant_distribution(M,
                                    N: int = 100,
                                    tolerance: float = 1e-5,
                                    delta: float = 1e-5,
                                    initial: Optional[np.ndarray] = None,
                                    random_state=None,
                                    support_tol: float = 0.0) -> InvariantDistribution:
    """
    Compute the invariant probability distribution of a square Markov matrix.

    Args:
        M: Row-stochastic matrix (dense array or scipy.sparse), shape (n, n).
        N: Maximum number of iterations after the first application of M.
        tolerance: Stop when ||p_new - p|| / ||p|| < tolerance.
        delta: Allowed drift of the total mass before renormalizing.
        initial: Optional starting distribution; random if None.
        random_state: None, int seed or RandomState for the random start.
        support_tol: Entries above this value form the support.

    Returns:
        InvariantDistribution. Exhausting N iterations is not an error;
        the best estimate is returned with converged=False.
    """
    if not issparse(M):
        M = np.asarray(M, dtype=float)
    if M.ndim != 2 or M.shape[0] != M.shape[1]:
        raise ValueError(f"Markov matrix must be square, got shape {M.shape}")
    n = M.shape[0]
    if n == 0:
        raise ValueError("Markov matrix is empty")
    if N < 1:
        raise ValueError(f"N must be positive, got {N}")
    if tolerance <= 0 or delta <= 0:
        raise ValueError(f"tolerance and delta must be positive, got {tolerance}, {delta}")

    # p @ M == M.T @ p; the transposed product works for dense and sparse alike
    MT = M.T.tocsr() if issparse(M) else M.T

    if initial is None:
        rho = check_random_state(random_state).rand(n)
    else:
        rho = np.asarray(initial, dtype=float).ravel()
        if rho.shape[0] != n:
            raise ValueError(f"initial has length {rho.shape[0]}, expected {n}")
        if np.any(rho < 0) or rho.sum() <= 0:
            raise ValueError("initial must be non-negative with positive mass")
    rho = rho / rho.sum()

    distribution = np.asarray(MT @ rho).ravel()
    distance = np.linalg.norm(distribution - rho) / np.linalg.norm(rho)

    check = checkpoint_interval(delta)
    counter = 1
    while counter <= N and distance >= tolerance:
        if not np.any(distribution):
            logger.warning("All mass left the domain after %d iterations", counter)
            return InvariantDistribution(dist=distribution,
                                         nonzero_inds=np.array([], dtype=int),
                                         n_iterations=counter,
                                         distance=float(distance),
                                         converged=False)
        counter += 1
        rho = distribution
        distribution = np.asarray(MT @ rho).ravel()

        if counter % check == 0:
            distribution = _renormalize(distribution, delta)

        distance = np.linalg.norm(distribution - rho) / np.linalg.norm(rho)

    converged = bool(distance < tolerance)
    if not converged:
        logger.warning("Power iteration stopped after %d iterations with relative change %.3g",
                       counter, distance)

    distribution = _renormalize(distribution, delta)
    nonzero_inds = np.flatnonzero(distribution > support_tol)

    return InvariantDistribution(dist=distribution,
                                 nonzero_inds=nonzero_inds,
                                 n_iterations=counter,
                                 distance=float(distance),
                                 converged=converged)
