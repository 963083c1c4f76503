"""
Barycentric sampling of simplices.

Produces sets of convex combination coefficients. Multiplying a
coefficient set of shape (n, dim + 1) with the (dim + 1, dim) vertex
array of any simplex yields n points inside that simplex, either on a
regular grid or uniformly at random.
"""

import itertools

import numpy as np
from sklearn.utils import check_random_state


def grid_split_factor(dim: int, n: int) -> int:
    """Smallest split factor k such that k**dim >= n."""
    k = max(1, int(round(n ** (1.0 / dim))))
    while k ** dim < n:
        k += 1
    while k > 1 and (k - 1) ** dim >= n:
        k -= 1
    return k


def even_sampling_coeffs(dim: int, split_factor: int) -> np.ndarray:
    """
    Barycentric centroids of a shape-preserving subdivision of a simplex.

    The reference simplex is taken as the Kuhn simplex
    {1 >= x_1 >= ... >= x_dim >= 0} of the unit cube. Scaling it by k and
    cutting every unit cube of [0, k]^dim into its dim! Kuhn simplices
    splits it into k**dim congruent copies of itself (edgewise
    subdivision). A small simplex belongs to the reference simplex iff its
    centroid has strictly decreasing coordinates.

    Args:
        dim: Dimension of the simplex.
        split_factor: Number of pieces each edge is cut into.

    Returns:
        Array of shape (split_factor**dim, dim + 1); rows are strictly
        positive and sum to 1.
    """
    k = split_factor
    corners = np.array(list(itertools.product(range(k), repeat=dim)), dtype=float)

    centroids = []
    for perm in itertools.permutations(range(dim)):
        # Coordinate perm[r] is raised in the first r + 1 of the dim edge
        # steps, so the centroid offset along it is (dim - r) / (dim + 1).
        offset = np.empty(dim)
        offset[list(perm)] = (dim - np.arange(dim)) / (dim + 1.0)
        x = corners + offset
        if dim > 1:
            keep = np.all(np.diff(x, axis=1) < 0, axis=1)
            x = x[keep]
        centroids.append(x)

    x = np.vstack(centroids) / k

    # Ordered coordinates -> barycentric weights w.r.t. the vertices
    # 0, e_1, e_1 + e_2, ..., e_1 + ... + e_dim
    coeffs = np.empty((x.shape[0], dim + 1))
    coeffs[:, 0] = 1.0 - x[:, 0]
    coeffs[:, 1:dim] = x[:, :-1] - x[:, 1:]
    coeffs[:, dim] = x[:, -1]
    return coeffs


def random_coeffs(dim: int, n: int, random_state=None) -> np.ndarray:
    """
    Uniformly distributed points in the standard simplex.

    Draws from the flat Dirichlet distribution, which is uniform over the
    simplex and symmetric under permutation of the vertices (normalizing
    independent uniforms instead would crowd the centroid).
    """
    rs = check_random_state(random_state)
    return rs.dirichlet(np.ones(dim + 1), size=n)


def subsample_coeffs(dim: int, n: int,
                     sample_randomly: bool = False,
                     random_state=None) -> np.ndarray:
    """
    Convex combination coefficients for generating points in a simplex.

    Args:
        dim: Dimension of the space.
        n: Requested number of coefficient vectors.
        sample_randomly: If True draw n random vectors; otherwise use a
            regular grid, which may return more than n vectors.
        random_state: None, int seed or RandomState (random mode only).

    Returns:
        Array of shape (n_coeffs, dim + 1). Always read n_coeffs back from
        the result; in grid mode it is split_factor**dim >= n.
    """
    if dim < 1:
        raise ValueError(f"dim must be at least 1, got {dim}")
    if n < 1:
        raise ValueError(f"Number of points must be positive, got {n}")

    if sample_randomly:
        return random_coeffs(dim, n, random_state=random_state)
    return even_sampling_coeffs(dim, grid_split_factor(dim, n))
