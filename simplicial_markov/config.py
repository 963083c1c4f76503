"""
Numerical tolerances for Markov matrix construction.

The exact builder used to hard-code its tolerances; they are collected
here so they can be threaded through every call that needs them.
"""

from dataclasses import dataclass


@dataclass
class MarkovConfig:
    """Tolerances shared by the matrix builders and the geometric primitives."""
    delta: float = 1e-5               # Total allowed matrix-mass error per row
    convex_params_tol: float = 1e-12  # Exact intersection primitive tolerance
    containment_tol: float = 1e-10    # Relative slack on facets for point location
    degenerate_tol: float = 1e-14     # |det| / extent**dim below this means a flat simplex

    def __post_init__(self):
        for name in ('delta', 'convex_params_tol', 'containment_tol', 'degenerate_tol'):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value}")

    def voltol(self, n_simplices: int) -> float:
        """
        Volume-ratio threshold for the exact builder's pre-filter.

        Discarding every pair whose volume ratio is at most delta / n
        loses at most delta of mass in any row.
        """
        if n_simplices < 1:
            raise ValueError(f"n_simplices must be positive, got {n_simplices}")
        return self.delta / n_simplices


DEFAULT_CONFIG = MarkovConfig()
