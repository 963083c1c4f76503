"""
simplicial_markov: Transfer operators and invariant measures on
triangulated state spaces.

This package estimates the Markov matrix describing how probability
mass moves between the simplices of a triangulation under a forward
map, and the invariant distribution of that matrix.

Usage:
    from simplicial_markov import Triangulation, TransferOperator

    t = Triangulation.from_points(points, forward_map)
    op = TransferOperator(method='exact').fit(t)

    M = op.get_matrix()
    invdist = op.invariant_distribution()
    support = invdist.nonzero_inds
"""

import logging

from .core import TransferOperator, transfer_operator
from .config import MarkovConfig
from .triangulation import Triangulation, simplex_volume, simplex_volumes
from .sampling import subsample_coeffs, even_sampling_coeffs, random_coeffs
from .containment import (
    ContainmentScratch,
    contains_point,
    contains_points,
    barycentric_coordinates,
    is_flat,
)
from .candidates import CandidateFilter, potentially_intersecting_simplices
from .intersection import VolumeIntersector, HalfspaceIntersector, intersection_volume
from .markov import markov_matrix_approx, markov_matrix_exact
from .invariant import InvariantDistribution, estimate_invariant_distribution
from .logging_config import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'TransferOperator',
    'transfer_operator',
    'MarkovConfig',
    'Triangulation',
    'simplex_volume',
    'simplex_volumes',
    'subsample_coeffs',
    'even_sampling_coeffs',
    'random_coeffs',
    'ContainmentScratch',
    'contains_point',
    'contains_points',
    'barycentric_coordinates',
    'is_flat',
    'CandidateFilter',
    'potentially_intersecting_simplices',
    'VolumeIntersector',
    'HalfspaceIntersector',
    'intersection_volume',
    'markov_matrix_approx',
    'markov_matrix_exact',
    'InvariantDistribution',
    'estimate_invariant_distribution',
    'setup_logging',
]

__version__ = '0.1.0'
