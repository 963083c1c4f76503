"""
Tests for simplicial_markov.candidates module.
"""

import numpy as np
from simplicial_markov.candidates import CandidateFilter, potentially_intersecting_simplices
from simplicial_markov.intersection import intersection_volume

from conftest import grid_triangulation


class TestCandidateFilter:

    def test_includes_self_under_identity(self, identity_pair):
        cf = CandidateFilter(identity_pair)
        for i in range(identity_pair.n_simplices):
            assert i in cf.candidates(i)

    def test_sorted_unique(self, contracting_grid):
        cf = CandidateFilter(contracting_grid)
        for i in range(contracting_grid.n_simplices):
            c = cf.candidates(i)
            assert np.array_equal(c, np.unique(c))

    def test_no_false_negatives(self, contracting_grid):
        t = contracting_grid
        cf = CandidateFilter(t)
        simplices, imsimplices = t.simplices, t.imsimplices
        for i in range(t.n_simplices):
            truth = {j for j in range(t.n_simplices)
                     if intersection_volume(simplices[j], imsimplices[i]) > 0}
            assert truth.issubset(set(cf.candidates(i).tolist()))

    def test_prunes_far_targets(self):
        t = grid_triangulation(6, lambda x: x)
        cf = CandidateFilter(t)
        # A corner triangle cannot reach the far corner of the domain
        assert len(cf.candidates(0)) < t.n_simplices

    def test_image_outside_domain(self):
        t = grid_triangulation(2, lambda x: x + 10.0)
        cf = CandidateFilter(t)
        assert len(cf.candidates(0)) == 0

    def test_source_side_query(self):
        t = grid_triangulation(2, lambda x: x + 10.0)
        cf = CandidateFilter(t)
        assert 0 in cf.candidates(0, image=False)

    def test_functional_shortcut(self, identity_pair):
        assert np.array_equal(potentially_intersecting_simplices(identity_pair, 1),
                              CandidateFilter(identity_pair).candidates(1))
