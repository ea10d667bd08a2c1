'''
Created on 19 Oct 2026
'''
import unittest

import numpy as np
import scipy.integrate as integrate

from dpmix.distributions.gamma import GammaDistribution, GammaPriors
from dpmix.distributions.normal import NormalDistribution, NormalGammaPriors
from dpmix.mcmc.concentration import GammaPriorConcentrationSampler
from dpmix.mcmc.crp_gibbs import ChineseRestaurantGibbsSampler
from dpmix.mcmc.dp import DirichletProcessSampler, DirichletProcessState
from dpmix.mcmc.gamma_posterior import GibbsMetropolisSampler
from dpmix.utils import posterior_predictive_density, relabel_clustering

from . import simulate_test_data

from .mocks import CountingDistribution, MockDistribution, MockParams


def fast_gamma_distribution():
    priors = GammaPriors(2, 2, 2, 0.5, 5)

    sampler = GibbsMetropolisSampler(priors, num_iters=100, burnin=50)

    return GammaDistribution(priors, posterior_sampler=sampler, num_predictive_samples=200)


class TestUtils(unittest.TestCase):

    def test_relabel_clustering(self):
        np.testing.assert_array_equal(relabel_clustering([3, 3, 1, 5, 1]), [0, 0, 1, 2, 1])

        np.testing.assert_array_equal(relabel_clustering([0, 1, 2]), [0, 1, 2])

    def test_concentration(self):
        sampler = GammaPriorConcentrationSampler(1.0, 1.0)

        rng = np.random.default_rng(0)

        for num_clusters in [0, 1, 10]:
            self.assertGreater(sampler.sample(1.0, num_clusters, 100, rng=rng), 0)

        with self.assertRaises(ValueError):
            GammaPriorConcentrationSampler(0, 1.0)


class TestChineseRestaurant(unittest.TestCase):

    def test_mock_labels(self):
        rng = np.random.default_rng(1)

        N = 100

        clustering = relabel_clustering(rng.integers(0, 10, size=N))

        data = rng.normal(size=N)

        dist = MockDistribution()

        params = [dist.sample_prior() for _ in range(clustering.max() + 1)]

        sampler = ChineseRestaurantGibbsSampler(dist)

        new_clustering, new_params = sampler.sample(clustering, params, 1.0, data, rng=rng)

        self.assertEqual(new_clustering.shape, (N,))

        self.assertEqual(len(new_params), new_clustering.max() + 1)

        np.testing.assert_array_equal(np.unique(new_clustering), np.arange(len(new_params)))

        np.testing.assert_array_equal(relabel_clustering(new_clustering), new_clustering)

    def test_outside_support(self):
        dist = fast_gamma_distribution()

        data = np.array([1.0, 2.0, -1.0])

        clustering = np.zeros(3, dtype=int)

        params = [dist.sample_posterior([1.0, 2.0], rng=np.random.default_rng(2))]

        sampler = ChineseRestaurantGibbsSampler(dist)

        with self.assertRaises(ValueError):
            sampler.sample(clustering, params, 1.0, data, rng=np.random.default_rng(2))

    def test_new_tables_drawn_from_prior(self):
        rng = np.random.default_rng(8)

        N = 50

        dist = CountingDistribution()

        sampler = ChineseRestaurantGibbsSampler(dist)

        # A large concentration makes almost every customer open a new table
        _, params = sampler.sample(np.zeros(N, dtype=int), [MockParams(1)], 1e6, np.zeros(N), rng=rng)

        self.assertGreater(len(params), 1)

        # Every table except the starting one was opened during the sweep
        self.assertGreaterEqual(dist.num_prior_calls, len(params) - 1)

        self.assertEqual(dist.num_posterior_calls, 0)

    def test_default_log_predictive(self):
        dist = MockDistribution()

        np.testing.assert_array_equal(dist.log_predictive(np.array([1.0, -2.0])), [0, 0])


class TestDirichletProcess(unittest.TestCase):

    def test_gamma_mixture(self):
        data, _ = simulate_test_data.gamma_clusters(20, seed=3)

        sampler = DirichletProcessSampler(fast_gamma_distribution())

        rng = np.random.default_rng(3)

        state = sampler.init_state(data, rng=rng)

        self.assertEqual(state.num_clusters, 1)

        for _ in range(5):
            state = sampler.sample(state, data, rng=rng)

            self._check_state(state, len(data))

            for params in state.params:
                self.assertTrue(np.all(params.shape > 0))

                self.assertTrue(np.all(params.rate > 0))

        self.assertEqual(sampler.iter, 5)

    def test_state_read_only(self):
        state = DirichletProcessState([0, 0, 1], [None, None], 1.0)

        with self.assertRaises(ValueError):
            state.clustering[0] = 1

    def test_init_state_clustering(self):
        data, _ = simulate_test_data.gamma_clusters(3, seed=4)

        sampler = DirichletProcessSampler(fast_gamma_distribution())

        state = sampler.init_state(data, alpha=2.0, clustering=[5, 5, 5, 2, 2, 2], rng=4)

        np.testing.assert_array_equal(state.clustering, [0, 0, 0, 1, 1, 1])

        self.assertEqual(state.num_clusters, 2)

        self.assertEqual(state.alpha, 2.0)

        with self.assertRaises(ValueError):
            sampler.init_state(data, alpha=0)

    def test_workers_match_serial(self):
        data, _ = simulate_test_data.gamma_clusters(15, seed=5)

        states = []

        for num_workers in [1, 2]:
            sampler = DirichletProcessSampler(fast_gamma_distribution(), num_workers=num_workers)

            rng = np.random.default_rng(5)

            state = sampler.init_state(data, clustering=np.arange(len(data)) % 4, rng=rng)

            states.append(sampler.sample(state, data, num_iters=3, rng=rng))

        np.testing.assert_array_equal(states[0].clustering, states[1].clustering)

        self.assertEqual(states[0].alpha, states[1].alpha)

        for params_1, params_2 in zip(states[0].params, states[1].params):
            np.testing.assert_array_equal(params_1.shape, params_2.shape)

            np.testing.assert_array_equal(params_1.rate, params_2.rate)

        with self.assertRaises(ValueError):
            DirichletProcessSampler(fast_gamma_distribution(), num_workers=0)

    def test_normal_posterior_predictive(self):
        data, _ = simulate_test_data.normal_clusters(25, seed=6)

        dist = NormalDistribution(NormalGammaPriors(mu=0.0, kappa=0.1, a=2.0, b=1.0))

        sampler = DirichletProcessSampler(dist)

        rng = np.random.default_rng(6)

        state = sampler.init_state(data, rng=rng)

        states = []

        for _ in range(20):
            state = sampler.sample(state, data, rng=rng)

            self._check_state(state, len(data))

            states.append(state)

        grid = np.linspace(-60, 60, 6001)

        density = posterior_predictive_density(states[10:], dist, grid, rng=rng)

        self.assertTrue(np.all(density >= 0))

        self.assertAlmostEqual(integrate.trapezoid(density, grid), 1.0, delta=0.02)

    def test_gamma_posterior_predictive_support(self):
        data, _ = simulate_test_data.gamma_clusters(10, seed=7)

        dist = fast_gamma_distribution()

        sampler = DirichletProcessSampler(dist)

        rng = np.random.default_rng(7)

        state = sampler.sample(sampler.init_state(data, rng=rng), data, num_iters=2, rng=rng)

        grid = np.linspace(-2, 15, 35)

        density = posterior_predictive_density([state], dist, grid, rng=rng)

        np.testing.assert_array_equal(density[grid <= 0], 0)

        self.assertTrue(np.all(density[grid > 0] > 0))

        with self.assertRaises(ValueError):
            posterior_predictive_density([], dist, grid)

    def _check_state(self, state, num_data_points):
        self.assertEqual(len(state.clustering), num_data_points)

        self.assertEqual(state.num_clusters, state.clustering.max() + 1)

        np.testing.assert_array_equal(np.unique(state.clustering), np.arange(state.num_clusters))

        self.assertGreater(state.alpha, 0)


if __name__ == "__main__":
    unittest.main()
