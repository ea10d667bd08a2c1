'''
Created on 19 Oct 2026
'''
from collections import namedtuple
from concurrent.futures import ProcessPoolExecutor
from contextlib import nullcontext

import numpy as np

from dpmix.mcmc.concentration import GammaPriorConcentrationSampler
from dpmix.mcmc.crp_gibbs import ChineseRestaurantGibbsSampler
from dpmix.utils import relabel_clustering


class DirichletProcessState(namedtuple('DirichletProcessState', ['clustering', 'params', 'alpha'])):
    '''
    Snapshot of the sampler after one sweep.

    clustering labels data points 0..K-1, params holds one length one parameter batch per cluster and alpha is the
    concentration. The clustering array is read only so a snapshot is never modified by later sweeps.
    '''
    __slots__ = ()

    def __new__(cls, clustering, params, alpha):
        clustering = np.array(clustering, dtype=int)

        clustering.flags.writeable = False

        return super(DirichletProcessState, cls).__new__(cls, clustering, tuple(params), float(alpha))

    @property
    def num_clusters(self):
        return len(self.params)


def _sample_block(dist, block_data, rng):
    return dist.sample_posterior(block_data, size=1, rng=rng)


class DirichletProcessSampler(object):
    '''
    Dirichlet process mixture sampler with explicit cluster parameters.

    A sweep reassigns data points, refreshes each cluster's parameters with a posterior draw given its members, then
    updates the concentration. With num_workers > 1 the cluster refresh runs in a pool of worker processes, so the
    kernel must be picklable.
    '''

    def __init__(self, dist, prior_a=1.0, prior_b=1.0, num_workers=1, verbose=False):
        if num_workers < 1:
            raise ValueError('num_workers must be at least 1, got {}'.format(num_workers))

        self.dist = dist

        self.partition_sampler = ChineseRestaurantGibbsSampler(dist)

        self.concentration_sampler = GammaPriorConcentrationSampler(prior_a, prior_b)

        self.num_workers = num_workers

        self.verbose = verbose

        self.iter = 0

    def init_state(self, data, alpha=1.0, clustering=None, rng=None):
        '''
        Build a starting state, with all data in one cluster unless a clustering is given.
        '''
        data = np.asarray(data, dtype=np.float64)

        if clustering is None:
            clustering = np.zeros(data.shape[0], dtype=int)

        else:
            clustering = relabel_clustering(clustering)

        if not alpha > 0:
            raise ValueError('Concentration must be positive, got {}'.format(alpha))

        with self._executor() as executor:
            params = self._update_params(clustering, data, np.random.default_rng(rng), executor)

        return DirichletProcessState(clustering, params, alpha)

    def sample(self, state, data, num_iters=1, rng=None):
        rng = np.random.default_rng(rng)

        data = np.asarray(data, dtype=np.float64)

        with self._executor() as executor:
            for _ in range(num_iters):
                state = self._sample(state, data, rng, executor)

                self.iter += 1

                if self.verbose:
                    print('Iteration: {0}, Number of clusters: {1}, Alpha: {2:.4f}'.format(
                        self.iter, state.num_clusters, state.alpha))

        return state

    def _executor(self):
        if self.num_workers == 1:
            return nullcontext()

        return ProcessPoolExecutor(max_workers=self.num_workers)

    def _sample(self, state, data, rng, executor):
        clustering, _ = self.partition_sampler.sample(state.clustering, state.params, state.alpha, data, rng=rng)

        params = self._update_params(clustering, data, rng, executor)

        alpha = self.concentration_sampler.sample(state.alpha, len(params), len(clustering), rng=rng)

        return DirichletProcessState(clustering, params, alpha)

    def _update_params(self, clustering, data, rng, executor=None):
        blocks = [data[clustering == z] for z in range(clustering.max() + 1)]

        # One stream per cluster keeps the result independent of which worker runs it
        streams = rng.spawn(len(blocks))

        if executor is None:
            return [_sample_block(self.dist, x, block_rng) for x, block_rng in zip(blocks, streams)]

        return list(executor.map(_sample_block, [self.dist] * len(blocks), blocks, streams))
