'''
Created on 19 Oct 2026
'''
import numbers

import numpy as np

CONJUGATE = 'conjugate'

NON_CONJUGATE = 'non-conjugate'


def check_size(size):
    if not isinstance(size, numbers.Integral) or size < 1:
        raise ValueError('Number of draws must be a positive integer, got {}'.format(size))

    return int(size)


class MixtureDistribution(object):
    '''
    Base class for the cluster kernel of a Dirichlet process mixture.

    Parameters are batches of draws, one entry per draw, so a single cluster is a batch of length one. The conjugacy
    label tells the inference engine whether `sample_posterior` is exact or an MCMC approximation.
    '''

    conjugacy = None

    @property
    def is_conjugate(self):
        return self.conjugacy == CONJUGATE

    def log_likelihood(self, data, params):
        raise NotImplementedError()

    def likelihood(self, data, params):
        return np.exp(self.log_likelihood(data, params))

    def log_likelihood_bulk(self, data, params):
        '''
        Log density of every data point under every parameter pair, an (N, K) array.
        '''
        data = np.atleast_1d(np.asarray(data, dtype=np.float64))

        return self.log_likelihood(data[:, np.newaxis], params)

    def sample_prior(self, size=1, rng=None):
        raise NotImplementedError()

    def sample_posterior(self, data, size=1, rng=None):
        raise NotImplementedError()

    def predictive(self, data, rng=None):
        raise NotImplementedError()

    def log_predictive(self, data, rng=None):
        '''
        Log of the prior predictive density. Kernels whose predictive can underflow should override this.
        '''
        with np.errstate(divide='ignore'):
            return np.log(self.predictive(data, rng=rng))
