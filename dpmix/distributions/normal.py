'''
Created on 19 Oct 2026

Univariate normal kernel with a conjugate normal-gamma prior on (mean, precision).
'''
from collections import namedtuple

import numpy as np
import scipy.stats as stats

from dpmix.distributions.base import CONJUGATE, MixtureDistribution, check_size


class NormalGammaPriors(namedtuple('NormalGammaPriors', ['mu', 'kappa', 'a', 'b'])):
    '''
    precision ~ Gamma(a, rate=b) and mean | precision ~ Normal(mu, 1 / (kappa * precision)).
    '''
    __slots__ = ()

    def __new__(cls, mu=0.0, kappa=1.0, a=1.0, b=1.0):
        self = super(NormalGammaPriors, cls).__new__(cls, float(mu), float(kappa), float(a), float(b))

        if not np.isfinite(self.mu):
            raise ValueError('Prior mean must be finite, got {}'.format(self.mu))

        for name in ('kappa', 'a', 'b'):
            value = getattr(self, name)

            if not (np.isfinite(value) and value > 0):
                raise ValueError('Prior parameter {0} must be a positive real, got {1}'.format(name, value))

        return self


class NormalParameters(object):
    __slots__ = ('mean', 'precision')

    def __init__(self, mean, precision):
        self.mean = np.atleast_1d(np.asarray(mean, dtype=np.float64))

        self.precision = np.atleast_1d(np.asarray(precision, dtype=np.float64))

        if self.mean.shape != self.precision.shape:
            raise ValueError('Mean and precision batches differ in size')

    def __len__(self):
        return self.mean.shape[0]

    def __getitem__(self, idx):
        return NormalParameters(self.mean[idx], self.precision[idx])

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]


class NormalDistribution(MixtureDistribution):

    conjugacy = CONJUGATE

    def __init__(self, priors=None):
        if priors is None:
            priors = NormalGammaPriors()

        self.priors = priors

    def create_priors_from_data(self, data):
        '''
        Hyperparameters of the posterior after observing data.
        '''
        data = np.atleast_1d(np.asarray(data, dtype=np.float64))

        N = data.shape[0]

        if N == 0:
            raise ValueError('Cannot sample from the posterior of an empty cluster')

        mean = np.mean(data)

        kappa = self.priors.kappa + N

        mu = (self.priors.kappa * self.priors.mu + N * mean) / kappa

        a = self.priors.a + 0.5 * N

        b = self.priors.b + \
            0.5 * np.sum((data - mean) ** 2) + \
            0.5 * self.priors.kappa * N * (mean - self.priors.mu) ** 2 / kappa

        return NormalGammaPriors(mu, kappa, a, b)

    def log_likelihood(self, data, params):
        return stats.norm.logpdf(data, loc=params.mean, scale=1 / np.sqrt(params.precision))

    def sample_prior(self, size=1, rng=None):
        return self._sample(self.priors, size, rng)

    def sample_posterior(self, data, size=1, rng=None):
        return self._sample(self.create_priors_from_data(data), size, rng)

    def log_predictive(self, data, rng=None):
        data = np.atleast_1d(np.asarray(data, dtype=np.float64))

        p = self.priors

        scale = np.sqrt(p.b * (p.kappa + 1) / (p.a * p.kappa))

        return stats.t.logpdf(data, df=2 * p.a, loc=p.mu, scale=scale)

    def predictive(self, data, rng=None):
        return np.exp(self.log_predictive(data, rng=rng))

    def _sample(self, priors, size, rng):
        size = check_size(size)

        rng = np.random.default_rng(rng)

        precision = stats.gamma.rvs(priors.a, scale=(1 / priors.b), size=size, random_state=rng)

        precision = np.maximum(precision, np.finfo(np.float64).tiny)

        mean = stats.norm.rvs(loc=priors.mu, scale=1 / np.sqrt(priors.kappa * precision), random_state=rng)

        return NormalParameters(mean, precision)
