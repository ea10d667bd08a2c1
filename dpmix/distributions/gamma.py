'''
Created on 19 Oct 2026

Gamma cluster kernel with a non-conjugate prior on the shape.
'''
from collections import namedtuple

import numpy as np
import scipy.special as special
import scipy.stats as stats

from dpmix.distributions.base import MixtureDistribution, NON_CONJUGATE, check_size
from dpmix.math_utils import clamp_unit_interval, gamma_log_pdf
from dpmix.mcmc.gamma_posterior import GibbsMetropolisSampler, MIN_RATE


class GammaPriors(namedtuple('GammaPriors', ['a0', 'b0', 'c0', 'd0', 'scale'])):
    '''
    Hyperparameters of the Gamma kernel.

    The shape is -scale * log(u) with u ~ Beta(a0, b0) and the rate is Gamma(c0, d0) with d0 a rate.
    '''
    __slots__ = ()

    def __new__(cls, a0, b0, c0, d0, scale):
        self = super(GammaPriors, cls).__new__(cls, float(a0), float(b0), float(c0), float(d0), float(scale))

        for name, value in zip(self._fields, self):
            if not (np.isfinite(value) and value > 0):
                raise ValueError('Prior parameter {0} must be a positive real, got {1}'.format(name, value))

        return self

    @classmethod
    def from_vector(cls, values):
        values = list(values)

        if len(values) != len(cls._fields):
            raise ValueError('Expected {0} prior parameters, got {1}'.format(len(cls._fields), len(values)))

        return cls(*values)


class GammaParameters(object):
    '''
    Batch of (shape, rate) pairs stored as matched arrays.
    '''
    __slots__ = ('shape', 'rate')

    def __init__(self, shape, rate):
        self.shape = np.atleast_1d(np.asarray(shape, dtype=np.float64))

        self.rate = np.atleast_1d(np.asarray(rate, dtype=np.float64))

        if self.shape.shape != self.rate.shape:
            raise ValueError('Shape and rate batches differ in size')

    def __len__(self):
        return self.shape.shape[0]

    def __getitem__(self, idx):
        return GammaParameters(self.shape[idx], self.rate[idx])

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]


class GammaDistribution(MixtureDistribution):

    conjugacy = NON_CONJUGATE

    def __init__(self, priors, posterior_sampler=None, num_predictive_samples=1000):
        if not isinstance(priors, GammaPriors):
            priors = GammaPriors.from_vector(priors)

        if posterior_sampler is None:
            posterior_sampler = GibbsMetropolisSampler(priors)

        self.priors = priors

        self.posterior_sampler = posterior_sampler

        self.num_predictive_samples = check_size(num_predictive_samples)

    def log_likelihood(self, data, params):
        return gamma_log_pdf(data, params.shape, params.rate)

    def sample_prior(self, size=1, rng=None):
        size = check_size(size)

        rng = np.random.default_rng(rng)

        u = stats.beta.rvs(self.priors.a0, self.priors.b0, size=size, random_state=rng)

        shape = -self.priors.scale * np.log(clamp_unit_interval(u))

        rate = stats.gamma.rvs(self.priors.c0, scale=(1 / self.priors.d0), size=size, random_state=rng)

        rate = np.maximum(rate, MIN_RATE)

        return GammaParameters(shape, rate)

    def sample_posterior(self, data, size=1, rng=None):
        shape, rate = self.posterior_sampler.sample(data, size=size, rng=rng)

        return GammaParameters(shape, rate)

    def log_predictive(self, data, rng=None):
        '''
        Log of a Monte Carlo estimate of the prior predictive density at each data point.

        The average over prior draws is taken in log space so points far in the tail keep a finite value. Points
        outside the support get -inf and no prior draws are made when every point is outside.
        '''
        data = np.atleast_1d(np.asarray(data, dtype=np.float64))

        log_density = np.full(data.shape, -np.inf)

        in_support = data > 0

        if np.any(in_support):
            params = self.sample_prior(size=self.num_predictive_samples, rng=rng)

            log_p = self.log_likelihood_bulk(data[in_support], params)

            log_density[in_support] = special.logsumexp(log_p, axis=1) - np.log(self.num_predictive_samples)

        return log_density

    def predictive(self, data, rng=None):
        return np.exp(self.log_predictive(data, rng=rng))
