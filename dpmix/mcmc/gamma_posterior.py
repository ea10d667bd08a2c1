'''
Created on 19 Oct 2026

Posterior updates for the parameters of a Gamma cluster kernel.
'''
import math
import numba
import numpy as np

from dpmix.distributions.base import check_size

MIN_RATE = np.finfo(np.float64).tiny


@numba.jit(cache=True, nopython=True)
def log_shape_prior_density(shape, a, b, scale):
    '''
    Log density of shape = -scale * log(u) when u ~ Beta(a, b).
    '''
    t = shape / scale

    log_beta_fn = math.lgamma(a) + math.lgamma(b) - math.lgamma(a + b)

    return -a * t + (b - 1) * math.log(-math.expm1(-t)) - log_beta_fn - math.log(scale)


@numba.jit(cache=True, nopython=True)
def _log_acceptance_ratio(proposal, shape, rate, N, log_data_sum, a, b, scale):
    diff = proposal - shape

    log_ratio = diff * log_data_sum

    log_ratio -= N * (math.lgamma(proposal) - math.lgamma(shape))

    log_ratio += N * diff * math.log(rate)

    log_ratio += log_shape_prior_density(proposal, a, b, scale) - log_shape_prior_density(shape, a, b, scale)

    # Random walk is symmetric in log(shape) not shape
    log_ratio += math.log(proposal) - math.log(shape)

    return log_ratio


class GibbsMetropolisSampler(object):
    '''
    Draw (shape, rate) pairs for a Gamma kernel given the data assigned to a cluster.

    The rate has a conjugate Gamma update given the shape, so it is drawn exactly. The shape has no closed form
    conditional and is updated with a random walk Metropolis-Hastings move on log(shape). Each requested draw is the
    final state of an independent chain.
    '''

    def __init__(self, priors, num_iters=500, burnin=300, step_size=0.1, init_shape=1.0):
        '''
        Args :
            priors : (GammaPriors) Hyperparameters of the kernel.
            num_iters : (int) Length of each chain.
            burnin : (int) Number of initial iterations discarded from each chain.
            step_size : (float) Standard deviation of the random walk proposal on log(shape).
            init_shape : (float) Starting value of the shape in each chain.
        '''
        if num_iters < 1:
            raise ValueError('num_iters must be at least 1, got {}'.format(num_iters))

        if not 0 <= burnin < num_iters:
            raise ValueError('burnin must be in [0, num_iters), got {}'.format(burnin))

        if not step_size > 0:
            raise ValueError('step_size must be positive, got {}'.format(step_size))

        if not init_shape > 0:
            raise ValueError('init_shape must be positive, got {}'.format(init_shape))

        self.priors = priors

        self.num_iters = int(num_iters)

        self.burnin = int(burnin)

        self.step_size = float(step_size)

        self.init_shape = float(init_shape)

    def sample(self, data, size=1, rng=None):
        '''
        Returns matched arrays of shape and rate draws, one entry per chain.
        '''
        size = check_size(size)

        data = np.atleast_1d(np.asarray(data, dtype=np.float64))

        if data.shape[0] == 0:
            raise ValueError('Cannot sample from the posterior of an empty cluster')

        rng = np.random.default_rng(rng)

        N = data.shape[0]

        data_sum = np.sum(data)

        log_data_sum = np.sum(np.log(data))

        shape = np.zeros(size)

        rate = np.zeros(size)

        # Chains share no state so each gets its own stream
        for i, chain_rng in enumerate(rng.spawn(size)):
            shape[i], rate[i], _ = self._run_chain(N, data_sum, log_data_sum, chain_rng)

        return shape, rate

    def sample_rate(self, shape, num_data_points, data_sum, size=None, rng=None):
        '''
        Exact draw of the rate from its conditional posterior given the shape.
        '''
        rng = np.random.default_rng(rng)

        post_shape = self.priors.c0 + num_data_points * shape

        post_rate = self.priors.d0 + data_sum

        return np.maximum(rng.gamma(post_shape, 1 / post_rate, size=size), MIN_RATE)

    def log_acceptance_ratio(self, proposal, shape, rate, num_data_points, log_data_sum):
        return _log_acceptance_ratio(
            proposal,
            shape,
            rate,
            num_data_points,
            log_data_sum,
            self.priors.a0,
            self.priors.b0,
            self.priors.scale
        )

    def _run_chain(self, N, data_sum, log_data_sum, rng):
        shape = self.init_shape

        log_steps = rng.normal(0, self.step_size, size=self.num_iters)

        log_u = np.log(rng.random(size=self.num_iters))

        num_accepted = 0

        for i in range(self.num_iters):
            rate = float(self.sample_rate(shape, N, data_sum, rng=rng))

            proposal = shape * math.exp(log_steps[i])

            log_ratio = self.log_acceptance_ratio(proposal, shape, rate, N, log_data_sum)

            if math.isnan(log_ratio):
                continue

            if log_u[i] < log_ratio:
                shape = proposal

                num_accepted += 1

        return shape, rate, num_accepted
