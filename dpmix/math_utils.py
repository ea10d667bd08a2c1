'''
Created on 19 Oct 2026
'''
import math
import numba
import numpy as np

UNIT_INTERVAL_EPS = np.finfo(np.float64).eps


def discrete_rvs(p, rng):
    return rng.multinomial(1, p).argmax()


def clamp_unit_interval(u):
    '''
    Move values at exactly 0 or 1 into the open unit interval so their logs are finite.
    '''
    return np.clip(u, UNIT_INTERVAL_EPS, 1 - UNIT_INTERVAL_EPS)


@numba.jit(cache=True, nopython=True)
def exp_normalize(log_p):
    log_p = np.asarray(log_p)
    log_norm = log_sum_exp(log_p)
    p = np.exp(log_p - log_norm)
    p = p / p.sum()
    return p, log_norm


@numba.jit(cache=True, nopython=True)
def log_sum_exp(log_X):
    '''
    Given a list of values in log space, log_X. Compute log(exp(log_X[0]) + exp(log_X[1]) + ... exp(log_X[n]))

    Numerically safer than naive method.
    '''
    max_exp = np.max(log_X)
    if np.isinf(max_exp):
        return max_exp
    total = 0.0
    for x in log_X:
        total += np.exp(x - max_exp)
    return np.log(total) + max_exp


@numba.jit(cache=True, nopython=True)
def log_normalize(log_p):
    return log_p - log_sum_exp(log_p)


@numba.vectorize(["float64(float64, float64, float64)"])
def gamma_log_pdf(x, shape, rate):
    '''
    Log density of a Gamma(shape, rate) distribution, -inf outside the positive half line.
    '''
    if x <= 0:
        return -math.inf
    return shape * math.log(rate) - math.lgamma(shape) + (shape - 1) * math.log(x) - rate * x
