import numpy as np
import scipy.stats as stats


class GammaPriorConcentrationSampler(object):
    '''
    Gibbs update assuming a gamma prior on the concentration parameter.
    '''

    def __init__(self, a, b):
        '''
        Args :
            a : (float) Shape parameter of the gamma prior.
            b : (float) Rate parameter of the gamma prior.
        '''
        if not (a > 0 and b > 0):
            raise ValueError('Concentration prior parameters must be positive, got a={0} b={1}'.format(a, b))

        self.a = a

        self.b = b

    def sample(self, old_value, num_clusters, num_data_points, rng=None):
        rng = np.random.default_rng(rng)

        if num_clusters == 0:
            return stats.gamma.rvs(self.a, scale=(1 / self.b), random_state=rng)

        k = num_clusters

        n = num_data_points

        eta = stats.beta.rvs(a=old_value + 1, b=n, random_state=rng)

        shape = (self.a + k - 1)

        rate = self.b - np.log(eta)

        x = shape / (n * rate)

        pi = x / (1 + x)

        shape += stats.bernoulli.rvs(pi, random_state=rng)

        new_value = stats.gamma.rvs(shape, scale=(1 / rate), random_state=rng)

        new_value = max(new_value, 1e-10)  # Catch numerical error

        return new_value
