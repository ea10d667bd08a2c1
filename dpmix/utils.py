import numpy as np


def relabel_clustering(clustering):
    '''
    Map cluster labels to 0..K-1 in order of first appearance.
    '''
    clustering = np.asarray(clustering)

    _, first_index, inverse = np.unique(clustering, return_index=True, return_inverse=True)

    order = np.argsort(np.argsort(first_index))

    return order[inverse.reshape(-1)].astype(int)


def cluster_sizes(clustering):
    _, sizes = np.unique(clustering, return_counts=True)

    return sizes


def posterior_predictive_density(states, dist, grid, rng=None):
    '''
    Density of a new observation at each grid point, averaged over saved sampler states.

    For a single state with concentration alpha, N data points and clusters of size n_c with parameters theta_c the
    density is sum_c n_c / (alpha + N) f(x | theta_c) + alpha / (alpha + N) predictive(x).
    '''
    grid = np.atleast_1d(np.asarray(grid, dtype=np.float64))

    states = list(states)

    if len(states) == 0:
        raise ValueError('Need at least one sampler state')

    prior_density = dist.predictive(grid, rng=rng)

    density = np.zeros(grid.shape)

    for state in states:
        sizes = cluster_sizes(state.clustering)

        norm_const = state.alpha + sizes.sum()

        density += (state.alpha / norm_const) * prior_density

        for n, params in zip(sizes, state.params):
            density += (n / norm_const) * dist.likelihood(grid, params)

    return density / len(states)
