'''
Created on 19 Oct 2026

Gibbs update of cluster assignments under the Chinese restaurant process with explicit cluster parameters.
'''
import numpy as np

from dpmix.math_utils import discrete_rvs, exp_normalize


class Table(object):

    def __init__(self, params):
        self.params = params

        self.customers = set()

    def __contains__(self, idx):
        return idx in self.customers

    def __len__(self):
        return len(self.customers)


class ChineseRestaurantGibbsSampler(object):
    '''
    Reassign each data point given the parameters of every other cluster.

    Joining an existing table is weighted by its size times the kernel density, opening a new table by the
    concentration times the prior predictive density. A new table gets parameters drawn from the prior. They are
    replaced by a posterior draw given the table members when the sweep driver refreshes the cluster parameters.
    '''

    def __init__(self, dist):
        self.dist = dist

    def sample(self, clustering, params, alpha, data, rng=None):
        '''
        Returns a relabelled copy of the clustering and the matching list of cluster parameters.
        '''
        rng = np.random.default_rng(rng)

        data = np.asarray(data, dtype=np.float64)

        tables = self._get_tables(clustering, params)

        log_predictive = self.dist.log_predictive(data, rng=rng)

        for customer_idx in rng.permutation(data.shape[0]):
            tables = self._resample_customer(customer_idx, data, tables, alpha, log_predictive[customer_idx], rng)

        return self._prune(len(data), tables)

    def _get_tables(self, clustering, params):
        tables = []

        for z, block_params in enumerate(params):
            table = Table(block_params)

            table.customers.update(np.flatnonzero(clustering == z))

            tables.append(table)

        return tables

    def _resample_customer(self, customer_idx, data, tables, alpha, log_predictive, rng):
        data_point = data[customer_idx]

        for table in tables:
            if customer_idx in table:
                table.customers.remove(customer_idx)

                break

        tables = [t for t in tables if len(t) > 0]

        log_p = np.zeros(len(tables) + 1, dtype=np.float64)

        for c, table in enumerate(tables):
            log_p[c] = np.log(len(table)) + np.sum(self.dist.log_likelihood(data_point, table.params))

        log_p[-1] = np.log(alpha) + log_predictive

        if np.isneginf(np.max(log_p)):
            raise ValueError('Data point {} has zero density under every cluster and the prior'.format(customer_idx))

        p, _ = exp_normalize(log_p)

        table_idx = discrete_rvs(p, rng)

        if table_idx == len(tables):
            tables.append(Table(self.dist.sample_prior(size=1, rng=rng)))

        tables[table_idx].customers.add(customer_idx)

        return tables

    def _prune(self, num_data_points, tables):
        tables = [t for t in tables if len(t) > 0]

        clustering = np.zeros(num_data_points, dtype=int)

        params = []

        # Order tables by their first customer so labels match relabel_clustering
        tables = sorted(tables, key=lambda t: min(t.customers))

        for z, table in enumerate(tables):
            clustering[np.array(sorted(table.customers))] = z

            params.append(table.params)

        return clustering, params
