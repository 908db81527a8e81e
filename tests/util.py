from itertools import combinations, product

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components

from jtcrf import create_potential_graph
from jtcrf.sum_product import sum_product


def random_graph(seed, num_vars=6, edge_prob=0.5, max_labels=3):
    '''Create a random pairwise graph with strictly positive tables

    :param seed: seed for numpy RandomState
    :param num_vars: number of variables
    :param edge_prob: probability of an interaction between any two variables
    :param max_labels: maximum number of labels per variable (at least 2)
    :return: PairwiseGraph
    '''

    rng = np.random.RandomState(seed)
    sizes = rng.randint(2, max_labels + 1, size=num_vars)
    units = [rng.uniform(0.1, 1.0, size=size) for size in sizes]
    pairs = {
        (i, j): rng.uniform(0.1, 1.0, size=(sizes[i], sizes[j]))
        for i, j in combinations(range(num_vars), 2)
        if rng.rand() < edge_prob
    }
    return create_potential_graph(units, pairs)


def chain_graph():
    '''Binary chain 0 - 1 - 2 with symmetric couplings'''
    coupling = [[0.9, 0.1], [0.1, 0.9]]
    return create_potential_graph(
        [[0.4, 0.6], [0.5, 0.5], [0.8, 0.2]],
        {(0, 1): coupling, (1, 2): coupling}
    )


def brute_force_joint(graph, evidence=None):
    '''Normalized joint over all variables (axes in id order) by enumeration

    :param graph: PairwiseGraph
    :param evidence: optional dictionary of observed labels; inconsistent
        entries are set to zero before normalizing
    :return: numpy array with one axis per variable
    '''

    args = []
    for node in graph:
        args.extend([node.original.values, list(node.original.variables)])
    joint = np.array(sum_product.einsum(*args, list(range(len(graph)))))

    for var, value in (evidence or {}).items():
        mask = np.zeros(joint.shape[var], dtype=bool)
        mask[value] = True
        shape = [1] * joint.ndim
        shape[var] = -1
        joint = joint * np.reshape(mask, shape)

    return joint / joint.sum()


def brute_force_marginal(graph, variables, evidence=None):
    '''Marginal over the given variables with axes in the given order'''
    joint = brute_force_joint(graph, evidence)
    return sum_product.einsum(joint, list(range(len(graph))), list(variables))


def brute_force_log_prob(graph, labeling):
    joint = brute_force_joint(graph)
    with np.errstate(divide='ignore'):
        return float(np.log(joint[tuple(labeling)]))


def all_labelings(graph):
    return product(*[range(node.cardinality) for node in graph])


def is_chordal(graph):
    '''Test chordality with maximum cardinality search

    A graph is chordal iff, visiting nodes in maximum cardinality order, the
    previously visited neighbors of each node form a clique (Tarjan and
    Yannakakis, 1984).
    '''

    adjacency = graph.adjacency()
    weights = {var: 0 for var in adjacency}
    visited = set()

    while weights:
        var = max(sorted(weights), key=lambda v: weights[v])
        del weights[var]

        earlier = adjacency[var] & visited
        for n1, n2 in combinations(earlier, 2):
            if n2 not in adjacency[n1]:
                return False

        visited.add(var)
        for n in adjacency[var]:
            if n in weights:
                weights[n] += 1

    return True


def tree_adjacency(tree):
    '''Clique adjacency matrix of a JunctionTree'''
    adj = np.zeros((len(tree.cliques), len(tree.cliques)), dtype=int)
    for separator in tree.separators:
        c1, c2 = separator.cliques
        adj[c1, c2] = adj[c2, c1] = 1
    return adj


def assert_is_tree(tree):
    '''Cliques and separators form a single tree'''
    num_components, _ = connected_components(csr_matrix(tree_adjacency(tree)), directed=False)
    assert num_components == 1
    assert len(tree.separators) == len(tree.cliques) - 1


def assert_running_intersection(tree):
    '''Cliques containing any variable induce a connected subtree'''
    adj = tree_adjacency(tree)
    for var in range(len(tree.nodes)):
        ix = [clique.id for clique in tree.cliques if var in clique.variables]
        assert len(ix) > 0
        sub = csr_matrix(adj[np.ix_(ix, ix)])
        num_components, _ = connected_components(sub, directed=False)
        assert num_components == 1, "variable %d breaks running intersection" % var


def assert_separators_consistent(tree, atol=1e-8):
    '''Neighboring cliques agree on the marginal over their separator'''
    for separator in tree.separators:
        c1, c2 = [tree.cliques[ix] for ix in separator.cliques]
        keep = sorted(separator.variables - c1.observed - c2.observed)
        m1 = c1.potential.marginalize(keep)
        m2 = c2.potential.marginalize(keep)
        np.testing.assert_allclose(
            m1.values,
            m2.transpose(m1.variables).values,
            atol=atol
        )
