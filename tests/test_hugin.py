import numpy as np
import pytest

import jtcrf
from jtcrf import PotentialTable
from jtcrf import beliefpropagation as bp

from .util import (
    assert_separators_consistent,
    brute_force_marginal,
    chain_graph,
    random_graph,
)

'''
HUGIN Tests

examples:
https://www.cs.ru.nl/~peterl/BN/examplesproofs.pdf
http://www.inf.ed.ac.uk/teaching/courses/pmr/docs/jta_ex.pdf
'''


def initialized_tree(graph, ordering=None):
    tree = jtcrf.build(graph, ordering=ordering)
    for clique in tree.cliques:
        clique.initialize(tree.nodes)
    for separator in tree.separators:
        separator.initialize()
    return tree


def test_initialize_multiplies_represented_tables():
    tree = initialized_tree(chain_graph())
    nodes = tree.nodes

    assert tree.cliques[0].potential.allclose(nodes[0].original)
    assert tree.cliques[1].potential.allclose(
        nodes[1].original.multiply(nodes[2].original)
    )
    assert tree.separators[0].current.is_identity
    assert tree.separators[0].updated.is_identity


def test_separator_keeps_last_two_messages():
    separator = bp.Separator(0, 0, 1, [1])
    first = PotentialTable([1], [0.2, 0.4])
    second = PotentialTable([1], [0.3, 0.1])

    separator.receive_message(first)
    assert separator.current.is_identity
    assert separator.updated is first

    separator.receive_message(second)
    assert separator.current is first
    assert separator.updated is second

    clique = bp.Clique(1, [1, 2])
    clique.potential = PotentialTable([1, 2], [[1.0, 2.0], [3.0, 4.0]])
    separator.send_message(clique)

    np.testing.assert_allclose(
        clique.potential.to_array((1, 2)),
        [[1.5, 3.0], [0.75, 1.0]]
    )


def test_clique_message_skips_observed_variables():
    clique = bp.Clique(0, [0, 1])
    clique.potential = PotentialTable([0], [0.3, 0.7])
    clique.observed.add(1)
    separator = bp.Separator(0, 0, 1, [0, 1])

    clique.send_message(separator)

    assert separator.updated.variables == (0,)
    np.testing.assert_allclose(separator.updated.values, [0.3, 0.7])


def test_collect_gathers_evidence_at_root():
    graph = chain_graph()
    tree = initialized_tree(graph)

    bp.collect(tree.cliques, tree.separators, tree.root)

    root = tree.cliques[tree.root]
    np.testing.assert_allclose(
        root.potential.normalize().to_array((0, 1)),
        brute_force_marginal(graph, [0, 1])
    )


def test_collect_leaves_leaf_untouched():
    graph = chain_graph()
    tree = initialized_tree(graph)
    leaf = tree.cliques[1].potential

    bp.collect(tree.cliques, tree.separators, tree.root)

    assert tree.cliques[1].potential is leaf


@pytest.mark.parametrize("seed", range(8))
def test_hugin_makes_cliques_consistent(seed):
    graph = random_graph(seed, num_vars=7, edge_prob=0.4)
    tree = initialized_tree(graph, ordering="min_fill")

    bp.hugin(tree.cliques, tree.separators, tree.root)

    assert_separators_consistent(tree)

    total = tree.cliques[tree.root].potential.sum()
    for clique in tree.cliques:
        variables = sorted(clique.variables)
        np.testing.assert_allclose(
            clique.potential.to_array(variables) / total,
            brute_force_marginal(graph, variables)
        )


def test_hugin_from_every_root_gives_same_beliefs():
    graph = random_graph(11, num_vars=6, edge_prob=0.5)
    beliefs = []

    for root in range(len(jtcrf.build(graph).cliques)):
        tree = initialized_tree(graph)
        bp.hugin(tree.cliques, tree.separators, root)
        beliefs.append([clique.potential.normalize() for clique in tree.cliques])

    for other in beliefs[1:]:
        for expected, actual in zip(beliefs[0], other):
            assert actual.allclose(expected)


def test_hugin_with_zero_entries():
    # a hard constraint forces variables 0 and 1 to be equal
    graph = jtcrf.create_potential_graph(
        [[0.5, 0.5], [0.3, 0.7], [0.6, 0.4]],
        {(0, 1): [[1.0, 0.0], [0.0, 1.0]], (1, 2): [[0.0, 1.0], [1.0, 1.0]]}
    )
    tree = initialized_tree(graph)

    bp.hugin(tree.cliques, tree.separators, tree.root, zero_division="raise")

    assert_separators_consistent(tree)
    np.testing.assert_allclose(
        tree.cliques[1].potential.normalize().to_array((1, 2)),
        brute_force_marginal(graph, [1, 2])
    )
