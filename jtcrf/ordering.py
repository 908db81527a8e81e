"""
Elimination orderings for triangulation

An ordering is a list containing every variable id exactly once. The identity
ordering eliminates variables by ascending id. The greedy heuristics simulate
elimination on a copy of the adjacency and pick the next variable from a heap.
"""

import heapq
import logging
from itertools import combinations

import numpy as np


logger = logging.getLogger(__name__)


def identity_ordering(graph):
    '''Eliminate variables in ascending id order'''
    return list(graph.ids)


def _fill_in_count(var, adjacency):
    '''Number of edges added to connect all remaining neighbors of var'''
    return sum(
        1
        for n1, n2 in combinations(sorted(adjacency[var]), 2)
        if n2 not in adjacency[n1]
    )


def _cluster_weight(var, adjacency, sizes):
    '''Size of the table over var and its remaining neighbors'''
    return int(sizes[var] * np.prod([sizes[n] for n in adjacency[var]]))


def _greedy_ordering(graph, score):
    '''Create an ordering by repeatedly eliminating the lowest scoring variable

    :param graph: PairwiseGraph to eliminate
    :param score: function (var, adjacency, sizes) -> tuple, lower is better
    :return: list of variable ids

    Heap entries are [score..., var, valid]. When the score of a variable
    changes a new entry is pushed and the previous one is marked invalid.
    '''

    adjacency = graph.adjacency()
    sizes = graph.cardinalities

    heap = []
    entry_finder = {}

    def push(var):
        prev = entry_finder.get(var)
        if prev is not None:
            # invalidate previous entry
            prev[-1] = False
        entry = list(score(var, adjacency, sizes)) + [var, True]
        entry_finder[var] = entry
        heapq.heappush(heap, entry)

    for var in graph.ids:
        push(var)

    ordering = []
    while heap:
        entry = heapq.heappop(heap)
        if not entry[-1]:
            continue

        var = entry[-2]
        del entry_finder[var]
        ordering.append(var)

        # eliminate var: connect its remaining neighbors and remove it
        neighbors = adjacency.pop(var)
        for n1, n2 in combinations(neighbors, 2):
            adjacency[n1].add(n2)
            adjacency[n2].add(n1)
        for n in neighbors:
            adjacency[n].discard(var)

        # scores can only change within distance two of var
        affected = set(neighbors)
        for n in neighbors:
            affected.update(adjacency[n])
        for n in affected:
            push(n)

    return ordering


def min_degree_ordering(graph):
    '''Greedily eliminate the variable with the fewest remaining neighbors'''
    return _greedy_ordering(
        graph,
        lambda var, adjacency, sizes: (
            len(adjacency[var]),
            _cluster_weight(var, adjacency, sizes),
        )
    )


def min_fill_ordering(graph):
    '''Greedily eliminate the variable that adds the fewest fill-in edges

    Ties are broken by the weight of the induced cluster (product of the
    cardinalities of the variable and its remaining neighbors), then by id.
    '''
    return _greedy_ordering(
        graph,
        lambda var, adjacency, sizes: (
            _fill_in_count(var, adjacency),
            _cluster_weight(var, adjacency, sizes),
        )
    )


ORDERING_STRATEGIES = {
    "identity": identity_ordering,
    "min_degree": min_degree_ordering,
    "min_fill": min_fill_ordering,
}


def validate_ordering(ordering, graph):
    '''Check that ordering contains every variable of graph exactly once

    :return: the ordering as a list of ints
    '''

    ordering = [int(var) for var in ordering]
    if sorted(ordering) != graph.ids:
        raise ValueError(
            "Elimination ordering must contain each of the %d variables exactly once: %s"
            % (len(graph), ordering)
        )
    return ordering


def get_ordering(strategy, graph):
    '''Resolve an ordering strategy into an elimination ordering

    :param strategy: strategy name, callable graph -> ordering, or an explicit
        sequence of variable ids
    :param graph: the PairwiseGraph to be eliminated
    :return: validated list of variable ids
    '''

    if isinstance(strategy, str):
        try:
            strategy = ORDERING_STRATEGIES[strategy]
        except KeyError:
            raise ValueError("Unknown elimination ordering %r" % strategy)

    ordering = strategy(graph) if callable(strategy) else strategy
    ordering = validate_ordering(ordering, graph)
    logger.debug("Elimination ordering: %s", ordering)
    return ordering
