"""
Underlying variable graph of a pairwise model

Nodes live in an arena addressed by their integer id. Neighbor relations are
sets of ids, so copying the arena for triangulation never shares mutable state
with the original.
"""

import logging
from itertools import combinations

import numpy as np

from .errors import EmptyGraphError, UnknownVariableError, VariableMismatchError
from .potential import PotentialTable


logger = logging.getLogger(__name__)


class UnderlyingVariableNode(object):
    """One variable of the model together with the table assigned to it.

    The original table is the baseline given at construction. The current
    table is the original sliced by any evidence entered since the last reset.
    """

    def __init__(self, id, table, neighbors=()):
        self.id = int(id)
        if self.id not in table.variables:
            raise VariableMismatchError(
                "Table of node %d does not contain the node itself: %s"
                % (self.id, table.variables)
            )
        self.original = table
        self.current = table
        self.neighbors = set(int(n) for n in neighbors)
        self.neighbors.discard(self.id)
        self._cardinality = table.cardinalities[self.id]

    @property
    def cardinality(self):
        return self._cardinality

    @property
    def scope(self):
        '''Variables coupled to this node through its original table'''
        return frozenset(self.original.variables)

    def observe(self, var, value):
        '''Slice the current table at an observed value (no-op if var is absent)'''
        self.current = self.current.enter_evidence(var, value)

    def reset(self):
        self.current = self.original

    def copy(self):
        node = UnderlyingVariableNode(self.id, self.original, self.neighbors)
        node.current = self.current
        return node

    def __repr__(self):
        return "UnderlyingVariableNode(id=%d, neighbors=%s)" % (
            self.id,
            sorted(self.neighbors)
        )


class PairwiseGraph(object):
    """Arena of underlying variable nodes addressed by id 0..n-1

    Adjacency is kept symmetric: declaring j a neighbor of i also makes i a
    neighbor of j, and every variable in a node's table is a neighbor of it.
    """

    def __init__(self, nodes):
        nodes = list(nodes)
        if len(nodes) == 0:
            raise EmptyGraphError("Cannot build a graph without variables")

        ids = sorted(node.id for node in nodes)
        if ids != list(range(len(nodes))):
            raise ValueError(
                "Node ids must be unique and cover 0..%d, got %s" % (len(nodes) - 1, ids)
            )

        self._nodes = [None] * len(nodes)
        for node in nodes:
            self._nodes[node.id] = node

        for node in self._nodes:
            node.neighbors.update(v for v in node.original.variables if v != node.id)
            for n in list(node.neighbors):
                if not 0 <= n < len(self._nodes):
                    raise UnknownVariableError(n)
                self._nodes[n].neighbors.add(node.id)

        for node in self._nodes:
            for var, size in node.original.cardinalities.items():
                if self._nodes[var].cardinality != size:
                    raise VariableMismatchError(
                        "Variable %d has %d labels but the table of node %d uses %d"
                        % (var, self._nodes[var].cardinality, node.id, size)
                    )

    def __len__(self):
        return len(self._nodes)

    def __iter__(self):
        return iter(self._nodes)

    def __getitem__(self, id):
        return self._nodes[self._check(id)]

    def __contains__(self, id):
        return isinstance(id, (int, np.integer)) and 0 <= id < len(self._nodes)

    def _check(self, id):
        if id not in self:
            raise UnknownVariableError(id)
        return int(id)

    @property
    def ids(self):
        return list(range(len(self._nodes)))

    @property
    def cardinalities(self):
        return {node.id: node.cardinality for node in self._nodes}

    def neighbors(self, id):
        return set(self[id].neighbors)

    def adjacency(self):
        '''Return an independent dictionary id -> set of neighbor ids'''
        return {node.id: set(node.neighbors) for node in self._nodes}

    def has_edge(self, i, j):
        return j in self[i].neighbors

    def add_edge(self, i, j):
        if i == j:
            raise ValueError("Self-loops are not allowed (variable %d)" % i)
        self[i].neighbors.add(self._check(j))
        self[j].neighbors.add(self._check(i))

    def edges(self):
        '''Sorted list of (i, j) pairs with i < j'''
        return sorted(
            (node.id, n)
            for node in self._nodes
            for n in node.neighbors
            if node.id < n
        )

    def copy(self):
        return PairwiseGraph([node.copy() for node in self._nodes])

    def moralize(self):
        '''Connect all variables that share a table

        A node table over more than two variables couples its neighbors to
        each other, so they must end up in a common clique.

        :return moral: a new PairwiseGraph with the extra edges
        :return added: list of (i, j) pairs (i < j) that were added
        '''

        moral = self.copy()
        added = []
        for node in moral:
            for n, m in combinations(sorted(node.scope), 2):
                if not moral.has_edge(n, m):
                    moral.add_edge(n, m)
                    added.append((n, m))
        return moral, added

    def __repr__(self):
        return "PairwiseGraph(nodes=%d, edges=%s)" % (len(self), self.edges())


def create_potential_graph(unit_potentials, pairwise_potentials):
    '''Build the underlying graph from site and interaction tables

    Each interaction table is multiplied into the table of its lower-id
    endpoint, so every table is owned by exactly one node.

    :param unit_potentials: sequence of 1-D arrays, entry i holds the site
        potential of variable i over its labels
    :param pairwise_potentials: dictionary with (i, j) variable pairs as keys
        and 2-D arrays with axes (i, j) as values
    :return: a PairwiseGraph

    Example, a binary chain 0 - 1 - 2:

        >>> graph = create_potential_graph(
        ...     [[0.4, 0.6], [0.5, 0.5], [0.8, 0.2]],
        ...     {(0, 1): [[0.9, 0.1], [0.1, 0.9]], (1, 2): [[0.9, 0.1], [0.1, 0.9]]}
        ... )
        >>> graph.edges()
        [(0, 1), (1, 2)]
    '''

    unit_potentials = [np.asarray(unit, dtype=float) for unit in unit_potentials]
    if len(unit_potentials) == 0:
        raise EmptyGraphError("Cannot build a graph without variables")

    for i, unit in enumerate(unit_potentials):
        if unit.ndim != 1:
            raise VariableMismatchError(
                "Site potential of variable %d must be one dimensional" % i
            )

    tables = [PotentialTable([i], unit) for i, unit in enumerate(unit_potentials)]
    neighbors = [set() for _ in unit_potentials]

    seen = set()
    for (i, j) in sorted(pairwise_potentials):
        for var in (i, j):
            if not 0 <= var < len(unit_potentials):
                raise UnknownVariableError(var)
        if i == j:
            raise VariableMismatchError("Self-loop interaction on variable %d" % i)
        if frozenset((i, j)) in seen:
            raise ValueError("Duplicate interaction between %d and %d" % (i, j))
        seen.add(frozenset((i, j)))

        values = np.asarray(pairwise_potentials[(i, j)], dtype=float)
        expected = (len(unit_potentials[i]), len(unit_potentials[j]))
        if values.shape != expected:
            raise VariableMismatchError(
                "Interaction table (%d, %d) has shape %s, expected %s"
                % (i, j, values.shape, expected)
            )

        owner = min(i, j)
        tables[owner] = tables[owner].multiply(PotentialTable([i, j], values))
        neighbors[i].add(j)
        neighbors[j].add(i)

    logger.debug(
        "Created potential graph with %d variables and %d interactions",
        len(tables),
        len(seen)
    )

    return PairwiseGraph(
        UnderlyingVariableNode(i, table, neighbors[i])
        for i, table in enumerate(tables)
    )
