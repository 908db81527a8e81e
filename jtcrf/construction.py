"""
Triangulation and junction tree construction

The steps run in order on an elimination ordering:

1. triangulate: add fill-in edges so the graph becomes chordal
2. extract_cliques: find the maximal cliques and all candidate separators
3. assign_representatives: choose the clique that holds each node's table
4. build_spanning_tree: keep a maximum weight spanning tree of the candidates
"""

import logging
from itertools import combinations

from .errors import InferenceError


logger = logging.getLogger(__name__)


def triangulate(graph, ordering):
    '''Triangulate a graph by eliminating variables in the given order

    When a variable is eliminated, all of its remaining neighbors are
    connected to each other so they form a clique.

    :param graph: PairwiseGraph to triangulate (left untouched)
    :param ordering: list of all variable ids
    :return tri_graph: a new PairwiseGraph containing the fill-in edges
    :return fill_edges: list of (i, j) pairs (i < j) added in elimination order
    '''

    tri_graph = graph.copy()
    eliminated = set()
    fill_edges = []

    for var in ordering:
        remaining = sorted(tri_graph.neighbors(var) - eliminated)
        eliminated.add(var)

        for n, m in combinations(remaining, 2):
            if not tri_graph.has_edge(n, m):
                tri_graph.add_edge(n, m)
                fill_edges.append((n, m))

    logger.debug("Triangulation added %d fill-in edges: %s", len(fill_edges), fill_edges)

    return tri_graph, fill_edges


def extract_cliques(tri_graph, ordering):
    '''Find the maximal cliques of a triangulated graph

    Walking the elimination ordering, each variable together with its not yet
    removed neighbors forms a candidate clique. Candidates contained in an
    already accepted clique are skipped. Every accepted clique is paired with
    all previously accepted cliques as a candidate separator.

    :param tri_graph: triangulated PairwiseGraph
    :param ordering: the elimination ordering used for triangulation
    :return cliques: list of frozensets of variable ids, in discovery order
    :return candidates: list of (clique_ix1, clique_ix2) pairs in discovery order
    '''

    cliques = []
    candidates = []
    removed = set()

    for var in ordering:
        scope = frozenset((tri_graph.neighbors(var) - removed) | {var})
        removed.add(var)

        if any(scope <= clique for clique in cliques):
            continue

        new_ix = len(cliques)
        candidates.extend((clique_ix, new_ix) for clique_ix in range(new_ix))
        cliques.append(scope)
        logger.debug("Found clique %d: %s", new_ix, sorted(scope))

    return cliques, candidates


def assign_representatives(cliques, graph):
    '''Assign every underlying node to the clique that represents it

    A node can be represented in a clique when the clique contains the node
    and every variable its table couples it to. The first such clique wins.

    :param cliques: list of clique scopes (frozensets of variable ids)
    :param graph: PairwiseGraph holding the node tables
    :return: dictionary mapping node id to clique index
    '''

    assignments = {}
    for node in graph:
        try:
            assignments[node.id] = next(
                clique_ix
                for clique_ix, clique in enumerate(cliques)
                if node.scope <= clique
            )
        except StopIteration:
            raise InferenceError(
                "No clique contains the table of node %d over %s"
                % (node.id, sorted(node.scope))
            )

    return assignments


def candidate_separators(cliques, candidates):
    '''Weight candidate separators by the size of the clique overlap

    :param cliques: list of clique scopes
    :param candidates: list of (clique_ix1, clique_ix2) pairs
    :return: list of (weight, clique_ix1, clique_ix2, overlap) sorted by
        descending weight; ties keep their discovery order
    '''

    weighted = []
    for (c1, c2) in candidates:
        overlap = cliques[c1] & cliques[c2]
        weighted.append((len(overlap), c1, c2, overlap))

    # sorted() is stable so equal weights stay in discovery order
    return sorted(weighted, key=lambda entry: -entry[0])


class _DisjointSets(object):
    '''Connectivity tracker over clique indices (union-find)'''

    def __init__(self, size):
        self.parent = list(range(size))

    def find(self, ix):
        root = ix
        while self.parent[root] != root:
            root = self.parent[root]
        # path compression
        while self.parent[ix] != root:
            self.parent[ix], ix = root, self.parent[ix]
        return root

    def union(self, ix1, ix2):
        root1, root2 = self.find(ix1), self.find(ix2)
        if root1 == root2:
            return False
        self.parent[root2] = root1
        return True


def build_spanning_tree(cliques, candidates):
    '''Construct a junction tree as a maximum weight spanning tree (Kruskal)

    :param cliques: list of clique scopes
    :param candidates: list of (clique_ix1, clique_ix2) candidate pairs
    :return: list of (clique_ix1, clique_ix2, separator_vars) tree edges

    Disconnected graphs give separators with an empty variable set, so the
    result is always a single tree over all cliques.
    '''

    components = _DisjointSets(len(cliques))
    edges = []

    for weight, c1, c2, overlap in candidate_separators(cliques, candidates):
        if len(edges) == len(cliques) - 1:
            break
        if components.union(c1, c2):
            edges.append((c1, c2, overlap))
            logger.debug(
                "Added separator %s between cliques %d and %d",
                sorted(overlap), c1, c2
            )

    if len(edges) != len(cliques) - 1:
        raise InferenceError(
            "Candidate separators do not connect all %d cliques" % len(cliques)
        )

    return edges
