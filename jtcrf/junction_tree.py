import logging

import numpy as np

from . import beliefpropagation as bp
from . import construction as cons
from .config import default_config
from .errors import IncompleteEvidenceError, InferenceError, UnknownVariableError
from .graph import PairwiseGraph
from .ordering import get_ordering
from .potential import PotentialTable


logger = logging.getLogger(__name__)


DIRTY = "dirty"
PROPAGATED = "propagated"


class JunctionTree(object):
    """Exact inference over a pairwise graph through a clique tree

    The tree is in one of two states. It is "dirty" after construction and
    whenever evidence changes; queries propagate messages first and move it to
    "propagated". Only add_evidence and reset_evidence make it dirty again.
    """

    def __init__(self, nodes, cliques, separators, edges, config=None):
        self.nodes = nodes
        self.cliques = list(cliques)
        self.separators = list(separators)
        self.edges = list(edges)
        self.config = default_config if config is None else config

        self.assignments = {}
        for clique in self.cliques:
            for node_id in clique.represented:
                self.assignments[node_id] = clique.id

        missing = [node.id for node in nodes if node.id not in self.assignments]
        if missing:
            raise InferenceError("Nodes %s are not represented in any clique" % missing)

        # any clique will do as the root
        self.root = self.cliques[0].id
        self.evidence = {}
        self.state = DIRTY

    @property
    def ready_to_query(self):
        return self.state == PROPAGATED

    @property
    def max_clique_size(self):
        return max(len(clique.variables) for clique in self.cliques)

    def _check_var(self, var):
        if var not in self.nodes:
            raise UnknownVariableError(var)
        return int(var)

    def add_evidence(self, observed):
        """
        Enter evidence into the tree

        Input:
        ------

        Dictionary of variable id as key and observed label as value

        The tables of the observed node and of all its neighbors are sliced at
        the observed label. Observing an already observed variable again with
        the same label is a no-op.

        """

        observed = {self._check_var(var): int(value) for var, value in observed.items()}
        for var, value in observed.items():
            if not 0 <= value < self.nodes[var].cardinality:
                raise ValueError(
                    "Label %d out of range for variable %d with %d labels"
                    % (value, var, self.nodes[var].cardinality)
                )
            if var in self.evidence and self.evidence[var] != value:
                raise ValueError(
                    "Variable %d already observed with label %d, reset evidence first"
                    % (var, self.evidence[var])
                )

        self.state = DIRTY

        for var, value in observed.items():
            if var in self.evidence:
                continue
            clique = self.cliques[self.assignments[var]]
            clique.observed.add(var)

            node = self.nodes[var]
            node.observe(var, value)
            for neighbor in node.neighbors:
                self.nodes[neighbor].observe(var, value)

            self.evidence[var] = value
            logger.debug("Entered evidence %d=%d into clique %d", var, value, clique.id)

    def reset_evidence(self):
        '''Remove all evidence, restoring the original node tables'''
        for node in self.nodes:
            node.reset()
        for clique in self.cliques:
            clique.observed = set()
        self.evidence = {}
        self.state = DIRTY

    def propagate(self):
        '''Initialize cliques and separators and pass messages'''

        logger.debug("Propagating evidence %s from root clique %d", self.evidence, self.root)

        for clique in self.cliques:
            clique.initialize(self.nodes)
        for separator in self.separators:
            separator.initialize()

        bp.hugin(
            self.cliques,
            self.separators,
            self.root,
            zero_division=self.config.zero_division
        )
        self.state = PROPAGATED

    def _ensure_propagated(self):
        if self.state != PROPAGATED:
            self.propagate()

    def _one_hot(self, var):
        values = np.zeros(self.nodes[var].cardinality)
        values[self.evidence[var]] = 1.0
        return values

    def query_marginal(self, var):
        '''Normalized distribution of a single variable

        :param var: variable id
        :return: 1-D numpy array with one probability per label. An observed
            variable gets all of its mass on the observed label.
        '''

        var = self._check_var(var)
        if var in self.evidence:
            return self._one_hot(var)

        self._ensure_propagated()

        clique = self.cliques[self.assignments[var]]
        marginal = clique.potential.marginalize([var])
        if marginal.variables != (var,):
            raise InferenceError(
                "Potential of clique %d does not cover variable %d" % (clique.id, var)
            )
        return marginal.normalize(zero_division=self.config.zero_division).to_array()

    def find_clique(self, variables):
        '''First clique whose scope contains all the given variables, or None'''
        variables = set(variables)
        return next(
            (clique for clique in self.cliques if clique.contains(variables)),
            None
        )

    def query_joint(self, variables):
        '''Normalized joint distribution of variables that share a clique

        :param variables: sequence of variable ids
        :return: PotentialTable over exactly the given variables (check its
            variable order), or None when no single clique contains them all
        '''

        variables = list(dict.fromkeys(self._check_var(var) for var in variables))
        clique = self.find_clique(variables)
        if clique is None:
            logger.debug("No clique contains all of the variables %s", variables)
            return None

        self._ensure_propagated()

        joint = clique.potential.marginalize(variables)
        # observed variables have been sliced out, put them back as one-hot axes
        for var in variables:
            if var in self.evidence:
                joint = joint.multiply(PotentialTable([var], self._one_hot(var)))

        return joint.normalize(zero_division=self.config.zero_division)

    def query(self, query):
        '''Query a marginal (single id) or a joint table (sequence of ids)'''
        if isinstance(query, (int, np.integer)):
            return self.query_marginal(query)
        return self.query_joint(query)

    def marginals(self):
        '''List of the marginal distributions of all variables'''
        return [self.query_marginal(var) for var in range(len(self.nodes))]

    def edge_beliefs(self):
        '''Pairwise beliefs for every edge of the underlying graph

        :return: dictionary with (i, j) pairs (i < j) as keys and normalized
            2-D arrays with axes (i, j) as values
        '''

        return {
            (i, j): self.query_joint([i, j]).to_array((i, j))
            for (i, j) in self.edges
        }

    def log_joint(self, labeling):
        '''Log probability of a complete labeling

        Computed as the sum of log clique marginals minus the sum of log
        separator marginals, which is exact on a junction tree.

        With evidence entered this is the log probability of the labeling
        conditioned on the evidence. A labeling that contradicts the evidence
        gets -inf.

        :param labeling: mapping (or sequence indexed by id) of variable labels
        :return: log probability, -inf for impossible labelings
        '''

        if not hasattr(labeling, "keys"):
            labeling = dict(enumerate(labeling))
        labeling = {self._check_var(var): int(value) for var, value in labeling.items()}

        missing = [var for var in range(len(self.nodes)) if var not in labeling]
        if missing:
            raise IncompleteEvidenceError(missing)

        if any(labeling[var] != value for var, value in self.evidence.items()):
            return -np.inf

        self._ensure_propagated()

        policy = self.config.zero_division
        with np.errstate(divide='ignore'):
            total = 0.0
            for clique in self.cliques:
                p = clique.potential.normalize(zero_division=policy)
                total += np.log(p.enter_full_evidence(labeling))
            for separator in self.separators:
                # the mass over an empty separator normalizes to one
                if separator.weight == 0:
                    continue
                p = separator.updated.normalize(zero_division=policy)
                total -= np.log(p.enter_full_evidence(labeling))

        return float(total)

    def log_partition(self):
        '''Log of the total mass of the model given the current evidence

        Without evidence this is log Z, with evidence it is log Z plus the log
        probability of the evidence.
        '''

        self._ensure_propagated()
        with np.errstate(divide='ignore'):
            return float(np.log(self.cliques[self.root].potential.sum()))

    def is_consistent(self):
        '''Check that neighboring cliques agree on their separator marginals

        Marginals are compared within the configured absolute tolerance.
        '''

        self._ensure_propagated()
        for separator in self.separators:
            c1, c2 = [self.cliques[ix] for ix in separator.cliques]
            keep = sorted(separator.variables - set(self.evidence))
            m1 = c1.potential.marginalize(keep)
            m2 = c2.potential.marginalize(keep)
            if not np.allclose(
                    m1.values,
                    m2.transpose(m1.variables).values,
                    atol=self.config.atol
            ):
                logger.debug("Cliques %d and %d disagree on %s", c1.id, c2.id, keep)
                return False
        return True

    def describe(self):
        '''Multi-line description of the cliques and separators'''
        lines = ["Junction tree (%s)" % self.state, "Cliques:"]
        lines.extend("  %r" % clique for clique in self.cliques)
        lines.append("Separators:")
        lines.extend("  %r" % separator for separator in self.separators)
        return "\n".join(lines)

    def __repr__(self):
        return "JunctionTree(cliques=%d, separators=%d, state=%r)" % (
            len(self.cliques),
            len(self.separators),
            self.state
        )


def build(graph, ordering=None, config=None):
    '''Build a junction tree for a pairwise graph

    :param graph: PairwiseGraph or an iterable of UnderlyingVariableNode
    :param ordering: elimination ordering (list of ids), strategy name or
        callable; defaults to the configured strategy
    :param config: InferenceConfig, defaults to jtcrf.config.default_config
    :return: a JunctionTree ready to be queried
    '''

    config = default_config if config is None else config
    if not isinstance(graph, PairwiseGraph):
        graph = PairwiseGraph(graph)

    moral, _ = graph.moralize()
    ordering = get_ordering(config.ordering if ordering is None else ordering, moral)

    tri_graph, _ = cons.triangulate(moral, ordering)
    scopes, candidates = cons.extract_cliques(tri_graph, ordering)
    assignments = cons.assign_representatives(scopes, tri_graph)
    tree_edges = cons.build_spanning_tree(scopes, candidates)

    cliques = [bp.Clique(ix, scope) for ix, scope in enumerate(scopes)]
    for node_id in sorted(assignments):
        cliques[assignments[node_id]].represented.append(node_id)

    separators = []
    for sep_ix, (c1, c2, overlap) in enumerate(tree_edges):
        separators.append(bp.Separator(sep_ix, c1, c2, overlap))
        cliques[c1].separators.append(sep_ix)
        cliques[c2].separators.append(sep_ix)

    logger.debug(
        "Built junction tree with %d cliques (largest %d variables)",
        len(cliques),
        max(len(scope) for scope in scopes)
    )

    return JunctionTree(tri_graph, cliques, separators, graph.edges(), config=config)
