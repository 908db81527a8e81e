import logging
from collections import deque

from .potential import identity


logger = logging.getLogger(__name__)


class Clique(object):
    """A node of the junction tree

    variables: scope of the clique (frozenset of underlying variable ids)
    represented: ids of the underlying nodes whose tables are multiplied into
    this clique
    potential: current belief, valid as a joint over the scope after propagation
    observed: ids of variables with evidence entered through this clique
    separators: ids of the incident separators
    """

    def __init__(self, id, variables):
        self.id = id
        self.variables = frozenset(variables)
        self.represented = []
        self.separators = []
        self.observed = set()
        self.potential = identity()

    def contains(self, variables):
        return set(variables) <= self.variables

    def initialize(self, nodes):
        '''Reset the potential to the product of the represented node tables

        :param nodes: PairwiseGraph holding the (evidence sliced) node tables
        '''

        potential = identity()
        for node_id in self.represented:
            potential = potential.multiply(nodes[node_id].current)
        self.potential = potential

    def send_message(self, separator):
        '''Project the clique potential onto the separator'''
        keep = sorted(separator.variables - self.observed)
        separator.receive_message(self.potential.marginalize(keep))

    def receive_message(self, message):
        self.potential = self.potential.multiply(message)

    def __repr__(self):
        return "Clique(id=%d, variables=%s, represented=%s)" % (
            self.id,
            sorted(self.variables),
            self.represented
        )


class Separator(object):
    """An edge of the junction tree between two cliques

    The separator keeps the last two messages that passed through it. The
    message forwarded to a clique is updated / current, so information the
    receiver already sent is not counted twice.
    """

    def __init__(self, id, clique1, clique2, variables):
        self.id = id
        self.cliques = (clique1, clique2)
        self.variables = frozenset(variables)
        self.current = identity()
        self.updated = identity()

    @property
    def weight(self):
        return len(self.variables)

    def other(self, clique_id):
        '''Id of the clique on the other side of the separator'''
        c1, c2 = self.cliques
        return c2 if clique_id == c1 else c1

    def initialize(self):
        self.current = identity()
        self.updated = identity()

    def receive_message(self, message):
        self.current = self.updated
        self.updated = message

    def send_message(self, clique, zero_division=None):
        clique.receive_message(
            self.updated.divide(self.current, zero_division=zero_division)
        )

    def __repr__(self):
        return "Separator(id=%d, cliques=%s, variables=%s)" % (
            self.id,
            self.cliques,
            sorted(self.variables)
        )


def df_traverse(cliques, separators, root):
    '''Depth-first (pre-order) traversal of the junction tree

    :param cliques: list of Clique objects indexed by id
    :param separators: list of Separator objects indexed by id
    :param root: id of the clique to start from
    :return: generator of (clique_id, parent_id, separator_id) triples, with
        parent and separator None for the root
    '''

    stack = [(root, None, None)]
    while stack:
        clique_ix, parent_ix, entrance = stack.pop()
        yield clique_ix, parent_ix, entrance
        stack.extend(
            (separators[sep_ix].other(clique_ix), clique_ix, sep_ix)
            for sep_ix in reversed(cliques[clique_ix].separators)
            if sep_ix != entrance
        )


def bf_traverse(cliques, separators, root):
    '''Breadth-first traversal of the junction tree

    Output is the same kind of triples as df_traverse produces.
    '''

    queue = deque([(root, None, None)])
    while queue:
        clique_ix, parent_ix, entrance = queue.popleft()
        yield clique_ix, parent_ix, entrance
        queue.extend(
            (separators[sep_ix].other(clique_ix), clique_ix, sep_ix)
            for sep_ix in cliques[clique_ix].separators
            if sep_ix != entrance
        )


def update(receiver, sender, separator, zero_division=None):
    '''Update receiver according to the information in sender'''
    sender.send_message(separator)
    separator.send_message(receiver, zero_division=zero_division)


def collect(cliques, separators, root, zero_division=None):
    '''Collect evidence towards the root

    Children are processed before their parents (reverse pre-order) so every
    clique has absorbed its whole subtree before it sends a message.
    '''

    order = list(df_traverse(cliques, separators, root))
    for clique_ix, parent_ix, sep_ix in reversed(order):
        if parent_ix is None:
            continue
        logger.debug("Collecting evidence from clique %d into %d", clique_ix, parent_ix)
        update(cliques[parent_ix], cliques[clique_ix], separators[sep_ix], zero_division)


def distribute(cliques, separators, root, zero_division=None):
    '''Distribute evidence from the root to the leaves (pre-order)'''

    for clique_ix, parent_ix, sep_ix in df_traverse(cliques, separators, root):
        if parent_ix is None:
            continue
        logger.debug("Distributing evidence from clique %d to %d", parent_ix, clique_ix)
        update(cliques[clique_ix], cliques[parent_ix], separators[sep_ix], zero_division)


def hugin(cliques, separators, root, zero_division=None):
    '''Run the HUGIN two pass algorithm

    After the call every clique potential is the (unnormalized) joint over its
    variables and neighboring cliques agree on their separators.

    See page 3:
    http://compbio.fmph.uniba.sk/vyuka/gm/old/2010-02/handouts/junction-tree.pdf
    '''

    collect(cliques, separators, root, zero_division)
    distribute(cliques, separators, root, zero_division)
