"""
Exact junction tree inference for pairwise conditional random fields
"""

from ._meta import __version__

from .config import InferenceConfig, default_config
from .errors import (
    EmptyGraphError,
    IncompleteEvidenceError,
    InferenceError,
    UnknownVariableError,
    VariableMismatchError,
    ZeroDivisionPotentialError,
)
from .potential import PotentialTable, identity
from .graph import PairwiseGraph, UnderlyingVariableNode, create_potential_graph
from .junction_tree import JunctionTree, build
