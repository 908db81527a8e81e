"""
Exceptions raised by the inference engine
"""


class InferenceError(Exception):
    '''Base class for all errors raised by jtcrf'''


class VariableMismatchError(InferenceError, ValueError):
    '''Potential tables disagree about variables (duplicates or cardinalities)'''


class UnknownVariableError(InferenceError, ValueError):
    '''A variable id is not part of the graph or junction tree'''

    def __init__(self, var):
        self.var = var
        super().__init__("Variable %s not in tree" % (var,))


class EmptyGraphError(InferenceError, ValueError):
    '''A junction tree cannot be built from a graph without variables'''


class IncompleteEvidenceError(InferenceError, ValueError):
    '''Full evidence was requested but some variables have no assigned value'''

    def __init__(self, missing):
        self.missing = tuple(sorted(missing))
        super().__init__(
            "No evidence for variable(s) %s" % ", ".join(str(v) for v in self.missing)
        )


class ZeroDivisionPotentialError(InferenceError, ZeroDivisionError):
    '''A non-zero potential entry was divided by zero (or a zero table normalized)'''
