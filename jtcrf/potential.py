"""
Discrete potential tables over integer variable ids

A table pairs an ordered tuple of variable ids with a numpy array that has one
axis per variable. Tables are never modified in place: every operation returns
a new table.
"""

import logging

import numpy as np

from .config import default_config
from .errors import (
    IncompleteEvidenceError,
    VariableMismatchError,
    ZeroDivisionPotentialError,
)
from .sum_product import sum_product


logger = logging.getLogger(__name__)


def _resolve_policy(zero_division):
    return default_config.zero_division if zero_division is None else zero_division


class PotentialTable(object):
    """A non-negative function over a set of discrete variables.

    The variable order of a table is part of its value: operations may return
    tables with a different order than their inputs, so callers should always
    use ``variables`` (or ``to_array``) instead of assuming an order.
    """

    __slots__ = ("_variables", "_values")

    def __init__(self, variables, values):
        variables = tuple(int(var) for var in variables)
        values = np.array(values, dtype=float)

        if len(set(variables)) != len(variables):
            raise VariableMismatchError(
                "Duplicate variables in potential table: %s" % (variables,)
            )
        if values.ndim != len(variables):
            raise VariableMismatchError(
                "Potential table has %d variables but %d dimensions"
                % (len(variables), values.ndim)
            )

        values.flags.writeable = False
        self._variables = variables
        self._values = values

    @property
    def variables(self):
        return self._variables

    @property
    def values(self):
        return self._values

    @property
    def shape(self):
        return self._values.shape

    @property
    def cardinalities(self):
        return dict(zip(self._variables, self._values.shape))

    @property
    def is_scalar(self):
        '''True for a table without variables (a single total mass)'''
        return len(self._variables) == 0

    @property
    def is_identity(self):
        '''True for the scalar one, the identity of multiply and divide'''
        return self.is_scalar and float(self._values) == 1.0

    def __repr__(self):
        return "PotentialTable(variables=%r, values=%s)" % (
            list(self._variables),
            np.array2string(self._values, precision=4),
        )

    def _check_cardinalities(self, other):
        cards = self.cardinalities
        for var, size in other.cardinalities.items():
            if var in cards and cards[var] != size:
                raise VariableMismatchError(
                    "Variable %d has %d labels in one table and %d in the other"
                    % (var, cards[var], size)
                )

    def _expand(self, variables, cardinalities):
        '''Broadcast the table to the given variables

        Variables missing from the table are treated as constant along their
        axis (the table is repeated over all of their labels).

        :param variables: target variable order (superset of table variables)
        :param cardinalities: dictionary of variable sizes for missing variables
        :return: numpy array with one axis per target variable
        '''

        present = [var for var in variables if var in self._variables]
        values = self.transpose(present).values
        shape = [
            cardinalities[var] if var in self._variables else 1
            for var in variables
        ]
        full_shape = [cardinalities[var] for var in variables]
        return np.broadcast_to(np.reshape(values, shape), full_shape)

    def transpose(self, order):
        '''Permute the table axes to follow the given variable order

        :param order: a permutation of the table variables
        :return: equivalent table whose variables are in the given order
        '''

        order = tuple(order)
        if order == self._variables:
            return self
        if sorted(order) != sorted(self._variables):
            raise VariableMismatchError(
                "Cannot order table over %s as %s" % (self._variables, order)
            )
        axes = [self._variables.index(var) for var in order]
        return PotentialTable(order, np.transpose(self._values, axes))

    def to_array(self, order=None):
        '''Return a writable copy of the values with axes ordered as requested'''
        table = self if order is None else self.transpose(order)
        return np.array(table.values)

    def sum(self):
        return float(np.sum(self._values))

    def allclose(self, other, **kwargs):
        '''Compare tables irrespective of variable order'''
        if sorted(self._variables) != sorted(other.variables):
            return False
        return np.allclose(
            self._values,
            other.transpose(self._variables).values,
            **kwargs
        )

    def multiply(self, other):
        '''Product of two tables over the union of their variables

        :param other: a PotentialTable
        :return: table over self.variables followed by the variables only in other
        '''

        if other.is_identity:
            return self
        if self.is_identity:
            return other

        # a scalar, such as a message over an empty separator, scales the table
        if other.is_scalar:
            return PotentialTable(self._variables, self._values * float(other.values))
        if self.is_scalar:
            return PotentialTable(other.variables, other.values * float(self._values))

        self._check_cardinalities(other)
        output = list(self._variables) + [
            var for var in other.variables if var not in self._variables
        ]
        values = sum_product.einsum(
            self._values,
            list(self._variables),
            other.values,
            list(other.variables),
            output
        )
        return PotentialTable(output, values)

    def divide(self, other, zero_division=None):
        '''Elementwise division self / other

        Each table is repeated over the variables it lacks before dividing.
        0/0 is defined as 0. The outcome of dividing a non-zero entry by zero
        depends on zero_division:

            "warn": keep the dividend and log a warning
            "raise": raise ZeroDivisionPotentialError
            "nan": store nan

        :param other: the divisor table
        :param zero_division: policy name, defaults to the configured policy
        :return: table over self.variables followed by the variables only in other
        '''

        policy = _resolve_policy(zero_division)

        if other.is_identity:
            return self

        self._check_cardinalities(other)
        variables = list(self._variables) + [
            var for var in other.variables if var not in self._variables
        ]
        cardinalities = self.cardinalities
        cardinalities.update(other.cardinalities)

        numerator = self._expand(variables, cardinalities)
        denominator = other._expand(variables, cardinalities)

        with np.errstate(divide='ignore', invalid='ignore'):
            quotient = np.array(np.true_divide(numerator, denominator))

        zeros = denominator == 0
        quotient[zeros & (numerator == 0)] = 0.0

        undefined = zeros & (numerator != 0)
        if np.any(undefined):
            if policy == "raise":
                raise ZeroDivisionPotentialError(
                    "Division of non-zero potential entries by zero over variables %s"
                    % (variables,)
                )
            elif policy == "nan":
                quotient[undefined] = np.nan
            else:
                logger.warning(
                    "Can't divide a non zero number by 0 in %d entries over variables %s",
                    int(np.count_nonzero(undefined)),
                    variables
                )
                quotient[undefined] = numerator[undefined]

        return PotentialTable(variables, quotient)

    def marginalize(self, keep):
        '''Sum out every variable not in keep

        Variables in keep that the table does not have (for instance observed
        variables which have been sliced out) are ignored.

        :param keep: iterable of variable ids to keep
        :return: table over the kept variables in the order given by keep
        '''

        output = []
        for var in keep:
            if var in self._variables and var not in output:
                output.append(var)

        if tuple(output) == self._variables:
            return self

        values = sum_product.einsum(self._values, list(self._variables), output)
        return PotentialTable(output, values)

    def enter_evidence(self, var, value):
        '''Slice the table at an observed value of var

        :param var: the observed variable
        :param value: the observed label index
        :return: table without var (the table itself if var is not present)
        '''

        if var not in self._variables:
            return self

        axis = self._variables.index(var)
        size = self._values.shape[axis]
        if not 0 <= value < size:
            raise ValueError(
                "Label %s out of range for variable %d with %d labels"
                % (value, var, size)
            )

        variables = self._variables[:axis] + self._variables[axis+1:]
        return PotentialTable(variables, np.take(self._values, value, axis=axis))

    def enter_full_evidence(self, evidence):
        '''Return the single entry selected by a complete assignment

        :param evidence: mapping from variable id to label index covering every
            variable in the table (extra variables are ignored)
        :return: the selected entry as a float
        '''

        missing = [var for var in self._variables if var not in evidence]
        if missing:
            raise IncompleteEvidenceError(missing)

        reduced = self
        for var in self._variables:
            reduced = reduced.enter_evidence(var, evidence[var])

        return float(reduced.values)

    def normalize(self, zero_division=None):
        '''Scale the table so that its entries sum to one'''

        total = self.sum()
        if total == 0:
            if _resolve_policy(zero_division) == "raise":
                raise ZeroDivisionPotentialError(
                    "Cannot normalize potential over %s with zero mass" % (self._variables,)
                )
            logger.warning(
                "Normalizing potential over %s with zero mass",
                self._variables
            )
            return self
        return PotentialTable(self._variables, self._values / total)


def identity():
    '''The zero-variable potential (scalar one)'''
    return PotentialTable((), 1.0)
