"""
Inference settings shared by the potential algebra and the junction tree
"""

import attr


ZERO_DIVISION_POLICIES = ("warn", "raise", "nan")

ORDERINGS = ("identity", "min_degree", "min_fill")


def _check_ordering(instance, attribute, value):
    if callable(value):
        return
    if value not in ORDERINGS:
        raise ValueError(
            "Unknown elimination ordering %r, expected one of %s or a callable"
            % (value, ", ".join(ORDERINGS))
        )


@attr.s(frozen=True)
class InferenceConfig():
    """Settings for building and querying a junction tree.

    ordering: name of the elimination ordering heuristic ("identity",
    "min_degree", "min_fill") or a callable mapping a PairwiseGraph to a list
    of variable ids

    zero_division: what to do when a non-zero entry is divided by zero while
    passing messages ("warn" keeps the dividend and logs a warning, "raise"
    raises ZeroDivisionPotentialError, "nan" stores nan in the message)

    atol: absolute tolerance used when checking separator consistency
    """

    ordering = attr.ib(default="identity", validator=_check_ordering)

    zero_division = attr.ib(
        default="warn",
        validator=attr.validators.in_(ZERO_DIVISION_POLICIES)
    )

    atol = attr.ib(default=1e-8, converter=float)


default_config = InferenceConfig()
