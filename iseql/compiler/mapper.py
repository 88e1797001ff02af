"""
Constraint → Operator Mapping

Every temporal constraint kind corresponds to one join operator. An
omitted delta or epsilon becomes UNBOUNDED for the operators that use
it; CONCURRENT is a During Join with both forced to zero. rho,
cardinality and overlap percentage pass through untouched whenever the
edge carries them.
"""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional, Tuple

from ..errors import UnsupportedConstructError
from ..ir.ast import UNBOUNDED, Operator, OperatorParams
from ..ir.graph import ConstraintKind, TemporalConstraint


class _Rule(NamedTuple):
    operator: Operator
    uses_delta: bool
    uses_epsilon: bool


_RULES: Dict[ConstraintKind, _Rule] = {
    ConstraintKind.BEFORE: _Rule(Operator.BEF, True, False),
    ConstraintKind.AFTER: _Rule(Operator.AFT, True, False),
    ConstraintKind.DURING: _Rule(Operator.DJ, True, True),
    ConstraintKind.REVERSE_DURING: _Rule(Operator.RDJ, True, True),
    ConstraintKind.LEFT_OVERLAP: _Rule(Operator.LOJ, True, True),
    ConstraintKind.RIGHT_OVERLAP: _Rule(Operator.ROJ, True, True),
    ConstraintKind.START_PRECEDING: _Rule(Operator.SP, True, False),
    ConstraintKind.END_FOLLOWING: _Rule(Operator.EF, False, True),
}


def map_constraint(constraint: TemporalConstraint) -> Tuple[Operator, OperatorParams]:
    """
    Translate an edge constraint into an operator and its parameters.

    Raises:
        UnsupportedConstructError: If the constraint kind is not recognized
    """
    kind = constraint.kind

    if kind == ConstraintKind.CONCURRENT:
        return Operator.DJ, _with_advanced(constraint, delta=0, epsilon=0)

    rule = _RULES.get(kind)
    if rule is None:
        raise UnsupportedConstructError(f"Unknown constraint type: {kind}", kind)

    delta = _or_unbounded(constraint.delta) if rule.uses_delta else None
    epsilon = _or_unbounded(constraint.epsilon) if rule.uses_epsilon else None
    return rule.operator, _with_advanced(constraint, delta=delta, epsilon=epsilon)


def _or_unbounded(value: Optional[float]) -> float:
    return UNBOUNDED if value is None else value


def _with_advanced(
    constraint: TemporalConstraint,
    delta: Optional[float],
    epsilon: Optional[float],
) -> OperatorParams:
    return OperatorParams(
        delta=delta,
        epsilon=epsilon,
        rho=constraint.rho,
        cardinality=constraint.cardinality,
        overlap_percentage=constraint.overlap_percentage,
    )
