"""
Tests for Constraint → Operator Mapping

Each constraint kind maps to exactly one operator. Omitted timing
parameters become UNBOUNDED for the operators that use them, and
CONCURRENT ignores whatever delta and epsilon were supplied.
"""

import pytest

from iseql.compiler.mapper import map_constraint
from iseql.errors import UnsupportedConstructError
from iseql.ir.ast import UNBOUNDED, Operator
from iseql.ir.graph import (
    Cardinality,
    CardinalityBound,
    ConstraintKind,
    TemporalConstraint,
)


class TestOperatorTable:
    """The fixed constraint → operator table."""

    @pytest.mark.parametrize(
        "kind,operator,delta,epsilon",
        [
            (ConstraintKind.BEFORE, Operator.BEF, UNBOUNDED, None),
            (ConstraintKind.AFTER, Operator.AFT, UNBOUNDED, None),
            (ConstraintKind.DURING, Operator.DJ, UNBOUNDED, UNBOUNDED),
            (ConstraintKind.REVERSE_DURING, Operator.RDJ, UNBOUNDED, UNBOUNDED),
            (ConstraintKind.LEFT_OVERLAP, Operator.LOJ, UNBOUNDED, UNBOUNDED),
            (ConstraintKind.RIGHT_OVERLAP, Operator.ROJ, UNBOUNDED, UNBOUNDED),
            (ConstraintKind.START_PRECEDING, Operator.SP, UNBOUNDED, None),
            (ConstraintKind.END_FOLLOWING, Operator.EF, None, UNBOUNDED),
            (ConstraintKind.CONCURRENT, Operator.DJ, 0, 0),
        ],
    )
    def test_defaults(self, kind, operator, delta, epsilon):
        """With no parameters supplied, defaults follow the table."""
        op, params = map_constraint(TemporalConstraint(kind=kind))
        assert op == operator
        assert params.delta == delta
        assert params.epsilon == epsilon

    def test_supplied_values_win_over_defaults(self):
        op, params = map_constraint(
            TemporalConstraint(kind=ConstraintKind.DURING, delta=4, epsilon=9)
        )
        assert op == Operator.DJ
        assert params.delta == 4
        assert params.epsilon == 9

    def test_unused_parameter_is_dropped(self):
        """BEFORE only uses delta; END_FOLLOWING only uses epsilon."""
        _, before = map_constraint(
            TemporalConstraint(kind=ConstraintKind.BEFORE, delta=1, epsilon=2)
        )
        assert before.delta == 1
        assert before.epsilon is None

        _, following = map_constraint(
            TemporalConstraint(kind=ConstraintKind.END_FOLLOWING, delta=1, epsilon=2)
        )
        assert following.delta is None
        assert following.epsilon == 2


class TestConcurrent:
    """CONCURRENT is a During Join pinned to zero."""

    def test_supplied_delta_epsilon_are_overridden(self):
        op, params = map_constraint(
            TemporalConstraint(kind=ConstraintKind.CONCURRENT, delta=10, epsilon=7)
        )
        assert op == Operator.DJ
        assert params.delta == 0
        assert params.epsilon == 0

    def test_advanced_parameters_still_pass_through(self):
        _, params = map_constraint(
            TemporalConstraint(kind=ConstraintKind.CONCURRENT, rho=2, overlap_percentage=80)
        )
        assert params.rho == 2
        assert params.overlap_percentage == 80


class TestAdvancedParameters:
    """rho, cardinality and overlap pass through unchanged for every kind."""

    @pytest.mark.parametrize("kind", list(ConstraintKind))
    def test_passthrough(self, kind):
        card = Cardinality(left=CardinalityBound(min=1, max=3), right=CardinalityBound(max=2))
        _, params = map_constraint(
            TemporalConstraint(kind=kind, rho=1.5, cardinality=card, overlap_percentage=40)
        )
        assert params.rho == 1.5
        assert params.cardinality is card
        assert params.overlap_percentage == 40

    @pytest.mark.parametrize("kind", list(ConstraintKind))
    def test_absent_when_not_supplied(self, kind):
        _, params = map_constraint(TemporalConstraint(kind=kind))
        assert params.rho is None
        assert params.cardinality is None
        assert params.overlap_percentage is None


class TestUnsupported:
    def test_unknown_kind(self):
        with pytest.raises(UnsupportedConstructError) as e:
            map_constraint(TemporalConstraint(kind="SOMETIMES"))
        assert "Unknown constraint type: SOMETIMES" in str(e.value)

    def test_raw_string_kind_is_accepted(self):
        """Kinds compare by value, so a plain string from JSON still maps."""
        op, _ = map_constraint(TemporalConstraint(kind="AFTER"))
        assert op == Operator.AFT
