"""
Reference scenario graphs from the package-exchange surveillance queries.

BDPE_QUERY  Basic Direct Package Exchange: p1 has the package, then p2
            has it, with an immediate handoff (δ=0).
DPE2_QUERY  Direct Package Exchange, scenario 2: each person enters the
            scene before holding the package. Two entry events have no
            incoming edges, so the graph has two roots and the compiler
            rejects it.
UP_QUERY    Unattended Package: the person holding the package
            eventually leaves (unbounded BEFORE).
"""

from __future__ import annotations

from iseql.ir.graph import (
    ConstraintEdge,
    ConstraintKind,
    EventNode,
    GraphData,
    Position,
    TemporalConstraint,
)
from iseql.ir.ast import UNBOUNDED


BDPE_QUERY = GraphData(
    nodes=(
        EventNode(
            id="n1",
            predicate="hasPkg",
            arguments={"person": "p1", "package": "pkg1"},
            position=Position(100, 100),
            label="P1 has package",
        ),
        EventNode(
            id="n2",
            predicate="hasPkg",
            arguments={"person": "p2", "package": "pkg1"},
            position=Position(300, 100),
            label="P2 has package",
        ),
    ),
    edges=(
        ConstraintEdge(
            id="e1",
            source="n1",
            target="n2",
            constraint=TemporalConstraint(kind=ConstraintKind.BEFORE, delta=0),
        ),
    ),
)

BDPE_EXPECTED = (
    '(σ[pred=hasPkg, person="p1", package="pkg1"](M1) Bef(δ:0) '
    'σ[pred=hasPkg, person="p2", package="pkg1"](M2))'
)


DPE2_QUERY = GraphData(
    nodes=(
        EventNode(
            id="n1",
            predicate="in",
            arguments={"person": "p1"},
            position=Position(100, 100),
            label="P1 enters",
        ),
        EventNode(
            id="n2",
            predicate="hasPkg",
            arguments={"person": "p1", "package": "pkg1"},
            position=Position(300, 100),
            label="P1 has package",
        ),
        EventNode(
            id="n3",
            predicate="hasPkg",
            arguments={"person": "p2", "package": "pkg1"},
            position=Position(500, 100),
            label="P2 has package",
        ),
        EventNode(
            id="n4",
            predicate="in",
            arguments={"person": "p2"},
            position=Position(300, 300),
            label="P2 enters",
        ),
    ),
    edges=(
        # P1 enters at most 50 frames before having the package
        ConstraintEdge(
            id="e1",
            source="n1",
            target="n2",
            constraint=TemporalConstraint(kind=ConstraintKind.START_PRECEDING, delta=50),
        ),
        ConstraintEdge(
            id="e2",
            source="n2",
            target="n3",
            constraint=TemporalConstraint(kind=ConstraintKind.BEFORE, delta=0),
        ),
        # P2 enters at most 50 frames before receiving the package
        ConstraintEdge(
            id="e3",
            source="n4",
            target="n3",
            constraint=TemporalConstraint(kind=ConstraintKind.START_PRECEDING, delta=50),
        ),
    ),
)


UP_QUERY = GraphData(
    nodes=(
        EventNode(
            id="n1",
            predicate="hasPkg",
            arguments={"person": "p1", "package": "pkg1"},
            position=Position(100, 100),
            label="Person has package",
        ),
        EventNode(
            id="n2",
            predicate="in",
            arguments={"person": "p1"},
            position=Position(300, 100),
            label="Person leaves (NOT)",
        ),
    ),
    edges=(
        ConstraintEdge(
            id="e1",
            source="n1",
            target="n2",
            constraint=TemporalConstraint(kind=ConstraintKind.BEFORE, delta=UNBOUNDED),
        ),
    ),
)


REFERENCE_QUERIES = {
    "BDPE": BDPE_QUERY,
    "DPE2": DPE2_QUERY,
    "UP": UP_QUERY,
}
