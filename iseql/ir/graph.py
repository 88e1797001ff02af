"""
Event Graph Model

The graph is what the author draws: event nodes joined by temporally
constrained edges. It is the compiler's only input.

Properties the compiler relies on:
- Ordered: edge order is significant and preserved end to end
- Inert: visual fields (position, label) never change the query
- Rejecting: graphs with no single root or with cycles are refused, not repaired
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

# Argument values the downstream engine understands.
ArgumentValue = Union[str, int, float, bool]


# ---------- Enums (closed-world) ----------


class NodeKind(str, Enum):
    """
    PREDICATE: a primitive event, e.g. hasPkg(person, package)
    COMPOUND: a reference to a previously saved query
    """

    PREDICATE = "predicate"
    COMPOUND = "compound"


class ConstraintKind(str, Enum):
    """Temporal relation between the source and target events of an edge."""

    BEFORE = "BEFORE"
    AFTER = "AFTER"
    DURING = "DURING"
    REVERSE_DURING = "REVERSE_DURING"
    LEFT_OVERLAP = "LEFT_OVERLAP"
    RIGHT_OVERLAP = "RIGHT_OVERLAP"
    START_PRECEDING = "START_PRECEDING"
    END_FOLLOWING = "END_FOLLOWING"
    CONCURRENT = "CONCURRENT"  # delta=0 and epsilon=0, whatever was supplied


# ---------- Constraint structs ----------


@dataclass(frozen=True)
class CardinalityBound:
    """Repetition bound for one side of a join."""

    min: Optional[int] = None
    max: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.min is None and self.max is None


@dataclass(frozen=True)
class Cardinality:
    """Optional repetition bounds for the left and right operands."""

    left: Optional[CardinalityBound] = None
    right: Optional[CardinalityBound] = None

    def sides(self) -> Tuple[Tuple[str, Optional[CardinalityBound]], ...]:
        return (("left", self.left), ("right", self.right))


@dataclass(frozen=True)
class TemporalConstraint:
    """
    The timing annotation carried by every edge.

    delta bounds the gap between left endpoints, epsilon the gap between
    right endpoints. Omitted values mean "unbounded" for the operators
    that use them.
    """

    kind: ConstraintKind
    delta: Optional[float] = None
    epsilon: Optional[float] = None
    rho: Optional[float] = None
    cardinality: Optional[Cardinality] = None
    overlap_percentage: Optional[float] = None


# ---------- Graph ----------


@dataclass(frozen=True)
class Position:
    """Canvas coordinates. Never read by the compiler."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class EventNode:
    """One vertex of the event graph."""

    id: str
    kind: NodeKind = NodeKind.PREDICATE
    predicate: Optional[str] = None  # 'hasPkg', 'insideCar', 'in', ...
    arguments: Dict[str, ArgumentValue] = field(default_factory=dict)
    compound_query: Optional[str] = None  # saved query reference, never expanded here
    position: Position = field(default_factory=Position)
    label: Optional[str] = None

    @staticmethod
    def predicate_event(
        node_id: str, predicate: str, label: Optional[str] = None, **arguments: Any
    ) -> "EventNode":
        """Create a predicate-kind node."""
        return EventNode(
            id=node_id,
            kind=NodeKind.PREDICATE,
            predicate=predicate,
            arguments=dict(arguments),
            label=label,
        )

    @staticmethod
    def compound_event(
        node_id: str, query_ref: str, label: Optional[str] = None
    ) -> "EventNode":
        """Create a compound-kind node referencing a saved query."""
        return EventNode(
            id=node_id,
            kind=NodeKind.COMPOUND,
            compound_query=query_ref,
            label=label,
        )

    @property
    def display_name(self) -> str:
        return self.label or self.id


@dataclass(frozen=True)
class ConstraintEdge:
    """Directed edge: the source event constrains the target event."""

    id: str
    source: str
    target: str
    constraint: TemporalConstraint


@dataclass(frozen=True)
class GraphData:
    """
    The compilation input.

    Edge order is part of the contract: a node's outgoing edges are
    chained in exactly the order they appear here.
    """

    nodes: Sequence[EventNode] = field(default_factory=tuple)
    edges: Sequence[ConstraintEdge] = field(default_factory=tuple)

    def node_index(self) -> Dict[str, EventNode]:
        """Map node id to node. The first node wins on duplicate ids."""
        index: Dict[str, EventNode] = {}
        for node in self.nodes:
            index.setdefault(node.id, node)
        return index

    def outgoing(self, node_id: str) -> Tuple[ConstraintEdge, ...]:
        """Outgoing edges of a node, in input order."""
        return tuple(e for e in self.edges if e.source == node_id)
