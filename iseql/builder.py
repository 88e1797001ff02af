"""
ISEQL Fluent Graph Builder

Provides a fluent API for authoring event graphs in code, the same
graphs the visual editor produces.

Edges may only connect declared events, and declaration order is kept:
the order constraints are added is the order the compiler chains them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from iseql.ir.graph import (
    ArgumentValue,
    Cardinality,
    CardinalityBound,
    ConstraintEdge,
    ConstraintKind,
    EventNode,
    GraphData,
    Position,
    TemporalConstraint,
)
from iseql.ir.validation import check_parameters, validate_graph


class GraphBuilderError(Exception):
    """Raised when graph building fails."""

    pass


class IncompleteGraphError(GraphBuilderError):
    """Raised when a constraint references an event that was never declared."""

    def __init__(self, missing_nodes: List[str]):
        self.missing_nodes = missing_nodes
        super().__init__(f"Graph is incomplete. Undeclared events: {', '.join(missing_nodes)}")


@dataclass
class _BuilderState:
    """Internal state for the builder."""

    nodes: List[EventNode] = field(default_factory=list)
    edges: List[ConstraintEdge] = field(default_factory=list)
    next_edge: int = 1


class GraphBuilder:
    """
    Fluent builder for event graphs.

    Usage:
        g = (
            GraphBuilder()
            .event("n1", "hasPkg", person="p1", package="pkg1")
            .event("n2", "hasPkg", person="p2", package="pkg1")
            .before("n1", "n2", delta=0)
            .build()
        )
    """

    def __init__(self) -> None:
        self._state = _BuilderState()

    # ========== Events ==========

    def event(
        self,
        node_id: str,
        predicate: str,
        label: Optional[str] = None,
        position: Optional[Position] = None,
        arguments: Optional[Dict[str, ArgumentValue]] = None,
        **kwargs: ArgumentValue,
    ) -> "GraphBuilder":
        """
        Declare a predicate event, e.g. event("n1", "in", person="p1").

        Arguments named like a builder parameter (label, position, ...)
        go in the `arguments` dict instead of keywords.
        """
        merged = dict(arguments or {})
        merged.update(kwargs)
        self._state.nodes.append(
            EventNode(
                id=node_id,
                predicate=predicate,
                arguments=merged,
                position=position or Position(),
                label=label,
            )
        )
        return self

    def compound(
        self, node_id: str, query_ref: str, label: Optional[str] = None
    ) -> "GraphBuilder":
        """Declare a reference to a saved query."""
        self._state.nodes.append(EventNode.compound_event(node_id, query_ref, label))
        return self

    # ========== Constraints ==========

    def constrain(
        self,
        source: str,
        target: str,
        kind: ConstraintKind,
        delta: Optional[float] = None,
        epsilon: Optional[float] = None,
        rho: Optional[float] = None,
        left_card: Optional[CardinalityBound] = None,
        right_card: Optional[CardinalityBound] = None,
        overlap_percentage: Optional[float] = None,
        edge_id: Optional[str] = None,
    ) -> "GraphBuilder":
        """
        Add a constraint edge from `source` to `target`.

        Edge ids default to e1, e2, ... in the order edges are added.

        Raises:
            IncompleteGraphError: If either endpoint was never declared
            ParameterRangeError: If a parameter is out of range
        """
        declared = {n.id for n in self._state.nodes}
        missing = [n for n in (source, target) if n not in declared]
        if missing:
            raise IncompleteGraphError(missing)

        cardinality = None
        if left_card is not None or right_card is not None:
            cardinality = Cardinality(left=left_card, right=right_card)

        if edge_id is None:
            edge_id = f"e{self._state.next_edge}"

        edge = ConstraintEdge(
            id=edge_id,
            source=source,
            target=target,
            constraint=TemporalConstraint(
                kind=kind,
                delta=delta,
                epsilon=epsilon,
                rho=rho,
                cardinality=cardinality,
                overlap_percentage=overlap_percentage,
            ),
        )
        check_parameters(edge)
        self._state.edges.append(edge)
        self._state.next_edge += 1
        return self

    def before(self, source: str, target: str, delta: Optional[float] = None, **kw: Any) -> "GraphBuilder":
        """`source` ends before `target` starts, at most delta frames apart."""
        return self.constrain(source, target, ConstraintKind.BEFORE, delta=delta, **kw)

    def after(self, source: str, target: str, delta: Optional[float] = None, **kw: Any) -> "GraphBuilder":
        return self.constrain(source, target, ConstraintKind.AFTER, delta=delta, **kw)

    def during(
        self, source: str, target: str, delta: Optional[float] = None,
        epsilon: Optional[float] = None, **kw: Any,
    ) -> "GraphBuilder":
        return self.constrain(
            source, target, ConstraintKind.DURING, delta=delta, epsilon=epsilon, **kw
        )

    def reverse_during(
        self, source: str, target: str, delta: Optional[float] = None,
        epsilon: Optional[float] = None, **kw: Any,
    ) -> "GraphBuilder":
        return self.constrain(
            source, target, ConstraintKind.REVERSE_DURING, delta=delta, epsilon=epsilon, **kw
        )

    def left_overlap(
        self, source: str, target: str, delta: Optional[float] = None,
        epsilon: Optional[float] = None, **kw: Any,
    ) -> "GraphBuilder":
        return self.constrain(
            source, target, ConstraintKind.LEFT_OVERLAP, delta=delta, epsilon=epsilon, **kw
        )

    def right_overlap(
        self, source: str, target: str, delta: Optional[float] = None,
        epsilon: Optional[float] = None, **kw: Any,
    ) -> "GraphBuilder":
        return self.constrain(
            source, target, ConstraintKind.RIGHT_OVERLAP, delta=delta, epsilon=epsilon, **kw
        )

    def start_preceding(
        self, source: str, target: str, delta: Optional[float] = None, **kw: Any
    ) -> "GraphBuilder":
        """`source` starts at most delta frames before `target` starts."""
        return self.constrain(source, target, ConstraintKind.START_PRECEDING, delta=delta, **kw)

    def end_following(
        self, source: str, target: str, epsilon: Optional[float] = None, **kw: Any
    ) -> "GraphBuilder":
        """`source` ends at most epsilon frames after `target` ends."""
        return self.constrain(source, target, ConstraintKind.END_FOLLOWING, epsilon=epsilon, **kw)

    def concurrent(self, source: str, target: str, **kw: Any) -> "GraphBuilder":
        """Both events share start and end points. delta and epsilon are forced to 0."""
        return self.constrain(source, target, ConstraintKind.CONCURRENT, **kw)

    # ========== Build ==========

    def build(self, validate: bool = False) -> GraphData:
        """
        Build the graph.

        Args:
            validate: Run the graph validator and raise on errors

        Raises:
            GraphValidationError: If validate is set and the graph is invalid
        """
        graph = GraphData(nodes=tuple(self._state.nodes), edges=tuple(self._state.edges))
        if validate:
            validate_graph(graph.nodes, graph.edges).raise_for_errors()
        return graph

    def copy(self) -> "GraphBuilder":
        """Create a copy of this builder with the same state."""
        new_builder = GraphBuilder()
        new_builder._state = _BuilderState(
            nodes=list(self._state.nodes),
            edges=list(self._state.edges),
            next_edge=self._state.next_edge,
        )
        return new_builder


# Convenience function for starting a graph
def graph() -> GraphBuilder:
    """Start building a new event graph."""
    return GraphBuilder()
