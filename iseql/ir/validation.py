"""
Event Graph Validation

Structural and parameter sanity checks over a raw graph, run before the
compiler touches it.

The validator never raises. It accumulates every error it can find so
the graph author gets complete diagnostics in one pass; the only
short-circuit is an empty graph, where no other check is meaningful.
Warnings are informational and never affect validity.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from ..errors import GraphValidationError, ParameterRangeError
from .graph import ConstraintEdge, EventNode, NodeKind

logger = logging.getLogger(__name__)

CYCLE_ARROW = " → "


@dataclass
class ValidationResult:
    """Outcome of validating a graph."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def raise_for_errors(self) -> None:
        """Raise GraphValidationError if the graph is invalid."""
        if not self.valid:
            raise GraphValidationError(self.errors, self.warnings)


def validate_graph(
    nodes: Sequence[EventNode], edges: Sequence[ConstraintEdge]
) -> ValidationResult:
    """
    Check a graph for everything that would stop it compiling.

    Checks, in order:
    - at least one node (short-circuits when violated)
    - unique node ids and edges that reference existing nodes
    - no directed cycles
    - connectivity (warning only)
    - per-edge parameter ranges
    - predicate nodes carry a predicate name
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not nodes:
        errors.append("Graph must contain at least one event node")
        return ValidationResult(valid=False, errors=errors)

    _check_references(nodes, edges, errors)

    cycle = find_cycle(nodes, edges)
    if cycle:
        errors.append(f"Circular dependency detected: {CYCLE_ARROW.join(cycle)}")

    orphans = _find_orphan_nodes(nodes, edges)
    if orphans:
        names = ", ".join(n.display_name for n in orphans)
        warnings.append(f"Multiple disconnected components: {names}")

    for edge in edges:
        _validate_parameters(edge, errors)

    for node in nodes:
        if node.kind == NodeKind.PREDICATE and not node.predicate:
            errors.append(f"Node {node.id} is missing predicate name")

    if errors:
        logger.debug("Graph rejected with %d error(s)", len(errors))

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def find_cycle(
    nodes: Sequence[EventNode], edges: Sequence[ConstraintEdge]
) -> Optional[List[str]]:
    """
    Return one directed cycle as a closed path of node ids, or None.

    Depth-first from every unvisited node in input order. A back edge to
    a node still on the path closes the cycle: [A, B, A].
    """
    adjacency = _adjacency(nodes, edges)
    visited: Set[str] = set()

    for node in nodes:
        if node.id not in visited:
            cycle = _dfs_cycle(node.id, adjacency, visited, [], set())
            if cycle:
                return cycle
    return None


def _dfs_cycle(
    node_id: str,
    adjacency: Dict[str, List[str]],
    visited: Set[str],
    path: List[str],
    on_path: Set[str],
) -> Optional[List[str]]:
    visited.add(node_id)
    on_path.add(node_id)
    path.append(node_id)

    for neighbor in adjacency.get(node_id, []):
        if neighbor in on_path:
            start = path.index(neighbor)
            return path[start:] + [neighbor]
        if neighbor not in visited:
            cycle = _dfs_cycle(neighbor, adjacency, visited, path, on_path)
            if cycle:
                return cycle

    on_path.discard(node_id)
    path.pop()
    return None


def _adjacency(
    nodes: Sequence[EventNode], edges: Sequence[ConstraintEdge]
) -> Dict[str, List[str]]:
    adjacency: Dict[str, List[str]] = {node.id: [] for node in nodes}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(edge.target)
    return adjacency


def _check_references(
    nodes: Sequence[EventNode], edges: Sequence[ConstraintEdge], errors: List[str]
) -> None:
    counts = Counter(node.id for node in nodes)
    for node_id, count in counts.items():
        if count > 1:
            errors.append(f"Duplicate node id {node_id} ({count} nodes)")

    for edge in edges:
        if edge.source not in counts:
            errors.append(f"Edge {edge.id}: unknown source node {edge.source}")
        if edge.target not in counts:
            errors.append(f"Edge {edge.id}: unknown target node {edge.target}")


def _find_orphan_nodes(
    nodes: Sequence[EventNode], edges: Sequence[ConstraintEdge]
) -> List[EventNode]:
    """
    Nodes that take part in no edge, when the graph is not a single rooted tree.

    A lone node is a complete query on its own and is never an orphan.
    """
    if len(nodes) == 1:
        return []

    connected: Set[str] = set()
    incoming: Counter = Counter()
    for edge in edges:
        connected.add(edge.source)
        connected.add(edge.target)
        incoming[edge.target] += 1

    roots = [n for n in nodes if incoming[n.id] == 0]
    if len(roots) == 1 and all(n.id in connected for n in nodes):
        return []

    return [n for n in nodes if n.id not in connected]


_SYMBOLS = {"delta": "δ (delta)", "epsilon": "ε (epsilon)", "rho": "ρ (rho)"}


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_parameters(edge: ConstraintEdge, errors: List[str]) -> None:
    c = edge.constraint

    for name, label in _SYMBOLS.items():
        value = getattr(c, name)
        if value is None:
            continue
        if not _is_number(value):
            errors.append(f"Edge {edge.id}: {label} must be a number, got {value!r}")
        elif value < 0:
            errors.append(f"Edge {edge.id}: {label} must be ≥ 0, got {value}")

    overlap = c.overlap_percentage
    if overlap is not None:
        if not _is_number(overlap):
            errors.append(f"Edge {edge.id}: overlapPercentage must be a number, got {overlap!r}")
        elif not 0 <= overlap <= 100:
            errors.append(
                f"Edge {edge.id}: overlapPercentage must be between 0-100, got {overlap}"
            )

    if c.cardinality is None:
        return
    for side, bound in c.cardinality.sides():
        if bound is None:
            continue
        malformed = False
        for key, value in (("min", bound.min), ("max", bound.max)):
            if value is not None and not _is_number(value):
                errors.append(
                    f"Edge {edge.id}: {side} cardinality {key} must be a number, got {value!r}"
                )
                malformed = True
        if malformed:
            continue
        if bound.min is not None and bound.min < 0:
            errors.append(f"Edge {edge.id}: {side} cardinality min must be ≥ 0")
        if bound.min is not None and bound.max is not None and bound.max < bound.min:
            errors.append(f"Edge {edge.id}: {side} cardinality max must be ≥ min")


def check_parameters(edge: ConstraintEdge) -> None:
    """
    Fail fast on the first out-of-range parameter of a single edge.

    Raises:
        ParameterRangeError: If any parameter is out of range
    """
    errors: List[str] = []
    _validate_parameters(edge, errors)
    if errors:
        raise ParameterRangeError(errors[0], edge.id)
