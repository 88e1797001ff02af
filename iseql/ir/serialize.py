"""
Graph and AST Serialization

Graphs cross the JSON boundary twice: the authoring surface hands them
in, and the persistence layer stores them verbatim. This module speaks
that wire shape (camelCase keys, constraint `type` tag) and keeps edge
order intact so a stored graph recompiles to the same query.

The expression tree can also be dumped to a JSON-friendly dict for
inspection; unbounded parameters are left out.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ..errors import UnsupportedConstructError
from .ast import (
    ASTNode,
    DifferenceNode,
    OperatorNode,
    OperatorParams,
    PredicateNode,
    ProjectNode,
    SelectNode,
    is_bounded,
)
from .graph import (
    Cardinality,
    CardinalityBound,
    ConstraintEdge,
    ConstraintKind,
    EventNode,
    GraphData,
    NodeKind,
    Position,
    TemporalConstraint,
)


# ---------- Graph: dict → IR ----------


def graph_from_json(json_str: str) -> GraphData:
    """
    Deserialize a graph from JSON.

    Raises:
        ValueError: If the JSON is invalid or missing required fields
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}")
    return graph_from_dict(data)


def graph_from_dict(data: Dict[str, Any]) -> GraphData:
    """
    Reconstruct a graph from its wire dictionary.

    Raises:
        ValueError: If the dictionary is missing required fields or
            carries an unknown node type or constraint type
    """
    try:
        nodes = tuple(_node_from_dict(n) for n in data.get("nodes", []))
        edges = tuple(_edge_from_dict(e) for e in data.get("edges", []))
    except KeyError as e:
        raise ValueError(f"Missing required field: {e}")
    except (TypeError, ValueError, AttributeError) as e:
        raise ValueError(f"Invalid data format: {e}")
    return GraphData(nodes=nodes, edges=edges)


def _node_from_dict(data: Dict[str, Any]) -> EventNode:
    position = data.get("position") or {}
    return EventNode(
        id=data["id"],
        kind=NodeKind(data.get("type", NodeKind.PREDICATE.value)),
        predicate=data.get("predicate"),
        arguments=dict(data.get("arguments") or {}),
        compound_query=data.get("compoundQuery"),
        position=Position(x=position.get("x", 0.0), y=position.get("y", 0.0)),
        label=data.get("label"),
    )


def _edge_from_dict(data: Dict[str, Any]) -> ConstraintEdge:
    return ConstraintEdge(
        id=data["id"],
        source=data["source"],
        target=data["target"],
        constraint=_constraint_from_dict(data["constraint"]),
    )


def _constraint_from_dict(data: Dict[str, Any]) -> TemporalConstraint:
    cardinality = None
    if data.get("cardinality"):
        card = data["cardinality"]
        cardinality = Cardinality(
            left=_bound_from_dict(card.get("left")),
            right=_bound_from_dict(card.get("right")),
        )
    return TemporalConstraint(
        kind=ConstraintKind(data["type"]),
        delta=_number(data, "delta"),
        epsilon=_number(data, "epsilon"),
        rho=_number(data, "rho"),
        cardinality=cardinality,
        overlap_percentage=_number(data, "overlapPercentage"),
    )


def _bound_from_dict(data: Optional[Dict[str, Any]]) -> Optional[CardinalityBound]:
    if data is None:
        return None
    return CardinalityBound(min=_number(data, "min"), max=_number(data, "max"))


def _number(data: Dict[str, Any], key: str) -> Optional[float]:
    """Read an optional numeric parameter. Booleans are not numbers here."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    return value


# ---------- Graph: IR → dict ----------


def graph_to_json(graph: GraphData, indent: Optional[int] = 2) -> str:
    """Serialize a graph to JSON in the authoring surface's shape."""
    return json.dumps(graph_to_dict(graph), indent=indent, ensure_ascii=False)


def graph_to_dict(graph: GraphData) -> Dict[str, Any]:
    """Convert a graph to its wire dictionary. Unset optional fields are omitted."""
    return {
        "nodes": [_node_to_dict(n) for n in graph.nodes],
        "edges": [_edge_to_dict(e) for e in graph.edges],
    }


def _node_to_dict(node: EventNode) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": node.id,
        "type": node.kind.value,
        "position": {"x": node.position.x, "y": node.position.y},
    }
    if node.predicate is not None:
        data["predicate"] = node.predicate
    if node.arguments:
        data["arguments"] = dict(node.arguments)
    if node.compound_query is not None:
        data["compoundQuery"] = node.compound_query
    if node.label is not None:
        data["label"] = node.label
    return data


def _edge_to_dict(edge: ConstraintEdge) -> Dict[str, Any]:
    c = edge.constraint
    constraint: Dict[str, Any] = {"type": c.kind.value}
    for key, value in (
        ("delta", c.delta),
        ("epsilon", c.epsilon),
        ("rho", c.rho),
        ("overlapPercentage", c.overlap_percentage),
    ):
        if value is not None:
            constraint[key] = value
    card = _cardinality_to_dict(c.cardinality)
    if card:
        constraint["cardinality"] = card
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "constraint": constraint,
    }


def _cardinality_to_dict(card: Optional[Cardinality]) -> Dict[str, Any]:
    if card is None:
        return {}
    data: Dict[str, Any] = {}
    for side, bound in card.sides():
        if bound is None:
            continue
        data[side] = {
            k: v for k, v in (("min", bound.min), ("max", bound.max)) if v is not None
        }
    return data


# ---------- AST → dict ----------


def ast_to_dict(node: ASTNode) -> Dict[str, Any]:
    """
    Convert an expression tree to a dict tagged by node type.

    Raises:
        UnsupportedConstructError: For an object that is not an AST node
    """
    if isinstance(node, PredicateNode):
        data: Dict[str, Any] = {
            "type": "PREDICATE",
            "predicate": node.predicate,
            "relation": node.relation,
        }
        if node.arguments:
            data["arguments"] = dict(node.arguments)
        return data
    if isinstance(node, OperatorNode):
        return {
            "type": "OPERATOR",
            "operator": node.operator.value,
            "params": _params_to_dict(node.params),
            "left": ast_to_dict(node.left),
            "right": ast_to_dict(node.right),
        }
    if isinstance(node, ProjectNode):
        return {
            "type": "PROJECT",
            "fields": list(node.fields),
            "source": ast_to_dict(node.source),
        }
    if isinstance(node, SelectNode):
        return {
            "type": "SELECT",
            "condition": node.condition,
            "source": ast_to_dict(node.source),
        }
    if isinstance(node, DifferenceNode):
        return {
            "type": "DIFFERENCE",
            "left": ast_to_dict(node.left),
            "right": ast_to_dict(node.right),
        }
    raise UnsupportedConstructError(
        f"Unknown AST node type: {type(node).__name__}", node
    )


def _params_to_dict(params: OperatorParams) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if is_bounded(params.delta):
        data["delta"] = params.delta
    if is_bounded(params.epsilon):
        data["epsilon"] = params.epsilon
    if params.rho is not None:
        data["rho"] = params.rho
    card = _cardinality_to_dict(params.cardinality)
    if card:
        data["cardinality"] = card
    if params.overlap_percentage is not None:
        data["overlapPercentage"] = params.overlap_percentage
    return data


# ---------- Shape check ----------


def validate_json(json_str: str) -> tuple[bool, list[str]]:
    """
    Check that a JSON string has the shape of a graph document.

    This is a shape check only; structural rules (roots, cycles,
    parameter ranges) belong to validate_graph.

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors: List[str] = []

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        return False, [f"Invalid JSON: {e}"]

    if not isinstance(data, dict):
        return False, ["graph must be an object"]

    for key in ("nodes", "edges"):
        if key not in data:
            errors.append(f"Missing required field: {key}")
        elif not isinstance(data[key], list):
            errors.append(f"{key} must be an array")

    for i, node in enumerate(_items(data, "nodes")):
        if not isinstance(node, dict):
            errors.append(f"nodes[{i}] must be an object")
            continue
        if "id" not in node:
            errors.append(f"nodes[{i}].id is required")
        if "type" in node:
            try:
                NodeKind(node["type"])
            except ValueError:
                errors.append(f"Invalid node type: {node['type']}")

    for i, edge in enumerate(_items(data, "edges")):
        if not isinstance(edge, dict):
            errors.append(f"edges[{i}] must be an object")
            continue
        for key in ("id", "source", "target", "constraint"):
            if key not in edge:
                errors.append(f"edges[{i}].{key} is required")
        constraint = edge.get("constraint")
        if constraint is None:
            continue
        if not isinstance(constraint, dict):
            errors.append(f"edges[{i}].constraint must be an object")
        elif "type" not in constraint:
            errors.append(f"edges[{i}].constraint.type is required")
        else:
            try:
                ConstraintKind(constraint["type"])
            except ValueError:
                errors.append(f"Invalid constraint type: {constraint['type']}")
            for key in ("delta", "epsilon", "rho", "overlapPercentage"):
                try:
                    _number(constraint, key)
                except ValueError:
                    errors.append(f"edges[{i}].constraint.{key} must be a number")

    return len(errors) == 0, errors


def _items(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    return value if isinstance(value, list) else []
