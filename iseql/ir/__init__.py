"""ISEQL intermediate representations: the event graph in, the expression tree out."""

from .graph import (
    ArgumentValue,
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
from .ast import (
    ASTNode,
    DifferenceNode,
    Operator,
    OperatorNode,
    OperatorParams,
    PredicateNode,
    ProjectNode,
    SelectNode,
    UNBOUNDED,
    count_operators,
    is_bounded,
)
from .validation import ValidationResult, check_parameters, find_cycle, validate_graph
from .serialize import (
    ast_to_dict,
    graph_from_dict,
    graph_from_json,
    graph_to_dict,
    graph_to_json,
    validate_json,
)

__all__ = [
    "ArgumentValue",
    "Cardinality",
    "CardinalityBound",
    "ConstraintEdge",
    "ConstraintKind",
    "EventNode",
    "GraphData",
    "NodeKind",
    "Position",
    "TemporalConstraint",
    # Expression tree
    "ASTNode",
    "DifferenceNode",
    "Operator",
    "OperatorNode",
    "OperatorParams",
    "PredicateNode",
    "ProjectNode",
    "SelectNode",
    "UNBOUNDED",
    "count_operators",
    "is_bounded",
    # Validation
    "ValidationResult",
    "check_parameters",
    "find_cycle",
    "validate_graph",
    # Serialization
    "ast_to_dict",
    "graph_from_dict",
    "graph_from_json",
    "graph_to_dict",
    "graph_to_json",
    "validate_json",
]
