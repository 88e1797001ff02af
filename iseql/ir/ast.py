"""
ISEQL Expression Tree

The tree is the compiler's output representation. It is exclusively
owned: no shared subtrees, no back references. Five node kinds exist;
the graph compiler only ever emits predicates and operators, the others
are part of the stable output format.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence, Union

from .graph import ArgumentValue, Cardinality

# Stands in for an omitted delta/epsilon. Never printed.
UNBOUNDED = math.inf


class Operator(str, Enum):
    """Temporal join operators."""

    BEF = "Bef"  # Before
    AFT = "Aft"  # After
    DJ = "DJ"  # During Join
    RDJ = "RDJ"  # Reverse During Join
    LOJ = "LOJ"  # Left Overlap Join
    ROJ = "ROJ"  # Right Overlap Join
    SP = "SP"  # Start Preceding
    EF = "EF"  # End Following


@dataclass(frozen=True)
class OperatorParams:
    """Timing parameters of a join. None means the operator does not use it."""

    delta: Optional[float] = None
    epsilon: Optional[float] = None
    rho: Optional[float] = None
    cardinality: Optional[Cardinality] = None
    overlap_percentage: Optional[float] = None


def is_bounded(value: Optional[float]) -> bool:
    """True when a parameter is present and finite."""
    return value is not None and value != UNBOUNDED


@dataclass(frozen=True)
class PredicateNode:
    """Selection over relation alias `relation` filtered by predicate and arguments."""

    predicate: str
    relation: str  # "M1", "M2", ...
    arguments: Dict[str, ArgumentValue] = field(default_factory=dict)


@dataclass(frozen=True)
class OperatorNode:
    """Binary temporal join."""

    operator: Operator
    params: OperatorParams
    left: "ASTNode"
    right: "ASTNode"


@dataclass(frozen=True)
class ProjectNode:
    fields: Sequence[str]
    source: "ASTNode"


@dataclass(frozen=True)
class SelectNode:
    condition: str
    source: "ASTNode"


@dataclass(frozen=True)
class DifferenceNode:
    left: "ASTNode"
    right: "ASTNode"


ASTNode = Union[PredicateNode, OperatorNode, ProjectNode, SelectNode, DifferenceNode]


def count_operators(node: ASTNode) -> int:
    """Number of OperatorNodes in a tree."""
    if isinstance(node, OperatorNode):
        return 1 + count_operators(node.left) + count_operators(node.right)
    if isinstance(node, (ProjectNode, SelectNode)):
        return count_operators(node.source)
    if isinstance(node, DifferenceNode):
        return count_operators(node.left) + count_operators(node.right)
    return 0
