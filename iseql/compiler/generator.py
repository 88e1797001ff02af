"""
Expression Tree → ISEQL Text

The downstream engine parses this output, so the format is fixed:

    σ[pred=hasPkg, person="p1"](M1)          predicate over relation M1
    (<left> Bef(δ:0) <right>)                 temporal join
    π[a,b](<source>)                          projection
    σ[<condition>](<source>)                  selection
    (<left> - <right>)                        difference

Operator parameters print in the order δ, ε, ρ, leftCard, rightCard,
overlap%. Unbounded values are never printed; an operator with nothing
to print carries no parentheses at all.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..errors import UnsupportedConstructError
from ..ir.ast import (
    ASTNode,
    DifferenceNode,
    OperatorNode,
    OperatorParams,
    PredicateNode,
    ProjectNode,
    SelectNode,
    is_bounded,
)
from ..ir.graph import ArgumentValue, CardinalityBound

INDENT = "  "


class QueryGenerator:
    """
    Serializes expression trees.

    Compact mode is a single line. Pretty mode puts the left operand,
    the operator line and the right operand of every join on their own
    lines, indented one level per nesting depth.
    """

    def __init__(self, pretty: bool = False, indent: str = INDENT) -> None:
        self.pretty = pretty
        self.indent = indent

    def generate(self, node: ASTNode) -> str:
        """
        Render a tree.

        Raises:
            UnsupportedConstructError: If the tree holds an unknown node type
        """
        return self._render(node, 0)

    def _render(self, node: ASTNode, depth: int) -> str:
        if isinstance(node, PredicateNode):
            return self._pad(depth) + format_predicate(node)

        if isinstance(node, OperatorNode):
            op = f"{node.operator.value}{format_params(node.params)}"
            return self._binary(node.left, op, node.right, depth)

        if isinstance(node, DifferenceNode):
            return self._binary(node.left, "-", node.right, depth)

        if isinstance(node, ProjectNode):
            return self._unary(f"π[{','.join(node.fields)}]", node.source, depth)

        if isinstance(node, SelectNode):
            return self._unary(f"σ[{node.condition}]", node.source, depth)

        raise UnsupportedConstructError(
            f"Unknown AST node type: {type(node).__name__}", node
        )

    def _binary(self, left: ASTNode, op: str, right: ASTNode, depth: int) -> str:
        lhs = self._render(left, depth + 1)
        rhs = self._render(right, depth + 1)
        if not self.pretty:
            return f"({lhs} {op} {rhs})"
        pad = self._pad(depth)
        return "\n".join([f"{pad}(", lhs, f"{pad}{op}", rhs, f"{pad})"])

    def _unary(self, head: str, source: ASTNode, depth: int) -> str:
        inner = self._render(source, depth + 1)
        if not self.pretty:
            return f"{head}({inner})"
        pad = self._pad(depth)
        return "\n".join([f"{pad}{head}(", inner, f"{pad})"])

    def _pad(self, depth: int) -> str:
        return self.indent * depth if self.pretty else ""


def generate_query(ast: ASTNode, pretty: bool = False) -> str:
    """Render an expression tree as ISEQL text."""
    return QueryGenerator(pretty=pretty).generate(ast)


# ---------- Formatting helpers ----------


def format_predicate(node: PredicateNode) -> str:
    return f"σ[pred={node.predicate}{format_arguments(node.arguments)}]({node.relation})"


def format_arguments(arguments: Optional[Dict[str, ArgumentValue]]) -> str:
    """`, k1=v1, k2=v2` in mapping order, or '' when there are none."""
    if not arguments:
        return ""
    pairs = [f"{key}={format_value(value)}" for key, value in arguments.items()]
    return ", " + ", ".join(pairs)


def format_value(value: ArgumentValue) -> str:
    """Strings are double-quoted; numbers and booleans are literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    return format_number(value)


def format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_params(params: OperatorParams) -> str:
    parts: List[str] = []

    if is_bounded(params.delta):
        parts.append(f"δ:{format_number(params.delta)}")
    if is_bounded(params.epsilon):
        parts.append(f"ε:{format_number(params.epsilon)}")
    if is_bounded(params.rho):
        parts.append(f"ρ:{format_number(params.rho)}")

    if params.cardinality is not None:
        for side, bound in params.cardinality.sides():
            rendered = format_cardinality(bound)
            if rendered:
                parts.append(f"{side}Card:{rendered}")

    if params.overlap_percentage is not None:
        parts.append(f"overlap:{format_number(params.overlap_percentage)}%")

    return f"({', '.join(parts)})" if parts else ""


def format_cardinality(bound: Optional[CardinalityBound]) -> str:
    if bound is None:
        return ""
    if bound.min is not None and bound.max is not None:
        return f"[{format_number(bound.min)},{format_number(bound.max)}]"
    if bound.min is not None:
        return f"≥{format_number(bound.min)}"
    if bound.max is not None:
        return f"≤{format_number(bound.max)}"
    return ""
