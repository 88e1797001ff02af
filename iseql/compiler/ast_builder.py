"""
Graph → Expression Tree

Canonicalizes an event graph into an ISEQL expression tree.

The builder is safe to call on an unvalidated graph: it finds the root
itself and re-detects cycles on the way down, failing fast on the first
structural problem.

Canonical shape:
- a node without outgoing edges is a predicate leaf
- a node with k outgoing edges is a left-deep chain of k operators,
  ((A op1 B) op2 C) op3 D, in edge input order

The chaining is a canonicalization of "one event constrains several
successors", not a join reordering. Edge order decides the shape.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import AbstractSet, Dict, Optional, Protocol

from ..errors import StructuralError, UnsupportedConstructError
from ..ir.ast import (
    ASTNode,
    DifferenceNode,
    OperatorNode,
    PredicateNode,
    ProjectNode,
    SelectNode,
)
from ..ir.graph import EventNode, GraphData, NodeKind
from .mapper import map_constraint

logger = logging.getLogger(__name__)

RELATION_PREFIX = "M"


class CompoundResolver(Protocol):
    """
    Expands a compound node (a saved query reference) into a subtree.

    No resolver ships with the compiler. Callers that keep a library of
    saved queries plug one in here.
    """

    def resolve(self, node: EventNode) -> ASTNode:
        """
        Return the expression tree the node's saved query stands for.

        The builder copies the returned tree and renames its relations
        into its own M1, M2, ... sequence, so the tree may be shared.
        """
        ...


@dataclass
class _BuildState:
    """Per-call state. Never shared between calls."""

    graph: GraphData
    nodes: Dict[str, EventNode]
    next_relation: int = 1


class ASTBuilder:
    """
    Builds ISEQL expression trees from event graphs.

    Holds no state between calls; every build() starts a fresh alias
    counter, so identical graphs always produce identical trees.
    """

    def __init__(self, resolver: Optional[CompoundResolver] = None) -> None:
        self.resolver = resolver

    def build(self, graph: GraphData) -> ASTNode:
        """
        Build the expression tree for a graph.

        Raises:
            StructuralError: No root or several roots, a cycle, an edge to
                an unknown node, a compound leaf, or a compound node the
                resolver cannot expand.
            UnsupportedConstructError: An edge with an unknown constraint kind.
        """
        root = find_root(graph)
        logger.debug("Building expression tree from root %s", root.id)
        state = _BuildState(graph=graph, nodes=graph.node_index())
        return self._subtree(root.id, frozenset(), state)

    # ---------------- Internals ----------------

    def _subtree(
        self, node_id: str, path: AbstractSet[str], state: _BuildState
    ) -> ASTNode:
        # `path` holds the ancestors on this branch only; siblings never see it.
        if node_id in path:
            raise StructuralError(f"Cycle detected at node {node_id}", node_id)

        node = state.nodes.get(node_id)
        if node is None:
            raise StructuralError(f"Node {node_id} not found", node_id)

        path = path | {node_id}
        outgoing = state.graph.outgoing(node_id)

        if not outgoing:
            if node.kind != NodeKind.PREDICATE:
                raise StructuralError(
                    f"Node {node_id} has no children but is not a predicate", node_id
                )
            return self._predicate(node, state)

        result = self._own_expression(node, state)
        for edge in outgoing:
            operator, params = map_constraint(edge.constraint)
            right = self._subtree(edge.target, path, state)
            result = OperatorNode(
                operator=operator,
                params=params,
                left=result,
                right=right,
            )
        return result

    def _own_expression(self, node: EventNode, state: _BuildState) -> ASTNode:
        """The node itself as the left operand of its first operator."""
        if node.kind == NodeKind.PREDICATE:
            return self._predicate(node, state)

        if self.resolver is None:
            raise StructuralError(
                f"Node {node.id} references saved query "
                f"'{node.compound_query}', but no compound resolver is configured",
                node.id,
            )
        return self._adopt(self.resolver.resolve(node), state)

    def _adopt(self, tree: ASTNode, state: _BuildState) -> ASTNode:
        """
        Copy a resolved subtree into this build.

        Every node is copied so two compound nodes naming the same saved
        query never share a subtree, and every predicate takes the next
        alias from this build's counter, in pre-order.
        """
        if isinstance(tree, PredicateNode):
            return PredicateNode(
                predicate=tree.predicate,
                relation=self._next_relation(state),
                arguments=dict(tree.arguments),
            )
        if isinstance(tree, OperatorNode):
            left = self._adopt(tree.left, state)
            return replace(tree, left=left, right=self._adopt(tree.right, state))
        if isinstance(tree, ProjectNode):
            fields = list(tree.fields)
            return replace(tree, fields=fields, source=self._adopt(tree.source, state))
        if isinstance(tree, SelectNode):
            return replace(tree, source=self._adopt(tree.source, state))
        if isinstance(tree, DifferenceNode):
            left = self._adopt(tree.left, state)
            return replace(tree, left=left, right=self._adopt(tree.right, state))
        raise UnsupportedConstructError(
            f"Unknown AST node type: {type(tree).__name__}", tree
        )

    def _predicate(self, node: EventNode, state: _BuildState) -> PredicateNode:
        if not node.predicate:
            raise StructuralError(f"Node {node.id} is missing predicate name", node.id)

        return PredicateNode(
            predicate=node.predicate,
            relation=self._next_relation(state),
            arguments=dict(node.arguments),
        )

    @staticmethod
    def _next_relation(state: _BuildState) -> str:
        relation = f"{RELATION_PREFIX}{state.next_relation}"
        state.next_relation += 1
        return relation


def find_root(graph: GraphData) -> EventNode:
    """
    Return the single node without incoming edges.

    Raises:
        StructuralError: If there is no such node, or more than one
    """
    if not graph.nodes:
        raise StructuralError("Graph contains no event nodes")

    targets = {edge.target for edge in graph.edges}
    roots = [node for node in graph.nodes if node.id not in targets]

    if not roots:
        raise StructuralError(
            "No root node found (all nodes have incoming edges - possible cycle)"
        )
    if len(roots) > 1:
        names = ", ".join(node.display_name for node in roots)
        raise StructuralError(f"Multiple root nodes found: {names}")
    return roots[0]


def build_ast(
    graph: GraphData, resolver: Optional[CompoundResolver] = None
) -> ASTNode:
    """Convenience wrapper around ASTBuilder(resolver).build(graph)."""
    return ASTBuilder(resolver).build(graph)
