"""
ISEQL error taxonomy.

Validation accumulates every problem it finds before reporting.
Building and generation fail fast on the first one.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class ISEQLError(Exception):
    """Base class for every failure raised by the compiler."""

    pass


class StructuralError(ISEQLError):
    """
    Raised when the graph cannot be canonicalized into a tree.

    Covers missing or multiple roots, cycles, dangling node references,
    compound leaves and compound nodes that no resolver could expand.
    """

    def __init__(self, message: str, node_id: Optional[str] = None):
        self.node_id = node_id
        super().__init__(message)


class ParameterRangeError(ISEQLError, ValueError):
    """Raised when a constraint parameter is outside its legal range."""

    def __init__(self, message: str, edge_id: Optional[str] = None):
        self.edge_id = edge_id
        super().__init__(message)


class UnsupportedConstructError(ISEQLError):
    """Raised for an unknown constraint kind or AST node kind."""

    def __init__(self, message: str, construct: object = None):
        self.construct = construct
        super().__init__(message)


class GraphValidationError(ISEQLError, ValueError):
    """
    Raised when a graph fails validation and the caller asked for an exception.

    Carries the complete list of errors so the author gets every
    diagnostic in one pass.
    """

    def __init__(self, errors: Sequence[str], warnings: Sequence[str] = ()):
        self.errors: List[str] = list(errors)
        self.warnings: List[str] = list(warnings)
        msg = "Graph failed validation:\n- " + "\n- ".join(self.errors)
        super().__init__(msg)
