"""
ISEQL: temporal event graphs compiled to algebraic queries

Turns a small directed graph of events ("A happens, then B happens
within δ frames") into a canonical ISEQL expression: relation selections
combined by temporal join operators annotated with timing parameters.
"""

__version__ = "0.1.0"

from .errors import (
    GraphValidationError,
    ISEQLError,
    ParameterRangeError,
    StructuralError,
    UnsupportedConstructError,
)
from .compiler import CompilationResult, CompileOptions, compile_graph
from .builder import GraphBuilder, graph

__all__ = [
    "CompilationResult",
    "CompileOptions",
    "GraphBuilder",
    "GraphValidationError",
    "ISEQLError",
    "ParameterRangeError",
    "StructuralError",
    "UnsupportedConstructError",
    "compile_graph",
    "graph",
]
