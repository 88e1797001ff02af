"""The ISEQL compiler: constraint mapping, tree building, text generation."""

from .mapper import map_constraint
from .ast_builder import ASTBuilder, CompoundResolver, build_ast, find_root
from .generator import QueryGenerator, generate_query
from .pipeline import (
    CompilationResult,
    CompileOptions,
    VALIDATION_FAILED_HEADER,
    compile_graph,
)

__all__ = [
    "ASTBuilder",
    "CompilationResult",
    "CompileOptions",
    "CompoundResolver",
    "QueryGenerator",
    "VALIDATION_FAILED_HEADER",
    "build_ast",
    "compile_graph",
    "find_root",
    "generate_query",
    "map_constraint",
]
