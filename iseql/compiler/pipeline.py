"""
Graph → ISEQL Compilation Pipeline

Validate → build tree → generate text. Each stage either hands a value
to the next or stops the pipeline; the caller always gets a
CompilationResult, never an exception from the compiler itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from ..errors import ISEQLError
from ..ir.ast import ASTNode
from ..ir.graph import GraphData
from ..ir.serialize import ast_to_dict
from ..ir.validation import validate_graph
from .ast_builder import ASTBuilder, CompoundResolver
from .generator import generate_query

logger = logging.getLogger(__name__)

VALIDATION_FAILED_HEADER = "Validation failed:"


@dataclass(frozen=True)
class CompileOptions:
    """How to compile a graph."""

    pretty_print: bool = False
    validate_before_compile: bool = True

    @staticmethod
    def from_mapping(options: Mapping[str, Any]) -> "CompileOptions":
        """Accept the camelCase keys used at the JSON boundary."""
        return CompileOptions(
            pretty_print=bool(options.get("prettyPrint", False)),
            validate_before_compile=bool(options.get("validateBeforeCompile", True)),
        )


@dataclass
class CompilationResult:
    """
    The outcome of one compilation.

    On success both `query` and `ast` are set. On failure `error` holds a
    single descriptive message and neither `query` nor `ast` is set.
    Validator warnings ride along either way.
    """

    success: bool
    query: Optional[str] = None
    ast: Optional[ASTNode] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.query is not None:
            data["query"] = self.query
        if self.ast is not None:
            data["ast"] = ast_to_dict(self.ast)
        if self.error is not None:
            data["error"] = self.error
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data


def compile_graph(
    graph: GraphData,
    options: Union[CompileOptions, Mapping[str, Any], None] = None,
    resolver: Optional[CompoundResolver] = None,
) -> CompilationResult:
    """
    Compile an event graph into ISEQL text.

    Args:
        graph: The graph to compile
        options: CompileOptions, or a mapping with prettyPrint /
            validateBeforeCompile keys
        resolver: Optional expansion for compound (saved query) nodes

    Returns:
        CompilationResult; failures are reported in `error`, not raised
    """
    if options is None:
        options = CompileOptions()
    elif not isinstance(options, CompileOptions):
        options = CompileOptions.from_mapping(options)

    warnings: List[str] = []

    if options.validate_before_compile:
        validation = validate_graph(graph.nodes, graph.edges)
        warnings = validation.warnings
        for warning in warnings:
            logger.info("Graph warning: %s", warning)
        if not validation.valid:
            logger.info("Graph failed validation with %d error(s)", len(validation.errors))
            return CompilationResult(
                success=False,
                error="\n".join([VALIDATION_FAILED_HEADER] + validation.errors),
                warnings=warnings,
            )

    try:
        ast = ASTBuilder(resolver).build(graph)
        query = generate_query(ast, pretty=options.pretty_print)
    except ISEQLError as e:
        logger.warning("Compilation failed: %s", e)
        return CompilationResult(success=False, error=str(e), warnings=warnings)

    logger.debug("Compiled %d node(s) into %d character(s)", len(graph.nodes), len(query))
    return CompilationResult(success=True, query=query, ast=ast, warnings=warnings)
