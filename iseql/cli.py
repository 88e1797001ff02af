"""
ISEQL compiler CLI.

Compiles an event graph saved as JSON into ISEQL text.

Usage:
    python -m iseql graph.json
    python -m iseql graph.json --pretty
    python -m iseql - --format json < graph.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .compiler import CompileOptions, compile_graph
from .ir.serialize import graph_from_json


def main(args: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code: 0 if compiled, 1 if compilation failed, 2 if error
    """
    parser = argparse.ArgumentParser(
        prog="iseql",
        description="Compile a temporal event graph into an ISEQL query",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s graph.json
    %(prog)s graph.json --pretty --output query.txt
    %(prog)s - --format json < graph.json

Exit codes:
    0 - Graph compiled
    1 - Graph rejected (validation or structural error)
    2 - Error reading or parsing the graph
        """,
    )

    parser.add_argument(
        "graph",
        type=str,
        help="Path to the graph JSON file, or '-' for stdin",
    )

    parser.add_argument(
        "--pretty", "-p",
        action="store_true",
        help="Indent nested operators over several lines",
    )

    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip graph validation before building the query",
    )

    parser.add_argument(
        "--format", "-f",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log compiler stages to stderr",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parsed = parser.parse_args(args)

    if parsed.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    # Read graph
    try:
        if parsed.graph == "-":
            source = sys.stdin.read()
        else:
            source = Path(parsed.graph).read_text(encoding="utf-8")
        graph = graph_from_json(source)
    except OSError as e:
        print(f"Error reading graph: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"Error parsing graph: {e}", file=sys.stderr)
        return 2

    options = CompileOptions(
        pretty_print=parsed.pretty,
        validate_before_compile=not parsed.no_validate,
    )
    result = compile_graph(graph, options)

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if parsed.format == "json":
        output = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    elif result.success:
        output = result.query
    else:
        output = None

    if not result.success:
        print(result.error, file=sys.stderr)

    if output is not None:
        if parsed.output:
            Path(parsed.output).write_text(output + "\n", encoding="utf-8")
            print(f"Query written to: {parsed.output}", file=sys.stderr)
        else:
            print(output)

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
