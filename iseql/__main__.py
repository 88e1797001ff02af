"""
Allow running the compiler as a module.

Usage:
    python -m iseql graph.json
"""

from .cli import main
import sys

if __name__ == "__main__":
    sys.exit(main())
