"""
TypeScript AST: nodes, tree-sitter parser and serializer.
"""

from __future__ import annotations

from .parser import DefinitionFile, ImportBinding, ImportKind, parse_definition, parse_source
from .serializer import TypeScriptSerializer

__all__ = [
    "DefinitionFile",
    "ImportBinding",
    "ImportKind",
    "TypeScriptSerializer",
    "parse_definition",
    "parse_source",
]
