"""
Import resolution and alias allocation for the generated wrapper.
"""

from __future__ import annotations

from .aliases import MOLECULER_ALIAS, MOLECULER_MODULE, RESERVED_ALIASES, AliasTable, derive_alias
from .import_resolver import ImportResolver, fill_imports

__all__ = [
    "AliasTable",
    "ImportResolver",
    "MOLECULER_ALIAS",
    "MOLECULER_MODULE",
    "RESERVED_ALIASES",
    "derive_alias",
    "fill_imports",
]
