"""
Builtin extensions that complete extracted action records.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..context import InjectBuiltinFn
from .db_mixin import inject_database_mixin_builtins
from .registry import BuiltinRegistry

# Builtins always run first, before user provided ones
DEFAULT_BUILTINS: tuple[InjectBuiltinFn, ...] = (inject_database_mixin_builtins,)


def default_registry(additional_builtins: Iterable[InjectBuiltinFn] = ()) -> BuiltinRegistry:
    """Registry with the default builtins followed by additional_builtins."""
    return BuiltinRegistry([*DEFAULT_BUILTINS, *additional_builtins])


__all__ = [
    "BuiltinRegistry",
    "DEFAULT_BUILTINS",
    "default_registry",
    "inject_database_mixin_builtins",
]
