"""
Run-scoped state shared by the pipeline phases.

Action records, the alias table and the rewrite table are created empty for
each generation run and dropped once the wrapper text is produced.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

from .resolver.aliases import AliasTable
from .ts_ast.nodes import TypeNode, TypeParameter, TypeReference

if TYPE_CHECKING:
    from .descriptors import ServiceDescriptor
    from .ts_ast.parser import DefinitionFile


@dataclass
class HandlerTypes:
    """Type signature of an action handler as written in its definition file."""

    params: TypeNode | None = None
    return_type: TypeNode | None = None
    type_parameters: list[TypeParameter] | None = None


@dataclass
class ActionRecord(HandlerTypes):
    """One action's external type contract.

    Types still belong to the definition file they were read from; they are
    only copied (with imports rewritten) when the wrapper is synthesized.
    """

    id: str | None = None

    def missing_fields(self) -> list[str]:
        return [f.name for f in fields(HandlerTypes) if getattr(self, f.name) is None]

    def fill_missing(self, **types: TypeNode | list[TypeParameter] | None) -> None:
        """Set the given type fields, keeping those already known."""
        for name, value in types.items():
            if name not in _TYPE_FIELDS:
                raise AttributeError(f"ActionRecord has no type field {name!r}")
            if getattr(self, name) is None:
                setattr(self, name, value)


_TYPE_FIELDS = {f.name for f in fields(HandlerTypes)}


class RewriteTable:
    """Replacement names for type references, keyed by node identity.

    A reference that is not in the table is copied verbatim.
    """

    def __init__(self):
        self._names: dict[TypeReference, str] = {}

    def record(self, node: TypeReference, qualified_name: str) -> None:
        self._names[node] = qualified_name

    def get(self, node: TypeReference) -> str | None:
        return self._names.get(node)

    def __contains__(self, node: object) -> bool:
        return node in self._names

    def __len__(self) -> int:
        return len(self._names)


@dataclass
class CallWrapperContext:
    """State handed to the resolver and to builtin extensions."""

    wrapper_path: str = ""
    current_file_path: str = ""
    imports: AliasTable = field(default_factory=AliasTable)
    rewrites: RewriteTable = field(default_factory=RewriteTable)


InjectBuiltinFn = Callable[[CallWrapperContext, list[ActionRecord], "ServiceDescriptor", "DefinitionFile"], None]
