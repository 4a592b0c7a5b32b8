"""
TypeScript definition file parser.

Uses tree-sitter and tree-sitter-typescript to parse service definition
files, index their import declarations and convert type syntax into
TypeScript AST nodes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Node, Parser, Tree

from .nodes import (
    ArrayType,
    CompositeType,
    ConditionalType,
    IndexedAccessType,
    KeywordType,
    LiteralType,
    TupleType,
    TypeNode,
    TypeOperator,
    TypeParameter,
    TypeReference,
)

logger = logging.getLogger(__name__)

TYPESCRIPT = Language(ts_typescript.language_typescript())
TSX = Language(ts_typescript.language_tsx())


class ImportKind(str, Enum):
    """How a local name is bound by an import declaration."""

    NAMED = "named"  # import { A } / import { A as B }
    DEFAULT = "default"  # import A from
    NAMESPACE = "namespace"  # import * as A from


@dataclass
class ImportBinding:
    """A local name introduced by an import declaration."""

    local_name: str = ""
    imported_name: str | None = None  # Exported name; None for namespace imports
    kind: ImportKind = ImportKind.NAMED
    module_specifier: str = ""


@dataclass
class DefinitionFile:
    """A parsed service definition file."""

    path: str = ""
    source: bytes = b""
    tree: Tree | None = None
    imports: list[ImportBinding] = field(default_factory=list)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8")

    def find_import(self, local_name: str) -> ImportBinding | None:
        """Return the first import binding that introduces local_name."""
        return next((b for b in self.imports if b.local_name == local_name), None)


def get_parser(path: str | Path = "") -> Parser:
    """Get a tree-sitter parser for the file type of path."""
    language = TSX if str(path).endswith(".tsx") else TYPESCRIPT
    return Parser(language)


def parse_source(code: str, path: str | Path = "service.ts") -> DefinitionFile:
    """Parse TypeScript source code into a DefinitionFile.

    tree-sitter recovers from syntax errors, so a broken file still yields
    a tree; the broken regions simply match nothing downstream.
    """
    source = code.encode("utf-8")
    tree = get_parser(path).parse(source)
    if tree.root_node.has_error:
        logger.warning("Syntax errors in %s, type information may be incomplete", path)

    definition = DefinitionFile(path=str(path), source=source, tree=tree)
    definition.imports = _collect_imports(definition)
    return definition


def parse_definition(path: str | Path) -> DefinitionFile:
    """Read and parse a service definition file."""
    return parse_source(Path(path).read_text(encoding="utf-8"), path)


def string_value(definition: DefinitionFile, node: Node) -> str:
    """Value of a string node, without its quotes."""
    return definition.text(node)[1:-1]


def named_children(node: Node) -> list[Node]:
    """Named children without comments and other extras."""
    return [c for c in node.named_children if not c.is_extra]


def _collect_imports(definition: DefinitionFile) -> list[ImportBinding]:
    bindings: list[ImportBinding] = []
    for statement in definition.root.children:
        if statement.type != "import_statement":
            continue
        source_node = statement.child_by_field_name("source")
        if source_node is None:
            continue
        specifier = string_value(definition, source_node)

        clause = next((c for c in statement.children if c.type == "import_clause"), None)
        if clause is None:
            continue

        for child in clause.named_children:
            if child.type == "identifier":
                bindings.append(
                    ImportBinding(
                        local_name=definition.text(child),
                        imported_name="default",
                        kind=ImportKind.DEFAULT,
                        module_specifier=specifier,
                    )
                )
            elif child.type == "namespace_import":
                name = next(c for c in child.named_children if c.type == "identifier")
                bindings.append(
                    ImportBinding(
                        local_name=definition.text(name),
                        kind=ImportKind.NAMESPACE,
                        module_specifier=specifier,
                    )
                )
            elif child.type == "named_imports":
                for specifier_node in child.named_children:
                    if specifier_node.type != "import_specifier":
                        continue
                    name = specifier_node.child_by_field_name("name")
                    alias = specifier_node.child_by_field_name("alias")
                    imported = definition.text(name)
                    if name.type == "string":
                        imported = string_value(definition, name)
                    bindings.append(
                        ImportBinding(
                            local_name=definition.text(alias or name),
                            imported_name=imported,
                            kind=ImportKind.NAMED,
                            module_specifier=specifier,
                        )
                    )
    return bindings


def convert_type(definition: DefinitionFile, node: Node) -> TypeNode:
    """Convert a tree-sitter type (or type annotation) node into a TypeScript AST node."""
    if node.type == "type_annotation":
        node = named_children(node)[0]
    return _convert(definition, node)


def _convert(definition: DefinitionFile, node: Node) -> TypeNode:
    kind = node.type

    if kind in ("type_identifier", "nested_type_identifier"):
        return TypeReference(name="".join(definition.text(node).split()))
    if kind == "generic_type":
        name = node.child_by_field_name("name")
        arguments = node.child_by_field_name("type_arguments")
        return TypeReference(
            name="".join(definition.text(name).split()),
            type_arguments=[convert_type(definition, a) for a in named_children(arguments)] if arguments else [],
        )
    if kind == "predefined_type":
        return KeywordType(keyword=definition.text(node))
    if kind == "literal_type":
        return LiteralType(text=definition.text(node))
    if kind == "array_type":
        return ArrayType(element_type=convert_type(definition, named_children(node)[0]))
    if kind == "tuple_type":
        return TupleType(elements=[convert_type(definition, e) for e in named_children(node)])
    if kind == "conditional_type":
        return ConditionalType(
            check_type=convert_type(definition, node.child_by_field_name("left")),
            extends_type=convert_type(definition, node.child_by_field_name("right")),
            true_type=convert_type(definition, node.child_by_field_name("consequence")),
            false_type=convert_type(definition, node.child_by_field_name("alternative")),
        )
    if kind == "lookup_type":
        object_node, index_node = named_children(node)[:2]
        return IndexedAccessType(
            object_type=convert_type(definition, object_node),
            index_type=convert_type(definition, index_node),
        )
    if kind == "index_type_query":
        return TypeOperator(operator="keyof", type=convert_type(definition, named_children(node)[0]))

    return _convert_composite(definition, node)


def _convert_composite(definition: DefinitionFile, node: Node) -> CompositeType:
    """Keep the node's text, converting each child so nested references survive."""
    if not node.children:
        return CompositeType(parts=[definition.text(node)])

    parts: list[str | TypeNode] = []
    cursor = node.start_byte
    for child in node.children:
        if child.start_byte > cursor:
            parts.append(definition.source[cursor : child.start_byte].decode("utf-8"))
        if child.children or child.type in _CONVERTED_LEAVES:
            converted = _convert(definition, child)
            if isinstance(converted, CompositeType):
                parts.extend(converted.parts)
            else:
                parts.append(converted)
        else:
            parts.append(definition.text(child))
        cursor = child.end_byte
    if node.end_byte > cursor:
        parts.append(definition.source[cursor : node.end_byte].decode("utf-8"))
    return CompositeType(parts=parts)


# Leaf node kinds that still carry type meaning
_CONVERTED_LEAVES = {"type_identifier", "predefined_type"}


def convert_type_parameters(definition: DefinitionFile, node: Node | None) -> list[TypeParameter] | None:
    """Convert a type_parameters node; None when there is none."""
    if node is None:
        return None

    params: list[TypeParameter] = []
    for param in named_children(node):
        if param.type != "type_parameter":
            continue
        constraint = param.child_by_field_name("constraint")
        default = param.child_by_field_name("value")
        params.append(
            TypeParameter(
                name=definition.text(param.child_by_field_name("name")),
                constraint=convert_type(definition, named_children(constraint)[0]) if constraint else None,
                default=convert_type(definition, named_children(default)[0]) if default else None,
                is_const=any(c.type == "const" for c in param.children),
            )
        )
    return params
