"""
TypeScript AST node definitions.

These nodes represent the type expressions read from service definition
files and the declarations of the generated call wrapper. They are built
either by the tree-sitter parser or by the synthesizer, then serialized
to source code.

Nodes compare and hash by identity: two structurally equal references
coming from different places in a definition file are different keys in
a rewrite table.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field


@dataclass(eq=False)
class TSNode:
    """Base class for all TypeScript AST nodes."""

    def children(self) -> list[TSNode]:
        """Direct child nodes, in source order."""
        return []


@dataclass(eq=False)
class TypeNode(TSNode):
    """Base class for type expressions."""

    pass


@dataclass(eq=False)
class TypeReference(TypeNode):
    """A named type, optionally qualified and instantiated (e.g. ns.Foo<Bar>)."""

    name: str = ""
    type_arguments: list[TypeNode] = field(default_factory=list)

    @property
    def segments(self) -> list[str]:
        return self.name.split(".")

    @property
    def leading_name(self) -> str:
        """Left-most segment of a qualified name."""
        return self.segments[0]

    def children(self) -> list[TSNode]:
        return list(self.type_arguments)


@dataclass(eq=False)
class KeywordType(TypeNode):
    """A predefined type keyword (string, number, void, never, unknown...)."""

    keyword: str = ""


@dataclass(eq=False)
class LiteralType(TypeNode):
    """A literal type, stored as its source text (quotes included)."""

    text: str = ""

    @staticmethod
    def string(value: str) -> LiteralType:
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        return LiteralType(text=f"'{escaped}'")

    @staticmethod
    def number(value: int) -> LiteralType:
        return LiteralType(text=str(value))


@dataclass(eq=False)
class ArrayType(TypeNode):
    """An array type (T[])."""

    element_type: TypeNode | None = None

    def children(self) -> list[TSNode]:
        return [self.element_type] if self.element_type else []


@dataclass(eq=False)
class TupleType(TypeNode):
    """A tuple type ([A, B])."""

    elements: list[TypeNode] = field(default_factory=list)

    def children(self) -> list[TSNode]:
        return list(self.elements)


@dataclass(eq=False)
class ConditionalType(TypeNode):
    """A conditional type (C extends E ? T : F)."""

    check_type: TypeNode | None = None
    extends_type: TypeNode | None = None
    true_type: TypeNode | None = None
    false_type: TypeNode | None = None

    def children(self) -> list[TSNode]:
        return [t for t in (self.check_type, self.extends_type, self.true_type, self.false_type) if t]


@dataclass(eq=False)
class IndexedAccessType(TypeNode):
    """An indexed access type (O[I])."""

    object_type: TypeNode | None = None
    index_type: TypeNode | None = None

    def children(self) -> list[TSNode]:
        return [t for t in (self.object_type, self.index_type) if t]


@dataclass(eq=False)
class TypeOperator(TypeNode):
    """A prefix type operator such as keyof."""

    operator: str = "keyof"
    type: TypeNode | None = None

    def children(self) -> list[TSNode]:
        return [self.type] if self.type else []


@dataclass(eq=False)
class CompositeType(TypeNode):
    """Any other type syntax, kept as verbatim text around converted children.

    Unions, object literals, function types, mapped types and friends are
    not modelled one by one: the parser keeps their source text and only
    converts the nested nodes, so references deep inside them can still be
    rewritten.
    """

    parts: list[str | TypeNode] = field(default_factory=list)

    def children(self) -> list[TSNode]:
        return [p for p in self.parts if isinstance(p, TypeNode)]


@dataclass(eq=False)
class TypeParameter(TSNode):
    """A type parameter declaration (<const T extends C = D>)."""

    name: str = ""
    constraint: TypeNode | None = None
    default: TypeNode | None = None
    is_const: bool = False

    def children(self) -> list[TSNode]:
        return [t for t in (self.constraint, self.default) if t]


@dataclass(eq=False)
class ImportDeclaration(TSNode):
    """A namespace import (import type * as alias from 'specifier')."""

    alias: str = ""
    module_specifier: str = ""


@dataclass(eq=False)
class PropertySignature(TSNode):
    """An interface member keyed by a string literal."""

    name: str = ""
    type: TypeNode | None = None

    def children(self) -> list[TSNode]:
        return [self.type] if self.type else []


@dataclass(eq=False)
class InterfaceDeclaration(TSNode):
    """An interface declaration."""

    name: str = ""
    members: list[PropertySignature] = field(default_factory=list)

    def children(self) -> list[TSNode]:
        return list(self.members)


@dataclass(eq=False)
class Parameter(TSNode):
    """A function parameter."""

    name: str = ""
    type: TypeNode | None = None
    optional: bool = False

    def children(self) -> list[TSNode]:
        return [self.type] if self.type else []


@dataclass(eq=False)
class FunctionDeclaration(TSNode):
    """A function declaration; without body it is an overload signature."""

    name: str = ""
    type_parameters: list[TypeParameter] = field(default_factory=list)
    parameters: list[Parameter] = field(default_factory=list)
    return_type: TypeNode | None = None
    body: list[str] | None = None  # Statements, one per line

    def children(self) -> list[TSNode]:
        nodes: list[TSNode] = [*self.type_parameters, *self.parameters]
        if self.return_type:
            nodes.append(self.return_type)
        return nodes


@dataclass(eq=False)
class WrapperFile(TSNode):
    """The generated call wrapper module, grouped by output section."""

    lint_rules: list[str] = field(default_factory=list)
    imports: list[ImportDeclaration] = field(default_factory=list)
    interfaces: list[InterfaceDeclaration] = field(default_factory=list)
    call_overloads: list[FunctionDeclaration] = field(default_factory=list)
    generic_call_overloads: list[FunctionDeclaration] = field(default_factory=list)


def walk(node: TSNode) -> Iterator[TSNode]:
    """Yield node and all its descendants, depth first, pre-order."""
    yield node
    for child in node.children():
        yield from walk(child)


ReferenceHook = Callable[[TypeReference], str | None]


def clone_type(node: TypeNode, hook: ReferenceHook | None = None) -> TypeNode:
    """Structural copy of a type expression.

    For every type reference, hook may return a replacement name; the
    reference is then copied under that name, type arguments included.
    """
    if isinstance(node, TypeReference):
        name = (hook(node) if hook else None) or node.name
        return TypeReference(name=name, type_arguments=[clone_type(a, hook) for a in node.type_arguments])
    if isinstance(node, KeywordType):
        return KeywordType(keyword=node.keyword)
    if isinstance(node, LiteralType):
        return LiteralType(text=node.text)
    if isinstance(node, ArrayType):
        return ArrayType(element_type=_clone_optional(node.element_type, hook))
    if isinstance(node, TupleType):
        return TupleType(elements=[clone_type(e, hook) for e in node.elements])
    if isinstance(node, ConditionalType):
        return ConditionalType(
            check_type=_clone_optional(node.check_type, hook),
            extends_type=_clone_optional(node.extends_type, hook),
            true_type=_clone_optional(node.true_type, hook),
            false_type=_clone_optional(node.false_type, hook),
        )
    if isinstance(node, IndexedAccessType):
        return IndexedAccessType(
            object_type=_clone_optional(node.object_type, hook),
            index_type=_clone_optional(node.index_type, hook),
        )
    if isinstance(node, TypeOperator):
        return TypeOperator(operator=node.operator, type=_clone_optional(node.type, hook))
    if isinstance(node, CompositeType):
        return CompositeType(parts=[p if isinstance(p, str) else clone_type(p, hook) for p in node.parts])
    raise TypeError(f"Cannot clone {type(node).__name__}")


def clone_type_parameter(param: TypeParameter, hook: ReferenceHook | None = None) -> TypeParameter:
    return TypeParameter(
        name=param.name,
        constraint=_clone_optional(param.constraint, hook),
        default=_clone_optional(param.default, hook),
        is_const=param.is_const,
    )


def _clone_optional(node: TypeNode | None, hook: ReferenceHook | None) -> TypeNode | None:
    return clone_type(node, hook) if node is not None else None
