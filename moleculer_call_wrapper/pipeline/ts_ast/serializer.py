"""
TypeScript AST Serializer.

Converts TypeScript AST nodes to source code:
- 4-space indentation
- single-quoted string literals
- one overload signature per line
- file layout rendered from the call wrapper template
"""

from __future__ import annotations

from pathlib import Path

import jinja2

from .nodes import (
    ArrayType,
    CompositeType,
    ConditionalType,
    FunctionDeclaration,
    ImportDeclaration,
    IndexedAccessType,
    InterfaceDeclaration,
    KeywordType,
    LiteralType,
    Parameter,
    PropertySignature,
    TupleType,
    TypeNode,
    TypeOperator,
    TypeParameter,
    TypeReference,
    WrapperFile,
)

TEMPLATES_DIR = Path(__file__).parent.parent.parent.resolve() / "templates"


class TypeScriptSerializer:
    """Serializes TypeScript AST nodes to source code."""

    INDENT = "    "  # 4 spaces

    def __init__(self):
        self.jinja_env = jinja2.Environment(lstrip_blocks=True, trim_blocks=True)
        self.wrapper_template = self.jinja_env.from_string((TEMPLATES_DIR / "typescript" / "call_wrapper.ts.jinja2").read_text(encoding="utf-8"))

    def serialize(self, file: WrapperFile) -> str:
        """Serialize a complete call wrapper file to source code."""
        return self.wrapper_template.render(
            lint_rules=file.lint_rules,
            imports=[self.serialize_import(i) for i in file.imports],
            interfaces=[self.serialize_interface(i) for i in file.interfaces],
            call_overloads=[self.serialize_function(f) for f in file.call_overloads],
            generic_call_overloads=[self.serialize_function(f) for f in file.generic_call_overloads],
        )

    def serialize_import(self, declaration: ImportDeclaration) -> str:
        return f"import type * as {declaration.alias} from {self._quote(declaration.module_specifier)};"

    def serialize_interface(self, interface: InterfaceDeclaration) -> str:
        lines = [f"interface {interface.name} {{"]
        for member in interface.members:
            lines.append(f"{self.INDENT}{self.serialize_property(member)}")
        lines.append("}")
        return "\n".join(lines)

    def serialize_property(self, prop: PropertySignature) -> str:
        return f"{self._quote(prop.name)}: {self.serialize_type(prop.type)};"

    def serialize_function(self, function: FunctionDeclaration) -> str:
        type_params = self.serialize_type_parameters(function.type_parameters)
        params = ", ".join(self.serialize_parameter(p) for p in function.parameters)
        signature = f"export function {function.name}{type_params}({params})"
        if function.return_type is not None:
            signature += f": {self.serialize_type(function.return_type)}"

        if function.body is None:
            return f"{signature};"

        lines = [f"{signature} {{"]
        lines.extend(f"{self.INDENT}{statement}" for statement in function.body)
        lines.append("}")
        return "\n".join(lines)

    def serialize_parameter(self, param: Parameter) -> str:
        optional = "?" if param.optional else ""
        if param.type is None:
            return f"{param.name}{optional}"
        return f"{param.name}{optional}: {self.serialize_type(param.type)}"

    def serialize_type_parameters(self, params: list[TypeParameter]) -> str:
        if not params:
            return ""
        return "<" + ", ".join(self.serialize_type_parameter(p) for p in params) + ">"

    def serialize_type_parameter(self, param: TypeParameter) -> str:
        text = f"const {param.name}" if param.is_const else param.name
        if param.constraint is not None:
            text += f" extends {self.serialize_type(param.constraint)}"
        if param.default is not None:
            text += f" = {self.serialize_type(param.default)}"
        return text

    def serialize_type(self, node: TypeNode | None) -> str:
        """Serialize a type expression."""
        if node is None:
            return "unknown"
        if isinstance(node, TypeReference):
            if node.type_arguments:
                return f"{node.name}<{', '.join(self.serialize_type(a) for a in node.type_arguments)}>"
            return node.name
        if isinstance(node, KeywordType):
            return node.keyword
        if isinstance(node, LiteralType):
            return node.text
        if isinstance(node, ArrayType):
            return f"{self._wrap_operand(node.element_type)}[]"
        if isinstance(node, TupleType):
            return f"[{', '.join(self.serialize_type(e) for e in node.elements)}]"
        if isinstance(node, ConditionalType):
            return (
                f"{self.serialize_type(node.check_type)} extends {self.serialize_type(node.extends_type)}"
                f" ? {self.serialize_type(node.true_type)} : {self.serialize_type(node.false_type)}"
            )
        if isinstance(node, IndexedAccessType):
            return f"{self._wrap_operand(node.object_type)}[{self.serialize_type(node.index_type)}]"
        if isinstance(node, TypeOperator):
            return f"{node.operator} {self._wrap_operand(node.type)}"
        if isinstance(node, CompositeType):
            return "".join(p if isinstance(p, str) else self.serialize_type(p) for p in node.parts)
        raise TypeError(f"Cannot serialize {type(node).__name__}")

    def _wrap_operand(self, node: TypeNode | None) -> str:
        """Parenthesize operands that would otherwise bind wrongly (A | B)[]."""
        text = self.serialize_type(node)
        if isinstance(node, (ConditionalType, TypeOperator)):
            return f"({text})"
        return text

    @staticmethod
    def _quote(value: str) -> str:
        return LiteralType.string(value).text
