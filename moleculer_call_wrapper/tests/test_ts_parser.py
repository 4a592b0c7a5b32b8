"""
Tests for the tree-sitter based TypeScript parser.

Covers the import table of a definition file and the conversion of type
syntax into TypeScript AST nodes.
"""

from __future__ import annotations

from pathlib import Path

from moleculer_call_wrapper.pipeline.ts_ast.nodes import (
    ArrayType,
    CompositeType,
    ConditionalType,
    IndexedAccessType,
    KeywordType,
    LiteralType,
    TypeOperator,
    TypeReference,
    walk,
)
from moleculer_call_wrapper.pipeline.ts_ast.parser import (
    ImportKind,
    convert_type,
    convert_type_parameters,
    named_children,
    parse_definition,
    parse_source,
)
from moleculer_call_wrapper.pipeline.ts_ast.serializer import TypeScriptSerializer

TEST_DATA_DIR = Path(__file__).with_name("test_data")


def parse_alias_type(type_text: str):
    """Parse `type X = <type_text>;` and convert its value."""
    definition = parse_source(f"type X = {type_text};\n")
    alias = definition.root.children[0]
    assert alias.type == "type_alias_declaration"
    return definition, convert_type(definition, alias.child_by_field_name("value"))


class TestImportTable:
    """Tests for the import bindings of a definition file."""

    def test_named_imports(self):
        """Test named and renamed imports."""
        definition = parse_source("import { A, B as C } from './types';\n")

        a = definition.find_import("A")
        assert a.kind == ImportKind.NAMED
        assert a.imported_name == "A"
        assert a.module_specifier == "./types"

        c = definition.find_import("C")
        assert c.imported_name == "B"
        assert definition.find_import("B") is None

    def test_type_only_imports(self):
        """Test that `import type` binds like a regular import."""
        definition = parse_source("import type { User } from '@app/users';\n")
        assert definition.find_import("User").module_specifier == "@app/users"

    def test_namespace_and_default_imports(self):
        """Test namespace and default imports."""
        definition = parse_source("import * as events from './events';\nimport Big from 'big.js';\n")

        events = definition.find_import("events")
        assert events.kind == ImportKind.NAMESPACE
        assert events.imported_name is None

        big = definition.find_import("Big")
        assert big.kind == ImportKind.DEFAULT
        assert big.module_specifier == "big.js"

    def test_side_effect_import_binds_nothing(self):
        """Test that `import 'x'` adds no binding."""
        definition = parse_source("import 'reflect-metadata';\n")
        assert definition.imports == []

    def test_first_binding_wins(self):
        """Test that the first import of a name is used."""
        definition = parse_source("import { A } from './one';\nimport { A } from './two';\n")
        assert definition.find_import("A").module_specifier == "./one"

    def test_parse_definition_file(self):
        """Test parsing a definition file from disk."""
        definition = parse_definition(TEST_DATA_DIR / "services" / "users.service.ts")

        assert definition.path.endswith("users.service.ts")
        assert not definition.root.has_error
        assert definition.find_import("Params").imported_name == "ListParams"
        assert definition.find_import("events").kind == ImportKind.NAMESPACE


class TestConvertType:
    """Tests for the conversion of type syntax."""

    def test_type_reference(self):
        """Test a plain and a generic type reference."""
        _, node = parse_alias_type("Promise<User>")
        assert isinstance(node, TypeReference)
        assert node.name == "Promise"
        assert isinstance(node.type_arguments[0], TypeReference)
        assert node.type_arguments[0].name == "User"

    def test_qualified_reference(self):
        """Test a qualified name keeps its segments."""
        _, node = parse_alias_type("events.NotifyParams")
        assert isinstance(node, TypeReference)
        assert node.segments == ["events", "NotifyParams"]
        assert node.leading_name == "events"

    def test_keyword_and_literal(self):
        """Test predefined and literal types."""
        _, keyword = parse_alias_type("never")
        assert isinstance(keyword, KeywordType)
        assert keyword.keyword == "never"

        _, literal = parse_alias_type("'tenantId'")
        assert isinstance(literal, LiteralType)
        assert literal.text == "'tenantId'"

    def test_array_lookup_and_keyof(self):
        """Test array, indexed access and keyof types."""
        _, array = parse_alias_type("User[]")
        assert isinstance(array, ArrayType)
        assert array.element_type.name == "User"

        _, lookup = parse_alias_type("User['id']")
        assert isinstance(lookup, IndexedAccessType)
        assert lookup.object_type.name == "User"

        _, keyof = parse_alias_type("keyof User")
        assert isinstance(keyof, TypeOperator)
        assert keyof.type.name == "User"

    def test_conditional(self):
        """Test a conditional type."""
        _, node = parse_alias_type("T extends string ? A : B")
        assert isinstance(node, ConditionalType)
        assert node.check_type.name == "T"
        assert node.extends_type.keyword == "string"
        assert node.true_type.name == "A"
        assert node.false_type.name == "B"

    def test_composite_keeps_text_and_nested_references(self):
        """Test that unsupported syntax keeps its text with convertible references inside."""
        _, node = parse_alias_type("{ user: User; tags: Array<Tag> } | null")
        assert isinstance(node, CompositeType)

        names = {n.name for n in walk(node) if isinstance(n, TypeReference)}
        assert {"User", "Array", "Tag"} <= names

        serializer = TypeScriptSerializer()
        assert serializer.serialize_type(node) == "{ user: User; tags: Array<Tag> } | null"

    def test_type_parameters(self):
        """Test type parameters with constraint and default."""
        definition = parse_source("function f<K extends keyof User, T = string>() {}\n")
        function = definition.root.children[0]
        params = convert_type_parameters(definition, function.child_by_field_name("type_parameters"))

        assert [p.name for p in params] == ["K", "T"]
        assert isinstance(params[0].constraint, TypeOperator)
        assert params[0].default is None
        assert params[1].default.keyword == "string"

    def test_no_type_parameters(self):
        """Test that a missing type parameter list converts to None."""
        assert convert_type_parameters(parse_source(""), None) is None


class TestParseErrors:
    """Tests for files with syntax errors."""

    def test_broken_file_still_parses(self):
        """Test that a broken file still yields a tree."""
        definition = parse_source("import { A } from './a';\nconst x = {{;\n")
        assert definition.tree is not None
        assert definition.root.has_error

    def test_named_children_skip_comments(self):
        """Test that comments are not returned as named children."""
        definition = parse_source("const x = [/* first */ 1, 2];\n")
        array = definition.root.children[0].children[1].child_by_field_name("value")
        assert [c.type for c in named_children(array)] == ["number", "number"]
