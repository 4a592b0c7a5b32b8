"""
Service descriptor discovery.

Reads the static parts of a service schema straight from its definition
file, for manifests that only list the file:

    const UsersService: ServiceSchema = {
        name: 'users',
        version: 2,
        mixins: [DatabaseMethodsMixin<User>()],
        actions: {
            get: { handler(ctx: Context<GetParams>) { ... } },
            secret: false,
            purge: { visibility: 'private', handler() { ... } },
        },
    };
"""

from __future__ import annotations

import logging

from tree_sitter import Node

from ..descriptors import ActionSchema, MixinDescriptor, ServiceDescriptor
from ..ts_ast.parser import DefinitionFile, named_children, string_value

logger = logging.getLogger(__name__)

SCHEMA_KEYS = {"actions", "mixins", "version"}


def discover_service(definition: DefinitionFile) -> ServiceDescriptor | None:
    """
    Build a descriptor from the service schema object of a definition file.

    The schema is the first object literal with a string `name` property
    next to `actions`, `mixins` or `version`.

    Args:
        definition: The parsed service definition file

    Returns:
        The discovered descriptor, or None when no schema object is found
    """
    schema = _find_schema_object(definition, definition.root)
    if schema is None:
        logger.debug("No service schema found in %s", definition.path)
        return None

    properties = _properties(definition, schema)
    service = ServiceDescriptor(name=string_value(definition, properties["name"]))

    version = properties.get("version")
    if version is not None:
        service.version = _version_value(definition, version)

    actions = _unwrap(properties.get("actions"))
    if actions is not None and actions.type == "object":
        service.actions = _discover_actions(definition, actions)

    mixins = _unwrap(properties.get("mixins"))
    if mixins is not None and mixins.type == "array":
        service.mixins = [MixinDescriptor(name=name) for name in _mixin_names(definition, mixins)]

    logger.debug("Discovered service %s with %d actions in %s", service.name, len(service.actions), definition.path)
    return service


def _find_schema_object(definition: DefinitionFile, node: Node) -> Node | None:
    if node.type == "object":
        properties = _properties(definition, node)
        name = properties.get("name")
        if name is not None and name.type == "string" and SCHEMA_KEYS & properties.keys():
            return node
    for child in node.children:
        found = _find_schema_object(definition, child)
        if found is not None:
            return found
    return None


def _properties(definition: DefinitionFile, node: Node) -> dict[str, Node]:
    """Value nodes of the pairs of an object literal, by key."""
    properties: dict[str, Node] = {}
    for child in named_children(node):
        if child.type == "pair":
            key = child.child_by_field_name("key")
            name = string_value(definition, key) if key.type == "string" else definition.text(key)
            properties.setdefault(name, child.child_by_field_name("value"))
        elif child.type == "method_definition":
            properties.setdefault(definition.text(child.child_by_field_name("name")), child)
    return properties


def _unwrap(node: Node | None) -> Node | None:
    """Strip `as` / `satisfies` casts and parentheses around a value."""
    while node is not None and node.type in ("as_expression", "satisfies_expression", "parenthesized_expression"):
        node = named_children(node)[0]
    return node


def _version_value(definition: DefinitionFile, node: Node) -> int | str:
    if node.type == "number":
        text = definition.text(node)
        return int(text) if text.isdigit() else text
    if node.type == "string":
        return string_value(definition, node)
    return definition.text(node)


def _discover_actions(definition: DefinitionFile, node: Node) -> dict[str, ActionSchema | bool]:
    actions: dict[str, ActionSchema | bool] = {}
    for name, value in _properties(definition, node).items():
        value = _unwrap(value)
        if value.type == "false":
            actions[name] = False
        elif value.type == "object":
            visibility = _properties(definition, value).get("visibility")
            actions[name] = ActionSchema(
                visibility=string_value(definition, visibility) if visibility is not None and visibility.type == "string" else None
            )
        else:
            actions[name] = ActionSchema()
    return actions


def _mixin_names(definition: DefinitionFile, node: Node) -> list[str]:
    names = []
    for element in named_children(node):
        element = _unwrap(element)
        if element.type == "call_expression":
            element = element.child_by_field_name("function")
        names.append(definition.text(element))
    return names
