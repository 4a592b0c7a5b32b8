"""
Database mixin builtin.

Services using the database mixin of @treatwell/moleculer-essentials get
their CRUD actions (find, get, list, create...) from the mixin, so those
actions have no typed handler in the service file. The entity and tenant
types are read from the mixin call instead:

    mixins: [DatabaseMethodsMixin<User, 'tenantId'>()]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tree_sitter import Node

from ..context import ActionRecord, CallWrapperContext
from ..descriptors import ServiceDescriptor, action_namespace
from ..resolver.import_resolver import fill_imports
from ..ts_ast.nodes import KeywordType, TypeNode, TypeReference
from ..ts_ast.parser import DefinitionFile, convert_type, named_children

logger = logging.getLogger(__name__)

DATABASE_MIXIN_MODULE = "@treatwell/moleculer-essentials/mixins/database"
DATABASE_MIXIN_FUNCTION = "DatabaseMethodsMixin"
DATABASE_MIXIN_MARKER_METHOD = "_getDatabaseMixinCollection"

# Action suffix -> (params template, takes the tenant type argument)
PARAMS_TEMPLATES: dict[str, tuple[str, bool]] = {
    "find": ("DatabaseActionFindParams", True),
    "findStream": ("DatabaseActionFindParams", True),
    "getInternal": ("DatabaseActionGetInternalParams", True),
    "get": ("DatabaseActionGetParams", True),
    "countInternal": ("DatabaseActionCountInternalParams", True),
    "count": ("DatabaseActionCountParams", True),
    "list": ("DatabaseActionListParams", True),
    "create": ("DatabaseActionCreateParams", False),
    "update": ("DatabaseActionUpdateParams", True),
    "remove": ("DatabaseActionRemoveParams", True),
}

# Action suffix -> result template, parameterized by the entity type
RESULT_TEMPLATES: dict[str, str] = {
    "find": "DatabaseActionFindResult",
    "list": "DatabaseActionListResult",
    "create": "DatabaseActionEntityResult",
    "update": "DatabaseActionEntityResult",
    "remove": "DatabaseActionEntityResult",
    "getInternal": "DatabaseActionEntityResult",
    "get": "DatabaseActionEntityResult",
}

COUNT_ACTIONS = {"count", "countInternal"}
STREAM_ACTION = "findStream"


@dataclass
class DatabaseMixinTypes:
    """Type arguments of the database mixin call."""

    entity_type: TypeNode
    tenant_field: TypeNode | None = None

    @property
    def type_arguments(self) -> list[TypeNode]:
        return [self.entity_type, self.tenant_field] if self.tenant_field else [self.entity_type]


def inject_database_mixin_builtins(
    context: CallWrapperContext,
    actions: list[ActionRecord],
    service: ServiceDescriptor,
    definition: DefinitionFile,
) -> None:
    """Fill the unset params and return types of the database mixin actions."""
    if not uses_database_mixin(service):
        return

    types = find_database_mixin_types(context, definition)
    if types is None:
        return

    namespace = action_namespace(service)
    db_actions = [
        a
        for a in actions
        if a.id and a.id.startswith(namespace) and a.id[len(namespace) :] in PARAMS_TEMPLATES and (a.params is None or a.return_type is None)
    ]
    if not db_actions:
        return

    import_name = context.imports.register(DATABASE_MIXIN_MODULE)

    for action in db_actions:
        action_name = action.id[len(namespace) :]
        action.fill_missing(
            params=database_params_type(import_name, action_name, types),
            return_type=database_return_type(context, import_name, action_name, types),
        )


def uses_database_mixin(service: ServiceDescriptor) -> bool:
    return any(DATABASE_MIXIN_MARKER_METHOD in m.methods or m.name == DATABASE_MIXIN_FUNCTION for m in service.mixins)


def database_params_type(import_name: str, action_name: str, types: DatabaseMixinTypes) -> TypeNode | None:
    template = PARAMS_TEMPLATES.get(action_name)
    if template is None:
        return None
    name, with_tenant = template
    arguments = types.type_arguments if with_tenant else [types.entity_type]
    return TypeReference(name=f"{import_name}.{name}", type_arguments=arguments)


def database_return_type(context: CallWrapperContext, import_name: str, action_name: str, types: DatabaseMixinTypes) -> TypeNode | None:
    if action_name == STREAM_ACTION:
        stream_import_name = context.imports.register("stream")
        return TypeReference(name=f"{stream_import_name}.Readable")
    if action_name in COUNT_ACTIONS:
        return KeywordType(keyword="number")
    template = RESULT_TEMPLATES.get(action_name)
    if template is None:
        return None
    return TypeReference(name=f"{import_name}.{template}", type_arguments=[types.entity_type])


def find_database_mixin_types(context: CallWrapperContext, definition: DefinitionFile) -> DatabaseMixinTypes | None:
    """Read the type arguments of the last DatabaseMethodsMixin<...>() call of the file."""
    result: DatabaseMixinTypes | None = None

    def visit(node: Node) -> None:
        nonlocal result
        if node.type != "call_expression" or _function_name(definition, node) != DATABASE_MIXIN_FUNCTION:
            for child in node.children:
                visit(child)
            return
        arguments = node.child_by_field_name("type_arguments")
        if arguments is None or not named_children(arguments):
            return
        type_arguments = [convert_type(definition, a) for a in named_children(arguments)]
        result = DatabaseMixinTypes(
            entity_type=type_arguments[0],
            tenant_field=type_arguments[1] if len(type_arguments) > 1 else None,
        )

    visit(definition.root)

    if result is not None:
        fill_imports(context, definition, result.entity_type)
        fill_imports(context, definition, result.tenant_field)
    else:
        logger.debug("No %s call in %s", DATABASE_MIXIN_FUNCTION, definition.path)
    return result


def _function_name(definition: DefinitionFile, node: Node) -> str | None:
    function = node.child_by_field_name("function")
    return definition.text(function) if function is not None else None
