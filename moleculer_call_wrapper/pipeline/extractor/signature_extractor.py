"""
Signature extractor for action handlers.

Finds the handler methods of a service definition and reads their
parameter, return and type parameter declarations:

    actions: {
        get: {
            async handler(ctx: Context<GetParams>): Promise<User> { ... }
        }
    }

gives the action "get" the params type GetParams and the return type
Promise<User>.
"""

from __future__ import annotations

import logging

from tree_sitter import Node

from ..builtins.registry import BuiltinRegistry
from ..context import ActionRecord, CallWrapperContext, HandlerTypes
from ..descriptors import ServiceDescriptor, action_id
from ..resolver.import_resolver import ImportResolver
from ..ts_ast.nodes import KeywordType, TypeReference
from ..ts_ast.parser import DefinitionFile, convert_type, convert_type_parameters, named_children, string_value

logger = logging.getLogger(__name__)

HANDLER_NAME = "handler"
ACTIONS_PROPERTY = "actions"


class SignatureExtractor:
    """Extracts action handler signatures from a definition file."""

    def extract(self, definition: DefinitionFile) -> dict[str, HandlerTypes]:
        """
        Map each action name to the types of its handler.

        Args:
            definition: The parsed service definition file

        Returns:
            Handler types by action name, in source order
        """
        handlers: dict[str, HandlerTypes] = {}
        self._visit(definition, definition.root, handlers)
        return handlers

    def _visit(self, definition: DefinitionFile, node: Node, handlers: dict[str, HandlerTypes]) -> None:
        action_name = self._match_handler(definition, node)
        if action_name is None:
            for child in node.children:
                self._visit(definition, child, handlers)
            return

        handlers[action_name] = self._handler_types(definition, node)

    def _match_handler(self, definition: DefinitionFile, node: Node) -> str | None:
        """Action name when node is a handler(ctx) method of an action, else None."""
        if node.type != "method_definition":
            return None

        name = node.child_by_field_name("name")
        if name is None or definition.text(name) != HANDLER_NAME:
            return None

        parameters = node.child_by_field_name("parameters")
        if parameters is None or len(named_children(parameters)) != 1:
            return None

        # method -> action object -> pair "<action name>: { ... }"
        action_object = node.parent
        action_pair = action_object.parent if action_object is not None else None
        if action_object is None or action_object.type != "object" or action_pair is None or action_pair.type != "pair":
            return None
        if not self._is_actions_object(definition, action_pair.parent):
            return None

        ctx_type = self._parameter_type(named_children(parameters)[0])
        if ctx_type is None or named_children(ctx_type)[0].type not in ("generic_type", "type_identifier", "nested_type_identifier"):
            return None

        return self._property_name(definition, action_pair.child_by_field_name("key"))

    def _handler_types(self, definition: DefinitionFile, node: Node) -> HandlerTypes:
        parameters = node.child_by_field_name("parameters")
        ctx_type = convert_type(definition, self._parameter_type(named_children(parameters)[0]))

        params = None
        if isinstance(ctx_type, TypeReference) and ctx_type.type_arguments:
            first = ctx_type.type_arguments[0]
            if not (isinstance(first, KeywordType) and first.keyword == "never"):
                params = first

        return_type = node.child_by_field_name("return_type")
        return HandlerTypes(
            params=params,
            return_type=convert_type(definition, return_type) if return_type is not None and return_type.type == "type_annotation" else None,
            type_parameters=convert_type_parameters(definition, node.child_by_field_name("type_parameters")),
        )

    @staticmethod
    def _parameter_type(parameter: Node) -> Node | None:
        return parameter.child_by_field_name("type")

    def _is_actions_object(self, definition: DefinitionFile, node: Node | None) -> bool:
        """Whether node is the object literal of an actions property or variable."""
        if node is None or node.type != "object":
            return False
        owner = node.parent
        # actions: { ... } as ServiceActionsSchema
        while owner is not None and owner.type in ("as_expression", "satisfies_expression", "parenthesized_expression"):
            owner = owner.parent
        if owner is None:
            return False
        if owner.type == "pair":
            return self._property_name(definition, owner.child_by_field_name("key")) == ACTIONS_PROPERTY
        if owner.type == "variable_declarator":
            name = owner.child_by_field_name("name")
            return name is not None and definition.text(name) == ACTIONS_PROPERTY
        return False

    @staticmethod
    def _property_name(definition: DefinitionFile, key: Node | None) -> str | None:
        if key is None:
            return None
        if key.type == "string":
            return string_value(definition, key)
        if key.type == "computed_property_name":
            return None
        return definition.text(key)


def extract_service_actions(
    context: CallWrapperContext,
    service: ServiceDescriptor,
    definition: DefinitionFile,
    extractor: SignatureExtractor | None = None,
    resolver: ImportResolver | None = None,
    registry: BuiltinRegistry | None = None,
) -> list[ActionRecord]:
    """
    Build the action records of one service.

    Disabled and private actions are skipped. Actions without a typed handler
    keep unset fields, which builtins may fill afterwards.

    Args:
        context: Run context; current_file_path must point at definition
        service: The service descriptor
        definition: The parsed definition file of the service
        extractor: Signature extractor, a default one when None
        resolver: Import resolver, a default one when None
        registry: Builtins to run on the records, none when None

    Returns:
        Action records of the service, in descriptor order
    """
    extractor = extractor or SignatureExtractor()
    resolver = resolver or ImportResolver()
    handlers = extractor.extract(definition)

    actions: list[ActionRecord] = []
    for action_name in service.exposed_actions():
        types = handlers.get(action_name) or HandlerTypes()

        for type_parameter in types.type_parameters or []:
            resolver.resolve(context, definition, type_parameter)
        resolver.resolve(context, definition, types.return_type)
        resolver.resolve(context, definition, types.params)

        actions.append(
            ActionRecord(
                id=action_id(service, action_name),
                params=types.params,
                return_type=types.return_type,
                type_parameters=types.type_parameters,
            )
        )

    skipped = len(service.actions) - len(actions)
    logger.debug("Service %s: %d actions, %d disabled or private", service.name, len(actions), skipped)

    if registry is not None:
        registry.apply(context, actions, service, definition)

    return actions
