"""
Call wrapper synthesizer.

Turns the action records of all services into the wrapper module:

- Actions without own type parameters become entries of two lookup
  interfaces, Actions (with params) and ActionsU (without), served by two
  generic `call` overloads keyed on the interfaces.
- Generic actions without params get their own `call` overload.
- Generic actions with params get a `callT` overload whose params only
  apply when the action name is exactly the action id.

Every overload group ends with one loosely typed implementation that
forwards to ctx.call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from ..context import ActionRecord, RewriteTable
from ..resolver.aliases import MOLECULER_ALIAS, MOLECULER_MODULE, AliasTable
from ..ts_ast.nodes import (
    ConditionalType,
    FunctionDeclaration,
    ImportDeclaration,
    IndexedAccessType,
    InterfaceDeclaration,
    KeywordType,
    LiteralType,
    Parameter,
    PropertySignature,
    ReferenceHook,
    TupleType,
    TypeNode,
    TypeOperator,
    TypeParameter,
    TypeReference,
    WrapperFile,
    clone_type,
    clone_type_parameter,
)
from ..ts_ast.serializer import TypeScriptSerializer

logger = logging.getLogger(__name__)

PARAMS_ACTIONS = "Actions"
NO_PARAMS_ACTIONS = "ActionsU"

CALL_FUNCTION = "call"
GENERIC_CALL_FUNCTION = "callT"

DEFERRED_TYPE = "Promise"
ACTION_TYPE_PARAMETER = "N"

DEFAULT_LINT_RULES = [
    "@typescript-eslint/no-explicit-any",
    "@typescript-eslint/no-unused-vars",
]

DISPATCH_BODY = ["return ctx.call(action, params, meta);"]


def sorted_import_specifiers(specifiers: Iterable[str]) -> list[str]:
    """Scoped packages first, then other packages, then relative paths; each alphabetical."""
    ordered = sorted(specifiers)
    return [
        *(s for s in ordered if s.startswith("@")),
        *(s for s in ordered if not s.startswith((".", "@"))),
        *(s for s in ordered if s.startswith(".")),
    ]


def action_sort_key(action: ActionRecord) -> tuple[str, str]:
    """Case-insensitive order of action ids, ties broken by code point."""
    action_id = action.id or ""
    return action_id.casefold(), action_id


def rewrite_hook(rewrites: RewriteTable) -> ReferenceHook:
    """Clone hook substituting the qualified names recorded by the import resolver."""
    return rewrites.get


def is_deferred(node: TypeNode | None) -> bool:
    return isinstance(node, TypeReference) and node.name == DEFERRED_TYPE


def find_unused_template_name(action: ActionRecord) -> str:
    """First name made of 'N's that is not one of the action's type parameters."""
    type_names = {t.name for t in action.type_parameters or []}

    template_name = ACTION_TYPE_PARAMETER
    while template_name in type_names:
        template_name += ACTION_TYPE_PARAMETER
    return template_name


class WrapperSynthesizer:
    """Builds the call wrapper module from action records."""

    def __init__(self, lint_rules: list[str] | None = None, serializer: TypeScriptSerializer | None = None):
        self.lint_rules = list(DEFAULT_LINT_RULES if lint_rules is None else lint_rules)
        self.serializer = serializer or TypeScriptSerializer()
        self.moleculer = MOLECULER_ALIAS

    def synthesize(self, actions: list[ActionRecord], imports: AliasTable, rewrites: RewriteTable) -> str:
        """
        Generate the wrapper source code.

        Args:
            actions: Action records of all services
            imports: Alias table filled by the import resolver
            rewrites: Rewrite table filled by the import resolver

        Returns:
            TypeScript source of the wrapper module
        """
        return self.serializer.serialize(self.build(actions, imports, rewrites))

    def build(self, actions: list[ActionRecord], imports: AliasTable, rewrites: RewriteTable) -> WrapperFile:
        """Generate the wrapper AST."""
        self.moleculer = imports.register(MOLECULER_MODULE)
        hook = rewrite_hook(rewrites)

        file = WrapperFile(lint_rules=self.lint_rules)
        for specifier in sorted_import_specifiers(imports):
            file.imports.append(ImportDeclaration(alias=imports.get(specifier), module_specifier=specifier))

        params_actions = InterfaceDeclaration(name=PARAMS_ACTIONS)
        no_params_actions = InterfaceDeclaration(name=NO_PARAMS_ACTIONS)
        file.interfaces = [params_actions, no_params_actions]

        for action in sorted(actions, key=action_sort_key):
            if action.type_parameters:
                # Own type parameters cannot live in a lookup interface
                if action.params is not None:
                    generic_action, template_name = self._with_action_type_parameter(action)
                    file.generic_call_overloads.append(self._overload(generic_action, hook, GENERIC_CALL_FUNCTION, template_name))
                else:
                    file.call_overloads.append(self._overload(action, hook, CALL_FUNCTION))
            elif action.params is not None:
                params_actions.members.append(
                    PropertySignature(
                        name=action.id or "",
                        type=TupleType(elements=[clone_type(action.params, hook), self._unwrap_return_type(action, hook)]),
                    )
                )
            else:
                no_params_actions.members.append(PropertySignature(name=action.id or "", type=self._unwrap_return_type(action, hook)))

        logger.debug(
            "Synthesized %d lookup entries, %d %s overloads, %d %s overloads",
            len(params_actions.members) + len(no_params_actions.members),
            len(file.call_overloads),
            CALL_FUNCTION,
            len(file.generic_call_overloads),
            GENERIC_CALL_FUNCTION,
        )

        # First generic overload, for standard actions with params and returnType
        file.call_overloads.append(
            self._overload(
                ActionRecord(
                    type_parameters=[self._keyof_type_parameter(PARAMS_ACTIONS)],
                    params=self._lookup(PARAMS_ACTIONS, 0),
                    return_type=self._lookup(PARAMS_ACTIONS, 1),
                ),
                hook,
                CALL_FUNCTION,
                ACTION_TYPE_PARAMETER,
            )
        )
        # Second generic overload, for actions without params
        file.call_overloads.append(
            self._overload(
                ActionRecord(
                    type_parameters=[self._keyof_type_parameter(NO_PARAMS_ACTIONS)],
                    return_type=self._lookup(NO_PARAMS_ACTIONS),
                ),
                hook,
                CALL_FUNCTION,
                ACTION_TYPE_PARAMETER,
            )
        )

        file.call_overloads.append(self._implementation(hook, CALL_FUNCTION))
        file.generic_call_overloads.append(self._implementation(hook, GENERIC_CALL_FUNCTION))
        return file

    def _with_action_type_parameter(self, action: ActionRecord) -> tuple[ActionRecord, str]:
        """Copy of a generic action whose params only apply to its own id.

        Adds `N extends string = '<id>'` and turns params into
        `N extends '<id>' ? Params : never`.
        """
        template_name = find_unused_template_name(action)
        action_literal = LiteralType.string(action.id or "")
        generic_action = replace(
            action,
            params=ConditionalType(
                check_type=TypeReference(name=template_name),
                extends_type=action_literal,
                true_type=action.params,
                false_type=KeywordType(keyword="never"),
            ),
            type_parameters=[
                *(action.type_parameters or []),
                TypeParameter(
                    name=template_name,
                    constraint=KeywordType(keyword="string"),
                    default=LiteralType.string(action.id or ""),
                ),
            ],
        )
        return generic_action, template_name

    def _overload(
        self,
        action: ActionRecord,
        hook: ReferenceHook,
        name: str,
        action_type_name: str | None = None,
        body: list[str] | None = None,
    ) -> FunctionDeclaration:
        return FunctionDeclaration(
            name=name,
            type_parameters=[clone_type_parameter(t, hook) for t in action.type_parameters or []],
            parameters=self._parameters(action, hook, action_type_name),
            return_type=self._return_type(action, hook),
            body=body,
        )

    def _implementation(self, hook: ReferenceHook, name: str) -> FunctionDeclaration:
        """Loosely typed overload carrying the actual dispatch."""
        return self._overload(
            ActionRecord(params=KeywordType(keyword="unknown"), return_type=KeywordType(keyword="unknown")),
            hook,
            name,
            body=list(DISPATCH_BODY),
        )

    def _parameters(self, action: ActionRecord, hook: ReferenceHook, action_type_name: str | None) -> list[Parameter]:
        # 3 cases:
        #  - A generic Name (default)
        #  - String literal (if no params)
        #  - string keyword (if no action id)
        action_type: TypeNode
        if action_type_name:
            action_type = TypeReference(name=action_type_name)
        elif action.id:
            action_type = LiteralType.string(action.id)
        else:
            action_type = KeywordType(keyword="string")

        return [
            Parameter(name="ctx", type=TypeReference(name=f"{self.moleculer}.Context")),
            Parameter(name="action", type=action_type),
            Parameter(
                name="params",
                type=clone_type(action.params, hook) if action.params is not None else KeywordType(keyword="undefined"),
                optional=action.params is None,
            ),
            Parameter(name="meta", type=TypeReference(name=f"{self.moleculer}.CallingOptions"), optional=True),
        ]

    def _return_type(self, action: ActionRecord, hook: ReferenceHook) -> TypeNode:
        """Return type wrapped once in a Promise."""
        if action.return_type is None:
            return TypeReference(name=DEFERRED_TYPE, type_arguments=[KeywordType(keyword="void")])
        if is_deferred(action.return_type):
            return clone_type(action.return_type, hook)
        return TypeReference(name=DEFERRED_TYPE, type_arguments=[clone_type(action.return_type, hook)])

    def _unwrap_return_type(self, action: ActionRecord, hook: ReferenceHook) -> TypeNode:
        """Logical value type, without its Promise."""
        if action.return_type is None:
            return KeywordType(keyword="void")
        if is_deferred(action.return_type) and action.return_type.type_arguments:
            return clone_type(action.return_type.type_arguments[0], hook)
        return clone_type(action.return_type, hook)

    @staticmethod
    def _keyof_type_parameter(interface_name: str) -> TypeParameter:
        return TypeParameter(
            name=ACTION_TYPE_PARAMETER,
            constraint=TypeOperator(operator="keyof", type=TypeReference(name=interface_name)),
        )

    @staticmethod
    def _lookup(interface_name: str, index: int | None = None) -> TypeNode:
        """Interface[N] or Interface[N][index]."""
        entry = IndexedAccessType(
            object_type=TypeReference(name=interface_name),
            index_type=TypeReference(name=ACTION_TYPE_PARAMETER),
        )
        if index is None:
            return entry
        return IndexedAccessType(object_type=entry, index_type=LiteralType.number(index))
