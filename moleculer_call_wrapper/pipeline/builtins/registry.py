"""
Builtin registry.

Builtins are extensions that complete the action records of a service
from knowledge the handler signatures do not carry, typically actions
contributed by mixins. They run in order, once per service, and may only
fill fields that are still unset: the first writer of a field wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..context import ActionRecord, CallWrapperContext, HandlerTypes, InjectBuiltinFn

if TYPE_CHECKING:
    from ..descriptors import ServiceDescriptor
    from ..ts_ast.parser import DefinitionFile

logger = logging.getLogger(__name__)

_TYPE_FIELDS = ("params", "return_type", "type_parameters")


class BuiltinRegistry:
    """Ordered chain of builtin extensions."""

    def __init__(self, builtins: Iterable[InjectBuiltinFn] = ()):
        self._builtins: list[InjectBuiltinFn] = list(builtins)

    def register(self, builtin: InjectBuiltinFn) -> None:
        """Append a builtin at the end of the chain."""
        self._builtins.append(builtin)

    @property
    def builtins(self) -> list[InjectBuiltinFn]:
        return list(self._builtins)

    def apply(
        self,
        context: CallWrapperContext,
        actions: list[ActionRecord],
        service: ServiceDescriptor,
        definition: DefinitionFile,
    ) -> None:
        """
        Run every builtin on the records of one service.

        Fields that were set before a builtin ran are restored afterwards if
        the builtin changed them.

        Args:
            context: Run context
            actions: Action records of the service, updated in place
            service: The service descriptor
            definition: The parsed definition file of the service
        """
        for builtin in self._builtins:
            authored = [(action, self._snapshot(action)) for action in actions]
            builtin(context, actions, service, definition)
            for action, snapshot in authored:
                self._restore(builtin, action, snapshot)

    @staticmethod
    def _snapshot(action: ActionRecord) -> HandlerTypes:
        return HandlerTypes(
            params=action.params,
            return_type=action.return_type,
            type_parameters=action.type_parameters,
        )

    @staticmethod
    def _restore(builtin: InjectBuiltinFn, action: ActionRecord, snapshot: HandlerTypes) -> None:
        for name in _TYPE_FIELDS:
            before = getattr(snapshot, name)
            if before is not None and getattr(action, name) is not before:
                logger.warning(
                    "Builtin %s tried to overwrite %s of %s, keeping the authored type",
                    getattr(builtin, "__name__", builtin),
                    name,
                    action.id,
                )
                setattr(action, name, before)
