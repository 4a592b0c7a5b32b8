"""
Service descriptors.

Static description of a Moleculer service: its name, optional version,
exposed actions and mixins. Descriptors come from the manifest or from
discovery in the service's definition file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ActionSchema:
    """An enabled action entry."""

    visibility: str | None = None  # "published", "public", "protected" or "private"

    @property
    def is_private(self) -> bool:
        return self.visibility == "private"


@dataclass
class MixinDescriptor:
    """A mixin applied to a service, with the method names it contributes."""

    name: str = ""
    methods: list[str] = field(default_factory=list)


@dataclass
class ServiceDescriptor:
    """Static description of a service's exposed actions and metadata."""

    name: str = ""
    version: int | str | None = None
    # False marks a disabled action
    actions: dict[str, ActionSchema | bool] = field(default_factory=dict)
    mixins: list[MixinDescriptor] = field(default_factory=list)

    def exposed_actions(self) -> list[str]:
        """Names of the actions callable from other services, in declaration order."""
        names = []
        for name, action in self.actions.items():
            if action is False:
                continue
            if isinstance(action, ActionSchema) and action.is_private:
                continue
            names.append(name)
        return names

    @staticmethod
    def from_dict(d: dict[str, Any]) -> ServiceDescriptor:
        """Create a descriptor from a manifest entry."""
        actions: dict[str, ActionSchema | bool] = {}
        for name, action in (d.get("actions") or {}).items():
            if action is False:
                actions[name] = False
            elif isinstance(action, dict):
                actions[name] = ActionSchema(visibility=action.get("visibility"))
            else:
                actions[name] = ActionSchema()

        mixins = [MixinDescriptor(name=m.get("name", ""), methods=list(m.get("methods", []))) for m in d.get("mixins") or []]
        return ServiceDescriptor(
            name=d.get("name", ""),
            version=d.get("version"),
            actions=actions,
            mixins=mixins,
        )


def action_namespace(service: ServiceDescriptor) -> str:
    """Prefix shared by the ids of all actions of a service ("v2.users.")."""
    version = f"v{service.version}." if service.version else ""
    return f"{version}{service.name}."


def action_id(service: ServiceDescriptor, action_name: str) -> str:
    return f"{action_namespace(service)}{action_name}"
