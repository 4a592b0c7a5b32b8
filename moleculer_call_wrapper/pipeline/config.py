"""
Configuration for the call wrapper generator, and manifest loading.

A manifest is a JSON file listing the services to wrap and where to write
the wrapper. Paths in a manifest are relative to the manifest file.
"""

from __future__ import annotations

import importlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .context import InjectBuiltinFn
from .descriptors import ServiceDescriptor
from .errors import ManifestError
from .extractor.discovery import discover_service
from .synthesizer.wrapper_synthesizer import DEFAULT_LINT_RULES
from .ts_ast.parser import parse_definition

logger = logging.getLogger(__name__)


@dataclass
class OutputConfig:
    """Configuration for writing the wrapper file.

    Attributes:
        atomic_write: Whether to use atomic file writes
        validate_before_write: Whether to check the wrapper parses before writing
    """

    atomic_write: bool = True
    validate_before_write: bool = False


@dataclass
class GeneratorConfig:
    """Configuration options for wrapper generation."""

    # Rules disabled by the lint directive heading the wrapper
    lint_rules: list[str] = field(default_factory=lambda: list(DEFAULT_LINT_RULES))

    # Output file configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                config.output = OutputConfig(
                    atomic_write=v.get("atomic_write", True),
                    validate_before_write=v.get("validate_before_write", False),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "lint_rules": self.lint_rules,
            "output": {
                "atomic_write": self.output.atomic_write,
                "validate_before_write": self.output.validate_before_write,
            },
        }


@dataclass
class Manifest:
    """A loaded manifest, with absolute paths."""

    output: Path
    services: list[ServiceDescriptor] = field(default_factory=list)
    definition_paths: list[Path] = field(default_factory=list)
    builtins: list[InjectBuiltinFn] = field(default_factory=list)
    config: GeneratorConfig = field(default_factory=GeneratorConfig)


def load_manifest(path: str | Path) -> Manifest:
    """
    Load a manifest file.

    Service entries without a name or actions are completed from the service
    object literal of their definition file; keys given in the entry win.

    Args:
        path: Path to the manifest JSON file

    Returns:
        The loaded manifest

    Raises:
        ManifestError: If the manifest cannot be read or is malformed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must contain a JSON object")
    if "output" not in data:
        raise ManifestError(f"Manifest {path} has no output path")

    base = path.parent.resolve()
    config_dict = {"output": data["output_options"]} if "output_options" in data else {}
    if "lint_rules" in data:
        config_dict["lint_rules"] = list(data["lint_rules"])

    manifest = Manifest(
        output=base / data["output"],
        builtins=[load_builtin(b) for b in data.get("builtins", [])],
        config=GeneratorConfig.from_dict(config_dict),
    )

    for i, entry in enumerate(data.get("services", [])):
        if not isinstance(entry, dict) or "file" not in entry:
            raise ManifestError(f"Service entry {i} of manifest {path} has no definition file")
        definition_path = base / entry["file"]
        manifest.services.append(_service_descriptor(entry, definition_path))
        manifest.definition_paths.append(definition_path)

    logger.debug("Loaded manifest %s with %d services", path, len(manifest.services))
    return manifest


def _service_descriptor(entry: dict, definition_path: Path) -> ServiceDescriptor:
    if "name" in entry and "actions" in entry:
        return ServiceDescriptor.from_dict(entry)

    try:
        discovered = discover_service(parse_definition(definition_path))
    except OSError as e:
        raise ManifestError(f"Cannot read service definition {definition_path}: {e}") from e
    if discovered is None:
        raise ManifestError(f"No service schema found in {definition_path}, give its name and actions in the manifest")

    service = ServiceDescriptor.from_dict(entry)
    service.name = service.name or discovered.name
    if "version" not in entry:
        service.version = discovered.version
    if "actions" not in entry:
        service.actions = discovered.actions
    if "mixins" not in entry:
        service.mixins = discovered.mixins
    return service


def load_builtin(path: str) -> InjectBuiltinFn:
    """
    Import a builtin from a "package.module:function" path.

    Raises:
        ManifestError: If the path does not point to a callable
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ManifestError(f"Invalid builtin path {path!r}, expected 'module:function'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ManifestError(f"Cannot import builtin module {module_name!r}: {e}") from e

    builtin = getattr(module, attribute, None)
    if not callable(builtin):
        raise ManifestError(f"Builtin {path!r} is not a callable")
    return builtin
