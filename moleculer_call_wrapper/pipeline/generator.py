"""
Pipeline generator - orchestrates the call wrapper generation.

Runs the phases in order for one wrapper file: extraction and import
resolution per service, builtins, synthesis of the whole wrapper, then a
conditional write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from .builtins import default_registry
from .config import GeneratorConfig
from .context import ActionRecord, CallWrapperContext, InjectBuiltinFn
from .descriptors import ServiceDescriptor
from .extractor.signature_extractor import SignatureExtractor, extract_service_actions
from .resolver.aliases import MOLECULER_MODULE
from .resolver.import_resolver import ImportResolver
from .synthesizer.wrapper_synthesizer import WrapperSynthesizer
from .ts_ast.parser import parse_definition
from .writer.atomic_writer import AtomicWriter

logger = logging.getLogger(__name__)


class CallWrapperGenerator:
    """
    Call wrapper generator for a set of services.

    Each call to generate() is an independent run: the alias and rewrite
    tables start empty, so the output only depends on the inputs.
    """

    def __init__(
        self,
        wrapper_path: str | Path,
        services: Sequence[ServiceDescriptor],
        definition_paths: Sequence[str | Path],
        additional_builtins: Iterable[InjectBuiltinFn] = (),
        config: GeneratorConfig | None = None,
    ):
        """
        Initialize the generator.

        Args:
            wrapper_path: Path of the wrapper file to write
            services: Descriptors of the services to wrap
            definition_paths: Definition file of each service, in the same order
            additional_builtins: Builtins to run after the default ones
            config: Generator configuration
        """
        if len(services) != len(definition_paths):
            raise ValueError(f"Got {len(services)} services but {len(definition_paths)} definition files")

        self.wrapper_path = Path(wrapper_path)
        self.services = list(services)
        self.definition_paths = [Path(p) for p in definition_paths]
        self.config = config or GeneratorConfig()
        self.registry = default_registry(additional_builtins)

        self.extractor = SignatureExtractor()
        self.resolver = ImportResolver()
        self.synthesizer = WrapperSynthesizer(lint_rules=self.config.lint_rules)
        self.writer = AtomicWriter(atomic=self.config.output.atomic_write)

    def generate(self) -> str:
        """
        Generate the wrapper source code.

        Returns:
            TypeScript source of the wrapper module
        """
        context = CallWrapperContext(wrapper_path=str(self.wrapper_path))
        # moleculer always owns its reserved alias
        context.imports.register(MOLECULER_MODULE)

        actions: list[ActionRecord] = []
        for service, definition_path in zip(self.services, self.definition_paths):
            definition = parse_definition(definition_path)
            context.current_file_path = str(definition_path)
            actions.extend(
                extract_service_actions(
                    context,
                    service,
                    definition,
                    extractor=self.extractor,
                    resolver=self.resolver,
                    registry=self.registry,
                )
            )

        logger.debug("Extracted %d actions from %d services", len(actions), len(self.services))
        return self.synthesizer.synthesize(actions, context.imports, context.rewrites)

    def is_up_to_date(self) -> bool:
        """Whether the wrapper file already holds the generated content."""
        return self.writer.read(self.wrapper_path) == self.generate()

    def write(self) -> bool:
        """
        Generate the wrapper and write it if it changed.

        Returns:
            True if the wrapper file was written
        """
        current = self.writer.read(self.wrapper_path)
        content = self.generate()
        return self.writer.write_if_changed(
            self.wrapper_path,
            content,
            current=current,
            validate=self.config.output.validate_before_write,
        )


def create_wrapper_call(
    wrapper_path: str | Path,
    services: Sequence[ServiceDescriptor],
    definition_paths: Sequence[str | Path],
    additional_builtins: Iterable[InjectBuiltinFn] = (),
    config: GeneratorConfig | None = None,
) -> bool:
    """
    Generate the call wrapper of services and write it when it changed.

    Args:
        wrapper_path: Path of the wrapper file to write
        services: Descriptors of the services to wrap
        definition_paths: Definition file of each service, in the same order
        additional_builtins: Builtins to run after the default ones
        config: Generator configuration

    Returns:
        True if the wrapper file was written
    """
    return CallWrapperGenerator(wrapper_path, services, definition_paths, additional_builtins, config).write()
