"""
Pipeline - typed Moleculer call wrapper generator.

This module provides a multi-phase architecture for generating one
TypeScript module that calls the actions of Moleculer services with
checked parameter and return types:

1. Phase 1 (Parser): Parse service definition files with tree-sitter
2. Phase 2 (Extractor): Read the action handler signatures
3. Phase 3 (Resolver): Map type references to aliased wrapper imports
4. Phase 4 (Builtins): Complete the actions contributed by mixins
5. Phase 5 (Synthesizer): Build the wrapper AST and serialize it
6. Phase 6 (Writer): Write the wrapper atomically, only when it changed
"""

from __future__ import annotations

from .builtins import BuiltinRegistry, default_registry
from .config import GeneratorConfig, Manifest, OutputConfig, load_builtin, load_manifest
from .context import ActionRecord, CallWrapperContext, HandlerTypes, InjectBuiltinFn, RewriteTable
from .descriptors import ActionSchema, MixinDescriptor, ServiceDescriptor, action_id, action_namespace
from .errors import CallWrapperError, ManifestError, WrapperValidationError
from .generator import CallWrapperGenerator, create_wrapper_call
from .resolver import AliasTable, ImportResolver
from .writer import AtomicWriter

__all__ = [
    "CallWrapperGenerator",
    "create_wrapper_call",
    "GeneratorConfig",
    "OutputConfig",
    "Manifest",
    "load_manifest",
    "load_builtin",
    "ActionRecord",
    "HandlerTypes",
    "CallWrapperContext",
    "InjectBuiltinFn",
    "RewriteTable",
    "AliasTable",
    "ImportResolver",
    "BuiltinRegistry",
    "default_registry",
    "ServiceDescriptor",
    "ActionSchema",
    "MixinDescriptor",
    "action_id",
    "action_namespace",
    "CallWrapperError",
    "ManifestError",
    "WrapperValidationError",
    "AtomicWriter",
]
