"""Moleculer Call Wrapper Generator

A Python package generating a typed TypeScript module to call the actions
of Moleculer services, from the handler signatures of their definition
files.
"""

__version__ = "1.0.0"

from .pipeline import (
    ActionRecord,
    AtomicWriter,
    CallWrapperContext,
    CallWrapperError,
    CallWrapperGenerator,
    GeneratorConfig,
    OutputConfig,
    ServiceDescriptor,
    create_wrapper_call,
    load_manifest,
)

__all__ = [
    "CallWrapperGenerator",
    "create_wrapper_call",
    "GeneratorConfig",
    "OutputConfig",
    "ServiceDescriptor",
    "ActionRecord",
    "CallWrapperContext",
    "CallWrapperError",
    "AtomicWriter",
    "load_manifest",
]
