"""
Synthesis of the call wrapper module.
"""

from __future__ import annotations

from .wrapper_synthesizer import DEFAULT_LINT_RULES, WrapperSynthesizer, sorted_import_specifiers

__all__ = [
    "DEFAULT_LINT_RULES",
    "WrapperSynthesizer",
    "sorted_import_specifiers",
]
