"""
Exceptions raised by the call wrapper pipeline.

The generation itself degrades missing type information to unset fields
and never raises; errors only come from its inputs and outputs.
"""

from __future__ import annotations


class CallWrapperError(Exception):
    """Base class for call wrapper generation errors."""

    pass


class ManifestError(CallWrapperError):
    """Raised when a manifest cannot be loaded.

    This can happen when:
    - The manifest file is not valid JSON
    - A service entry has no definition file
    - A builtin path does not point to an importable callable
    """

    pass


class WrapperValidationError(CallWrapperError):
    """Raised when the generated wrapper fails the syntax check before writing."""

    pass
