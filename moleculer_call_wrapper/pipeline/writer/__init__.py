"""
Writer module.

Writes the generated wrapper atomically, and only when it changed.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter

__all__ = ["AtomicWriter"]
