"""
Extractor module.

Reads action handler signatures, and optionally the service descriptor
itself, from service definition files.
"""

from __future__ import annotations

from .discovery import discover_service
from .signature_extractor import SignatureExtractor, extract_service_actions

__all__ = [
    "SignatureExtractor",
    "discover_service",
    "extract_service_actions",
]
