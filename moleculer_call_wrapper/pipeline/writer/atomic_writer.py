"""
Atomic file writer for the generated wrapper.

Ensures that file writes are atomic so an interrupted run never leaves a
half written wrapper behind, and that an unchanged wrapper is not written
at all (keeping the watch mode of TypeScript builds quiet).
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path

from tree_sitter import Node

from ..errors import WrapperValidationError
from ..ts_ast.parser import get_parser

logger = logging.getLogger(__name__)


def current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


class AtomicWriter:
    """Handles atomic file writes with optional validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content (opt-in)
    3. Atomically replace the target file
    """

    def __init__(self, validate_typescript: Callable[[str], None] | None = None, atomic: bool = True):
        """Initialize the atomic writer.

        Args:
            validate_typescript: Optional validation function for TypeScript code
            atomic: Whether to go through a temporary file
        """
        self._validate_typescript = validate_typescript or self._default_validate_typescript
        self._atomic = atomic

    @staticmethod
    def read(path: Path) -> str:
        """Current content of path, empty when the file does not exist."""
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def write(self, path: Path, content: str, validate: bool = False) -> None:
        """Write content to file.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            WrapperValidationError: If validation fails
            OSError: If file operations fail
        """
        if validate:
            self._validate_typescript(content)

        path.parent.mkdir(parents=True, exist_ok=True)

        if not self._atomic:
            path.write_text(content, encoding="utf-8")
            return

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            # mkstemp creates the file owner-only
            if path.exists():
                shutil.copymode(path, temp_path)
            else:
                temp_path.chmod(0o666 & ~current_umask())
            temp_path.replace(path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

    def write_if_changed(self, path: Path, content: str, current: str | None = None, validate: bool = False) -> bool:
        """Write content only if it differs from the file and is not empty.

        Args:
            path: Target file path
            content: Content to write
            current: Known current content of path, read from disk when None
            validate: Whether to validate before finalizing

        Returns:
            True if the file was written
        """
        if current is None:
            current = self.read(path)

        if not content or content == current:
            logger.info("%s is up to date", path)
            return False

        self.write(path, content, validate)
        logger.info("Wrote %s", path)
        return True

    def _default_validate_typescript(self, content: str) -> None:
        """Default TypeScript validation: the content must parse without errors.

        Raises:
            WrapperValidationError: If validation fails
        """
        tree = get_parser().parse(bytes(content, "utf8"))
        if not tree.root_node.has_error:
            return

        errors = self._find_errors(tree.root_node)
        if errors:
            first_error = errors[0]
            raise WrapperValidationError(
                f"Generated TypeScript code is not valid at line {first_error.start_point[0] + 1}: syntax error near '{first_error.text.decode('utf8')[:50]}'"
            )
        raise WrapperValidationError("Generated TypeScript code is not valid")

    def _find_errors(self, node: Node) -> list[Node]:
        """Find all ERROR and missing nodes in the tree."""
        errors = []
        if node.type == "ERROR" or node.is_missing:
            errors.append(node)
        for child in node.children:
            errors.extend(self._find_errors(child))
        return errors
