"""
Import resolver for type references.

Maps the type references of an extracted type expression back to the
import declarations of the file that owns it, so the generated wrapper
can refer to them through its own namespace imports.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from ..ts_ast.nodes import TSNode, TypeReference, walk
from ..ts_ast.parser import DefinitionFile, ImportBinding, ImportKind

if TYPE_CHECKING:
    from ..context import CallWrapperContext

logger = logging.getLogger(__name__)


class ImportResolver:
    """Resolves type references to aliased imports of the wrapper file."""

    def resolve(self, context: CallWrapperContext, definition: DefinitionFile, root: TSNode | None) -> None:
        """
        Record a rewrite for every resolvable type reference under root.

        Args:
            context: Run context holding the alias and rewrite tables
            definition: The definition file that owns root
            root: Type expression (or type parameter) to walk
        """
        if root is None:
            return

        for node in walk(root):
            if not isinstance(node, TypeReference):
                continue

            binding = definition.find_import(node.leading_name)
            if binding is None:
                continue

            specifier = self.wrapper_specifier(context, binding.module_specifier)
            alias = context.imports.register(specifier)
            qualified_name = self.qualified_name(alias, binding, node)
            logger.debug("%s: %s -> %s", definition.path, node.name, qualified_name)
            context.rewrites.record(node, qualified_name)

    @staticmethod
    def wrapper_specifier(context: CallWrapperContext, specifier: str) -> str:
        """Module specifier as seen from the wrapper file.

        Relative specifiers are recomputed against the wrapper's directory;
        package specifiers are kept verbatim.
        """
        if not specifier.startswith("."):
            return specifier

        target = os.path.normpath(os.path.join(os.path.dirname(os.path.abspath(context.current_file_path)), specifier))
        relative = os.path.relpath(target, os.path.dirname(os.path.abspath(context.wrapper_path)))
        relative = relative.replace(os.sep, "/")
        if not relative.startswith(("../", "./")):
            relative = f"./{relative}"
        return relative

    @staticmethod
    def qualified_name(alias: str, binding: ImportBinding, node: TypeReference) -> str:
        """Name of the referenced type through the wrapper's namespace import."""
        rest = node.segments[1:]
        if binding.kind == ImportKind.NAMESPACE:
            return ".".join([alias, *rest])
        # Handle import { A as B } from './file'
        return ".".join([alias, binding.imported_name or binding.local_name, *rest])


def fill_imports(context: CallWrapperContext, definition: DefinitionFile, root: TSNode | None) -> None:
    """Resolve the imports of root with a default ImportResolver."""
    ImportResolver().resolve(context, definition, root)
