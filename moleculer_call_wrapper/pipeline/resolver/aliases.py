"""
Alias allocation for imported module specifiers.

Every module the generated wrapper depends on is imported once, as a
namespace, under a short alias. Aliases only depend on the specifier (and,
for the rare collision, on registration order) so that regenerating with
the same dependencies gives byte-identical output.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterator
from types import MappingProxyType

logger = logging.getLogger(__name__)

MOLECULER_MODULE = "moleculer"
MOLECULER_ALIAS = "m"

# Well-known modules with fixed aliases
RESERVED_ALIASES = MappingProxyType(
    {
        "@wavyapp/wavy-sdk": "sdk",
        MOLECULER_MODULE: MOLECULER_ALIAS,
    }
)

HASH_ALIAS_PREFIX = "s"
HASH_ALIAS_LENGTH = 7

_IDENTIFIER_PATTERN = re.compile(r"[a-zA-Z]\w+", re.ASCII)

# TypeScript reserved words that cannot name a namespace import
TS_RESERVED_WORDS = {
    "await",
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "enum",
    "export",
    "extends",
    "false",
    "finally",
    "for",
    "function",
    "if",
    "implements",
    "import",
    "in",
    "instanceof",
    "interface",
    "let",
    "new",
    "null",
    "package",
    "private",
    "protected",
    "public",
    "return",
    "static",
    "super",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
    "yield",
}


def derive_alias(specifier: str, taken: set[str] | frozenset[str] = frozenset()) -> str:
    """Derive the alias of a module specifier.

    Reserved specifiers get their fixed alias. A specifier that is already a
    legal identifier is its own alias. Anything else ("./users.service",
    "@scope/pkg") gets a token made from its SHA-1 digest, lengthened until
    it is not in taken.
    """
    reserved = RESERVED_ALIASES.get(specifier)
    if reserved:
        return reserved

    if (
        _IDENTIFIER_PATTERN.fullmatch(specifier)
        and specifier not in TS_RESERVED_WORDS
        and specifier not in RESERVED_ALIASES.values()
        and specifier not in taken
    ):
        return specifier

    digest = hashlib.sha1(specifier.encode("utf-8")).hexdigest()
    length = HASH_ALIAS_LENGTH
    alias = f"{HASH_ALIAS_PREFIX}{digest[:length]}"
    while alias in taken or alias in RESERVED_ALIASES.values():
        length += 1
        alias = f"{HASH_ALIAS_PREFIX}{digest[:length]}"
    return alias


class AliasTable:
    """Module specifier to alias mapping, append-only for one generation run."""

    def __init__(self):
        self._aliases: dict[str, str] = {}

    def register(self, specifier: str) -> str:
        """Return the alias of specifier, allocating it on first registration."""
        alias = self._aliases.get(specifier)
        if alias is None:
            alias = derive_alias(specifier, set(self._aliases.values()))
            self._aliases[specifier] = alias
            logger.debug("Registered import %r as %s", specifier, alias)
        return alias

    def get(self, specifier: str) -> str | None:
        return self._aliases.get(specifier)

    def items(self) -> list[tuple[str, str]]:
        return list(self._aliases.items())

    def __contains__(self, specifier: object) -> bool:
        return specifier in self._aliases

    def __iter__(self) -> Iterator[str]:
        return iter(self._aliases)

    def __len__(self) -> int:
        return len(self._aliases)
