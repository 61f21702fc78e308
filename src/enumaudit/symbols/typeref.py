"""Parser for type-reference strings such as ``List<Shop.Status?>[]``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from enumaudit.errors import SymbolGraphError

_TOKEN = re.compile(
    r"\s*(?:(?:global\s*::\s*)?(?P<name>[A-Za-z_@][\w@]*(?:\s*\.\s*[A-Za-z_@][\w@]*)*)"
    r"|(?P<punct>[<>,?\[\]]))"
)

NULLABLE_SUFFIX = "?"


@dataclass(frozen=True)
class TypeRef:
    """Unresolved type reference.

    ``suffixes`` apply left to right: ``"?"`` for a nullable marker, an int for
    an array of that rank. ``Foo?[]`` is ``("?", 1)``.
    """

    name: str
    args: tuple[TypeRef, ...] = ()
    suffixes: tuple[str | int, ...] = ()


def parse_type_ref(text: str) -> TypeRef:
    """Parse a reference string, raising :class:`SymbolGraphError` if malformed."""
    if not isinstance(text, str) or not text.strip():
        raise SymbolGraphError(f"Empty type reference: {text!r}")

    tokens = _tokenize(text.strip(), text)
    parser = _Parser(tokens, text)
    ref = parser.parse_ref()
    if not parser.at_end():
        raise SymbolGraphError(f"Unexpected {parser.peek()!r} in type reference {text!r}")
    return ref


def _tokenize(source: str, original: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    while pos < len(source):
        if source[pos:].strip() == "":
            break
        match = _TOKEN.match(source, pos)
        if match is None:
            raise SymbolGraphError(f"Malformed type reference {original!r}")
        token = match.group("name") or match.group("punct")
        tokens.append(re.sub(r"\s+", "", token))
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: list[str], original: str) -> None:
        self._tokens = tokens
        self._pos = 0
        self._original = original

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def peek(self) -> str | None:
        return None if self.at_end() else self._tokens[self._pos]

    def _take(self, expected: str | None = None) -> str:
        token = self.peek()
        if token is None or (expected is not None and token != expected):
            want = expected or "a name"
            raise SymbolGraphError(
                f"Expected {want} in type reference {self._original!r}, got {token!r}"
            )
        self._pos += 1
        return token

    def parse_ref(self) -> TypeRef:
        name = self._take()
        if not (name[0].isalpha() or name[0] in "_@"):
            raise SymbolGraphError(f"Expected a type name in {self._original!r}, got {name!r}")

        args: list[TypeRef] = []
        if self.peek() == "<":
            self._take("<")
            args.append(self.parse_ref())
            while self.peek() == ",":
                self._take(",")
                args.append(self.parse_ref())
            self._take(">")

        suffixes: list[str | int] = []
        while self.peek() in ("?", "["):
            if self._take() == "?":
                suffixes.append(NULLABLE_SUFFIX)
                continue
            rank = 1
            while self.peek() == ",":
                self._take(",")
                rank += 1
            self._take("]")
            suffixes.append(rank)

        return TypeRef(name=name, args=tuple(args), suffixes=tuple(suffixes))
