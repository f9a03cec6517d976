"""
Gitignore pattern compilation for sourcefiles.

A pattern line is turned into a small tagged token sequence instead of a
regular expression, so matching never depends on escaping rules:

    LITERAL   the text itself
    STAR      ``*``  anything except ``/``
    DOUBLE    ``**`` anything, ``/`` included
    QMARK     ``?``  exactly one character except ``/``
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

LITERAL = "literal"
STAR = "star"
DOUBLE_STAR = "double_star"
QMARK = "qmark"

Token = Tuple[str, str]


def tokenize(pattern: str) -> Tuple[Token, ...]:
    """Split *pattern* into wildcard and literal tokens (``**`` before ``*``)."""
    tokens: list[Token] = []
    literal: list[str] = []
    i = 0

    def _flush() -> None:
        if literal:
            tokens.append((LITERAL, "".join(literal)))
            literal.clear()

    while i < len(pattern):
        if pattern.startswith("**", i):
            _flush()
            tokens.append((DOUBLE_STAR, "**"))
            i += 2
        elif pattern[i] == "*":
            _flush()
            tokens.append((STAR, "*"))
            i += 1
        elif pattern[i] == "?":
            _flush()
            tokens.append((QMARK, "?"))
            i += 1
        else:
            literal.append(pattern[i])
            i += 1
    _flush()
    return tuple(tokens)


def _advance(token: Token, text: str, positions: FrozenSet[int]) -> FrozenSet[int]:
    kind, value = token
    n = len(text)
    out: set[int] = set()
    for pos in positions:
        if kind == LITERAL:
            if text.startswith(value, pos):
                out.add(pos + len(value))
        elif kind == QMARK:
            if pos < n and text[pos] != "/":
                out.add(pos + 1)
        elif kind == STAR:
            stop = text.find("/", pos)
            stop = n if stop == -1 else stop
            out.update(range(pos, stop + 1))
        else:
            out.update(range(pos, n + 1))
    return frozenset(out)


@dataclass(frozen=True)
class CompiledPattern:
    """One usable ``.gitignore`` line."""

    source: str
    tokens: Tuple[Token, ...]
    negated: bool = False
    anchored: bool = False

    def _starts(self, text: str) -> FrozenSet[int]:
        if self.anchored:
            return frozenset({0})
        return frozenset({0} | {i + 1 for i, ch in enumerate(text) if ch == "/"})

    def matches(self, path: str) -> bool:
        """
        True if *path* (POSIX, relative to the ``.gitignore`` directory)
        matches.

        The tokens must be consumed up to the end of *path* or up to a ``/``,
        so a pattern naming a directory also matches everything below it.
        """
        positions = self._starts(path)
        for token in self.tokens:
            positions = _advance(token, path, positions)
            if not positions:
                return False
        n = len(path)
        return any(pos == n or path[pos] == "/" for pos in positions)


def compile_pattern(line: str) -> Optional[CompiledPattern]:
    """
    Compile a raw ``.gitignore`` line.

    Returns ``None`` for blank lines, ``#`` comments and lines with nothing
    left to match after ``!`` and ``/`` are stripped. Never raises.
    """
    pattern = line.strip()
    if not pattern or pattern.startswith("#"):
        return None

    negated = pattern.startswith("!")
    if negated:
        pattern = pattern[1:].strip()
        if not pattern:
            return None

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]
        if not pattern:
            return None

    return CompiledPattern(
        source=line.strip(),
        tokens=tokenize(pattern),
        negated=negated,
        anchored=anchored,
    )
