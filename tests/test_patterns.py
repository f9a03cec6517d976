"""Tests for gitignore pattern compilation."""
from __future__ import annotations

import pytest

from sourcefiles.patterns import (
    DOUBLE_STAR,
    LITERAL,
    QMARK,
    STAR,
    compile_pattern,
    tokenize,
)


@pytest.mark.parametrize("line", ["", "   ", "# comment", "  # indented comment", "!", "! ", "/", "!/"])
def test_compile_returns_none_for_unusable_lines(line: str) -> None:
    assert compile_pattern(line) is None


def test_compile_flags() -> None:
    plain = compile_pattern("foo")
    negated = compile_pattern("!foo")
    anchored = compile_pattern("/foo")
    both = compile_pattern("! /foo ")

    assert plain is not None and not plain.negated and not plain.anchored
    assert negated is not None and negated.negated and not negated.anchored
    assert anchored is not None and anchored.anchored and not anchored.negated
    assert both is not None and both.negated and both.anchored


def test_tokenize_wildcards() -> None:
    assert tokenize("a**b*c?") == (
        (LITERAL, "a"),
        (DOUBLE_STAR, "**"),
        (LITERAL, "b"),
        (STAR, "*"),
        (LITERAL, "c"),
        (QMARK, "?"),
    )


def test_tokenize_prefers_double_star() -> None:
    assert tokenize("***") == ((DOUBLE_STAR, "**"), (STAR, "*"))


def test_star_extension() -> None:
    pattern = compile_pattern("*.log")
    assert pattern is not None
    assert pattern.matches("a.log")
    assert pattern.matches("dir/a.log")
    assert not pattern.matches("a.log.txt")


def test_matched_directory_covers_contents() -> None:
    pattern = compile_pattern("logs")
    assert pattern is not None
    assert pattern.matches("logs")
    assert pattern.matches("logs/")
    assert pattern.matches("logs/today/x.txt")
    assert not pattern.matches("logsx")


def test_anchored_only_matches_from_root() -> None:
    pattern = compile_pattern("/build")
    assert pattern is not None
    assert pattern.matches("build")
    assert pattern.matches("build/out.js")
    assert not pattern.matches("src/build")


def test_unanchored_matches_at_any_segment() -> None:
    pattern = compile_pattern("build")
    assert pattern is not None
    assert pattern.matches("src/build/")
    assert not pattern.matches("src/rebuild/")


def test_directory_pattern_needs_trailing_slash() -> None:
    pattern = compile_pattern("build/")
    assert pattern is not None
    assert pattern.matches("build/")
    assert pattern.matches("src/build/")
    assert not pattern.matches("build")


def test_single_star_stops_at_separator() -> None:
    pattern = compile_pattern("doc/*.txt")
    assert pattern is not None
    assert pattern.matches("doc/a.txt")
    assert not pattern.matches("doc/sub/a.txt")


def test_double_star_crosses_separators() -> None:
    pattern = compile_pattern("docs/**/x.md")
    assert pattern is not None
    assert pattern.matches("docs/a/b/x.md")
    assert pattern.matches("docs/a/x.md")

    leading = compile_pattern("**/foo")
    assert leading is not None
    assert leading.matches("a/foo")
    assert leading.matches("a/b/foo/bar")


def test_question_mark_is_one_non_separator_char() -> None:
    pattern = compile_pattern("?.py")
    assert pattern is not None
    assert pattern.matches("a.py")
    assert pattern.matches("pkg/b.py")
    assert not pattern.matches("ab.py")
    assert not pattern.matches(".py")


def test_regex_metacharacters_are_literal() -> None:
    pattern = compile_pattern("a+b(1).js")
    assert pattern is not None
    assert pattern.matches("a+b(1).js")
    assert not pattern.matches("aab(1)xjs")

    brackets = compile_pattern("[ab].js")
    assert brackets is not None
    assert brackets.matches("[ab].js")
    assert not brackets.matches("a.js")
