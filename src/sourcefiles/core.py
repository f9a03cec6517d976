"""
Core logic for sourcefiles package.
"""

from __future__ import annotations

import os
import stat
import sys
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import pathspec
from colorama import Fore, Style, init as colorama_init

from .patterns import CompiledPattern, compile_pattern

colorama_init()

PathLike = Union[str, os.PathLike]

# Exceptions
class SourceFilesError(Exception): ...
class InvalidRootError(SourceFilesError): ...
class ConfigFileError(SourceFilesError): ...
class NoSourceFilesError(SourceFilesError): ...

# Defaults & helpers
GITIGNORE_FILE = ".gitignore"
MAX_SOURCE_FILE_SIZE_BYTES = 5 * 1024 * 1024
BINARY_SNIFF_BYTES = 4096
BINARY_CONTROL_RATIO = 0.3

SOURCE_CODE_EXTENSIONS: Tuple[str, ...] = (
    # TypeScript / JavaScript
    "ts", "tsx", "js", "jsx", "mjs", "cjs",
    # Web / config
    "json", "html", "css", "scss", "sass", "less",
    "yml", "yaml", "toml",
    # Common languages
    "py", "rb", "go", "rs", "java", "kt", "cs", "php", "swift",
    "scala", "sh", "bash", "zsh",
    # Infra / misc
    "sql", "graphql", "gql",
    # Markdown
    "md", "markdown",
)

TMP_DIR_NAMES = frozenset({"tmp", "temp"})


def _warn(msg: str, verbose: bool) -> None:
    if verbose:
        print(Fore.YELLOW + f"[sourcefiles] ! {msg}" + Style.RESET_ALL, file=sys.stderr)


def _abspath(path: PathLike) -> Path:
    # lexical normalisation only; symlinks are left alone
    return Path(os.path.abspath(path))


@dataclass(frozen=True)
class IgnorePolicy:
    """Built-in exclusions applied before any ``.gitignore`` pattern."""

    exclude_git_dir: bool = True
    exclude_hidden: bool = True
    exclude_tmp_dirs: bool = True


DEFAULT_POLICY = IgnorePolicy()


@dataclass(frozen=True)
class PathRecord:
    """A discovered file: a base directory plus the path relative to it."""

    relative_path: Path
    base_path: Path

    @property
    def absolute_path(self) -> Path:
        return self.base_path / self.relative_path


@dataclass(frozen=True)
class GitignoreFile:
    directory: Path
    content: str

    @cached_property
    def patterns(self) -> Tuple[CompiledPattern, ...]:
        compiled = (compile_pattern(line) for line in self.content.splitlines())
        return tuple(p for p in compiled if p is not None)


# Ignore-file utilities
def load_gitignore_files(start_dir: PathLike) -> List[GitignoreFile]:
    """
    Collect every readable ``.gitignore`` from *start_dir* up to (not
    including) the filesystem root, furthest ancestor first.
    """
    found: List[GitignoreFile] = []
    current = _abspath(start_dir)
    anchor = Path(current.anchor)
    while current != anchor and current != current.parent:
        candidate = current / GITIGNORE_FILE
        try:
            if candidate.is_file():
                found.append(
                    GitignoreFile(current, candidate.read_text(encoding="utf-8"))
                )
        except (OSError, UnicodeDecodeError):
            pass  # unreadable .gitignore files are skipped
        current = current.parent
    found.reverse()
    return found


def load_extra_patterns(config_path: Path) -> "pathspec.PathSpec":
    """Read newline-separated ignore patterns from *config_path*."""
    if not config_path.exists():
        raise ConfigFileError(f"Config file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read config file '{config_path}': {e}")
    lines = [
        ln.strip()
        for ln in text.splitlines()
        if ln.strip() and not ln.lstrip().startswith("#")
    ]
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def _builtin_segments(path: Path, root: Optional[Path]) -> Tuple[str, ...]:
    if root is not None:
        try:
            return path.relative_to(root).parts
        except ValueError:
            pass
    return tuple(part for part in path.parts if part != path.anchor)


def is_ignored(
    path: PathLike,
    gitignore_files: Sequence[GitignoreFile],
    is_dir: bool,
    policy: Optional[IgnorePolicy] = None,
    root: Optional[PathLike] = None,
) -> bool:
    """
    Decide whether *path* is excluded.

    Built-in rules come first and cannot be negated. Then every gitignore
    file containing *path* is applied in the given order, each top to
    bottom; the last matching pattern decides.

    The ``.git`` rule looks at every segment of the absolute path. When
    *root* is given, the hidden and tmp/temp rules only look at the part of
    *path* below it, so a tree living under ``/tmp`` can still be walked.
    """
    policy = policy or DEFAULT_POLICY
    candidate = _abspath(path)

    if policy.exclude_git_dir and ".git" in candidate.parts:
        return True

    segments = _builtin_segments(candidate, _abspath(root) if root is not None else None)
    if policy.exclude_hidden and segments:
        name = segments[-1]
        if name.startswith(".") and name not in (".", ".."):
            return True
    if policy.exclude_tmp_dirs and any(s in TMP_DIR_NAMES for s in segments):
        return True

    ignored = False
    for gitignore in gitignore_files:
        try:
            rel = candidate.relative_to(_abspath(gitignore.directory)).as_posix()
        except ValueError:
            continue
        if is_dir and not rel.endswith("/"):
            rel += "/"
        for pattern in gitignore.patterns:
            if pattern.matches(rel):
                ignored = not pattern.negated
    return ignored


# File-scanning helpers
def _list_dir(directory: Path, verbose: bool) -> Iterator[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        _warn(f"Could not list {directory}: {e}", verbose)
        return iter(())
    return iter(entries)


def _extra_match(
    extra_spec: Optional["pathspec.PathSpec"], path: Path, root: Path, is_dir: bool
) -> bool:
    if extra_spec is None:
        return False
    rel = path.relative_to(root).as_posix()
    return extra_spec.match_file(rel + "/" if is_dir else rel)


def enumerate_files(
    root: PathLike,
    policy: Optional[IgnorePolicy] = None,
    extra_spec: Optional["pathspec.PathSpec"] = None,
    max_depth: Optional[int] = None,
    verbose: bool = False,
) -> List[Path]:
    """
    Return every non-ignored regular file under *root* (or *root* itself if
    it is a file). Ignored directories are never descended into.

    A missing root gives an empty list; per-directory listing errors drop
    that subtree only.
    """
    root = _abspath(root)
    try:
        st = root.stat()
    except OSError:
        return []

    if stat.S_ISREG(st.st_mode):
        parent = root.parent
        gitignores = load_gitignore_files(parent)
        if is_ignored(root, gitignores, False, policy, root=parent):
            return []
        if _extra_match(extra_spec, root, parent, False):
            return []
        return [root]

    if not stat.S_ISDIR(st.st_mode):
        return []

    gitignores = load_gitignore_files(root)
    files: List[Path] = []
    stack = [(_list_dir(root, verbose), 1)]
    while stack:
        entries, depth = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue

        full_path = Path(entry.path)
        try:
            entry_is_dir = entry.is_dir(follow_symlinks=False)
            entry_is_file = not entry_is_dir and entry.is_file(follow_symlinks=False)
        except OSError as e:
            _warn(f"Could not inspect {full_path}: {e}", verbose)
            continue

        if is_ignored(full_path, gitignores, entry_is_dir, policy, root=root):
            continue
        if _extra_match(extra_spec, full_path, root, entry_is_dir):
            continue

        if entry_is_dir:
            if max_depth is None or depth <= max_depth:
                stack.append((_list_dir(full_path, verbose), depth + 1))
        elif entry_is_file:
            files.append(full_path)
    return files


# Source-file filter
def is_source_file(path: PathLike) -> bool:
    """Allowlisted extension, regular file, at most 5 MiB."""
    p = Path(path)
    try:
        st = p.stat()
    except OSError:
        return False
    if not stat.S_ISREG(st.st_mode):
        return False
    if st.st_size > MAX_SOURCE_FILE_SIZE_BYTES:
        return False
    name = p.name
    if "." not in name:
        return False
    return name.rsplit(".", 1)[1].lower() in SOURCE_CODE_EXTENSIONS


def _is_binary(data: bytes) -> bool:
    if not data:
        return False
    if b"\0" in data:
        return True
    control = sum(1 for b in data if b < 0x20 and b not in (0x09, 0x0A, 0x0D))
    return control / len(data) >= BINARY_CONTROL_RATIO


def is_binary_file(path: PathLike) -> bool:
    """Sniff the first 4 KiB of *path*; unreadable files count as binary."""
    try:
        with open(path, "rb") as fh:
            sample = fh.read(BINARY_SNIFF_BYTES)
    except OSError:
        return True
    return _is_binary(sample)


# Composition
def resolve_base_path(path: PathLike) -> Path:
    base = _abspath(path)
    if not base.exists():
        raise InvalidRootError(
            "The given path does not exist. Please provide a valid path."
        )
    return base


def find_source_files(
    base_path: PathLike,
    policy: Optional[IgnorePolicy] = None,
    extra_spec: Optional["pathspec.PathSpec"] = None,
    skip_binary: bool = False,
    max_depth: Optional[int] = None,
    verbose: bool = False,
) -> List[PathRecord]:
    base = _abspath(base_path)
    records: List[PathRecord] = []
    for p in enumerate_files(base, policy, extra_spec, max_depth, verbose):
        if not is_source_file(p):
            continue
        if skip_binary and is_binary_file(p):
            continue
        records.append(PathRecord(p.relative_to(base), base))
    return records
