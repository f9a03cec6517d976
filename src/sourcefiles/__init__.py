"""
sourcefiles - list the source files of a project tree.

Walks a directory while honouring every ``.gitignore`` from the tree up to
the filesystem root, skips ``.git``, hidden entries and ``tmp``/``temp``
directories, and keeps files with a known source extension under 5 MiB.
"""

__version__ = "0.1.0"

from .core import (  # noqa: E402
    ConfigFileError,
    GitignoreFile,
    IgnorePolicy,
    InvalidRootError,
    NoSourceFilesError,
    PathRecord,
    SourceFilesError,
    enumerate_files,
    find_source_files,
    is_binary_file,
    is_ignored,
    is_source_file,
    load_extra_patterns,
    load_gitignore_files,
)
from .patterns import CompiledPattern, compile_pattern  # noqa: E402

__all__ = [
    "CompiledPattern",
    "ConfigFileError",
    "GitignoreFile",
    "IgnorePolicy",
    "InvalidRootError",
    "NoSourceFilesError",
    "PathRecord",
    "SourceFilesError",
    "compile_pattern",
    "enumerate_files",
    "find_source_files",
    "is_binary_file",
    "is_ignored",
    "is_source_file",
    "load_extra_patterns",
    "load_gitignore_files",
]
