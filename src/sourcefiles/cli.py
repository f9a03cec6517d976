"""
CLI entrypoint for sourcefiles package.
"""
import argparse
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Optional

import pathspec
from colorama import Fore, Style

from . import __version__
from .core import (
    SOURCE_CODE_EXTENSIONS,
    IgnorePolicy,
    PathRecord,
    load_extra_patterns,
    find_source_files,
    resolve_base_path,
    ConfigFileError,
    InvalidRootError,
    NoSourceFilesError,
)


def _package_version() -> str:
    try:
        return version("sourcefiles")
    except PackageNotFoundError:
        return __version__


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sourcefiles",
        description="List source code files under a path, honouring .gitignore files.",
    )
    p.add_argument(
        "-p",
        "--path",
        type=Path,
        default=None,
        help="The path to the file or directory to process (default: cwd)",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="Path to a file with extra ignore patterns (one per line)",
    )
    p.add_argument("--include-hidden", action="store_true", help="Do not skip dotfiles")
    p.add_argument(
        "--include-tmp", action="store_true", help="Do not skip tmp/temp directories"
    )
    p.add_argument("--include-git", action="store_true", help="Do not skip .git contents")
    p.add_argument(
        "--skip-binary",
        action="store_true",
        help="Also drop files whose first 4 KiB look binary",
    )
    p.add_argument("--max-depth", type=int, help="Maximum directory depth to descend")
    p.add_argument(
        "--absolute", action="store_true", help="Print absolute instead of relative paths"
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    return p.parse_args(argv)


def _display_path(record: PathRecord, absolute: bool) -> Path:
    if absolute:
        return record.absolute_path
    if record.relative_path == Path("."):
        # --path named a single file
        return Path(record.absolute_path.name)
    return record.relative_path


def _info(msg: str, verbose: bool, color: str = "") -> None:
    if verbose:
        print(color + f"[sourcefiles] {msg}" + (Style.RESET_ALL if color else ""), file=sys.stderr)


def _collect(
    base: Path,
    ns: argparse.Namespace,
    policy: IgnorePolicy,
    extra_spec: Optional["pathspec.PathSpec"],
) -> List[PathRecord]:
    records = find_source_files(
        base,
        policy=policy,
        extra_spec=extra_spec,
        skip_binary=ns.skip_binary,
        max_depth=ns.max_depth,
        verbose=ns.verbose,
    )
    if not records:
        raise NoSourceFilesError(
            "No source code files found in the given path. "
            "Supported file extensions: " + ", ".join(SOURCE_CODE_EXTENSIONS)
        )
    return records


def main(argv: Optional[List[str]] = None) -> None:
    try:
        ns = _parse_args(argv)

        try:
            base = resolve_base_path(ns.path if ns.path is not None else Path.cwd())
        except InvalidRootError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        extra_spec = None
        if ns.config:
            try:
                extra_spec = load_extra_patterns(ns.config.resolve())
                _info(f"Loaded extra patterns from {ns.config}", ns.verbose)
            except ConfigFileError as e:
                print(f"Error: {e}", file=sys.stderr)
                sys.exit(1)

        policy = IgnorePolicy(
            exclude_git_dir=not ns.include_git,
            exclude_hidden=not ns.include_hidden,
            exclude_tmp_dirs=not ns.include_tmp,
        )

        _info(f"Scanning {base} …", ns.verbose)
        try:
            records = _collect(base, ns, policy, extra_spec)
        except NoSourceFilesError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        for record in records:
            path = _display_path(record, ns.absolute)
            print(path.as_posix())

        _info(f"Done. {len(records)} source files found.", ns.verbose, Fore.GREEN)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
