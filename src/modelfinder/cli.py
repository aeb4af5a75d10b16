#!/usr/bin/env python3
"""
modelfinder: Find the model files an annotation tool should process

Common usage:
  modelfinder
  modelfinder --model-dir app/models --model-dir 'engines/*/app/models'
  modelfinder --skip-unchanged-files
  modelfinder app/models/user.rb

Settings can also be read from `.modelfinder.toml`, `modelfinder.toml`, or a
`[tool.modelfinder]` table in `pyproject.toml`. Explicit flags take precedence.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import sys
from dataclasses import dataclass
from pathlib import Path

from modelfinder.config import find_config_file, load_config, merge_cli_with_config
from modelfinder.file_resolver import (
    DEFAULT_BASE_REF,
    DEFAULT_INCLUDES,
    DEFAULT_MODEL_DIRS,
    FileResolver,
    FileResolverConfig,
    ModelFile,
)


@dataclass
class Options:
    """Command-line options for the modelfinder tool."""

    files: list[str]
    model_dir: list[str]
    root_dir: str | None
    include: list[str]
    exclude: list[str] | None
    extend_exclude: list[str]
    ignore_model_sub_dir: bool
    skip_unchanged_files: bool
    base_ref: str
    pairs: bool
    version: bool


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks
    which flags the user explicitly passed (for config merge precedence).
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="modelfinder",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=str,
        default=[],
        help="Model files to process; if omitted, the model directories are scanned",
    )
    parser.add_argument(
        "-d",
        "--model-dir",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Model directory or glob pattern, relative to the root directory. Can be repeated "
        f"(default: {', '.join(DEFAULT_MODEL_DIRS)})",
    )
    parser.add_argument(
        "--root-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Project root that relative paths are resolved against (default: current directory)",
    )
    parser.add_argument(
        "--include",
        action="append",
        default=None,
        metavar="PATTERN",
        help=f"File patterns to include. Can be repeated (default: {', '.join(DEFAULT_INCLUDES)})",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Replace the default exclusion patterns for recursive scans. Can be repeated",
    )
    parser.add_argument(
        "--extend-exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Add to the default exclusion patterns (e.g., 'legacy/'). Can be repeated",
    )
    parser.add_argument(
        "-I",
        "--ignore-model-sub-dir",
        action="store_true",
        dest="ignore_model_sub_dir",
        help="Only look at files directly inside each model directory",
    )
    parser.add_argument(
        "--skip-unchanged-files",
        action="store_true",
        dest="skip_unchanged_files",
        help="Only return files changed relative to the base branch (uses `git diff`)",
    )
    parser.add_argument(
        "--base-ref",
        type=str,
        default=DEFAULT_BASE_REF,
        metavar="REF",
        help="Branch to diff against with --skip-unchanged-files (default: %(default)s)",
    )
    parser.add_argument(
        "--pairs",
        action="store_true",
        help="Print '<model dir><TAB><relative path>' instead of absolute paths",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    # Re-parse with sentinel defaults to detect which flags were actually supplied.
    # append actions use None as sentinel (argparse creates a list when the flag is used).
    _SENTINEL = object()
    sentinel_parser = argparse.ArgumentParser(add_help=False)
    sentinel_parser.add_argument("-d", "--model-dir", action="append", default=None)
    sentinel_parser.add_argument("--root-dir", default=_SENTINEL)
    sentinel_parser.add_argument("--include", action="append", default=None)
    sentinel_parser.add_argument("--exclude", action="append", default=None)
    sentinel_parser.add_argument("--extend-exclude", action="append", default=None)
    sentinel_parser.add_argument(
        "-I", "--ignore-model-sub-dir", action="store_true", default=_SENTINEL
    )
    sentinel_parser.add_argument("--skip-unchanged-files", action="store_true", default=_SENTINEL)
    sentinel_parser.add_argument("--base-ref", default=_SENTINEL)
    sentinel_opts, _ = sentinel_parser.parse_known_args(args if args is not None else sys.argv[1:])

    explicit_flags: set[str] = set()
    for dest_name in ("model_dir", "include", "exclude", "extend_exclude"):
        if getattr(sentinel_opts, dest_name) is not None:
            explicit_flags.add(dest_name)
    for dest_name in ("root_dir", "ignore_model_sub_dir", "skip_unchanged_files", "base_ref"):
        if getattr(sentinel_opts, dest_name) is not _SENTINEL:
            explicit_flags.add(dest_name)

    return (
        Options(
            files=opts.files,
            model_dir=opts.model_dir if opts.model_dir is not None else list(DEFAULT_MODEL_DIRS),
            root_dir=opts.root_dir,
            include=opts.include if opts.include is not None else list(DEFAULT_INCLUDES),
            exclude=opts.exclude,
            extend_exclude=opts.extend_exclude,
            ignore_model_sub_dir=opts.ignore_model_sub_dir,
            skip_unchanged_files=opts.skip_unchanged_files,
            base_ref=opts.base_ref,
            pairs=opts.pairs,
            version=opts.version,
        ),
        explicit_flags,
    )


def _resolver_config(options: Options) -> FileResolverConfig:
    return FileResolverConfig(
        model_dir=options.model_dir,
        root_dir=options.root_dir,
        include=options.include,
        exclude=options.exclude,
        extend_exclude=options.extend_exclude,
        ignore_model_sub_dir=options.ignore_model_sub_dir,
        skip_unchanged_files=options.skip_unchanged_files,
        base_ref=options.base_ref,
    )


def _format_model_file(model_file: ModelFile, pairs: bool) -> str:
    if pairs:
        return f"{model_file.directory}\t{model_file.path}"
    return str(model_file.full_path)


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the modelfinder CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("modelfinder")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    # Look for a config file starting from the root dir, if one was given.
    start_dir = Path(options.root_dir).expanduser() if options.root_dir else Path.cwd()
    config_path = find_config_file(start_dir)
    if config_path:
        config = load_config(config_path)
        # A relative root-dir in a config file is relative to that file.
        if config.root_dir and not Path(config.root_dir).expanduser().is_absolute():
            config.root_dir = str(config_path.parent / config.root_dir)
        merge_cli_with_config(options, config, explicit_flags)

    try:
        model_files = FileResolver(_resolver_config(options)).resolve(options.files)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    for model_file in model_files:
        print(_format_model_file(model_file, options.pairs))
    return 0


if __name__ == "__main__":
    sys.exit(main())
