"""
Self-contained model file discovery with optional filtering to files changed
relative to a base branch.

No imports from `modelfinder` outside this package.

Usage::

    from modelfinder.file_resolver import FileResolver, FileResolverConfig

    config = FileResolverConfig(
        model_dir=["app/models", "engines/*/app/models"],
        skip_unchanged_files=True,
    )
    resolver = FileResolver(config)
    for directory, path in resolver.resolve():
        ...
"""

from modelfinder.file_resolver.defaults import (
    DEFAULT_BASE_REF,
    DEFAULT_EXCLUDES,
    DEFAULT_INCLUDES,
    DEFAULT_MODEL_DIRS,
)
from modelfinder.file_resolver.diagnostics import Diagnostics, ListDiagnostics, StderrDiagnostics
from modelfinder.file_resolver.resolver import FileResolver
from modelfinder.file_resolver.types import FileResolverConfig, ModelFile
from modelfinder.file_resolver.vcs import CommandResult, CommandRunner, SubprocessRunner

__all__ = [
    "DEFAULT_BASE_REF",
    "DEFAULT_EXCLUDES",
    "DEFAULT_INCLUDES",
    "DEFAULT_MODEL_DIRS",
    "CommandResult",
    "CommandRunner",
    "Diagnostics",
    "FileResolver",
    "FileResolverConfig",
    "ListDiagnostics",
    "ModelFile",
    "StderrDiagnostics",
    "SubprocessRunner",
]
