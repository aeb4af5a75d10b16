"""Configuration and result types for model file resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

from modelfinder.file_resolver.defaults import (
    DEFAULT_BASE_REF,
    DEFAULT_EXCLUDES,
    DEFAULT_INCLUDES,
    DEFAULT_MODEL_DIRS,
)


class ModelFile(NamedTuple):
    """
    A model file as handed to the annotator: the absolute model directory it was
    found under, and its path relative to that directory.
    """

    directory: str
    path: str

    @property
    def full_path(self) -> Path:
        return Path(self.directory) / self.path


@dataclass
class FileResolverConfig:
    """
    Configuration for model file discovery and filtering.

    `root_dir=None` (or empty) means the current working directory.
    `exclude=None` means use `DEFAULT_EXCLUDES`; providing a list replaces them entirely.
    `base_ref` is the branch that `skip_unchanged_files` diffs against.
    """

    model_dir: list[str] = field(default_factory=lambda: list(DEFAULT_MODEL_DIRS))
    root_dir: str | None = None
    include: list[str] = field(default_factory=lambda: list(DEFAULT_INCLUDES))
    exclude: list[str] | None = None
    extend_exclude: list[str] = field(default_factory=list)
    ignore_model_sub_dir: bool = False
    skip_unchanged_files: bool = False
    base_ref: str = DEFAULT_BASE_REF

    @property
    def effective_exclude(self) -> list[str]:
        """Combined exclude patterns: defaults (or `exclude`) + `extend_exclude`."""
        base = self.exclude if self.exclude is not None else list(DEFAULT_EXCLUDES)
        return base + self.extend_exclude

    @property
    def diff_command(self) -> list[str]:
        return ["git", "diff", "--name-only", f"{self.base_ref}...HEAD"]

    def resolved_root(self) -> Path:
        """The root directory as an absolute path, falling back to the cwd."""
        root = self.root_dir if self.root_dir else os.getcwd()
        return Path(root).expanduser().resolve()
