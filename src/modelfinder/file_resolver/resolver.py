"""
FileResolver — main entry point for model file discovery.

Resolves configured model directory patterns (or explicit file arguments) into a
deduplicated list of `ModelFile` entries, optionally narrowed to the files that
changed relative to a base branch.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from pathlib import Path

import pathspec

from modelfinder.file_resolver.diagnostics import Diagnostics, StderrDiagnostics
from modelfinder.file_resolver.types import FileResolverConfig, ModelFile
from modelfinder.file_resolver.vcs import (
    CommandRunner,
    SubprocessRunner,
    format_command,
    parse_changed_files,
)

# Characters that indicate a path is a glob pattern rather than a literal path.
_GLOB_CHARS = frozenset("*?[")


class FileResolver:
    """
    Finds the model files to annotate under the configured model directories.

    All enumeration is done against explicit base paths; the process working
    directory is read (as the default root) but never changed.
    """

    def __init__(
        self,
        config: FileResolverConfig,
        diagnostics: Diagnostics | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self._config: FileResolverConfig = config
        self._diagnostics: Diagnostics = diagnostics or StderrDiagnostics()
        self._runner: CommandRunner = runner or SubprocessRunner()
        self._exclude_spec: pathspec.PathSpec = pathspec.PathSpec.from_lines(
            "gitignore", config.effective_exclude
        )
        self._include_spec: pathspec.PathSpec = pathspec.PathSpec.from_lines(
            "gitignore", config.include
        )

    def resolve(self, paths: Sequence[str | Path] = ()) -> list[ModelFile]:
        """
        Resolve the model files to annotate.

        With explicit `paths`, only those files are returned, paired with the
        model directory they live under. Without, every model directory is
        scanned. When `skip_unchanged_files` is set, the result is then filtered
        by `git diff --name-only <base_ref>...HEAD`, falling back to the full
        list if the diff can't be computed.
        """
        root = self._config.resolved_root()
        model_files = self._all_model_files(root, paths)
        if not model_files:
            return model_files
        if not self._config.skip_unchanged_files:
            return model_files
        return self._filter_unchanged(root, model_files)

    def expand_model_dirs(self, pattern: str, root: Path | None = None) -> list[Path]:
        """
        Expand a model directory pattern into the sorted list of existing
        directories it matches. Relative patterns are resolved against `root`.
        """
        if root is None:
            root = self._config.resolved_root()
        pattern_path = Path(pattern).expanduser()

        if not any(c in str(pattern_path) for c in _GLOB_CHARS):
            path = pattern_path if pattern_path.is_absolute() else root / pattern_path
            return [path.resolve()] if path.is_dir() else []

        # Split into a literal base and the glob tail, starting at the first wildcard.
        # Only the pattern's own parts are inspected, never the root's.
        parts = pattern_path.parts
        literal = Path()
        glob_part = str(pattern_path)
        for i, part in enumerate(parts):
            if any(c in part for c in _GLOB_CHARS):
                literal = Path(*parts[:i]) if i > 0 else Path()
                glob_part = str(Path(*parts[i:]))
                break
        base = literal if literal.is_absolute() else root / literal

        found = {match.resolve() for match in base.glob(glob_part) if match.is_dir()}
        return sorted(found)

    def _all_model_files(self, root: Path, paths: Sequence[str | Path]) -> list[ModelFile]:
        # Explicit arguments never fall back to a directory scan, even if none match.
        if paths:
            candidates = self._model_files_from_arguments(root, paths)
        else:
            candidates = self._scan_model_dirs(root)

        model_files = _dedupe(candidates)

        if not model_files and not paths:
            patterns = "', '".join(self._config.model_dir)
            self._diagnostics.report(
                f"No models found in directory patterns: '{patterns}'. Either specify models"
                " on the command line, or use the --model-dir option."
            )
        return model_files

    def _model_files_from_arguments(
        self, root: Path, paths: Sequence[str | Path]
    ) -> list[ModelFile]:
        """Pair each explicitly named file with the model directory that contains it."""
        specified = [(root / Path(p).expanduser()).resolve() for p in paths]
        matched: set[Path] = set()
        result: list[ModelFile] = []

        for pattern in self._config.model_dir:
            for directory in self.expand_model_dirs(pattern, root):
                for file_path in specified:
                    if directory in file_path.parents:
                        result.append(
                            ModelFile(str(directory), file_path.relative_to(directory).as_posix())
                        )
                        matched.add(file_path)

        unmatched = [str(p) for p in specified if p not in matched]
        if unmatched:
            self._diagnostics.report(
                "WARNING: The following specified files were not found under any model"
                f" directory patterns ({', '.join(self._config.model_dir)}):"
                f" {', '.join(unmatched)}"
            )
        return result

    def _scan_model_dirs(self, root: Path) -> list[ModelFile]:
        result: list[ModelFile] = []
        for pattern in self._config.model_dir:
            for directory in self.expand_model_dirs(pattern, root):
                if self._config.ignore_model_sub_dir:
                    found = self._list_top_level(directory)
                else:
                    found = self._walk_directory(directory)
                result.extend(ModelFile(str(directory), rel) for rel in found)
        return result

    def _list_top_level(self, directory: Path) -> Iterable[str]:
        """Files directly inside `directory` that match the include patterns."""
        for entry in sorted(directory.iterdir()):
            if entry.is_file() and self._include_spec.match_file(entry.name):
                yield entry.name

    def _walk_directory(self, directory: Path) -> Iterable[str]:
        """
        Walk a model directory using `os.walk()`, pruning excluded directories
        in-place. Yields paths relative to `directory`.
        """
        for dirpath, dirnames, filenames in os.walk(directory, onerror=_raise):
            current = Path(dirpath)
            rel_dir = current.relative_to(directory)

            dirnames[:] = sorted(
                d for d in dirnames if not self._is_dir_excluded(d, rel_dir / d)
            )

            for filename in sorted(filenames):
                if not self._include_spec.match_file(filename):
                    continue
                rel_file = (rel_dir / filename).as_posix()
                if self._exclude_spec.match_file(rel_file):
                    continue
                yield rel_file

    def _is_dir_excluded(self, dirname: str, rel_path: Path) -> bool:
        """Check if a directory should be pruned during traversal."""
        if self._exclude_spec.match_file(dirname + "/"):
            return True
        return self._exclude_spec.match_file(rel_path.as_posix() + "/")

    def _filter_unchanged(self, root: Path, model_files: list[ModelFile]) -> list[ModelFile]:
        """Keep only the files reported by the diff against the base ref."""
        command = self._config.diff_command
        result = self._runner.run(command, root)

        if not result.ok:
            # Reports are single-line; git errors often span several lines.
            output = " ".join((result.stderr.strip() or result.stdout.strip()).split())
            self._diagnostics.report(
                f"WARNING: Failed to get git diff. Command `{format_command(command)}` in"
                f" directory `{root}` failed with: {output}. Falling back to annotating"
                " all model files."
            )
            return model_files

        changed = parse_changed_files(result.stdout)
        filtered = [mf for mf in model_files if _relative_to_root(mf, root) in changed]

        if not filtered:
            self._diagnostics.report(
                "INFO: No model files found that changed based on"
                f" 'git diff {self._config.base_ref}...HEAD'."
            )
        return filtered


def _raise(error: OSError) -> None:
    raise error


def _relative_to_root(model_file: ModelFile, root: Path) -> str:
    """Path of a model file relative to the root, in the form git prints it."""
    return Path(os.path.relpath(model_file.full_path, root)).as_posix()


def _dedupe(model_files: Iterable[ModelFile]) -> list[ModelFile]:
    """Drop entries that point to an already-seen file, keeping the first."""
    seen: set[Path] = set()
    result: list[ModelFile] = []
    for model_file in model_files:
        full_path = model_file.full_path
        if full_path not in seen:
            seen.add(full_path)
            result.append(model_file)
    return result
