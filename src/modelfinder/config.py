"""
TOML-based config file loading for modelfinder.

Searches for `.modelfinder.toml`, `modelfinder.toml`, or `pyproject.toml
[tool.modelfinder]` walking up from a start directory. Config values are merged
with CLI flags using three-way precedence: explicit CLI flags > config file >
built-in defaults.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass
class ModelFinderConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    model_dir: list[str] | None = None
    root_dir: str | None = None
    include: list[str] | None = None
    exclude: list[str] | None = None
    extend_exclude: list[str] | None = None
    ignore_model_sub_dir: bool | None = None
    skip_unchanged_files: bool | None = None
    base_ref: str | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".modelfinder.toml", "modelfinder.toml", "pyproject.toml"]

_VALID_FIELDS = {f.name for f in fields(ModelFinderConfig)}

_LIST_FIELDS = {"model_dir", "include", "exclude", "extend_exclude"}
_BOOL_FIELDS = {"ignore_model_sub_dir", "skip_unchanged_files"}

_EXPECTED_TYPES: dict[str, str] = {
    **{name: "a string or list of strings" for name in _LIST_FIELDS | {"root_dir"}},
    **{name: "true or false" for name in _BOOL_FIELDS},
    "base_ref": "a non-empty string",
}

_INVALID = object()


def _is_str_list(value: object) -> bool:
    return isinstance(value, list) and all(
        isinstance(item, str) for item in cast(list[object], value)
    )


def _check_value(name: str, value: Any) -> Any:
    """Normalize a config value for field `name`, or return `_INVALID`."""
    if name in _BOOL_FIELDS:
        return value if isinstance(value, bool) else _INVALID
    if name == "base_ref":
        return value if isinstance(value, str) and value else _INVALID
    if name == "root_dir":
        if isinstance(value, str):
            return value
        # A list root-dir uses its first entry.
        if _is_str_list(value):
            return value[0] if value else None
        return _INVALID
    # Pattern lists: a single string is accepted as a one-item list.
    if isinstance(value, str):
        return [value]
    return value if _is_str_list(value) else _INVALID


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.modelfinder.toml` >
    `modelfinder.toml` > `pyproject.toml` (only if it has `[tool.modelfinder]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    if _pyproject_has_modelfinder_section(candidate):
                        return candidate
                else:
                    return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_modelfinder_section(path: Path) -> bool:
    """Check if a pyproject.toml has a [tool.modelfinder] section."""
    try:
        data = tomllib.loads(path.read_text())
        return "modelfinder" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> ModelFinderConfig:
    """
    Load a `ModelFinderConfig` from a TOML file. Supports both standalone
    `modelfinder.toml` / `.modelfinder.toml` and `pyproject.toml` (extracts
    `[tool.modelfinder]`). TOML kebab-case keys are mapped to Python snake_case.

    A file that can't be read or parsed produces a warning and an empty config.
    """
    try:
        data = tomllib.loads(config_path.read_text())
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
        print(f"Warning: could not parse config file {config_path}: {e}", file=sys.stderr)
        return ModelFinderConfig()

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("modelfinder", {})

    return _parse_config_data(data, config_path)


def _parse_config_data(data: dict[str, Any], source: Path | None = None) -> ModelFinderConfig:
    """Parse a flat or sectioned TOML dict into ModelFinderConfig."""
    # Flatten sections: [discovery], [git], etc. merge into top level
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in cast(dict[str, Any], value).items():
                flat[sub_key] = sub_value
        else:
            flat[key] = value

    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        snake_key = key.replace("-", "_")
        if snake_key not in _VALID_FIELDS:
            print(f"Warning: unrecognized config key '{key}' in {source}", file=sys.stderr)
            continue
        checked = _check_value(snake_key, value)
        if checked is _INVALID:
            expected = _EXPECTED_TYPES[snake_key]
            print(
                f"Warning: ignoring config key '{key}' in {source}: expected {expected},"
                f" got {value!r}",
                file=sys.stderr,
            )
            continue
        mapped[snake_key] = checked

    return ModelFinderConfig(**mapped)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: ModelFinderConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(ModelFinderConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue  # Not set in config

        if cfg_field.name in explicit_flags:
            continue

        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
