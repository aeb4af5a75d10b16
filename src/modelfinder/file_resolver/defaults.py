"""
Default model directories, include and exclude patterns for model discovery.

Include and exclude patterns use gitignore syntax. Directory patterns end with `/`.
"""

from __future__ import annotations

DEFAULT_MODEL_DIRS: list[str] = ["app/models"]

DEFAULT_INCLUDES: list[str] = ["*.rb"]

# Applied to recursive scans only. Matches a `concerns` segment at any depth.
DEFAULT_EXCLUDES: list[str] = ["concerns/"]

DEFAULT_BASE_REF: str = "main"
