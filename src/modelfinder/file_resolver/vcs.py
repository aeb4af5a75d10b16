"""
Running the version-control diff that backs `skip_unchanged_files`.

The resolver only depends on the `CommandRunner` protocol, so tests and
embedders can substitute any runner honoring the same contract: exit code 0
with newline-delimited, repository-relative paths on stdout, or a non-zero
exit code with diagnostics on stderr.
"""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import NamedTuple, Protocol

# Conventional shell exit code for "command not found".
_NOT_FOUND_EXIT_CODE = 127


class CommandResult(NamedTuple):
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    def run(self, command: Sequence[str], cwd: Path) -> CommandResult: ...


class SubprocessRunner:
    """Runs commands with `subprocess.run`, capturing output. No timeout is applied."""

    def run(self, command: Sequence[str], cwd: Path) -> CommandResult:
        try:
            proc = subprocess.run(
                list(command),
                cwd=str(cwd),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            # Executable not on PATH, or `cwd` does not exist.
            return CommandResult(_NOT_FOUND_EXIT_CODE, "", str(e))
        return CommandResult(proc.returncode, proc.stdout or "", proc.stderr or "")


def format_command(command: Sequence[str]) -> str:
    return shlex.join(command)


def parse_changed_files(stdout: str) -> set[str]:
    """Parse `git diff --name-only` output into a set of root-relative paths."""
    return {line.strip() for line in stdout.splitlines() if line.strip()}
