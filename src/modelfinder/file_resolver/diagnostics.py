"""Sinks for the warnings produced while resolving model files."""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Diagnostics(Protocol):
    """Receives one human-readable, single-line message per call."""

    def report(self, message: str) -> None: ...


class StderrDiagnostics:
    """Prints each message to stderr (or the given stream)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def report(self, message: str) -> None:
        # Look up sys.stderr late so pytest's capsys sees the output.
        print(message, file=self._stream or sys.stderr)


class ListDiagnostics:
    """Collects messages in memory."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def report(self, message: str) -> None:
        self.messages.append(message)
