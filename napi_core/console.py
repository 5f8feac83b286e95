"""Console output handler shared by the command line tools."""
from __future__ import annotations

from typing import TextIO
import sys


class Console:
    """Simple console output handler with configurable log level.

    Levels: none < error < warn < info < debug < trace
    Default: 'info'
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "warn": 2,
        "info": 3,
        "debug": 4,
        "trace": 5,
    }

    def __init__(
        self,
        level: str = "info",
        *,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        if level not in self.LEVELS:
            known = ", ".join(self.LEVELS)
            raise ValueError(f"Unknown console level '{level}'. Expected one of: {known}")
        self.level_name = level
        self.level = self.LEVELS[level]
        self._stdout = stdout
        self._stderr = stderr

    def enabled(self, level: str) -> bool:
        return self.level >= self.LEVELS[level]

    def _emit(self, level: str, message: str, *, error_stream: bool = False) -> None:
        if not self.enabled(level):
            return
        if error_stream:
            stream = self._stderr or sys.stderr
        else:
            stream = self._stdout or sys.stdout
        print(f"[{level.upper()}] {message}", file=stream)

    def error(self, message: str) -> None:
        self._emit("error", message, error_stream=True)

    def warn(self, message: str) -> None:
        self._emit("warn", message, error_stream=True)

    def info(self, message: str) -> None:
        self._emit("info", message)

    def debug(self, message: str) -> None:
        self._emit("debug", message)

    def trace(self, message: str) -> None:
        self._emit("trace", message)


__all__ = ["Console"]
