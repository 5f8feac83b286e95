"""Utilities for executing and spawning commands with optional dry-run support."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence
import os
import shlex
import subprocess


@dataclass
class CommandResult:
    """Represents the outcome of an executed command."""

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str


class CommandError(RuntimeError):
    """Raised when a command fails or cannot be started."""

    def __init__(self, result: CommandResult, *, reason: str | None = None):
        formatted = " ".join(map(shlex.quote, result.command))
        if reason is not None:
            message = f"Failed to start command: {formatted}\n{reason}"
        else:
            message = (
                f"Command failed with exit code {result.returncode}: {formatted}\n"
                f"stdout: {result.stdout}\n"
                f"stderr: {result.stderr}"
            )
        super().__init__(message)
        self.result = result


def _merge_environment(env: Mapping[str, str] | None) -> Dict[str, str] | None:
    if env is None:
        return None
    merged = os.environ.copy()
    merged.update(env)
    return merged


class CommandRunner:
    """Abstract command runner interface."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
    ) -> CommandResult:
        raise NotImplementedError

    def spawn(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        note: str | None = None,
    ) -> subprocess.Popen[bytes] | None:
        """Start ``command`` without waiting for it to finish."""
        raise NotImplementedError

    def format_command(self, command: Sequence[str]) -> str:
        return " ".join(shlex.quote(part) for part in command)


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
    ) -> CommandResult:
        try:
            process = subprocess.run(
                command,
                cwd=str(cwd) if cwd else None,
                env=_merge_environment(env),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            failed = CommandResult(command=command, returncode=-1, stdout="", stderr="")
            raise CommandError(failed, reason=str(exc)) from exc

        result = CommandResult(
            command=command,
            returncode=process.returncode,
            stdout=process.stdout,
            stderr=process.stderr,
        )
        if check and process.returncode != 0:
            raise CommandError(result)
        return result

    def spawn(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        note: str | None = None,
    ) -> subprocess.Popen[bytes]:
        # The child inherits stdio and outlives this call; nobody waits on it here.
        try:
            return subprocess.Popen(
                list(command),
                cwd=str(cwd) if cwd else None,
                env=_merge_environment(env),
            )
        except OSError as exc:
            failed = CommandResult(command=command, returncode=-1, stdout="", stderr="")
            raise CommandError(failed, reason=str(exc)) from exc


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    env: Dict[str, str] = field(default_factory=dict)
    note: str | None = None
    spawned: bool = False


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them."""

    def __init__(self) -> None:
        self.commands: List[RecordedCommand] = []

    def _record(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None,
        env: Mapping[str, str] | None,
        note: str | None,
        spawned: bool,
    ) -> None:
        self.commands.append(
            RecordedCommand(
                command=list(command),
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env else {},
                note=note,
                spawned=spawned,
            )
        )

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
    ) -> CommandResult:
        self._record(command, cwd=cwd, env=env, note=note, spawned=False)
        return CommandResult(command=command, returncode=0, stdout="", stderr="")

    def spawn(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        note: str | None = None,
    ) -> None:
        self._record(command, cwd=cwd, env=env, note=note, spawned=True)
        return None

    def iter_commands(self) -> Iterable[RecordedCommand]:
        return iter(self.commands)

    def iter_formatted(self, *, workspace: Path | None = None) -> Iterable[str]:
        default_cwd = str(workspace) if workspace else None
        for record in self.commands:
            cmd = self.format_command(record.command)
            cwd = record.cwd or default_cwd
            parts: List[str] = ["[dry-run]"]
            if record.note:
                parts.append(record.note)
            if cwd:
                parts.append(f"(cwd={cwd})")
            parts.append(cmd)
            yield " ".join(parts)
            for key, value in record.env.items():
                yield f"          {key}={value}"


__all__ = [
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
]
