"""Rust target triple detection and Node.js platform naming."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from napi_core.command_runner import CommandError, CommandRunner, SubprocessCommandRunner


AVAILABLE_TARGETS: List[str] = [
    "aarch64-apple-darwin",
    "aarch64-linux-android",
    "aarch64-unknown-linux-gnu",
    "aarch64-unknown-linux-musl",
    "aarch64-pc-windows-msvc",
    "x86_64-apple-darwin",
    "x86_64-pc-windows-msvc",
    "x86_64-unknown-linux-gnu",
    "x86_64-unknown-linux-musl",
    "x86_64-unknown-freebsd",
    "i686-pc-windows-msvc",
    "armv7-unknown-linux-gnueabihf",
    "armv7-linux-androideabi",
    "universal-apple-darwin",
]

DEFAULT_TARGETS: List[str] = [
    "x86_64-apple-darwin",
    "x86_64-pc-windows-msvc",
    "x86_64-unknown-linux-gnu",
]

_CPU_TO_NODE_ARCH: Dict[str, str] = {
    "x86_64": "x64",
    "aarch64": "arm64",
    "i686": "ia32",
    "armv7": "arm",
    "riscv64gc": "riscv64",
    "powerpc64le": "ppc64",
}

_SYS_TO_NODE_PLATFORM: Dict[str, str] = {
    "linux": "linux",
    "freebsd": "freebsd",
    "darwin": "darwin",
    "windows": "win32",
}


class TargetDetectionError(RuntimeError):
    """Raised when the host compilation target cannot be determined."""


@dataclass(frozen=True, slots=True)
class Target:
    triple: str
    platform: str
    arch: str
    abi: str | None = None

    @property
    def platform_arch_abi(self) -> str:
        if self.abi:
            return f"{self.platform}-{self.arch}-{self.abi}"
        return f"{self.platform}-{self.arch}"


def parse_triple(triple: str) -> Target:
    """Split a Rust target triple into Node.js ``platform``/``arch``/``abi`` names.

    ``armv7-linux-androideabi`` is read as ``armv7-linux-android-eabi`` so the
    trailing ``eabi`` becomes the abi segment.
    """

    normalized = f"{triple[:-4]}-eabi" if triple.endswith("eabi") else triple
    parts = normalized.split("-")
    abi: str | None = None
    if len(parts) >= 4:
        cpu, sys_name, abi = parts[0], parts[2], parts[3]
    elif len(parts) == 3:
        cpu, sys_name = parts[0], parts[2]
    elif len(parts) == 2:
        cpu, sys_name = parts
    else:
        cpu, sys_name = parts[0], parts[0]

    return Target(
        triple=triple,
        platform=_SYS_TO_NODE_PLATFORM.get(sys_name, sys_name),
        arch=_CPU_TO_NODE_ARCH.get(cpu, cpu),
        abi=abi or None,
    )


def get_system_default_target(runner: CommandRunner | None = None) -> str:
    """Return the host triple reported by ``rustc -vV``."""

    runner = runner or SubprocessCommandRunner()
    try:
        result = runner.run(["rustc", "-vV"])
    except CommandError as exc:
        raise TargetDetectionError(f"Failed to detect the host target via rustc: {exc}") from exc

    for line in result.stdout.splitlines():
        key, _, value = line.partition(":")
        if key.strip() == "host" and value.strip():
            return value.strip()
    raise TargetDetectionError("`rustc -vV` output did not contain a 'host:' line")


def resolve_target(explicit: str | None, *, runner: CommandRunner | None = None) -> str:
    if explicit:
        return explicit
    return get_system_default_target(runner)


__all__ = [
    "AVAILABLE_TARGETS",
    "DEFAULT_TARGETS",
    "Target",
    "TargetDetectionError",
    "get_system_default_target",
    "parse_triple",
    "resolve_target",
]
