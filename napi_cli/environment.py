"""Environment variables handed to the cargo child process."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Mapping, Tuple
import secrets
import tempfile


TYPE_DEF_TMP_PATH = "TYPE_DEF_TMP_PATH"
WINDOWS_X32_TARGET = "i686-pc-windows-msvc"

WINDOWS_X32_VARIABLES: Mapping[str, str] = {
    "CARGO_PROFILE_DEBUG_CODEGEN_UNITS": "256",
    "CARGO_PROFILE_RELEASE_CODEGEN_UNITS": "256",
    "CARGO_PROFILE_RELEASE_LTO": "off",
}


def get_intermediate_type_file(temp_dir: Path | None = None) -> Path:
    """Return a fresh ``type_def.<hex>.tmp`` path; the file itself is not created."""

    token = secrets.token_bytes(16).hex().upper()
    base = temp_dir if temp_dir is not None else Path(tempfile.gettempdir())
    return base / f"type_def.{token}.tmp"


def needs_windows_x32_workaround(target: str | None, disabled: bool) -> bool:
    """LTO miscompiles napi addons on 32-bit MSVC (napi-rs/napi-rs#297)."""

    return disabled and target == WINDOWS_X32_TARGET


WorkaroundPredicate = Callable[[str | None, bool], bool]

TOOLCHAIN_WORKAROUNDS: Tuple[Tuple[WorkaroundPredicate, Mapping[str, str]], ...] = (
    (needs_windows_x32_workaround, WINDOWS_X32_VARIABLES),
)


def workaround_environment(target: str | None, *, disable_windows_x32_optimize: bool) -> Dict[str, str]:
    env: Dict[str, str] = {}
    for predicate, variables in TOOLCHAIN_WORKAROUNDS:
        if predicate(target, disable_windows_x32_optimize):
            env.update(variables)
    return env


def build_environment(
    intermediate_type_file: Path,
    target: str | None,
    *,
    disable_windows_x32_optimize: bool = False,
) -> Dict[str, str]:
    env = {TYPE_DEF_TMP_PATH: str(intermediate_type_file)}
    env.update(
        workaround_environment(target, disable_windows_x32_optimize=disable_windows_x32_optimize)
    )
    return env


__all__ = [
    "TOOLCHAIN_WORKAROUNDS",
    "TYPE_DEF_TMP_PATH",
    "WINDOWS_X32_TARGET",
    "WINDOWS_X32_VARIABLES",
    "build_environment",
    "get_intermediate_type_file",
    "needs_windows_x32_workaround",
    "workaround_environment",
]
