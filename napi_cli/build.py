"""Translation of `napi build` options into a single `cargo build` invocation."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Sequence
import subprocess

from napi_core.command_runner import CommandRunner, SubprocessCommandRunner
from napi_core.console import Console
from .environment import build_environment, get_intermediate_type_file
from .target import resolve_target


class FeatureMode(str, Enum):
    ALL = "all"
    NO_DEFAULT = "no-default"
    EXPLICIT = "explicit"
    MANIFEST_DEFAULT = "manifest-default"


@dataclass(slots=True)
class FeatureSelection:
    all_features: bool = False
    no_default_features: bool = False
    features: List[str] = field(default_factory=list)

    @property
    def mode(self) -> FeatureMode:
        if self.all_features:
            return FeatureMode.ALL
        if self.no_default_features:
            return FeatureMode.NO_DEFAULT
        if self.features:
            return FeatureMode.EXPLICIT
        return FeatureMode.MANIFEST_DEFAULT

    def to_args(self) -> List[str]:
        mode = self.mode
        if mode is FeatureMode.ALL:
            return ["--all-features"]
        if mode is FeatureMode.NO_DEFAULT:
            return ["--no-default-features"]
        if mode is FeatureMode.EXPLICIT:
            return ["--features", *self.features]
        return []


@dataclass(slots=True)
class WorkspaceSelection:
    workspace: bool = False
    packages: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)

    def to_args(self) -> List[str]:
        args: List[str] = []
        if self.workspace:
            args.append("--workspace")
        elif self.packages:
            args.extend(["-p", *self.packages])

        if self.exclude:
            args.extend(["--exclude", *self.exclude])
        return args


@dataclass(slots=True)
class BuildRequest:
    target: str | None = None
    js_binding: Path | None = None
    disable_js_binding: bool = False
    cwd: Path | None = None
    dest: Path | None = None
    strip: bool = False
    pipe: str | None = None
    release: bool = False
    verbose: bool = False
    features: FeatureSelection = field(default_factory=FeatureSelection)
    workspace: WorkspaceSelection = field(default_factory=WorkspaceSelection)
    disable_windows_x32_optimize: bool = False
    zig: bool = False
    zig_abi_suffix: str | None = None
    bypass_flags: List[str] = field(default_factory=list)
    dry_run: bool = False
    intermediate_type_file: Path | None = None


@dataclass(slots=True)
class CargoInvocation:
    command: List[str]
    cwd: Path | None
    env: Dict[str, str]


class BuildCommand:
    """Builds the napi crate by spawning `cargo build` without waiting on it."""

    def __init__(
        self,
        request: BuildRequest,
        *,
        console: Console,
        runner: CommandRunner,
        rustc_runner: CommandRunner | None = None,
    ) -> None:
        self._request = request
        self._console = console
        self._runner = runner
        # rustc is always queried for real, even when the cargo call is only recorded.
        self._rustc_runner = rustc_runner or SubprocessCommandRunner()

    @property
    def request(self) -> BuildRequest:
        return self._request

    def plan(self) -> CargoInvocation:
        request = self._request
        if request.intermediate_type_file is None:
            request.intermediate_type_file = get_intermediate_type_file()

        command: List[str] = ["cargo", "build"]
        cwd = self._resolve_cwd()
        command.extend(self._feature_args())
        command.extend(self._workspace_args())
        command.extend(self._target_args())
        env = self._environment(request.intermediate_type_file)
        command.extend(self._bypass_args())
        return CargoInvocation(command=command, cwd=cwd, env=env)

    def execute(self) -> subprocess.Popen[bytes] | None:
        invocation = self.plan()
        self._console.debug(f"spawning {self._runner.format_command(invocation.command)}")
        return self._runner.spawn(
            invocation.command,
            cwd=invocation.cwd,
            env=invocation.env,
        )

    def _resolve_cwd(self) -> Path | None:
        cwd = self._request.cwd
        if cwd is not None:
            self._console.trace(f"set cargo working dir to {cwd}")
        return cwd

    def _feature_args(self) -> List[str]:
        args = self._request.features.to_args()
        self._console.trace(f"set features flags: {args}")
        return args

    def _workspace_args(self) -> List[str]:
        args = self._request.workspace.to_args()
        self._console.trace(f"set workspace flags: {args}")
        return args

    def _target_args(self) -> List[str]:
        request = self._request
        if request.target is None:
            request.target = resolve_target(None, runner=self._rustc_runner)
            self._console.trace(f"no target given, using host target {request.target}")
        else:
            self._console.trace(f"set compiling target to {request.target}")
        return ["--target", request.target]

    def _environment(self, intermediate_type_file: Path) -> Dict[str, str]:
        request = self._request
        env = build_environment(
            intermediate_type_file,
            request.target,
            disable_windows_x32_optimize=request.disable_windows_x32_optimize,
        )
        self._console.trace("set environment variables:")
        for key, value in env.items():
            self._console.trace(f"{key}={value}")
        return env

    def _bypass_args(self) -> Sequence[str]:
        self._console.trace(f"bypassing flags: {self._request.bypass_flags}")
        return list(self._request.bypass_flags)


__all__ = [
    "BuildCommand",
    "BuildRequest",
    "CargoInvocation",
    "FeatureMode",
    "FeatureSelection",
    "WorkspaceSelection",
]
