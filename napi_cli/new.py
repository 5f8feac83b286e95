"""Scaffolding for new napi addon projects."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List
import json

from napi_core.console import Console
from napi_core.template import TemplateResolver
from .target import AVAILABLE_TARGETS, DEFAULT_TARGETS, Target, parse_triple
from .templates import CARGO_TOML, STATIC_FILES


MIN_NODE_API_VERSION = 1
MAX_NODE_API_VERSION = 8
NAPI_CLI_VERSION = "^2.18.0"


class ScaffoldError(ValueError):
    """Raised when a project skeleton cannot be generated."""


@dataclass(slots=True)
class NewOptions:
    path: Path
    name: str | None = None
    min_node_api_version: int = 4
    license: str = "MIT"
    targets: List[str] = field(default_factory=list)
    enable_default_targets: bool = True
    enable_all_targets: bool = False
    enable_type_def: bool = True
    dry_run: bool = False


@dataclass(slots=True)
class ScaffoldFile:
    path: Path
    content: str


def binary_name(package_name: str) -> str:
    """``@scope/my-addon`` -> ``my-addon``."""
    return package_name.rsplit("/", 1)[-1]


def crate_name(package_name: str) -> str:
    return binary_name(package_name).replace("-", "_")


def select_targets(
    explicit: Iterable[str],
    *,
    enable_default_targets: bool,
    enable_all_targets: bool,
) -> List[str]:
    if enable_all_targets:
        return list(AVAILABLE_TARGETS)

    selected: List[str] = []
    candidates = list(DEFAULT_TARGETS) if enable_default_targets else []
    candidates.extend(explicit)
    for triple in candidates:
        if triple not in AVAILABLE_TARGETS:
            supported = ", ".join(AVAILABLE_TARGETS)
            raise ScaffoldError(f"Unsupported target '{triple}'. Supported targets: {supported}")
        if triple not in selected:
            selected.append(triple)

    if not selected:
        raise ScaffoldError("At least one target is required; pass --targets or keep the default targets")
    return selected


class NewCommand:
    """Generates a napi addon skeleton under ``options.path``."""

    def __init__(self, options: NewOptions, *, console: Console) -> None:
        self._options = options
        self._console = console

    def plan(self) -> List[ScaffoldFile]:
        options = self._options
        if not MIN_NODE_API_VERSION <= options.min_node_api_version <= MAX_NODE_API_VERSION:
            raise ScaffoldError(
                f"--min-node-api must be between {MIN_NODE_API_VERSION} and {MAX_NODE_API_VERSION}, "
                f"got {options.min_node_api_version}"
            )

        root = options.path
        if root.exists() and (not root.is_dir() or any(root.iterdir())):
            raise ScaffoldError(f"Refusing to scaffold into non-empty path '{root}'")

        name = (options.name or root.resolve().name).strip()
        if not name:
            raise ScaffoldError("Project name must not be empty")

        targets = select_targets(
            options.targets,
            enable_default_targets=options.enable_default_targets,
            enable_all_targets=options.enable_all_targets,
        )
        self._console.trace(f"scaffolding '{name}' for targets: {targets}")

        resolver = TemplateResolver(self._context(name))
        files = [ScaffoldFile(root / "Cargo.toml", resolver.render(CARGO_TOML))]
        files.extend(ScaffoldFile(root / relative, content) for relative, content in STATIC_FILES.items())
        files.append(ScaffoldFile(root / "package.json", _dump_json(self._package_json(name, targets))))
        for triple in targets:
            target = parse_triple(triple)
            files.append(
                ScaffoldFile(
                    root / "npm" / target.platform_arch_abi / "package.json",
                    _dump_json(self._platform_package_json(name, target)),
                )
            )
        return files

    def execute(self) -> List[ScaffoldFile]:
        files = self.plan()
        if self._options.dry_run:
            return files

        for item in files:
            item.path.parent.mkdir(parents=True, exist_ok=True)
            item.path.write_text(item.content, encoding="utf-8")
            self._console.debug(f"wrote {item.path}")
        self._console.info(f"Created napi project at {self._options.path}")
        return files

    def _context(self, name: str) -> Dict[str, Any]:
        options = self._options
        if options.enable_type_def:
            napi_derive = '"2"'
        else:
            napi_derive = '{ version = "2", default-features = false }'
        return {
            "crate": {
                "name": crate_name(name),
                "napi_features": f'"napi{options.min_node_api_version}"',
                "napi_derive": napi_derive,
            },
        }

    def _package_json(self, name: str, targets: List[str]) -> Dict[str, Any]:
        options = self._options
        uses_defaults = all(triple in targets for triple in DEFAULT_TARGETS)
        additional = [triple for triple in targets if not (uses_defaults and triple in DEFAULT_TARGETS)]
        return {
            "name": name,
            "version": "0.0.0",
            "main": "index.js",
            "types": "index.d.ts",
            "napi": {
                "name": binary_name(name),
                "triples": {
                    "defaults": uses_defaults,
                    "additional": additional,
                },
            },
            "license": options.license,
            "devDependencies": {"@napi-rs/cli": NAPI_CLI_VERSION},
            "engines": {"node": ">= 10"},
            "scripts": {
                "artifacts": "napi artifacts",
                "build": "napi build --release",
                "build:debug": "napi build",
                "prepublishOnly": "napi prepublish -t npm",
                "version": "napi version",
            },
        }

    def _platform_package_json(self, name: str, target: Target) -> Dict[str, Any]:
        artifact = f"{binary_name(name)}.{target.platform_arch_abi}.node"
        data: Dict[str, Any] = {
            "name": f"{name}-{target.platform_arch_abi}",
            "version": "0.0.0",
            "os": [target.platform],
        }
        if target.arch != "universal":
            data["cpu"] = [target.arch]
        data["main"] = artifact
        data["files"] = [artifact]
        data["license"] = self._options.license
        data["engines"] = {"node": ">= 10"}
        abi = target.abi or ""
        # gnueabihf and other gnu variants link against glibc, musleabihf against musl.
        if abi.startswith("gnu"):
            data["libc"] = ["glibc"]
        elif abi.startswith("musl"):
            data["libc"] = ["musl"]
        return data


def _dump_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, indent=2) + "\n"


__all__ = [
    "NewCommand",
    "NewOptions",
    "ScaffoldError",
    "ScaffoldFile",
    "binary_name",
    "crate_name",
    "select_targets",
]
