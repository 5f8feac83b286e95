"""Build defaults read from a project configuration file."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping

from napi_core.config_loader import ConfigError, load_config_section, normalize_string_list


_ALLOWED_KEYS = {
    "target",
    "features",
    "all_features",
    "no_default_features",
    "workspace",
    "packages",
    "exclude",
    "cargo_flags",
    "disable_windows_x32_optimize",
}


@dataclass(slots=True)
class BuildDefaults:
    target: str | None = None
    features: List[str] = field(default_factory=list)
    all_features: bool = False
    no_default_features: bool = False
    workspace: bool = False
    packages: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    cargo_flags: List[str] = field(default_factory=list)
    disable_windows_x32_optimize: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, source: str = "configuration") -> "BuildDefaults":
        unknown = {str(key) for key in data.keys() if str(key) not in _ALLOWED_KEYS}
        if unknown:
            joined = ", ".join(sorted(unknown))
            raise ConfigError(f"Build defaults in {source} contain unknown keys: {joined}")

        target = data.get("target")
        if target is not None and not isinstance(target, str):
            raise ConfigError(f"'target' in {source} must be a string")
        if target is not None:
            target = target.strip() or None

        flags = {}
        for key in ("all_features", "no_default_features", "workspace", "disable_windows_x32_optimize"):
            value = data.get(key, False)
            if not isinstance(value, bool):
                raise ConfigError(f"'{key}' in {source} must be a boolean")
            flags[key] = value

        return cls(
            target=target,
            features=normalize_string_list(data.get("features"), field_name="features"),
            packages=normalize_string_list(data.get("packages"), field_name="packages"),
            exclude=normalize_string_list(data.get("exclude"), field_name="exclude"),
            cargo_flags=normalize_string_list(data.get("cargo_flags"), field_name="cargo_flags"),
            **flags,
        )


def load_build_defaults(path: Path) -> BuildDefaults:
    """Read build defaults from ``path``.

    ``package.json`` files provide them under ``napi.build``; TOML, JSON and YAML
    files under a ``build`` table or at the root.
    """

    section = load_config_section(path, "build", package_key="napi")
    return BuildDefaults.from_mapping(section, source=str(path))


__all__ = ["BuildDefaults", "load_build_defaults"]
