"""Loading of tool settings from TOML, JSON, YAML files and ``package.json``."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Sequence

import json
import tomllib

try:  # Optional dependency for YAML support
    import yaml
except ModuleNotFoundError:  # pragma: no cover - exercised when PyYAML absent
    yaml = None


ConfigLoader = Callable[[Any], Any]


class ConfigError(ValueError):
    """Raised when a configuration file is missing, malformed or invalid."""


def _load_yaml(stream: Any) -> Any:
    if yaml is None:
        raise ConfigError(
            "PyYAML is required to load YAML configuration files. Install with `pip install PyYAML`."
        )
    return yaml.safe_load(stream)


FILE_LOADERS: Dict[str, ConfigLoader] = {
    ".toml": tomllib.load,
    ".json": json.load,
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
}
"""Mapping of file suffixes to loader callables."""

_DECODE_ERRORS: tuple[type[Exception], ...] = (tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError)
if yaml is not None:
    _DECODE_ERRORS += (yaml.YAMLError,)


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Load and decode the mapping stored in ``path``."""

    if not path.is_file():
        raise ConfigError(f"Configuration file '{path}' does not exist")

    suffix = path.suffix.lower()
    loader = FILE_LOADERS.get(suffix)
    if loader is None:
        supported = ", ".join(sorted(FILE_LOADERS))
        raise ConfigError(f"Unsupported configuration file extension: {suffix}. Supported: {supported}")

    # tomllib only accepts binary streams.
    if suffix == ".toml":
        handle = path.open("rb")
    else:
        handle = path.open("r", encoding="utf-8")
    with handle:
        try:
            data = loader(handle)
        except _DECODE_ERRORS as exc:
            raise ConfigError(f"Cannot parse configuration file '{path}': {exc}") from exc

    if not isinstance(data, Mapping):
        raise ConfigError(f"Configuration file '{path}' must contain a mapping at the root")
    return data


def load_config_section(path: Path, section: str, *, package_key: str) -> Mapping[str, Any]:
    """Return the ``section`` table of a configuration file.

    ``package.json`` keeps tool settings under ``package_key`` so the table is
    read from ``<package_key>.<section>`` and is empty when absent. Other files
    use a top-level ``section`` table and fall back to the whole document.
    """

    data = load_config_file(path)
    if path.name == "package.json":
        owner = data.get(package_key)
        if owner is None:
            return {}
        if not isinstance(owner, Mapping):
            raise ConfigError(f"'{package_key}' in '{path}' must be an object")
        data = owner
        table = data.get(section, {})
    else:
        table = data.get(section, data)

    if not isinstance(table, Mapping):
        raise ConfigError(f"'{section}' in '{path}' must be a table")
    return table


def normalize_string_list(value: Any, *, field_name: str) -> List[str]:
    """Coerce ``value`` into a list of trimmed, non-empty strings."""

    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        return [text] if text else []
    if not isinstance(value, Sequence):
        raise ConfigError(f"'{field_name}' must be a string or a list of strings")

    items: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"'{field_name}' entries must be strings, got {item!r}")
        if item.strip():
            items.append(item.strip())
    return items


__all__ = [
    "ConfigError",
    "ConfigLoader",
    "FILE_LOADERS",
    "load_config_file",
    "load_config_section",
    "normalize_string_list",
]
