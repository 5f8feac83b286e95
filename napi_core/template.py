"""Placeholder resolution for text templates."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
import re


_PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")


class TemplateError(ValueError):
    """Raised when a template cannot be rendered."""


@dataclass(slots=True)
class TemplateResolver:
    """Substitutes ``{{dotted.path}}`` placeholders from a nested mapping context."""

    context: Mapping[str, Any]
    _cache: dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    def render(self, text: str) -> str:
        def replacement(match: re.Match[str]) -> str:
            path = match.group(1).strip()
            return str(self._resolve_path(path))

        if not _PLACEHOLDER_PATTERN.search(text):
            return text
        return _PLACEHOLDER_PATTERN.sub(replacement, text)

    def clear_cache(self) -> None:
        """Reset any memoized path lookups."""
        self._cache.clear()

    def _resolve_path(self, path: str) -> Any:
        if path in self._cache:
            return self._cache[path]
        value = self._lookup_raw(path)
        if isinstance(value, (Mapping, list, tuple)):
            raise TemplateError(f"Placeholder '{path}' does not resolve to a scalar value")
        self._cache[path] = value
        return value

    def _lookup_raw(self, path: str) -> Any:
        current: Any = self.context
        for part in path.split('.'):
            if isinstance(current, Mapping) and part in current:
                current = current[part]
                continue
            if isinstance(current, (list, tuple)):
                try:
                    index = int(part)
                except ValueError as exc:
                    raise TemplateError(f"List index must be an integer for path '{path}'") from exc
                try:
                    current = current[index]
                except IndexError as exc:
                    raise TemplateError(f"Index {index} out of range for path '{path}'") from exc
                continue
            raise TemplateError(f"Cannot resolve path '{path}' in template context")
        return current


__all__ = [
    "TemplateError",
    "TemplateResolver",
]
