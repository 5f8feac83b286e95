"""Shared utilities for running commands, loading configuration and templating."""

from .command_runner import (
    CommandError,
    CommandResult,
    CommandRunner,
    RecordedCommand,
    RecordingCommandRunner,
    SubprocessCommandRunner,
)
from .config_loader import (
    ConfigError,
    ConfigLoader,
    FILE_LOADERS,
    load_config_file,
    load_config_section,
    normalize_string_list,
)
from .console import Console
from .template import TemplateError, TemplateResolver

__all__ = [
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "ConfigError",
    "ConfigLoader",
    "FILE_LOADERS",
    "load_config_file",
    "load_config_section",
    "normalize_string_list",
    "Console",
    "TemplateError",
    "TemplateResolver",
]
