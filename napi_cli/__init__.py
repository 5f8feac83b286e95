"""napi command line package."""
from __future__ import annotations

from .cli import main

__all__ = ["main"]
