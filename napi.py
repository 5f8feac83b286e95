"""Entry-point script for the napi CLI."""
from __future__ import annotations

import sys

from napi_cli.cli import main as cli_main


def main() -> int:
    """Delegate to the napi CLI entry point."""
    return cli_main(sys.argv[1:])


if __name__ == "__main__":  # pragma: no cover - exercised via integration tests
    raise SystemExit(main())
