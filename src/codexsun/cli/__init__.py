#!/usr/bin/env python3
"""
Codexsun CLI - management commands

The same commands are available from the server console while it runs.

Usage:
    codexsun-cli status     # Check the running server
    codexsun-cli routes     # List registered routes
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from codexsun.core.config import Settings
from .commands import CliError, CommandRunner
from .loop import dispatch_line, run_cli_loop, start_cli, tokenize

# Fix Windows console encoding for Unicode
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")


async def run_cli(args: List[str], settings: Optional[Settings] = None, app=None) -> None:
    """Run one tokenized command line."""
    runner = CommandRunner(settings or Settings.from_env(), app)
    await runner(args)


async def _run_standalone(command: str) -> None:
    settings = Settings.from_env()
    app = None
    if command == "routes":
        from codexsun.main import build_app
        app = await build_app(settings)
    await run_cli([command], settings, app)


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Codexsun CLI - management commands",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  codexsun-cli status    Check the running server
  codexsun-cli routes    List registered routes
        """
    )
    parser.add_argument(
        "command",
        choices=["help", "version", "config", "routes", "status"],
        help="Command to run"
    )

    args = parser.parse_args(argv)

    try:
        asyncio.run(_run_standalone(args.command))
    except (CliError, ValueError) as e:
        print(f"CLI error: {e}", file=sys.stderr)
        sys.exit(1)


__all__ = [
    "CliError",
    "CommandRunner",
    "dispatch_line",
    "main",
    "run_cli",
    "run_cli_loop",
    "start_cli",
    "tokenize",
]


if __name__ == "__main__":
    main()
