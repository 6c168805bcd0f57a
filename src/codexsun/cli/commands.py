"""
CLI commands available from the server console and from `codexsun-cli`.
"""
import logging
import sys
from typing import Awaitable, Callable, Dict, List, Optional, TextIO

import httpx
from fastapi import FastAPI
from fastapi.routing import APIRoute

from codexsun import __version__
from codexsun.core.config import Settings

logger = logging.getLogger(__name__)


class CliError(Exception):
    """Raised for an unknown command or bad arguments."""


class CommandRunner:
    """
    Dispatches a tokenized command line to a command handler.

    Usage:
        runner = CommandRunner(settings, app)
        await runner(["status"])
    """

    def __init__(self, settings: Settings, app: Optional[FastAPI] = None, out: Optional[TextIO] = None):
        self.settings = settings
        self.app = app
        self._out = out
        self.commands: Dict[str, Callable[[], Awaitable[None]]] = {
            "help": self.cmd_help,
            "version": self.cmd_version,
            "config": self.cmd_config,
            "routes": self.cmd_routes,
            "status": self.cmd_status,
        }
        self.descriptions = {
            "help": "List available commands",
            "version": "Show the server version",
            "config": "Show the active configuration",
            "routes": "List registered HTTP routes",
            "status": "Check the running server's /health endpoint",
        }

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    def echo(self, text: str = "") -> None:
        print(text, file=self.out, flush=True)

    async def __call__(self, args: List[str]) -> None:
        if not args:
            raise CliError("No command given")

        name, extra = args[0], args[1:]
        handler = self.commands.get(name)
        if handler is None:
            raise CliError(f"Unknown command '{name}'. Type 'help' for a list of commands.")
        if extra:
            raise CliError(f"Command '{name}' takes no arguments, got: {' '.join(extra)}")

        logger.debug(f"Running CLI command: {name}")
        await handler()

    async def cmd_help(self):
        self.echo("Commands:")
        width = max(len(name) for name in self.commands)
        for name in self.commands:
            self.echo(f"  {name:<{width}}  {self.descriptions.get(name, '')}")

    async def cmd_version(self):
        self.echo(f"codexsun {__version__}")

    async def cmd_config(self):
        origins = self.settings.cors_origins
        self.echo(f"Host:         {self.settings.host}")
        self.echo(f"Port:         {self.settings.port}")
        self.echo(f"Log level:    {self.settings.log_level}")
        self.echo(f"CORS origins: {origins if isinstance(origins, str) else ', '.join(origins)}")
        self.echo(f"Apps:         {', '.join(self.settings.apps) or '(none)'}")

    async def cmd_routes(self):
        if self.app is None:
            raise CliError("No application loaded")

        for route in self.app.routes:
            if not isinstance(route, APIRoute) or not route.include_in_schema:
                continue
            methods = ",".join(sorted(route.methods or []))
            self.echo(f"  {methods:<12} {route.path}")

    async def cmd_status(self):
        url = f"{self.settings.base_url}/health"
        async with httpx.AsyncClient(timeout=5.0) as client:
            try:
                response = await client.get(url)
            except httpx.HTTPError as e:
                self.echo(f"Server: ✗ Cannot connect to {url} ({e})")
                return

        if response.status_code != 200:
            self.echo(f"Server: ✗ Not healthy ({response.status_code})")
            return

        info = response.json()
        self.echo(f"Server: ✓ {info.get('status', 'unknown')} (v{info.get('version', 'unknown')}, up {info.get('uptime', 0)}s)")
