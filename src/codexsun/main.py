"""
Codexsun server entry point.

Builds the FastAPI app (CORS, registered apps, root and not-found routes),
binds it with uvicorn and, once it is listening, runs the interactive
console on stdin alongside it.
"""
import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Iterable, Optional, TextIO

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from codexsun import __version__
from codexsun.check_port import bind_socket
from codexsun.cli.commands import CommandRunner
from codexsun.cli.loop import start_cli
from codexsun.core.app_loader import RouteProvider, load_providers, register_apps
from codexsun.core.config import Settings
from codexsun.core.middleware import install_cors, install_request_logging, request_target
from codexsun.core.server_logger import server_logger, setup_logging

logger = logging.getLogger(__name__)

WELCOME = {"message": "Welcome to Codexsun!"}

# Methods the catch-all route answers; OPTIONS never gets this far
NOT_FOUND_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

STARTUP_POLL_SECONDS = 0.05


@dataclass
class RunningServer:
    app: FastAPI
    server: uvicorn.Server
    task: asyncio.Task
    host: str
    port: int


def not_found_body(request: Request) -> dict:
    return {
        "error": "Not Found",
        "message": f"Route {request.method} {request_target(request)} not found",
        "statusCode": 404,
    }


async def build_app(settings: Settings, providers: Optional[Iterable[RouteProvider]] = None) -> FastAPI:
    """
    Construct the application.

    Order matters: registered apps come before the root route, so an app
    may override GET /, and the not-found route is added last so it only
    sees requests nothing else matched.
    """
    app = FastAPI(
        title="Codexsun",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    install_cors(app, settings.cors_origins)
    install_request_logging(app)

    if providers is None:
        providers = load_providers(settings.apps)
    await register_apps(app, providers)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return WELCOME

    @app.api_route("/{path:path}", methods=NOT_FOUND_METHODS, include_in_schema=False)
    async def not_found(request: Request, path: str):
        return JSONResponse(status_code=404, content=not_found_body(request))

    return app


async def start_server(settings: Settings, providers: Optional[Iterable[RouteProvider]] = None) -> RunningServer:
    """
    Build the app and start serving it on settings.host:settings.port.

    Exits the process with code 1 if the address cannot be bound. Returns
    once uvicorn reports the server as started.
    """
    app = await build_app(settings, providers)

    try:
        sock = bind_socket(settings.host, settings.port)
    except OSError as e:
        logger.error(f"Cannot listen on {settings.host}:{settings.port}: {e}", exc_info=True)
        sys.exit(1)

    port = sock.getsockname()[1]
    config = uvicorn.Config(
        app,
        log_config=None,
        log_level=settings.log_level.lower(),
        access_log=False,
    )
    server = uvicorn.Server(config)
    task = asyncio.create_task(server.serve(sockets=[sock]))

    while not server.started:
        if task.done():
            sock.close()
            task.result()
            raise RuntimeError("Server stopped before it finished starting")
        await asyncio.sleep(STARTUP_POLL_SECONDS)

    server_logger(f"🚀 Server running on http://{settings.host}:{port}")
    return RunningServer(app=app, server=server, task=task, host=settings.host, port=port)


async def serve(
    settings: Settings,
    providers: Optional[Iterable[RouteProvider]] = None,
    stdin: Optional[TextIO] = None,
) -> None:
    """Start the server, then run the console until the server stops."""
    try:
        running = await start_server(settings, providers)
    except Exception as e:
        print(f"Fatal startup error {e}", file=sys.stderr, flush=True)
        logger.debug("Startup failed", exc_info=True)
        sys.exit(1)

    runner = CommandRunner(settings, running.app)
    cli_task = asyncio.create_task(start_cli(runner, stdin))
    try:
        await running.task
    finally:
        cli_task.cancel()
        results = await asyncio.gather(cli_task, return_exceptions=True)
        if isinstance(results[0], Exception):
            logger.error(f"Console stopped with an error: {results[0]}")

    logger.info("Server stopped")


def main():
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"Fatal startup error {e}", file=sys.stderr, flush=True)
        sys.exit(1)

    setup_logging(settings)
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
