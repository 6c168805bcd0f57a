"""
System routes bundled with the server.

Registered by default through CODEXSUN_APPS; provides the health check
used by the `status` CLI command.
"""
import time

from fastapi import APIRouter, FastAPI

from codexsun import __version__


def create_system_router() -> APIRouter:
    """
    Create the router for built-in system endpoints.

    Returns:
        APIRouter with GET /health
    """
    router = APIRouter(tags=["system"])
    started_at = time.monotonic()

    @router.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "ok",
            "service": "codexsun",
            "version": __version__,
            "uptime": round(time.monotonic() - started_at, 3),
        }

    return router


async def register(app: FastAPI) -> None:
    app.include_router(create_system_router())
