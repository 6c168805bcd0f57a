"""
HTTP middleware: CORS headers and request logging.
"""
import itertools
import logging
import time
from typing import List, Optional, Union

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

ALLOW_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"


def request_target(request: Request) -> str:
    """The request path and query exactly as sent, without percent-decoding."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        target = raw_path.decode("latin-1")
    else:
        target = request.scope.get("path", "/")
    query = request.scope.get("query_string", b"")
    if query:
        target += "?" + query.decode("latin-1")
    return target


def resolve_allowed_origin(origin: Optional[str], allowed: Union[str, List[str]]) -> Optional[str]:
    """Value for Access-Control-Allow-Origin, or None when the origin is not allowed."""
    if allowed == "*":
        return "*"
    if not origin:
        return None
    if origin.rstrip("/") in [o.rstrip("/") for o in allowed]:
        return origin
    return None


def add_vary_origin(response: Response) -> None:
    vary = response.headers.get("Vary")
    if not vary:
        response.headers["Vary"] = "Origin"
    elif "origin" not in [value.strip().lower() for value in vary.split(",")]:
        response.headers["Vary"] = f"{vary}, Origin"


def install_cors(app: FastAPI, allowed_origins: Union[str, List[str]] = "*") -> None:
    """
    Add CORS headers to every response and answer OPTIONS requests directly.

    OPTIONS requests on any path get an empty 204 and never reach a route.
    Unhandled route errors become a JSON 500 that still carries the headers.
    """

    def apply_headers(request: Request, response: Response) -> Response:
        allow_origin = resolve_allowed_origin(request.headers.get("origin"), allowed_origins)
        if allow_origin is not None:
            response.headers["Access-Control-Allow-Origin"] = allow_origin
        if allowed_origins != "*":
            add_vary_origin(response)
        response.headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
        return response

    @app.middleware("http")
    async def cors_headers(request: Request, call_next):
        if request.method == "OPTIONS":
            return apply_headers(request, Response(status_code=204))
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error for {request.method} {request_target(request)}: {e}", exc_info=True)
            response = JSONResponse(
                status_code=500,
                content={
                    "error": "Internal Server Error",
                    "message": "Internal server error",
                    "statusCode": 500,
                },
            )
        return apply_headers(request, response)


def install_request_logging(app: FastAPI) -> None:
    """Log an 'incoming request' and a 'request completed' record per request."""
    request_ids = itertools.count(1)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        req_id = f"req-{next(request_ids)}"
        url = request_target(request)
        client = request.client.host if request.client else None
        logger.info(
            "incoming request",
            extra={"reqId": req_id, "req": {"method": request.method, "url": url, "remoteAddress": client}},
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error("request failed", extra={"reqId": req_id}, exc_info=True)
            raise
        logger.info(
            "request completed",
            extra={
                "reqId": req_id,
                "req": {"method": request.method, "url": url},
                "res": {"statusCode": response.status_code},
                "responseTime": (time.perf_counter() - started) * 1000.0,
            },
        )
        return response
