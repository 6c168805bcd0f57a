"""
Server configuration loaded from environment variables.

Settings are read once at startup and passed explicitly to the server,
the CLI runner and the logging setup.
"""
import os
from dataclasses import dataclass, field
from typing import List, Union

from dotenv import load_dotenv

load_dotenv()

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_APPS = "codexsun.apps.system:register"

ANY_ORIGIN = "*"


def get_app_host() -> str:
    """Host the HTTP server binds to."""
    return os.getenv("APP_HOST", DEFAULT_HOST).strip() or DEFAULT_HOST


def get_app_port() -> int:
    """Port the HTTP server binds to."""
    raw = os.getenv("APP_PORT", str(DEFAULT_PORT)).strip()
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"APP_PORT must be a valid integer, got {raw!r}. Configure this in your .env file.")
    if not 0 <= port <= 65535:
        raise ValueError(f"APP_PORT must be between 0 and 65535, got {port}.")
    return port


def parse_origins(value: str) -> Union[str, List[str]]:
    """
    Parse a CORS_ORIGINS value.

    Returns "*" when any origin is allowed, otherwise the list of
    allowed origins with surrounding whitespace removed.
    """
    origins = [origin.strip() for origin in value.split(",") if origin.strip()]
    if not origins or ANY_ORIGIN in origins:
        return ANY_ORIGIN
    return origins


def parse_apps(value: str) -> List[str]:
    specs = [spec.strip() for spec in value.split(",") if spec.strip()]
    for spec in specs:
        module, _, attr = spec.partition(":")
        if not module or not attr:
            raise ValueError(f"CODEXSUN_APPS entries must look like 'package.module:attr', got {spec!r}.")
    return specs


@dataclass
class Settings:
    """Centralized configuration for one server process."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    cors_origins: Union[str, List[str]] = ANY_ORIGIN
    apps: List[str] = field(default_factory=lambda: [DEFAULT_APPS])

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=get_app_host(),
            port=get_app_port(),
            log_level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            cors_origins=parse_origins(os.getenv("CORS_ORIGINS", ANY_ORIGIN)),
            apps=parse_apps(os.getenv("CODEXSUN_APPS", DEFAULT_APPS)),
        )

    @property
    def cors_allows_any_origin(self) -> bool:
        return self.cors_origins == ANY_ORIGIN

    @property
    def base_url(self) -> str:
        host = self.host
        if host in ("0.0.0.0", ""):
            host = "127.0.0.1"
        elif host == "::":
            host = "::1"
        if ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{self.port}"
