# Core modules shared by the server and the CLI
from .config import Settings, get_app_host, get_app_port
from .server_logger import JsonLogHandler, LogStream, format_server_log, server_logger, setup_logging
from .middleware import install_cors, install_request_logging
from .app_loader import RouteProvider, load_provider, load_providers, register_apps

__all__ = [
    # Config
    "Settings",
    "get_app_host",
    "get_app_port",
    # Logging
    "JsonLogHandler",
    "LogStream",
    "format_server_log",
    "server_logger",
    "setup_logging",
    # Middleware
    "install_cors",
    "install_request_logging",
    # App loader
    "RouteProvider",
    "load_provider",
    "load_providers",
    "register_apps",
]
