"""
App loader - resolves route providers and registers them on the server.

A route provider is any callable taking the FastAPI app. It may be a plain
function or a coroutine function; either way it attaches its routes,
routers or middleware to the app before the server starts listening.
"""
import importlib
import inspect
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Union

from fastapi import FastAPI

logger = logging.getLogger(__name__)

RouteProvider = Callable[[FastAPI], Optional[Awaitable[Any]]]


def load_provider(spec: str) -> RouteProvider:
    """
    Import a provider from a "package.module:attr" string.

    Raises:
        ValueError: If the spec is malformed or the attribute is not callable
        ImportError / AttributeError: If the module or attribute does not exist
    """
    module_name, _, attr_path = spec.partition(":")
    if not module_name or not attr_path:
        raise ValueError(f"Invalid app provider {spec!r}, expected 'package.module:attr'")

    target: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        target = getattr(target, attr)

    if not callable(target):
        raise ValueError(f"App provider {spec!r} is not callable")
    return target


def load_providers(specs: Iterable[str]) -> List[RouteProvider]:
    return [load_provider(spec) for spec in specs]


def provider_name(provider: RouteProvider) -> str:
    module = getattr(provider, "__module__", None)
    name = getattr(provider, "__qualname__", None) or type(provider).__name__
    return f"{module}:{name}" if module else name


async def register_apps(app: FastAPI, providers: Iterable[Union[RouteProvider, str]]) -> int:
    """
    Run each provider against the app, in order.

    Strings are resolved with load_provider first. Any exception raised by
    a provider propagates to the caller.

    Returns:
        Number of providers registered
    """
    count = 0
    for provider in providers:
        if isinstance(provider, str):
            provider = load_provider(provider)
        name = provider_name(provider)
        logger.debug(f"Registering app {name}")
        result = provider(app)
        if inspect.isawaitable(result):
            await result
        logger.info(f"Registered app: {name}")
        count += 1

    logger.info(f"Registered {count} app(s)")
    return count
