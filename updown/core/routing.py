"""Per-path dispatch by HTTP method.

A path is registered with an optional GET and an optional POST handler. Any
other method on a registered path is answered by the router with 405 and an
``Allow`` header; the app's error handler strips the body.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import APIRouter


@dataclass(frozen=True)
class ByMethod:
    get: Optional[Callable[..., Any]] = None
    post: Optional[Callable[..., Any]] = None


def route_by_method(router: APIRouter, path: str, handlers: ByMethod, **route_kwargs: Any) -> None:
    registered = 0
    for method, endpoint in (("GET", handlers.get), ("POST", handlers.post)):
        if endpoint is None:
            continue
        router.add_api_route(path, endpoint, methods=[method], **route_kwargs)
        registered += 1
    if not registered:
        raise ValueError(f"No handler given for {path}")
