"""
Lightweight router: (method, path) -> handler + middleware chain.

Paths are normalized by dropping trailing slashes ("" becomes "/"). A segment
written as ``:name`` captures that part of the URL into ``request.params``.
Exact paths are looked up first; templates are tried in registration order.
Registering the same key twice replaces the earlier route.

Handlers take the ``Request`` and return a ``JsonResponder``. ``dispatch``
always returns a responder, errors included; the transport writes it out.
"""

import logging
from typing import Callable, Iterable

from .errors import INTERNAL_ERROR_MESSAGE, ApiError, NotFoundError
from .request import Request
from .responder import JsonResponder

logger = logging.getLogger(__name__)

Handler = Callable[[Request], JsonResponder]
Middleware = Callable[[Request], None]


def normalize(method: str, path: str) -> tuple[str, str]:
    return method.upper(), path.rstrip("/") or "/"


class Route:
    def __init__(self, method: str, path: str, handler: Handler, middlewares: list):
        self.method = method
        self.path = path
        self.handler = handler
        self.middlewares = middlewares
        self.segments = path.split("/")
        self.is_template = any(s.startswith(":") for s in self.segments)

    def match(self, segments: list) -> dict | None:
        if len(segments) != len(self.segments):
            return None
        params = {}
        for pattern, value in zip(self.segments, segments):
            if pattern.startswith(":"):
                if not value:
                    return None
                params[pattern[1:]] = value
            elif pattern != value:
                return None
        return params


class Router:
    def __init__(self):
        self._routes: dict[tuple[str, str], Route] = {}
        self._middlewares: list[Middleware] = []

    def register(self, method: str, path: str, handler: Handler, middlewares: Iterable[Middleware] = ()) -> None:
        key = normalize(method, path)
        self._routes[key] = Route(key[0], key[1], handler, list(middlewares))

    def add_middleware(self, middleware: Middleware) -> None:
        """Global middleware; runs before route middleware on every matched request."""
        self._middlewares.append(middleware)

    def match(self, method: str, path: str) -> tuple[Route, dict] | None:
        route = self._routes.get((method, path))
        if route is not None:
            return route, {}
        segments = path.split("/")
        for route in self._routes.values():
            if route.method != method or not route.is_template:
                continue
            params = route.match(segments)
            if params is not None:
                return route, params
        return None

    def dispatch(self, request: Request) -> JsonResponder:
        method, path = normalize(request.method, request.path)
        try:
            found = self.match(method, path)
            if found is None:
                raise NotFoundError(f"Route not found: {method} {path}")
            route, params = found
            request.params.update(params)

            for middleware in self._middlewares:
                middleware(request)
            for middleware in route.middlewares:
                middleware(request)

            result = route.handler(request)
            if not isinstance(result, JsonResponder):
                raise TypeError(f"Handler for {method} {path} returned {type(result).__name__}")
            return result
        except ApiError as exc:
            if exc.status >= 500:
                logger.error("%s %s failed: %s", method, path, exc.message)
            return JsonResponder.from_error(exc)
        except Exception:
            logger.exception("Unhandled error in %s %s", method, path)
            return JsonResponder.error(INTERNAL_ERROR_MESSAGE, http_status=500)
