"""Method + path routing for the gallery request handler.

Routes are kept in an explicit, ordered table and evaluated by a single
matching function.  A pattern is a literal path relative to the router's
base path, with at most one dynamic segment written as ``:name``::

    router = Router("/sw")
    router.register("GET", "/images", list_images)
    router.register("GET", "/image/:id", get_image)

Registration order decides precedence.  Patterns registered for the same
method are expected to be disjoint (one dynamic-segment route per resource).

Every request goes through a logging pass before dispatch.  The pass only
observes the request; it never changes the request or the response.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from urllib.parse import unquote

from swgallery.core.errors import GalleryError
from swgallery.worker.messages import GalleryRequest, GalleryResponse

logger = logging.getLogger(__name__)

Handler = Callable[[GalleryRequest, dict[str, str]], Awaitable[GalleryResponse]]


@dataclass(frozen=True)
class Route:
    """One entry of the routing table.

    Attributes:
        method: Upper-case HTTP method.
        pattern: Full pattern including the base path.
        segments: ``pattern`` split on ``/``.
        param: Name of the dynamic segment, or ``None``.
        param_index: Position of the dynamic segment in ``segments``.
        handler: Coroutine function called on a match.
    """

    method: str
    pattern: str
    segments: tuple[str, ...]
    param: str | None
    param_index: int | None
    handler: Handler


def _split(path: str) -> tuple[str, ...]:
    return tuple(path.strip("/").split("/")) if path.strip("/") else ()


def match_route(route: Route, method: str, path: str) -> dict[str, str] | None:
    """Match *method* and *path* against a single route.

    Returns:
        The bound path parameters (possibly empty) on a match, else ``None``.
    """
    if route.method != method.upper():
        return None

    segments = _split(path)
    if len(segments) != len(route.segments):
        return None

    params: dict[str, str] = {}
    for index, (expected, actual) in enumerate(zip(route.segments, segments)):
        if index == route.param_index:
            value = unquote(actual)
            if not value:
                return None
            params[route.param] = value
        elif expected != actual:
            return None
    return params


class Router:
    """Ordered routing table with a logging pass.

    Attributes:
        base_path: Prefix prepended to every registered pattern.
        routes: Registered routes in precedence order.
    """

    def __init__(self, base_path: str = "") -> None:
        self.base_path = base_path.rstrip("/")
        self.routes: list[Route] = []

    def register(self, method: str, pattern: str, handler: Handler) -> Route:
        """Append a route to the table.

        Args:
            method: HTTP method, case-insensitive.
            pattern: Path relative to ``base_path``, e.g. ``/image/:id``.
            handler: Coroutine function ``(request, params) -> response``.

        Returns:
            The registered :class:`Route`.

        Raises:
            ValueError: If the pattern has more than one dynamic segment or
                an unnamed one.
        """
        full_pattern = f"{self.base_path}/{pattern.lstrip('/')}"
        segments = _split(full_pattern)
        dynamic = [i for i, segment in enumerate(segments) if segment.startswith(":")]

        if len(dynamic) > 1:
            raise ValueError(f"Pattern {pattern!r} has more than one dynamic segment")

        param = param_index = None
        if dynamic:
            param_index = dynamic[0]
            param = segments[param_index][1:]
            if not param:
                raise ValueError(f"Pattern {pattern!r} has an unnamed dynamic segment")

        route = Route(
            method=method.upper(),
            pattern=full_pattern,
            segments=segments,
            param=param,
            param_index=param_index,
            handler=handler,
        )
        self.routes.append(route)
        return route

    def match(self, method: str, path: str) -> tuple[Route, dict[str, str]] | None:
        """Return the first route matching *method* and *path* with its parameters."""
        for route in self.routes:
            params = match_route(route, method, path)
            if params is not None:
                return route, params
        return None

    def owns(self, path: str) -> bool:
        """Whether *path* falls under this router's base path."""
        if not self.base_path:
            return True
        return path == self.base_path or path.startswith(self.base_path + "/")

    def log_request(self, request: GalleryRequest) -> None:
        logger.info(
            f"{request.method} {request.url} | Mode: {request.mode} | "
            f"Destination: {request.destination} | Referrer: {request.referrer}"
        )

    async def dispatch(self, request: GalleryRequest) -> GalleryResponse:
        """Log *request*, run the matching handler and return its response.

        Errors raised as :class:`GalleryError` become structured JSON error
        responses.  No matching route yields a 404.
        """
        self.log_request(request)

        found = self.match(request.method, request.path)
        if found is None:
            return GalleryResponse.json({"error": "Not found"}, status=404)

        route, params = found
        try:
            return await route.handler(request, params)
        except GalleryError as e:
            if e.status_code >= 500:
                logger.error(f"{request.method} {route.pattern} failed: {e.message}")
            return GalleryResponse.json(e.to_payload(), status=e.status_code)
