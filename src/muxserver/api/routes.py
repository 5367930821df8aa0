from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from starlette import routing
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from muxserver.core.errors import DuplicateRouteError, InvalidRouteError
from muxserver.core.logging import get_logger

logger = get_logger(__name__)

# Starlette compiles these into path parameters.
TEMPLATE_CHARS: str = '{}'


@runtime_checkable
class Route(Protocol):
    """A request handler that knows which path it is served on."""

    @property
    def pattern(self) -> str:
        ...

    async def handle(self, request: Request) -> Response:
        ...


def route_path(pattern: str) -> str:
    """Return the request path a route pattern is bound to.

    ``'echo'`` and ``'/echo'`` both map to ``'/echo'``.
    """
    return '/' + pattern.lstrip('/')


class RouteEndpoint:
    """ASGI endpoint serving one route for every request method.

    Starlette only filters methods for plain function endpoints, so
    wrapping the handler in an ASGI callable leaves method matching off.
    """

    def __init__(self, route: Route) -> None:
        self.route = route
        self._app = routing.request_response(route.handle)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._app(scope, receive, send)


class Router:
    """Exact-path dispatch table built once from an ordered set of routes.

    Every route is bound to ``route_path(route.pattern)`` whatever the
    request method. The table is immutable once built; two routes that map
    to the same path are rejected here, never at request time.
    """

    def __init__(self, routes: Iterable[Route]) -> None:
        """Register routes in order.

        Args:
            routes: Routes to serve. Ownership stays with the caller.

        Raises:
            InvalidRouteError: A route declares an empty pattern or one
                containing path parameter braces.
            DuplicateRouteError: Two routes map to the same path.
        """
        table = {}
        endpoints = []

        for route in routes:
            pattern = route.pattern
            if not pattern or not pattern.strip('/'):
                raise InvalidRouteError(
                    f'{type(route).__name__} declares an empty pattern {pattern!r}'
                )
            if any(char in pattern for char in TEMPLATE_CHARS):
                raise InvalidRouteError(
                    f'{type(route).__name__} declares pattern {pattern!r}; '
                    f'only literal paths are matched'
                )

            path = route_path(pattern)
            existing = table.get(path)
            if existing is not None:
                raise DuplicateRouteError(
                    f'pattern {pattern!r} of {type(route).__name__} is already '
                    f'registered by {type(existing).__name__} at {path}'
                )

            table[path] = route
            endpoints.append(
                routing.Route(path, endpoint=RouteEndpoint(route), name=type(route).__name__)
            )
            logger.debug(f'Registered {type(route).__name__} at {path}')

        self._routes: Mapping[str, Route] = MappingProxyType(table)
        self._endpoints: List[routing.Route] = endpoints

    @property
    def routes(self) -> Mapping[str, Route]:
        """Read-only mapping of request path to route."""
        return self._routes

    @property
    def endpoints(self) -> List[routing.Route]:
        """Starlette routes to mount on an application, in order."""
        return list(self._endpoints)

    @property
    def patterns(self) -> List[str]:
        return [route.pattern for route in self._routes.values()]

    def match(self, path: str) -> Optional[Route]:
        return self._routes.get(path)

    def __len__(self) -> int:
        return len(self._routes)
