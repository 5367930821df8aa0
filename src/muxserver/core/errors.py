class MuxServerError(Exception):
    """Base class for errors raised by muxserver."""


class RouteConfigurationError(MuxServerError, ValueError):
    """A set of routes cannot be assembled into a router."""


class InvalidRouteError(RouteConfigurationError):
    """A route declares an unusable pattern."""


class DuplicateRouteError(RouteConfigurationError):
    """Two routes declare the same pattern."""


class LifecycleError(MuxServerError, RuntimeError):
    """A lifecycle hook was called in a state that does not allow it."""


class ServerStartError(MuxServerError, RuntimeError):
    """The server could not start listening. Fatal for the process."""


class ShutdownTimeoutError(MuxServerError, TimeoutError):
    """Graceful shutdown did not finish before its deadline."""

    def __init__(self, timeout: float, open_connections: int) -> None:
        self.timeout = timeout
        self.open_connections = open_connections
        super().__init__(
            f'graceful shutdown exceeded {timeout}s deadline with '
            f'{open_connections} connection(s) still open'
        )
