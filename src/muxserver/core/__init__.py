from .errors import (
    DuplicateRouteError,
    InvalidRouteError,
    LifecycleError,
    MuxServerError,
    RouteConfigurationError,
    ServerStartError,
    ShutdownTimeoutError,
)
from .lifecycle import HttpServer, ServerState

__all__ = [
    'DuplicateRouteError',
    'HttpServer',
    'InvalidRouteError',
    'LifecycleError',
    'MuxServerError',
    'RouteConfigurationError',
    'ServerStartError',
    'ServerState',
    'ShutdownTimeoutError',
]
