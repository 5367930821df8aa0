"""Dependency-wired HTTP server with an echo and a hello route."""

from muxserver.api import Route, Router
from muxserver.app import build_routes, build_server, create_app
from muxserver.core import HttpServer, ServerState

__all__ = [
    'HttpServer',
    'Route',
    'Router',
    'ServerState',
    'build_routes',
    'build_server',
    'create_app',
]
