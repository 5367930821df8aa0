from typing import List, Optional

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from muxserver.api import Route, Router
from muxserver.config import HTTP_HOST, HTTP_PORT
from muxserver.core.lifecycle import HttpServer
from muxserver.core.logging import get_logger
from muxserver.handlers import EchoHandler, HelloHandler

NOT_FOUND_TEXT: str = '404 page not found\n'


async def not_found(request: Request, exc: Exception) -> PlainTextResponse:
    return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)


def create_app(router: Router) -> FastAPI:
    """Build the FastAPI application that dispatches to `router`.

    Paths match exactly: trailing-slash redirects are disabled, and
    anything unregistered gets a plain-text 404.

    Args:
        router: Router holding the routes to serve.

    Returns:
        FastAPI: Application ready to be handed to `HttpServer`.
    """
    app = FastAPI(
        title='muxserver',
        redirect_slashes=False,
        openapi_url=None,
        exception_handlers={404: not_found},
    )
    app.router.routes.extend(router.endpoints)
    app.state.router = router
    return app


def build_routes() -> List[Route]:
    """Construct every route the server offers, in registration order."""
    return [
        EchoHandler(get_logger('handlers.echo')),
        HelloHandler(get_logger('handlers.hello')),
    ]


def build_server(
    host: str = HTTP_HOST,
    port: int = HTTP_PORT,
    routes: Optional[List[Route]] = None,
) -> HttpServer:
    """Wire routes -> router -> application -> server.

    Args:
        host: Interface to listen on.
        port: TCP port to listen on.
        routes: Routes to serve; defaults to `build_routes()`.

    Returns:
        HttpServer: Server in the created state.
    """
    if routes is None:
        routes = build_routes()
    router = Router(routes)
    return HttpServer(create_app(router), host=host, port=port)
