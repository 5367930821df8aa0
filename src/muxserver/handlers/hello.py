import logging

from starlette.requests import ClientDisconnect, Request
from starlette.responses import PlainTextResponse, Response

INTERNAL_ERROR_TEXT: str = 'Internal server error'


class HelloHandler:
    """Greet the request body: ``Hello, <body>\\n``."""

    def __init__(self, log: logging.Logger) -> None:
        self._log = log

    @property
    def pattern(self) -> str:
        return 'hello'

    async def handle(self, request: Request) -> Response:
        try:
            body = await request.body()
        except ClientDisconnect as exc:
            self._log.error(f'Failed to read request: {exc!r}')
            return PlainTextResponse(INTERNAL_ERROR_TEXT, status_code=500)

        return PlainTextResponse(b'Hello, ' + body + b'\n')
