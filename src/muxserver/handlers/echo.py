import logging

from starlette.requests import ClientDisconnect, Request
from starlette.responses import Response


class EchoHandler:
    """Answer with the request body, byte for byte."""

    media_type: str = 'application/octet-stream'

    def __init__(self, log: logging.Logger) -> None:
        self._log = log

    @property
    def pattern(self) -> str:
        return 'echo'

    async def handle(self, request: Request) -> Response:
        """Copy the request body into the response.

        A body that breaks off mid-read is logged and answered with the
        bytes copied so far; the client sees whatever the transport still
        delivers.
        """
        body = bytearray()
        try:
            async for chunk in request.stream():
                body.extend(chunk)
        except ClientDisconnect as exc:
            self._log.warning(
                f'Failed to handle request: client disconnected after '
                f'{len(body)} bytes ({exc!r})'
            )

        return Response(content=bytes(body), media_type=self.media_type)
