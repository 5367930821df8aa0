import asyncio
import contextlib
import enum
import socket
from typing import Iterator, List, Optional, Tuple

import uvicorn
from starlette.types import ASGIApp

from muxserver.config import (
    FORCE_CLOSE_TIMEOUT,
    GRACEFUL_SHUTDOWN_LOG_INTERVAL,
    GRACEFUL_SHUTDOWN_TIMEOUT,
    HTTP_HOST,
    HTTP_PORT,
    LOG_LEVEL,
)
from muxserver.core.errors import LifecycleError, ServerStartError, ShutdownTimeoutError
from muxserver.core.logging import get_logger

logger = get_logger(__name__)


class ServerState(enum.Enum):
    CREATED = 'created'
    STARTING = 'starting'
    RUNNING = 'running'
    STOPPING = 'stopping'
    STOPPED = 'stopped'
    FAILED = 'failed'


class _ManagedServer(uvicorn.Server):
    """uvicorn server driven by HttpServer instead of process signals.

    Signal capturing is disabled because the supervisor owns SIGINT and
    SIGTERM, and `ready` is set once the startup phase is over, whether it
    succeeded or not. A failed startup ends `serve` with `started` still
    False instead of exiting the process.
    """

    def __init__(self, config: uvicorn.Config) -> None:
        super().__init__(config)
        self.ready = asyncio.Event()

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield

    async def serve(self, sockets: Optional[List[socket.socket]] = None) -> None:
        try:
            await super().serve(sockets=sockets)
        except SystemExit as exc:
            # uvicorn calls sys.exit() when the application fails to start.
            logger.error(f'uvicorn exited during startup with status {exc.code}')
            self.should_exit = True
        finally:
            self.ready.set()

    async def startup(self, sockets: Optional[List[socket.socket]] = None) -> None:
        try:
            await super().startup(sockets=sockets)
        finally:
            self.ready.set()

    @property
    def open_connections(self) -> int:
        return len(self.server_state.connections)


class HttpServer:
    """Own the listening socket and the uvicorn server serving `app`.

    The manager is driven from outside: `start` binds and launches serving
    on a background task, `stop` shuts down gracefully within a deadline.

    States: created -> starting -> running -> stopping -> stopped, with
    failed as the terminal state of an unsuccessful start.
    """

    def __init__(
        self,
        app: ASGIApp,
        host: str = HTTP_HOST,
        port: int = HTTP_PORT,
        shutdown_timeout: float = GRACEFUL_SHUTDOWN_TIMEOUT,
        log_interval: float = GRACEFUL_SHUTDOWN_LOG_INTERVAL,
    ) -> None:
        """Prepare the server without touching the network.

        Args:
            app: ASGI application to serve, usually from `create_app`.
            host: Interface to listen on.
            port: TCP port to listen on; 0 picks a free port.
            shutdown_timeout: Default deadline for `stop`, in seconds.
            log_interval: Seconds between shutdown progress log lines.
        """
        self._host = host
        self._port = port
        self._shutdown_timeout = shutdown_timeout
        self._log_interval = log_interval

        self._config = uvicorn.Config(app, host=host, port=port, log_level=LOG_LEVEL)
        self._server = _ManagedServer(self._config)
        self._socket: Optional[socket.socket] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._stopped = asyncio.Event()

        self.state = ServerState.CREATED

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port) once started, the configured pair before."""
        if self._socket is None or self._socket.fileno() == -1:
            return self._host, self._port
        host, port = self._socket.getsockname()[:2]
        return host, port

    async def start(self) -> None:
        """Bind the listener and start serving in the background.

        Returns once the socket is bound and uvicorn has finished its
        startup phase; connections are handled on a separate task.

        Raises:
            LifecycleError: The server was already started.
            ServerStartError: The address cannot be bound or uvicorn
                failed to start. The server is left in the failed state.
        """
        if self.state is not ServerState.CREATED:
            raise LifecycleError(f'cannot start server in state {self.state.value}')
        self.state = ServerState.STARTING

        try:
            self._socket = socket.create_server(
                (self._host, self._port), backlog=self._config.backlog
            )
        except OSError as exc:
            self.state = ServerState.FAILED
            logger.error(f'Failed to listen on {self._host}:{self._port}: {exc}')
            raise ServerStartError(f'cannot listen on {self._host}:{self._port}') from exc

        host, port = self.address
        logger.info(f'Starting HTTP server at {host}:{port}')

        self._serve_task = asyncio.create_task(
            self._server.serve(sockets=[self._socket])
        )
        ready = asyncio.create_task(self._server.ready.wait())
        try:
            await asyncio.wait(
                {ready, self._serve_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            self.state = ServerState.FAILED
            logger.error(f'Start of HTTP server at {host}:{port} was cancelled')
            self._serve_task.cancel()
            self._socket.close()
            raise
        finally:
            ready.cancel()

        if not self._server.started:
            self.state = ServerState.FAILED
            await self._abort_start()
            raise ServerStartError(f'HTTP server at {host}:{port} failed to start')

        self.state = ServerState.RUNNING

    async def stop(self, timeout: Optional[float] = None) -> None:
        """Gracefully shut the server down.

        The listener is closed first so no new connection is accepted,
        whatever happens next. In-flight requests get until the deadline
        to finish; connections still open after that are aborted. A call
        made while another stop is in progress waits for that one to
        finish and returns without raising.

        Args:
            timeout: Deadline in seconds; defaults to the configured
                graceful shutdown timeout.

        Raises:
            LifecycleError: The server is not running.
            ShutdownTimeoutError: Connections were still open at the
                deadline and had to be force-closed.
        """
        if self.state is ServerState.STOPPED:
            return
        if self.state is ServerState.STOPPING:
            await self._stopped.wait()
            return
        if self.state is not ServerState.RUNNING:
            raise LifecycleError(f'cannot stop server in state {self.state.value}')
        if timeout is None:
            timeout = self._shutdown_timeout

        self.state = ServerState.STOPPING
        host, port = self.address
        logger.info(f'Stopping HTTP server at {host}:{port} (timeout={timeout}s)')

        self._server.should_exit = True
        for listener in self._server.servers:
            listener.close()

        try:
            if not await self._wait_for_drain(timeout):
                open_connections = self._server.open_connections
                logger.warning(
                    f'FORCE shutdown → still {open_connections} connections open '
                    f'after {timeout}s'
                )
                await self._force_close()
                self.state = ServerState.STOPPED
                raise ShutdownTimeoutError(timeout, open_connections)

            self.state = ServerState.STOPPED
        finally:
            self._stopped.set()

        # Surface errors raised inside uvicorn's shutdown.
        self._serve_task.result()
        logger.info('HTTP server shutdown complete.')

    async def _wait_for_drain(self, timeout: float) -> bool:
        """Wait for uvicorn to finish serving; False if the deadline passed."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while not self._serve_task.done():
            remaining = deadline - loop.time()
            if remaining <= 0:
                return False

            logger.info(
                f'Shutdown progress | connections={self._server.open_connections} '
                f'| remaining={remaining:.1f}s'
            )
            await asyncio.wait(
                {self._serve_task}, timeout=min(self._log_interval, remaining)
            )

        return True

    async def _force_close(self) -> None:
        server = self._server
        server.force_exit = True
        for connection in list(server.server_state.connections):
            transport = getattr(connection, 'transport', None)
            if transport is not None:
                transport.abort()

        try:
            await asyncio.wait_for(self._serve_task, timeout=FORCE_CLOSE_TIMEOUT)
        except asyncio.TimeoutError:
            logger.error('HTTP server did not exit after force close, cancelled')
        except Exception:
            logger.exception('HTTP server failed during forced shutdown')

        for task in list(server.server_state.tasks):
            task.cancel()

    async def _abort_start(self) -> None:
        try:
            await self._serve_task
        except Exception as exc:
            raise ServerStartError('HTTP server failed to start') from exc
        finally:
            self._socket.close()
