import asyncio
import signal
import sys

from muxserver.app import build_server
from muxserver.config import GRACEFUL_SHUTDOWN_TIMEOUT, LOG_LEVEL, STARTUP_TIMEOUT
from muxserver.core.errors import ServerStartError, ShutdownTimeoutError
from muxserver.core.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def run() -> None:
    """Start the server, wait for SIGINT/SIGTERM, then stop it."""
    server = build_server()

    try:
        await asyncio.wait_for(server.start(), timeout=STARTUP_TIMEOUT)
    except asyncio.TimeoutError:
        raise ServerStartError(f'start did not complete within {STARTUP_TIMEOUT}s')

    loop = asyncio.get_running_loop()
    received = asyncio.Event()

    def _on_signal(sig: signal.Signals) -> None:
        logger.info(f'Received {sig.name}, shutting down')
        received.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _on_signal, sig)

    try:
        await received.wait()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)

    await server.stop(timeout=GRACEFUL_SHUTDOWN_TIMEOUT)


def main() -> int:
    configure_logging(LOG_LEVEL)
    try:
        asyncio.run(run())
    except ServerStartError as exc:
        logger.error(f'Startup failed: {exc}')
        return 1
    except ShutdownTimeoutError as exc:
        logger.error(f'Shutdown incomplete: {exc}')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
