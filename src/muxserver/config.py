import os

HTTP_HOST: str = os.getenv('HTTP_HOST', '0.0.0.0')
HTTP_PORT: int = int(os.getenv('HTTP_PORT', '8081'))

LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'info').lower()

STARTUP_TIMEOUT: float = float(os.getenv('STARTUP_TIMEOUT', '15'))

GRACEFUL_SHUTDOWN_TIMEOUT: float = float(
    os.getenv('GRACEFUL_SHUTDOWN_TIMEOUT', '15')
)
GRACEFUL_SHUTDOWN_LOG_INTERVAL: float = float(
    os.getenv('GRACEFUL_SHUTDOWN_LOG_INTERVAL', '5')
)
FORCE_CLOSE_TIMEOUT: float = float(os.getenv('FORCE_CLOSE_TIMEOUT', '1.0'))
