import copy
import logging
import logging.config
from typing import Optional

from uvicorn.config import LOGGING_CONFIG

BASE_LOGGER: str = 'uvicorn.error'


def configure_logging(level: str = 'info') -> None:
    """Install uvicorn's logging configuration before any server exists.

    The supervisor logs before `uvicorn.Config` is built, and uvicorn only
    configures its handlers when a config object is created, so the same
    dictConfig is applied here up front.

    Args:
        level: Log level name, e.g. ``info`` or ``debug``.
    """
    config = copy.deepcopy(LOGGING_CONFIG)
    for name in ('uvicorn', 'uvicorn.error'):
        config['loggers'][name]['level'] = level.upper()
    logging.config.dictConfig(config)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return application logger wired into Uvicorn's error logger.

    All logs go through `uvicorn.error` handlers, so they appear in
    console output together with Uvicorn's own startup and access logs.
    A leading ``muxserver.`` is dropped from module names to keep the
    logger names short.

    Args:
        name: Optional child logger name, usually ``__name__``.

    Returns:
        logging.Logger: Application logger.
    """
    base = logging.getLogger(BASE_LOGGER)
    if not name:
        return base

    if name.startswith('muxserver.'):
        name = name[len('muxserver.'):]
    return base.getChild(name)
