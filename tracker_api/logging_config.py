import logging

from .config import settings


def configure_logging():
    """Configure basic logging for the API process and the scheduler threads.

    Uses a simple format including level, module, and message. Safe to call
    more than once; handlers are only installed the first time.
    """
    if logging.getLogger().handlers:
        # Already configured (avoid duplicate handlers in reload / dev)
        return
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=fmt)


def get_logger(name: str):
    configure_logging()
    return logging.getLogger(name)
