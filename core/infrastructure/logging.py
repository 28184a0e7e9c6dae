"""
Logging infrastructure.

One format for every process entry point; modules just call
``logging.getLogger(__name__)``.
"""
import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler once per process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # aiosqlite logs every statement at DEBUG
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
