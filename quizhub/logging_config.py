import logging
import os

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None):
    """Configure the root logger once per process.

    Lambda runtimes install their own handler before our code runs, so an
    existing handler only gets its level adjusted.
    """
    level = (level or os.getenv("QUIZHUB_LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format=_FORMAT)
    # sqlalchemy echoes through its own logger
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
