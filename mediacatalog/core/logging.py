"""
Logging setup shared by the web app and the Celery worker.

Format: time | level | logger | message
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(settings) -> None:
    """
    Configure the root logger from ``settings.LOG_LEVEL``.

    A stdout handler is attached only when the root logger has none yet, so
    handlers installed by uvicorn or celery are kept. The uvicorn loggers are
    aligned to the same level.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not root_logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        console_handler.setLevel(log_level)
        root_logger.addHandler(console_handler)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(log_level)

    logging.getLogger("mediacatalog").info(
        "Logging configured: level=%s", settings.LOG_LEVEL
    )
