"""
Logging infrastructure.

Orchestration components log through named loggers under the
`orchestration.` namespace; everything else uses `logging.getLogger(__name__)`.
"""
import logging
from typing import Union


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance.

    Args:
        name: Logger name (e.g. "orchestration.submitter")

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Root configuration for entry points (API, scripts)."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
