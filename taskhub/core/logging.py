"""
Logging setup for TaskHub.

Every module logs through ``logging.getLogger(__name__)``; this configures the
``taskhub`` parent logger once at application startup.
"""
import logging
from typing import Union

LOGGER_NAME = "taskhub"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s"


def setup_logging(log_level: Union[str, int] = logging.INFO) -> logging.Logger:
    """Attach a console handler to the ``taskhub`` logger."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Re-running setup (tests, reloads) must not stack handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        logging.Formatter(fmt=DETAILED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(console_handler)
    logger.propagate = False

    logger.info("TaskHub logging initialized at level %s", logging.getLevelName(logger.level))
    return logger
