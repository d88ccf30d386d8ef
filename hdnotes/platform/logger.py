import logging
import os
from logging.handlers import RotatingFileHandler

from hdnotes.platform.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging() -> None:
    """Root logging setup, called once when the app is created."""
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)


def get_logger(name: str) -> logging.Logger:
    """
    Creates a logger instance that writes to console and, when LOG_DIR is
    set, to a rotating file as well.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    settings = get_settings()
    level = settings.LOG_LEVEL.upper()
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(settings.LOG_DIR, "hdnotes.log"), maxBytes=10_000_000, backupCount=5
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    # handlers are attached here; avoid printing twice through the root logger
    logger.propagate = False

    return logger
