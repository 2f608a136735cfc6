"""
loguru setup shared by every module: ``from rsvphub.core.logging import logger``.
"""
import sys
from loguru import logger
from rsvphub.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging() -> None:
    logger.remove()
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=settings.log_level, colorize=True)

    if settings.ENVIRONMENT == "production":
        logger.add(
            settings.LOG_FILE,
            format=FILE_FORMAT,
            level="INFO",
            rotation="100 MB",
            retention="14 days",
            compression="zip",
            enqueue=True,
        )


configure_logging()

__all__ = ["logger", "configure_logging"]
