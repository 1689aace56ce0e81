import sys

from loguru import logger

from tracker.config import settings


def configure_logging(level: str = None) -> None:
    """Route loguru output to stderr at the configured level"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.log_level).upper(),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {name}:{line} | {message}",
    )
