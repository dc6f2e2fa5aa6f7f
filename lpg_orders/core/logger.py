# ================== LOGURU LOGGER CONFIG =====================
import sys

from loguru import logger

from lpg_orders.core.config import settings

log_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Reset loguru sinks: coloured stderr plus an optional rotating JSON file."""
    logger.remove()
    logger.add(sys.stderr, colorize=True, format=log_format, level=level or settings.LOG_LEVEL)

    path = log_file or settings.LOG_FILE
    if path:
        logger.add(
            path,
            rotation="100 MB",
            retention="10 days",
            compression="zip",
            serialize=True,
            level="DEBUG",
            enqueue=True,
            catch=True,
        )

