"""Configuration and setup for logging."""

import sys

from loguru import logger

from fetal_health.settings import FetalHealthSettings


def configure_logging(settings: FetalHealthSettings) -> None:
    """Replace loguru's default handler with one driven by the settings."""
    logger.remove()  # Remove default handler

    if settings.logging.serialize:
        logger.add(
            sys.stderr,
            serialize=True,
            level=settings.logging.level,
            format="{message}",
            backtrace=True,
            diagnose=settings.debug,
        )
        return

    logger.add(
        sys.stderr,
        level=settings.logging.level,
        format=(
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "{extra} <level>{message}</level>"
        ),
        backtrace=True,
        diagnose=settings.debug,
    )
