"""Runtime configuration helpers."""

from fetal_health.config.logging import configure_logging

__all__ = ["configure_logging"]
