"""Application services built on top of the core pipeline."""

from fetal_health.services.repeated_runner import RepeatedRunner, derive_seeds

__all__ = ["RepeatedRunner", "derive_seeds"]
