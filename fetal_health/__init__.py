"""Fetal health classification from cardiotocography features."""

from fetal_health.containers import Container, container
from fetal_health.settings import FetalHealthSettings

__all__ = [
    "Container",
    "container",
    "FetalHealthSettings",
]
