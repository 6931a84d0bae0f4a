"""Dataset definitions: outcome classes, loading and descriptive statistics."""

from fetal_health.core.data.classes import CLASS_ORDER, TARGET_COLUMN, ClassChoice, FetalHealth
from fetal_health.core.data.loaders import CsvDatasetLoader, features_and_labels
from fetal_health.core.data.summary import class_distribution, class_means, imbalance_ratio

__all__ = [
    "CLASS_ORDER",
    "TARGET_COLUMN",
    "ClassChoice",
    "FetalHealth",
    "CsvDatasetLoader",
    "features_and_labels",
    "class_distribution",
    "class_means",
    "imbalance_ratio",
]
