"""Preprocessing components: splitting, class balancing, scaling and PCA."""

from fetal_health.core.preprocessing.balancers import (
    BalancedSubset,
    BalancedTrainingSet,
    ClassBalancer,
)
from fetal_health.core.preprocessing.decomposition import (
    PCAProjection,
    PCAReducer,
    component_names,
)
from fetal_health.core.preprocessing.sampling import CombinedOverUnderSampler, ResampleTargets
from fetal_health.core.preprocessing.scaling import StandardizationParameters, Standardizer
from fetal_health.core.preprocessing.splitters import DatasetSplitter, Split

__all__ = [
    "BalancedSubset",
    "BalancedTrainingSet",
    "ClassBalancer",
    "PCAProjection",
    "PCAReducer",
    "component_names",
    "CombinedOverUnderSampler",
    "ResampleTargets",
    "StandardizationParameters",
    "Standardizer",
    "DatasetSplitter",
    "Split",
]
