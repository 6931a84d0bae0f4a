"""Model evaluation: confusion matrix statistics and pairwise ROC analysis."""

from fetal_health.core.evaluation.confusion import (
    ClassStatistics,
    ConfusionMatrixEvaluator,
    ConfusionMatrixReport,
)
from fetal_health.core.evaluation.roc import (
    ClassPair,
    MulticlassROCEvaluator,
    MulticlassROCReport,
    ROCCurve,
    roc_curve,
    trapezoidal_auc,
)

__all__ = [
    "ClassStatistics",
    "ConfusionMatrixEvaluator",
    "ConfusionMatrixReport",
    "ClassPair",
    "MulticlassROCEvaluator",
    "MulticlassROCReport",
    "ROCCurve",
    "roc_curve",
    "trapezoidal_auc",
]
