"""Pairwise ROC curves and AUC for multi-class probability predictions."""

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import combinations

from loguru import logger
import numpy as np
import polars as pl
from sklearn import metrics

from fetal_health.errors import EmptyDatasetError, UnknownLabelError

type ClassPair = tuple[str, str]
"""An unordered pair of classes, stored in class order; the first one is scored."""


@dataclass(frozen=True, slots=True)
class ROCCurve:
    """ROC curve of one class pair.

    Attributes:
        positive: Class whose predicted probability is the decision score.
        negative: The other class of the pair.
        fpr: False positive rates, ascending.
        tpr: True positive rates, ascending within equal `fpr`.
        thresholds: Score threshold of each point (`inf` for the origin).
        auc: Trapezoidal area under the curve, NaN when the pair lacks a class.
    """

    positive: str
    negative: str
    fpr: np.ndarray
    tpr: np.ndarray
    thresholds: np.ndarray
    auc: float

    @property
    def pair(self) -> ClassPair:
        return self.positive, self.negative

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            {
                "positive": [self.positive] * len(self.fpr),
                "negative": [self.negative] * len(self.fpr),
                "threshold": self.thresholds,
                "fpr": self.fpr,
                "tpr": self.tpr,
            },
            schema={
                "positive": pl.String,
                "negative": pl.String,
                "threshold": pl.Float64,
                "fpr": pl.Float64,
                "tpr": pl.Float64,
            },
        )


def roc_curve(scores: np.ndarray, is_positive: np.ndarray) -> tuple[np.ndarray, ...]:
    """(FPR, TPR, thresholds) sweeping every distinct score as threshold.

    A row is called positive when its score is at least the threshold. The origin
    is included with an infinite threshold. Points are sorted by FPR, then TPR.
    """
    fpr, tpr, thresholds = metrics.roc_curve(
        is_positive.astype(np.int64), scores, pos_label=1, drop_intermediate=False
    )
    order = np.lexsort((tpr, fpr))
    return fpr[order], tpr[order], thresholds[order]


def trapezoidal_auc(fpr: np.ndarray, tpr: np.ndarray) -> float:
    return float(metrics.auc(fpr, tpr))


@dataclass(frozen=True, slots=True)
class MulticlassROCReport:
    """One ROC curve per unordered class pair."""

    curves: dict[ClassPair, ROCCurve]

    def __getitem__(self, pair: ClassPair) -> ROCCurve:
        if pair in self.curves:
            return self.curves[pair]
        return self.curves[(pair[1], pair[0])]

    def __iter__(self):
        return iter(self.curves.values())

    def __len__(self) -> int:
        return len(self.curves)

    @property
    def mean_auc(self) -> float:
        """Mean of the defined pairwise AUCs."""
        aucs = [c.auc for c in self.curves.values() if not np.isnan(c.auc)]
        return float(np.mean(aucs)) if aucs else float("nan")

    def auc_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            {
                "positive": [c.positive for c in self],
                "negative": [c.negative for c in self],
                "auc": [c.auc for c in self],
            },
            schema={"positive": pl.String, "negative": pl.String, "auc": pl.Float64},
        )

    def curve_frame(self) -> pl.DataFrame:
        return pl.concat([c.to_frame() for c in self], how="vertical")


class MulticlassROCEvaluator:
    """Computes a ROC curve and AUC for each unordered pair of classes.

    For the pair (A, B), only rows whose actual class is A or B are kept, and the
    predicted probability of A is the score separating A (positive) from B.
    """

    def evaluate(
        self,
        actual: Sequence[object] | pl.Series | np.ndarray,
        probabilities: np.ndarray,
        class_order: Sequence[str],
    ) -> MulticlassROCReport:
        """Evaluate every class pair.

        Args:
            actual: True labels.
            probabilities: Shape (n_rows, n_classes), columns in `class_order`.
            class_order: Class of each probability column.

        Raises:
            ValueError: If the probability matrix does not match labels and classes.
            EmptyDatasetError: If there are no rows.
            UnknownLabelError: If a label is missing from `class_order`.
        """
        labels = np.asarray(
            actual.cast(pl.String).to_list() if isinstance(actual, pl.Series) else actual,
            dtype=object,
        ).astype(str)
        probabilities = np.asarray(probabilities, dtype=np.float64)
        classes = tuple(class_order)

        if labels.size == 0:
            raise EmptyDatasetError("evaluate")
        if probabilities.shape != (labels.size, len(classes)):
            raise ValueError(
                f"Probabilities of shape {probabilities.shape} do not match "
                f"{labels.size} rows and {len(classes)} classes"
            )
        unknown = sorted(set(labels.tolist()) - set(classes), key=str)
        if unknown:
            raise UnknownLabelError(unknown, classes)

        curves: dict[ClassPair, ROCCurve] = {}
        for (i, positive), (_, negative) in combinations(enumerate(classes), 2):
            mask = (labels == positive) | (labels == negative)
            scores = probabilities[mask, i]
            is_positive = labels[mask] == positive
            curves[(positive, negative)] = self._curve(positive, negative, scores, is_positive)

        return MulticlassROCReport(curves=curves)

    @staticmethod
    def _curve(
        positive: str, negative: str, scores: np.ndarray, is_positive: np.ndarray
    ) -> ROCCurve:
        if is_positive.all() or not is_positive.any():
            logger.warning(
                f"ROC for {positive} vs {negative} is undefined: "
                f"{int(is_positive.sum())} positive and {int((~is_positive).sum())} negative rows"
            )
            empty = np.array([], dtype=np.float64)
            return ROCCurve(positive, negative, empty, empty, empty, float("nan"))

        fpr, tpr, thresholds = roc_curve(scores, is_positive)
        return ROCCurve(
            positive=positive,
            negative=negative,
            fpr=fpr,
            tpr=tpr,
            thresholds=thresholds,
            auc=trapezoidal_auc(fpr, tpr),
        )


__all__ = [
    "ClassPair",
    "ROCCurve",
    "MulticlassROCReport",
    "MulticlassROCEvaluator",
    "roc_curve",
    "trapezoidal_auc",
]
