"""Multi-class confusion matrix and its derived statistics."""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import polars as pl
from scipy import stats

from fetal_health.errors import EmptyDatasetError, UnknownLabelError


def _ratio(numerator: float, denominator: float) -> float:
    """`numerator / denominator`, NaN when the denominator is zero."""
    if denominator == 0:
        return float("nan")
    return float(numerator) / float(denominator)


def _as_labels(values: Sequence[object] | pl.Series | np.ndarray) -> list[str]:
    if isinstance(values, pl.Series):
        return values.cast(pl.String).to_list()
    return [str(v) for v in values]


@dataclass(frozen=True, slots=True)
class ClassStatistics:
    """One-vs-rest statistics of a class. Undefined ratios are NaN.

    Attributes:
        label: The positive class.
        true_positives / false_negatives / false_positives / true_negatives: Counts
            with `label` as the positive class and every other class as negative.
    """

    label: str
    true_positives: int
    false_negatives: int
    false_positives: int
    true_negatives: int

    @property
    def total(self) -> int:
        return (
            self.true_positives
            + self.false_negatives
            + self.false_positives
            + self.true_negatives
        )

    @property
    def sensitivity(self) -> float:
        return _ratio(self.true_positives, self.true_positives + self.false_negatives)

    @property
    def specificity(self) -> float:
        return _ratio(self.true_negatives, self.true_negatives + self.false_positives)

    @property
    def positive_predictive_value(self) -> float:
        return _ratio(self.true_positives, self.true_positives + self.false_positives)

    @property
    def negative_predictive_value(self) -> float:
        return _ratio(self.true_negatives, self.true_negatives + self.false_negatives)

    @property
    def prevalence(self) -> float:
        return _ratio(self.true_positives + self.false_negatives, self.total)

    @property
    def detection_rate(self) -> float:
        return _ratio(self.true_positives, self.total)

    @property
    def detection_prevalence(self) -> float:
        return _ratio(self.true_positives + self.false_positives, self.total)

    @property
    def balanced_accuracy(self) -> float:
        return (self.sensitivity + self.specificity) / 2


@dataclass(frozen=True, slots=True)
class ConfusionMatrixReport:
    """A confusion matrix indexed by (actual, predicted) and its statistics.

    Attributes:
        classes: Row and column order of `matrix`.
        matrix: Square count matrix; rows are actual classes, columns predicted ones.
        confidence_level: Level of the accuracy confidence interval.
    """

    classes: tuple[str, ...]
    matrix: np.ndarray
    confidence_level: float = 0.95

    @property
    def total(self) -> int:
        return int(self.matrix.sum())

    @property
    def correct(self) -> int:
        return int(np.trace(self.matrix))

    @property
    def accuracy(self) -> float:
        return _ratio(self.correct, self.total)

    @property
    def accuracy_interval(self) -> tuple[float, float]:
        """Exact (Clopper-Pearson) confidence interval of the accuracy."""
        if self.total == 0:
            return float("nan"), float("nan")
        interval = stats.binomtest(self.correct, self.total).proportion_ci(
            confidence_level=self.confidence_level, method="exact"
        )
        return float(interval.low), float(interval.high)

    @property
    def no_information_rate(self) -> float:
        """Share of the most frequent actual class."""
        return _ratio(int(self.matrix.sum(axis=1).max(initial=0)), self.total)

    @property
    def nir_p_value(self) -> float:
        """One-sided exact binomial p-value of accuracy > no-information rate."""
        if self.total == 0:
            return float("nan")
        result = stats.binomtest(
            self.correct, self.total, p=self.no_information_rate, alternative="greater"
        )
        return float(result.pvalue)

    @property
    def kappa(self) -> float:
        """Cohen's kappa: agreement beyond what the marginals give by chance."""
        if self.total == 0:
            return float("nan")
        expected = float(self.matrix.sum(axis=1) @ self.matrix.sum(axis=0)) / self.total**2
        return _ratio(self.accuracy - expected, 1.0 - expected)

    def class_statistics(self, label: str) -> ClassStatistics:
        i = self.classes.index(label)
        tp = int(self.matrix[i, i])
        fn = int(self.matrix[i, :].sum()) - tp
        fp = int(self.matrix[:, i].sum()) - tp
        return ClassStatistics(
            label=label,
            true_positives=tp,
            false_negatives=fn,
            false_positives=fp,
            true_negatives=self.total - tp - fn - fp,
        )

    @property
    def by_class(self) -> tuple[ClassStatistics, ...]:
        return tuple(self.class_statistics(label) for label in self.classes)

    def sensitivity(self, label: str) -> float:
        return self.class_statistics(label).sensitivity

    def specificity(self, label: str) -> float:
        return self.class_statistics(label).specificity

    def balanced_accuracy(self, label: str) -> float:
        return self.class_statistics(label).balanced_accuracy

    def matrix_frame(self) -> pl.DataFrame:
        """The matrix as a frame: one row per actual class, one column per prediction."""
        return pl.DataFrame(
            {
                "actual": list(self.classes),
                **{label: self.matrix[:, j].tolist() for j, label in enumerate(self.classes)},
            }
        )

    def by_class_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            [
                {
                    "class": s.label,
                    "sensitivity": s.sensitivity,
                    "specificity": s.specificity,
                    "pos_pred_value": s.positive_predictive_value,
                    "neg_pred_value": s.negative_predictive_value,
                    "prevalence": s.prevalence,
                    "detection_rate": s.detection_rate,
                    "detection_prevalence": s.detection_prevalence,
                    "balanced_accuracy": s.balanced_accuracy,
                }
                for s in self.by_class
            ]
        )

    def overall_frame(self) -> pl.DataFrame:
        low, high = self.accuracy_interval
        return pl.DataFrame(
            {
                "accuracy": [self.accuracy],
                "accuracy_lower": [low],
                "accuracy_upper": [high],
                "no_information_rate": [self.no_information_rate],
                "nir_p_value": [self.nir_p_value],
                "kappa": [self.kappa],
                "total": [self.total],
            }
        )


class ConfusionMatrixEvaluator:
    """Builds confusion matrix reports from actual and predicted labels."""

    def __init__(self, confidence_level: float = 0.95) -> None:
        self._confidence_level = confidence_level

    def evaluate(
        self,
        actual: Sequence[object] | pl.Series | np.ndarray,
        predicted: Sequence[object] | pl.Series | np.ndarray,
        class_order: Sequence[str],
    ) -> ConfusionMatrixReport:
        """Cross-tabulate `actual` against `predicted`.

        Raises:
            ValueError: If the label sequences differ in length.
            EmptyDatasetError: If there is nothing to evaluate.
            UnknownLabelError: If a label is missing from `class_order`.
        """
        actual_labels = _as_labels(actual)
        predicted_labels = _as_labels(predicted)
        if len(actual_labels) != len(predicted_labels):
            raise ValueError(
                f"Got {len(actual_labels)} actual and {len(predicted_labels)} predicted labels"
            )
        if not actual_labels:
            raise EmptyDatasetError("evaluate")

        classes = tuple(class_order)
        index = {label: i for i, label in enumerate(classes)}
        unknown = sorted(set(actual_labels + predicted_labels) - index.keys(), key=str)
        if unknown:
            raise UnknownLabelError(unknown, classes)

        matrix = np.zeros((len(classes), len(classes)), dtype=np.int64)
        np.add.at(
            matrix,
            ([index[a] for a in actual_labels], [index[p] for p in predicted_labels]),
            1,
        )
        return ConfusionMatrixReport(
            classes=classes, matrix=matrix, confidence_level=self._confidence_level
        )

    @staticmethod
    def from_matrix(
        matrix: Sequence[Sequence[int]] | np.ndarray,
        class_order: Sequence[str],
        confidence_level: float = 0.95,
    ) -> ConfusionMatrixReport:
        """Report for an already tabulated matrix (rows actual, columns predicted)."""
        counts = np.asarray(matrix, dtype=np.int64)
        classes = tuple(class_order)
        if counts.shape != (len(classes), len(classes)):
            raise ValueError(
                f"Matrix of shape {counts.shape} does not match {len(classes)} classes"
            )
        if (counts < 0).any():
            raise ValueError("Confusion matrix counts must be non-negative")
        return ConfusionMatrixReport(
            classes=classes, matrix=counts, confidence_level=confidence_level
        )


__all__ = ["ClassStatistics", "ConfusionMatrixReport", "ConfusionMatrixEvaluator"]
