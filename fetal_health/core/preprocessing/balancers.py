"""Class balancing of a multi-class training set from pairwise subsets."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger
import numpy as np
import polars as pl

from fetal_health.core.data.classes import CLASS_ORDER, TARGET_COLUMN
from fetal_health.core.preprocessing.sampling import CombinedOverUnderSampler
from fetal_health.errors import DegenerateSubsetError, EmptyDatasetError, UnknownLabelError


@dataclass(frozen=True, slots=True)
class BalancedSubset:
    """A majority-vs-minority subset after resampling.

    Attributes:
        majority_class: The shared majority class.
        minority_class: The minority class of this subset.
        data: The resampled rows.
        source_indices: Positions of the resampled rows in the training frame.
    """

    majority_class: str
    minority_class: str
    data: pl.DataFrame
    source_indices: np.ndarray


@dataclass(frozen=True, slots=True)
class BalancedTrainingSet:
    """Union of the minority rows of every subset and the majority rows of the first one."""

    data: pl.DataFrame
    majority_class: str
    subsets: tuple[BalancedSubset, ...] = field(default=())

    def class_counts(self, target: str = TARGET_COLUMN) -> dict[str, int]:
        counts = self.data[target].cast(pl.String).value_counts()
        return dict(zip(counts[target].to_list(), counts["count"].to_list()))

    def class_proportions(self, target: str = TARGET_COLUMN) -> dict[str, float]:
        counts = self.class_counts(target)
        total = sum(counts.values())
        return {label: n / total for label, n in counts.items()}


class ClassBalancer:
    """Combined over/under-sampling for a response with more than two classes.

    For every class other than the majority, the rows of that class and of the
    majority form a pairwise subset which is resampled to a target size with the
    minority class at probability `p`. The balanced set keeps the minority rows of
    each subset and the majority rows of the first subset only, so the shared
    majority rows are not counted once per subset.
    """

    def __init__(
        self,
        minority_probability: float = 0.47,
        subset_size: int | None = None,
        majority_class: str | None = None,
        class_order: Sequence[str] = CLASS_ORDER,
        target: str = TARGET_COLUMN,
    ) -> None:
        """Initialize the balancer.

        Args:
            minority_probability: Target minority share `p` in each pairwise subset.
            subset_size: Target size `N` of each subset. Defaults to the subset's size.
            majority_class: Majority class. Defaults to the most frequent class.
            class_order: Declared classes; ties for the majority follow this order.
            target: Name of the response column.

        Raises:
            InvalidProbabilityError: If `minority_probability` is outside (0, 1).
        """
        self._sampler = CombinedOverUnderSampler(minority_probability, subset_size)
        self._majority_class = majority_class
        self._class_order = tuple(class_order)
        self._target = target

        if majority_class is not None and majority_class not in self._class_order:
            raise UnknownLabelError([majority_class], self._class_order)

    def majority_class(self, train: pl.DataFrame) -> str:
        """The configured majority class, or the most frequent one in `train`."""
        if self._majority_class is not None:
            return self._majority_class

        labels = train[self._target].cast(pl.String).to_list()
        counts = {label: labels.count(label) for label in self._class_order}
        return max(self._class_order, key=lambda label: counts[label])

    def pairwise_subsets(self, train: pl.DataFrame) -> dict[str, pl.DataFrame]:
        """Rows of the majority class together with each other class, keyed by the latter.

        A `__source_index` column records each row's position in `train`.
        """
        majority = self.majority_class(train)
        indexed = train.with_row_index("__source_index")
        labels = pl.col(self._target).cast(pl.String)
        return {
            label: indexed.filter(labels.is_in([majority, label]))
            for label in self._class_order
            if label != majority
        }

    def balance(self, train: pl.DataFrame, rng: np.random.Generator) -> BalancedTrainingSet:
        """Balance `train` across its classes.

        Args:
            train: The training frame with the response column.
            rng: Generator driving the resampling. It is advanced by the call.

        Returns:
            A new frame, independent from `train`, with every class close to an
            equal share.

        Raises:
            EmptyDatasetError: If `train` has no rows.
            UnknownLabelError: If `train` holds undeclared labels.
            DegenerateSubsetError: If a pairwise subset lacks one of its classes.
        """
        if train.height == 0:
            raise EmptyDatasetError("balance")

        observed = set(train[self._target].cast(pl.String).unique().to_list())
        unknown = sorted(observed - set(self._class_order), key=str)
        if unknown:
            raise UnknownLabelError(unknown, self._class_order)

        majority = self.majority_class(train)
        subsets: list[BalancedSubset] = []
        for minority, subset in self.pairwise_subsets(train).items():
            subsets.append(self._balance_subset(subset, majority, minority, rng))

        if not subsets:
            raise DegenerateSubsetError(
                expected=self._class_order, present=sorted(observed, key=str)
            )

        first, *_ = subsets
        labels = pl.col(self._target).cast(pl.String)
        parts = [first.data.filter(labels == majority)]
        parts.extend(s.data.filter(labels == s.minority_class) for s in subsets)
        data = pl.concat(parts, how="vertical")

        balanced = BalancedTrainingSet(
            data=data,
            majority_class=majority,
            subsets=tuple(subsets),
        )
        logger.info(
            f"Balanced training set: {train.height} -> {data.height} rows, "
            f"counts={balanced.class_counts(self._target)}"
        )
        return balanced

    def _balance_subset(
        self,
        subset: pl.DataFrame,
        majority: str,
        minority: str,
        rng: np.random.Generator,
    ) -> BalancedSubset:
        y = subset[self._target].cast(pl.String).to_numpy()
        positions = self._sampler.fit_resample_indices(y, minority, majority, rng)

        resampled = subset.select(pl.all().gather(positions.tolist()))
        source_indices = resampled["__source_index"].to_numpy()
        logger.debug(
            f"Pairwise subset {majority}/{minority}: {subset.height} -> {resampled.height} rows"
        )
        return BalancedSubset(
            majority_class=majority,
            minority_class=minority,
            data=resampled.drop("__source_index"),
            source_indices=source_indices,
        )


__all__ = ["BalancedSubset", "BalancedTrainingSet", "ClassBalancer"]
