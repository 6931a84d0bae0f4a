"""Random train/test partition of a dataset."""

from dataclasses import dataclass
import math

import numpy as np
import polars as pl

from fetal_health.errors import EmptyDatasetError, InvalidFractionError

_ROW_INDEX = "__row_index"


@dataclass(frozen=True, slots=True)
class Split:
    """Result of data splitting.

    Attributes:
        train: Rows selected for training, in original relative order.
        test: Remaining rows, in original relative order.
        train_indices: Positions of the training rows in the original frame.
        test_indices: Positions of the test rows in the original frame.
    """

    train: pl.DataFrame
    test: pl.DataFrame
    train_indices: np.ndarray
    test_indices: np.ndarray


class DatasetSplitter:
    """Splits a dataset with a seeded permutation of its rows.

    `floor(train_fraction * size)` distinct rows are drawn without replacement
    for training and the rest go to the test set. The split depends only on the
    generator state and the input order.
    """

    def __init__(self, train_fraction: float = 0.8) -> None:
        """Initialize the splitter.

        Args:
            train_fraction: Fraction of rows used for training, in (0, 1).

        Raises:
            InvalidFractionError: If the fraction is outside (0, 1).
        """
        self._train_fraction = self._validate_fraction(train_fraction)

    @staticmethod
    def _validate_fraction(train_fraction: float) -> float:
        if not 0.0 < train_fraction < 1.0:
            raise InvalidFractionError(train_fraction)
        return train_fraction

    def split(
        self,
        dataset: pl.DataFrame,
        rng: np.random.Generator,
        train_fraction: float | None = None,
    ) -> Split:
        """Split `dataset` into train and test sets.

        Args:
            dataset: The frame to partition.
            rng: Generator used for the permutation. It is advanced by the call.
            train_fraction: Overrides the fraction given at construction.

        Returns:
            The two disjoint frames covering `dataset`.

        Raises:
            InvalidFractionError: If the fraction is outside (0, 1).
            EmptyDatasetError: If `dataset` has no rows.
        """
        fraction = (
            self._train_fraction
            if train_fraction is None
            else self._validate_fraction(train_fraction)
        )
        size = dataset.height
        if size == 0:
            raise EmptyDatasetError("split")

        train_size = math.floor(fraction * size)
        permutation = rng.permutation(size)
        train_indices = np.sort(permutation[:train_size])
        test_indices = np.sort(permutation[train_size:])

        indexed = dataset.with_row_index(_ROW_INDEX)
        train = indexed.filter(pl.col(_ROW_INDEX).is_in(train_indices.tolist())).drop(_ROW_INDEX)
        test = indexed.filter(pl.col(_ROW_INDEX).is_in(test_indices.tolist())).drop(_ROW_INDEX)

        return Split(
            train=train,
            test=test,
            train_indices=train_indices,
            test_indices=test_indices,
        )


__all__ = ["Split", "DatasetSplitter"]
