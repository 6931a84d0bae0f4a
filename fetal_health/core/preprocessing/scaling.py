"""Per-column standardization fit on a reference frame."""

from dataclasses import dataclass
import math

import polars as pl

from fetal_health.errors import EmptyDatasetError, SchemaMismatchError, ZeroVarianceError

_MIN_STD = 1e-12


@dataclass(frozen=True, slots=True)
class StandardizationParameters:
    """Mean and sample standard deviation of each fitted column, in column order."""

    columns: tuple[str, ...]
    means: tuple[float, ...]
    stds: tuple[float, ...]

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            {"column": list(self.columns), "mean": list(self.means), "std": list(self.stds)}
        )


class Standardizer:
    """Centres and scales columns with parameters frozen at fit time.

    Parameters are computed once on the reference frame (the balanced training
    predictors) and `apply` reuses them verbatim on any other frame, test data
    included.
    """

    def fit(self, dataset: pl.DataFrame) -> StandardizationParameters:
        """Compute the mean and sample standard deviation of every column.

        Raises:
            EmptyDatasetError: If `dataset` has no rows.
            ZeroVarianceError: If a column's deviation is ~0 or undefined.
        """
        if dataset.height == 0:
            raise EmptyDatasetError("standardize")

        stats = dataset.select(
            *[pl.col(c).mean().alias(f"{c}__mean") for c in dataset.columns],
            *[pl.col(c).std(ddof=1).alias(f"{c}__std") for c in dataset.columns],
        ).row(0, named=True)

        means: list[float] = []
        stds: list[float] = []
        for column in dataset.columns:
            std = stats[f"{column}__std"]
            if std is None or math.isnan(std) or std < _MIN_STD:
                raise ZeroVarianceError(column, std)
            means.append(float(stats[f"{column}__mean"]))
            stds.append(float(std))

        return StandardizationParameters(
            columns=tuple(dataset.columns),
            means=tuple(means),
            stds=tuple(stds),
        )

    def apply(
        self, dataset: pl.DataFrame, params: StandardizationParameters
    ) -> pl.DataFrame:
        """Standardize `dataset` as `(x - mean) / std` with the fitted parameters.

        Raises:
            SchemaMismatchError: If the columns differ from the fitted ones.
        """
        if tuple(dataset.columns) != params.columns:
            raise SchemaMismatchError(expected=params.columns, actual=dataset.columns)

        return dataset.select(
            ((pl.col(column) - mean) / std).alias(column)
            for column, mean, std in zip(params.columns, params.means, params.stds)
        )

    def fit_apply(self, dataset: pl.DataFrame) -> tuple[pl.DataFrame, StandardizationParameters]:
        params = self.fit(dataset)
        return self.apply(dataset, params), params


__all__ = ["StandardizationParameters", "Standardizer"]
