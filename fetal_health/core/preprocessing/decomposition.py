"""Principal component analysis of standardized predictors."""

from dataclasses import dataclass

import numpy as np
import polars as pl
from sklearn.decomposition import PCA

from fetal_health.errors import EmptyDatasetError, SchemaMismatchError


def _frozen(array: np.ndarray) -> np.ndarray:
    copy = np.array(array, dtype=np.float64, copy=True)
    copy.flags.writeable = False
    return copy


def component_names(k: int) -> list[str]:
    return [f"PC{i}" for i in range(1, k + 1)]


@dataclass(frozen=True, slots=True)
class PCAProjection:
    """A fitted principal component rotation.

    Attributes:
        columns: Column schema seen at fit time, in order.
        center: Column means subtracted before rotating.
        rotation: Matrix of shape (n_columns, n_components) whose columns are the
            orthonormal directions, by descending variance.
        explained_variance: Variance of each component.
        explained_variance_ratio: Proportion of the total variance of each component.
    """

    columns: tuple[str, ...]
    center: np.ndarray
    rotation: np.ndarray
    explained_variance: np.ndarray
    explained_variance_ratio: np.ndarray

    @property
    def n_components(self) -> int:
        return self.rotation.shape[1]

    def scree_table(self) -> pl.DataFrame:
        """Variance explained per component, for choosing how many to keep."""
        return pl.DataFrame(
            {
                "component": component_names(self.n_components),
                "std_dev": np.sqrt(self.explained_variance),
                "variance": self.explained_variance,
                "proportion": self.explained_variance_ratio,
                "cumulative_proportion": np.cumsum(self.explained_variance_ratio),
            }
        )

    def loadings(self, k: int | None = None) -> pl.DataFrame:
        """Rotation coefficients of each column on the first `k` components."""
        k = self.n_components if k is None else k
        return pl.DataFrame(
            {
                "column": list(self.columns),
                **{
                    name: self.rotation[:, i]
                    for i, name in enumerate(component_names(k))
                },
            }
        )


class PCAReducer:
    """Fits a principal component projection and projects frames with it.

    Projection only reads the fitted rotation, so the same `PCAProjection` can be
    reused on data never seen during fit.
    """

    def fit(self, standardized: pl.DataFrame) -> PCAProjection:
        """Fit the principal directions of `standardized`.

        Raises:
            EmptyDatasetError: If `standardized` has no rows.
        """
        if standardized.height == 0:
            raise EmptyDatasetError("fit principal components on")

        X = standardized.to_numpy().astype(np.float64)
        pca = PCA(svd_solver="full")
        pca.fit(X)

        return PCAProjection(
            columns=tuple(standardized.columns),
            center=_frozen(pca.mean_),
            rotation=_frozen(pca.components_.T),
            explained_variance=_frozen(pca.explained_variance_),
            explained_variance_ratio=_frozen(pca.explained_variance_ratio_),
        )

    def project(
        self, standardized: pl.DataFrame, projection: PCAProjection, k: int
    ) -> pl.DataFrame:
        """Scores of `standardized` on the first `k` principal directions.

        Raises:
            SchemaMismatchError: If the columns differ from the fitted ones.
            ValueError: If `k` is not between 1 and the number of components.
        """
        if tuple(standardized.columns) != projection.columns:
            raise SchemaMismatchError(expected=projection.columns, actual=standardized.columns)
        if not 1 <= k <= projection.n_components:
            raise ValueError(
                f"Number of components must be between 1 and {projection.n_components}, got {k}"
            )

        X = standardized.to_numpy().astype(np.float64)
        scores = (X - projection.center) @ projection.rotation[:, :k]
        return pl.DataFrame(scores, schema=component_names(k), orient="row")


__all__ = ["PCAProjection", "PCAReducer", "component_names"]
