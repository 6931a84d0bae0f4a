import numpy as np
import polars as pl
import pytest

from fetal_health.core.preprocessing import PCAReducer, Standardizer, component_names
from fetal_health.errors import EmptyDatasetError, SchemaMismatchError


@pytest.fixture
def standardized(ctg_frame) -> pl.DataFrame:
    result, _ = Standardizer().fit_apply(ctg_frame.drop("fetal_health"))
    return result


@pytest.fixture
def projection(standardized):
    return PCAReducer().fit(standardized)


def test_component_names():
    assert component_names(3) == ["PC1", "PC2", "PC3"]


class DescribePCAReducer:
    def it_fits_orthonormal_directions(self, projection, standardized):
        rotation = projection.rotation

        assert rotation.shape == (standardized.width, standardized.width)
        np.testing.assert_allclose(rotation.T @ rotation, np.eye(standardized.width), atol=1e-10)

    def it_orders_components_by_decreasing_variance(self, projection):
        ratios = projection.explained_variance_ratio

        assert np.all(np.diff(ratios) <= 0)
        assert ratios.sum() == pytest.approx(1.0)

    def it_explains_the_total_variance_of_standardized_data(self, projection, standardized):
        # Standardized columns have unit variance, so the components add up to the width.
        assert projection.explained_variance.sum() == pytest.approx(standardized.width)

    def it_projects_onto_the_first_k_components(self, projection, standardized):
        scores = PCAReducer().project(standardized, projection, 3)

        assert scores.columns == ["PC1", "PC2", "PC3"]
        assert scores.height == standardized.height
        np.testing.assert_allclose(scores.mean().row(0), 0.0, atol=1e-10)
        np.testing.assert_allclose(
            scores.var(ddof=1).row(0), projection.explained_variance[:3], rtol=1e-8
        )

    def it_does_not_change_the_projection_when_used(self, projection, standardized):
        rotation = projection.rotation.copy()
        center = projection.center.copy()

        PCAReducer().project(standardized.head(10) * 3.0, projection, 2)

        np.testing.assert_array_equal(projection.rotation, rotation)
        np.testing.assert_array_equal(projection.center, center)

    def it_freezes_the_fitted_arrays(self, projection):
        assert not projection.rotation.flags.writeable
        with pytest.raises(ValueError):
            projection.rotation[0, 0] = 1.0

    def it_is_deterministic(self, standardized, projection):
        again = PCAReducer().fit(standardized)

        np.testing.assert_array_equal(again.rotation, projection.rotation)

    def it_builds_a_scree_table(self, projection):
        scree = projection.scree_table()

        assert scree["component"].to_list() == component_names(projection.n_components)
        assert scree["cumulative_proportion"][-1] == pytest.approx(1.0)

    def it_lists_loadings_per_column(self, projection, standardized):
        loadings = projection.loadings(2)

        assert loadings.columns == ["column", "PC1", "PC2"]
        assert loadings["column"].to_list() == standardized.columns

    @pytest.mark.parametrize("k", [0, 6])
    def it_rejects_an_out_of_range_number_of_components(self, projection, standardized, k):
        with pytest.raises(ValueError, match="between 1 and 5"):
            PCAReducer().project(standardized, projection, k)

    def it_rejects_frames_with_other_columns(self, projection, standardized):
        with pytest.raises(SchemaMismatchError):
            PCAReducer().project(standardized.drop("histogram_mean"), projection, 2)

    def it_raises_on_an_empty_frame(self, standardized):
        with pytest.raises(EmptyDatasetError):
            PCAReducer().fit(standardized.clear())
