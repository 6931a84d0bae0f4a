import math

import numpy as np
import polars as pl
import pytest

from fetal_health.core.preprocessing import Standardizer
from fetal_health.errors import EmptyDatasetError, SchemaMismatchError, ZeroVarianceError


@pytest.fixture
def predictors(ctg_frame) -> pl.DataFrame:
    return ctg_frame.drop("fetal_health")


class DescribeStandardizer:
    def it_fits_means_and_sample_deviations(self):
        df = pl.DataFrame({"a": [1.0, 2.0, 3.0, 4.0], "b": [10.0, 10.0, 20.0, 20.0]})

        params = Standardizer().fit(df)

        assert params.columns == ("a", "b")
        assert params.means == pytest.approx((2.5, 15.0))
        assert params.stds == pytest.approx((math.sqrt(5 / 3), math.sqrt(100 / 3)))

    def it_centres_and_scales_the_fitted_frame(self, predictors):
        standardized, _ = Standardizer().fit_apply(predictors)

        np.testing.assert_allclose(standardized.mean().row(0), 0.0, atol=1e-10)
        np.testing.assert_allclose(standardized.std(ddof=1).row(0), 1.0, rtol=1e-10)

    def it_reuses_fitted_parameters_on_other_frames(self):
        standardizer = Standardizer()
        params = standardizer.fit(pl.DataFrame({"a": [0.0, 2.0, 4.0]}))

        result = standardizer.apply(pl.DataFrame({"a": [2.0, 6.0]}), params)

        assert result["a"].to_list() == pytest.approx([0.0, 2.0])

    def it_exports_parameters_as_a_frame(self, predictors):
        params = Standardizer().fit(predictors)

        frame = params.to_frame()

        assert frame.columns == ["column", "mean", "std"]
        assert frame["column"].to_list() == predictors.columns

    def it_rejects_constant_columns(self):
        df = pl.DataFrame({"a": [1.0, 2.0, 3.0], "flat": [5.0, 5.0, 5.0]})

        with pytest.raises(ZeroVarianceError) as exc_info:
            Standardizer().fit(df)

        assert exc_info.value.column == "flat"

    def it_rejects_a_single_row(self):
        with pytest.raises(ZeroVarianceError):
            Standardizer().fit(pl.DataFrame({"a": [1.0]}))

    def it_rejects_frames_with_other_columns(self, predictors):
        standardizer = Standardizer()
        params = standardizer.fit(predictors)

        with pytest.raises(SchemaMismatchError):
            standardizer.apply(predictors.drop("accelerations"), params)
        with pytest.raises(SchemaMismatchError):
            standardizer.apply(predictors.select(predictors.columns[::-1]), params)

    def it_raises_on_an_empty_frame(self, predictors):
        with pytest.raises(EmptyDatasetError):
            Standardizer().fit(predictors.clear())
