import polars as pl
import pytest

from fetal_health.core.data import FetalHealth, class_distribution, class_means, imbalance_ratio


@pytest.fixture
def labelled() -> pl.DataFrame:
    return pl.DataFrame(
        {
            "x": [1.0, 3.0, 5.0, 10.0, 20.0, 7.0],
            "fetal_health": pl.Series(
                ["Normal", "Normal", "Normal", "Suspect", "Suspect", "Pathological"],
                dtype=FetalHealth.dtype(),
            ),
        }
    )


class DescribeClassDistribution:
    def it_counts_each_class_in_class_order(self, labelled):
        result = class_distribution(labelled)

        assert result["fetal_health"].to_list() == ["Normal", "Suspect", "Pathological"]
        assert result["count"].to_list() == [3, 2, 1]
        assert result["proportion"].to_list() == pytest.approx([0.5, 1 / 3, 1 / 6])


class DescribeClassMeans:
    def it_averages_predictors_within_each_class(self, labelled):
        result = class_means(labelled)

        assert result["x"].to_list() == pytest.approx([3.0, 15.0, 7.0])


class DescribeImbalanceRatio:
    def it_divides_the_largest_by_the_smallest_class(self, labelled):
        assert imbalance_ratio(labelled) == pytest.approx(3.0)
