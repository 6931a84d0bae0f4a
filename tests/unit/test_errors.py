import pytest

from fetal_health.errors import (
    ConvergenceError,
    DegenerateSubsetError,
    EmptyDatasetError,
    FetalHealthError,
    InvalidFractionError,
    InvalidProbabilityError,
    SchemaMismatchError,
    UnknownLabelError,
    ZeroVarianceError,
)


@pytest.mark.parametrize(
    "error",
    [
        InvalidFractionError(1.2),
        EmptyDatasetError("split"),
        DegenerateSubsetError(["Normal", "Suspect"], ["Normal"]),
        InvalidProbabilityError(0.0),
        ZeroVarianceError("x", 0.0),
        SchemaMismatchError(["a"], ["b"]),
        ConvergenceError(10),
        UnknownLabelError(["Other"], ["Normal"]),
    ],
)
def test_errors_share_a_base_class(error):
    assert isinstance(error, FetalHealthError)
    assert str(error)


class DescribeSchemaMismatchError:
    def it_lists_missing_and_unexpected_columns(self):
        error = SchemaMismatchError(["a", "b"], ["b", "c"])

        assert "missing=['a']" in str(error)
        assert "unexpected=['c']" in str(error)

    def it_reports_reordered_columns(self):
        error = SchemaMismatchError(["a", "b"], ["b", "a"])

        assert "different order" in str(error)


class DescribeConvergenceError:
    def it_includes_the_reason(self):
        error = ConvergenceError(5, "lbfgs failed")

        assert str(error) == "Optimizer did not converge within 5 iterations: lbfgs failed"
