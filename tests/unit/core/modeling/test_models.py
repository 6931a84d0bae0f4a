import math

import numpy as np
import polars as pl
import pytest

from fetal_health.core.modeling import (
    INTERCEPT_TERM,
    TrainedModel,
    information_matrix,
    likelihood_ratio_test,
)
from fetal_health.errors import SchemaMismatchError

CLASSES = ("Normal", "Suspect", "Pathological")


@pytest.fixture
def model() -> TrainedModel:
    return TrainedModel(
        classes=CLASSES,
        feature_names=("x",),
        intercepts=np.array([0.0, math.log(2.0)]),
        coefficients=np.array([[1.0], [0.0]]),
        log_likelihood=-120.0,
        n_observations=100,
        covariance=np.diag([0.25, 0.04, 1.0, 0.01]),
    )


class DescribeTrainedModel:
    def it_uses_the_first_class_as_reference(self, model):
        assert model.reference_class == "Normal"
        assert not model.is_null

    def it_turns_log_odds_into_probabilities(self, model):
        probabilities = model.predict_proba(pl.DataFrame({"x": [0.0]}))

        np.testing.assert_allclose(probabilities, [[0.25, 0.25, 0.5]])

    def it_predicts_the_most_probable_class(self, model):
        predictions = model.predict_class(pl.DataFrame({"x": [0.0, 5.0]}))

        assert predictions.to_list() == ["Pathological", "Suspect"]
        assert predictions.dtype == pl.String

    def it_returns_probabilities_summing_to_one(self, model):
        probabilities = model.predict_proba(pl.DataFrame({"x": np.linspace(-50, 50, 21)}))

        np.testing.assert_allclose(probabilities.sum(axis=1), 1.0)
        assert np.all(probabilities >= 0)

    def it_selects_features_by_name(self, model):
        df = pl.DataFrame({"other": [1.0], "x": [0.0]})

        np.testing.assert_allclose(model.predict_proba(df), [[0.25, 0.25, 0.5]])

    def it_rejects_frames_without_the_fitted_features(self, model):
        with pytest.raises(SchemaMismatchError):
            model.predict_proba(pl.DataFrame({"y": [0.0]}))

    def it_counts_parameters_for_the_aic(self, model):
        assert model.n_parameters == 4
        assert model.deviance == pytest.approx(240.0)
        assert model.aic == pytest.approx(248.0)

    def it_tabulates_wald_tests(self, model):
        table = model.coefficient_table()

        assert table.columns == ["class", "term", "estimate", "std_error", "z_value", "p_value"]
        assert table["class"].to_list() == ["Suspect", "Suspect", "Pathological", "Pathological"]
        assert table["term"].to_list() == [INTERCEPT_TERM, "x", INTERCEPT_TERM, "x"]
        assert table["std_error"].to_list() == pytest.approx([0.5, 0.2, 1.0, 0.1])
        assert table["z_value"][1] == pytest.approx(5.0)
        assert table["p_value"][0] == pytest.approx(1.0)

    def it_reports_missing_standard_errors_as_nan(self, model):
        without = TrainedModel(
            classes=model.classes,
            feature_names=model.feature_names,
            intercepts=model.intercepts,
            coefficients=model.coefficients,
            log_likelihood=model.log_likelihood,
            n_observations=model.n_observations,
        )

        table = without.coefficient_table()

        assert without.standard_errors() is None
        assert table["std_error"].is_nan().all()


class DescribeInformationMatrix:
    def it_is_symmetric_and_positive_semidefinite(self, rng):
        X = rng.normal(size=(50, 2))
        logits = np.hstack([np.zeros((50, 1)), rng.normal(size=(50, 2))])
        probabilities = np.exp(logits) / np.exp(logits).sum(axis=1, keepdims=True)

        info = information_matrix(X, probabilities)

        assert info.shape == (6, 6)
        np.testing.assert_allclose(info, info.T, atol=1e-10)
        assert np.linalg.eigvalsh(info).min() > -1e-10

    def it_reduces_to_the_binary_logistic_information(self, rng):
        X = rng.normal(size=(30, 1))
        p = rng.uniform(0.1, 0.9, size=30)
        probabilities = np.column_stack([1 - p, p])

        info = information_matrix(X, probabilities)

        Z = np.hstack([np.ones((30, 1)), X])
        expected = Z.T @ (Z * (p * (1 - p))[:, None])
        np.testing.assert_allclose(info, expected)


class DescribeLikelihoodRatioTest:
    def it_compares_against_the_null_model(self, model):
        null = TrainedModel(
            classes=CLASSES,
            feature_names=(),
            intercepts=np.zeros(2),
            coefficients=np.zeros((2, 0)),
            log_likelihood=-150.0,
            n_observations=100,
        )

        result = likelihood_ratio_test(model, null)

        assert result.statistic == pytest.approx(60.0)
        assert result.df == 2
        assert result.p_value == pytest.approx(math.exp(-30.0))
        assert result.pseudo_r2 == pytest.approx(0.2)
        assert result.to_frame().columns == ["statistic", "df", "p_value", "pseudo_r2"]

    def it_rejects_models_of_different_classes(self, model):
        other = TrainedModel(
            classes=("Normal", "Suspect"),
            feature_names=(),
            intercepts=np.zeros(1),
            coefficients=np.zeros((1, 0)),
            log_likelihood=-150.0,
            n_observations=100,
        )

        with pytest.raises(ValueError, match="different classes"):
            likelihood_ratio_test(model, other)
