"""Fitted multinomial logit model and its statistics."""

from dataclasses import dataclass

import numpy as np
import polars as pl
from scipy import stats

from fetal_health.errors import SchemaMismatchError

INTERCEPT_TERM = "(Intercept)"


def _design_matrix(X: np.ndarray) -> np.ndarray:
    return np.hstack([np.ones((X.shape[0], 1)), X])


def _softmax(logits: np.ndarray) -> np.ndarray:
    shifted = logits - logits.max(axis=1, keepdims=True)
    exp = np.exp(shifted)
    return exp / exp.sum(axis=1, keepdims=True)


def information_matrix(X: np.ndarray, probabilities: np.ndarray) -> np.ndarray:
    """Observed information of the reference-class parameterization.

    Parameters are ordered by non-reference class, then by term (intercept first).
    `probabilities` holds one column per class with the reference class first.
    """
    Z = _design_matrix(X)
    n_terms = Z.shape[1]
    non_reference = probabilities[:, 1:]
    n_free = non_reference.shape[1]

    info = np.zeros((n_free * n_terms, n_free * n_terms))
    for j in range(n_free):
        for k in range(n_free):
            weights = non_reference[:, j] * ((j == k) - non_reference[:, k])
            block = Z.T @ (Z * weights[:, None])
            info[j * n_terms : (j + 1) * n_terms, k * n_terms : (k + 1) * n_terms] = block
    return info


@dataclass(frozen=True, slots=True)
class TrainedModel:
    """Multinomial logistic regression parameters relative to a reference class.

    For every class `k` other than the reference, `log(P(k) / P(reference)) =
    intercepts[k] + coefficients[k] @ x`. A model without features is the
    intercept-only (null) model.

    Attributes:
        classes: Class labels; the first one is the reference.
        feature_names: Input columns, in order.
        intercepts: Shape (n_classes - 1,).
        coefficients: Shape (n_classes - 1, n_features).
        log_likelihood: Log-likelihood on the training data.
        n_observations: Number of training rows.
        n_iter: Optimizer iterations used (0 for closed-form fits).
        covariance: Estimated covariance of the parameters, or None.
    """

    classes: tuple[str, ...]
    feature_names: tuple[str, ...]
    intercepts: np.ndarray
    coefficients: np.ndarray
    log_likelihood: float
    n_observations: int
    n_iter: int = 0
    covariance: np.ndarray | None = None

    @property
    def reference_class(self) -> str:
        return self.classes[0]

    @property
    def is_null(self) -> bool:
        return len(self.feature_names) == 0

    @property
    def n_parameters(self) -> int:
        return (len(self.classes) - 1) * (len(self.feature_names) + 1)

    @property
    def deviance(self) -> float:
        return -2.0 * self.log_likelihood

    @property
    def aic(self) -> float:
        return self.deviance + 2.0 * self.n_parameters

    def feature_matrix(self, X: pl.DataFrame) -> np.ndarray:
        """Numeric inputs of `X` in the fitted feature order."""
        if self.is_null:
            return np.empty((X.height, 0))
        missing = [c for c in self.feature_names if c not in X.columns]
        if missing:
            raise SchemaMismatchError(expected=self.feature_names, actual=X.columns)
        return X.select(self.feature_names).to_numpy().astype(np.float64)

    def linear_predictors(self, X: np.ndarray) -> np.ndarray:
        """Log-odds against the reference class, with a zero column for the reference."""
        free = self.intercepts[None, :] + X @ self.coefficients.T
        return np.hstack([np.zeros((X.shape[0], 1)), free])

    def probabilities(self, X: np.ndarray) -> np.ndarray:
        return _softmax(self.linear_predictors(X))

    def predict_proba(self, X: pl.DataFrame) -> np.ndarray:
        """Class probabilities, one column per class in `classes` order."""
        return self.probabilities(self.feature_matrix(X))

    def predict_class(self, X: pl.DataFrame) -> pl.Series:
        """Most probable class of each row."""
        probabilities = self.predict_proba(X)
        labels = np.asarray(self.classes, dtype=object)[probabilities.argmax(axis=1)]
        return pl.Series("prediction", labels.tolist(), dtype=pl.String)

    def standard_errors(self) -> np.ndarray | None:
        """Wald standard errors with the layout of `coefficient_table`."""
        if self.covariance is None:
            return None
        n_terms = len(self.feature_names) + 1
        variances = np.clip(np.diag(self.covariance), 0.0, None)
        return np.sqrt(variances).reshape(len(self.classes) - 1, n_terms)

    def coefficient_table(self) -> pl.DataFrame:
        """Estimates with Wald z tests, one row per non-reference class and term."""
        estimates = np.hstack([self.intercepts[:, None], self.coefficients])
        errors = self.standard_errors()
        terms = [INTERCEPT_TERM, *self.feature_names]

        rows = []
        for i, label in enumerate(self.classes[1:]):
            for j, term in enumerate(terms):
                estimate = float(estimates[i, j])
                error = float(errors[i, j]) if errors is not None else float("nan")
                z = estimate / error if error > 0 else float("nan")
                rows.append(
                    {
                        "class": label,
                        "term": term,
                        "estimate": estimate,
                        "std_error": error,
                        "z_value": z,
                        "p_value": float(2.0 * stats.norm.sf(abs(z))),
                    }
                )
        return pl.DataFrame(rows)


@dataclass(frozen=True, slots=True)
class LikelihoodRatioTest:
    """Comparison of a fitted model against the intercept-only model.

    Attributes:
        statistic: Twice the log-likelihood gain of the full model.
        df: Number of extra parameters of the full model.
        p_value: Upper tail of the chi-squared distribution at `statistic`.
        pseudo_r2: McFadden's pseudo R-squared.
    """

    statistic: float
    df: int
    p_value: float
    pseudo_r2: float

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            {
                "statistic": [self.statistic],
                "df": [self.df],
                "p_value": [self.p_value],
                "pseudo_r2": [self.pseudo_r2],
            }
        )


def likelihood_ratio_test(full: TrainedModel, null: TrainedModel) -> LikelihoodRatioTest:
    """Test whether `full` fits significantly better than the nested `null` model."""
    if full.classes != null.classes:
        raise ValueError(f"Models predict different classes: {full.classes} vs {null.classes}")
    if full.n_observations != null.n_observations:
        raise ValueError("Models must be fit on the same observations")

    statistic = max(2.0 * (full.log_likelihood - null.log_likelihood), 0.0)
    df = full.n_parameters - null.n_parameters
    p_value = float(stats.chi2.sf(statistic, df)) if df > 0 else float("nan")
    pseudo_r2 = (
        1.0 - full.log_likelihood / null.log_likelihood
        if null.log_likelihood != 0
        else float("nan")
    )
    return LikelihoodRatioTest(
        statistic=statistic, df=df, p_value=p_value, pseudo_r2=pseudo_r2
    )


__all__ = [
    "INTERCEPT_TERM",
    "TrainedModel",
    "LikelihoodRatioTest",
    "information_matrix",
    "likelihood_ratio_test",
]
