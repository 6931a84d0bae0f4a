"""Multinomial logistic regression adapter over scikit-learn."""

from collections.abc import Sequence
from typing import Protocol
import warnings

from loguru import logger
import numpy as np
import polars as pl
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression

from fetal_health.core.data.classes import CLASS_ORDER
from fetal_health.core.modeling.models import TrainedModel, information_matrix
from fetal_health.errors import ConvergenceError, EmptyDatasetError, UnknownLabelError


class Classifier(Protocol):
    """Protocol for classifiers producing immutable `TrainedModel`s."""

    def fit(self, X: pl.DataFrame, y: pl.Series) -> TrainedModel: ...

    def predict_class(self, model: TrainedModel, X: pl.DataFrame) -> pl.Series: ...

    def predict_proba(self, model: TrainedModel, X: pl.DataFrame) -> np.ndarray: ...


def _covariance(information: np.ndarray) -> np.ndarray:
    # pinv keeps near-singular fits usable; their standard errors come out huge.
    return np.linalg.pinv(information)


class MultinomialLogitClassifier:
    """Unpenalized softmax regression fit by maximum likelihood with L-BFGS.

    The first class of `class_order` present in the labels is the reference
    class; the fitted coefficients are the log-odds of every other class against
    it. Convergence failures are raised, not warned about.
    """

    def __init__(
        self,
        max_iter: int = 500,
        tol: float = 1e-6,
        class_order: Sequence[str] = CLASS_ORDER,
    ) -> None:
        """Initialize the classifier.

        Args:
            max_iter: Iteration budget of the optimizer.
            tol: Optimizer tolerance.
            class_order: Declared classes; the first present one is the reference.
        """
        self._max_iter = max_iter
        self._tol = tol
        self._class_order = tuple(class_order)

    def _present_classes(self, y: pl.Series) -> tuple[str, ...]:
        observed = set(y.cast(pl.String).unique().to_list())
        unknown = sorted(observed - set(self._class_order), key=str)
        if unknown:
            raise UnknownLabelError(unknown, self._class_order)
        return tuple(label for label in self._class_order if label in observed)

    def fit(self, X: pl.DataFrame, y: pl.Series) -> TrainedModel:
        """Fit the model on the numeric columns of `X` against labels `y`.

        Raises:
            EmptyDatasetError: If there are no rows.
            UnknownLabelError: If `y` holds undeclared labels.
            ConvergenceError: If the optimizer exhausts `max_iter`.
            ValueError: If fewer than two classes are present.
        """
        if X.height == 0:
            raise EmptyDatasetError("fit a classifier on")
        if X.height != y.len():
            raise ValueError(f"X has {X.height} rows but y has {y.len()}")

        classes = self._present_classes(y)
        if len(classes) < 2:
            raise ValueError(f"At least 2 classes are required to fit, got {list(classes)}")

        features = X.to_numpy().astype(np.float64)
        labels = y.cast(pl.String).to_numpy()

        estimator = LogisticRegression(
            penalty=None,
            solver="lbfgs",
            max_iter=self._max_iter,
            tol=self._tol,
        )
        with warnings.catch_warnings():
            warnings.simplefilter("error", ConvergenceWarning)
            try:
                estimator.fit(features, labels)
            except ConvergenceWarning as e:
                raise ConvergenceError(self._max_iter, str(e).splitlines()[0]) from e

        # scikit-learn sorts classes; reorder to the declared order, reference first.
        if len(classes) == 2:
            # Binary fits hold a single row of coefficients for the second sorted class.
            sign = 1.0 if estimator.classes_[1] == classes[1] else -1.0
            intercepts = sign * estimator.intercept_.reshape(1)
            coefficients = sign * estimator.coef_.reshape(1, -1)
        else:
            order = [list(estimator.classes_).index(label) for label in classes]
            weights = estimator.coef_[order]
            biases = estimator.intercept_[order]
            intercepts = biases[1:] - biases[0]
            coefficients = weights[1:] - weights[0]

        n_iter = int(np.max(estimator.n_iter_))
        model = self._build_model(
            classes=classes,
            feature_names=tuple(X.columns),
            intercepts=intercepts,
            coefficients=coefficients,
            features=features,
            labels=labels,
            n_iter=n_iter,
        )
        logger.info(
            f"Fitted multinomial model on {X.height} rows and {X.width} features "
            f"in {n_iter} iterations (logLik={model.log_likelihood:.3f})"
        )
        return model

    def fit_null(self, y: pl.Series) -> TrainedModel:
        """Fit the intercept-only model, which predicts the marginal class distribution.

        Raises:
            EmptyDatasetError: If `y` is empty.
            UnknownLabelError: If `y` holds undeclared labels.
        """
        if y.len() == 0:
            raise EmptyDatasetError("fit a classifier on")

        classes = self._present_classes(y)
        if len(classes) < 2:
            raise ValueError(f"At least 2 classes are required to fit, got {list(classes)}")

        labels = y.cast(pl.String).to_numpy()
        counts = np.array([np.sum(labels == label) for label in classes], dtype=np.float64)
        intercepts = np.log(counts[1:] / counts[0])

        return self._build_model(
            classes=classes,
            feature_names=(),
            intercepts=intercepts,
            coefficients=np.zeros((len(classes) - 1, 0)),
            features=np.empty((len(labels), 0)),
            labels=labels,
            n_iter=0,
        )

    def predict_class(self, model: TrainedModel, X: pl.DataFrame) -> pl.Series:
        return model.predict_class(X)

    def predict_proba(self, model: TrainedModel, X: pl.DataFrame) -> np.ndarray:
        return model.predict_proba(X)

    @staticmethod
    def _build_model(
        classes: tuple[str, ...],
        feature_names: tuple[str, ...],
        intercepts: np.ndarray,
        coefficients: np.ndarray,
        features: np.ndarray,
        labels: np.ndarray,
        n_iter: int,
    ) -> TrainedModel:
        draft = TrainedModel(
            classes=classes,
            feature_names=feature_names,
            intercepts=intercepts,
            coefficients=coefficients,
            log_likelihood=0.0,
            n_observations=len(labels),
            n_iter=n_iter,
        )
        probabilities = draft.probabilities(features)
        observed = np.array([classes.index(label) for label in labels])
        picked = probabilities[np.arange(len(labels)), observed]
        log_likelihood = float(np.sum(np.log(np.clip(picked, 1e-300, None))))

        intercepts = np.array(intercepts, dtype=np.float64)
        coefficients = np.array(coefficients, dtype=np.float64)
        covariance = _covariance(information_matrix(features, probabilities))
        for array in (intercepts, coefficients, covariance):
            array.flags.writeable = False

        return TrainedModel(
            classes=classes,
            feature_names=feature_names,
            intercepts=intercepts,
            coefficients=coefficients,
            log_likelihood=log_likelihood,
            n_observations=len(labels),
            n_iter=n_iter,
            covariance=covariance,
        )


__all__ = ["Classifier", "MultinomialLogitClassifier"]
