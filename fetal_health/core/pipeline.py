"""Modeling pipeline orchestrator.

This module provides the FetalHealthPipeline class that coordinates splitting,
class balancing, standardization, PCA, model fitting and evaluation for a
single run.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger
import numpy as np
import polars as pl

from fetal_health.core.data.classes import CLASS_ORDER, TARGET_COLUMN
from fetal_health.core.data.loaders import features_and_labels
from fetal_health.core.evaluation import (
    ConfusionMatrixEvaluator,
    ConfusionMatrixReport,
    MulticlassROCEvaluator,
    MulticlassROCReport,
)
from fetal_health.core.modeling import (
    LikelihoodRatioTest,
    MultinomialLogitClassifier,
    TrainedModel,
    likelihood_ratio_test,
)
from fetal_health.core.preprocessing import (
    BalancedTrainingSet,
    ClassBalancer,
    DatasetSplitter,
    PCAProjection,
    PCAReducer,
    Split,
    StandardizationParameters,
    Standardizer,
)
from fetal_health.errors import FetalHealthError
from fetal_health.settings import PipelineSettings


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Everything produced by one run.

    Attributes:
        seed: Seed of the run's generator.
        split: The train/test partition.
        balanced: The balanced training set.
        standardization: Scaling parameters fit on the balanced predictors.
        projection: PCA fit on the standardized balanced predictors.
        model: Multinomial model on the first `n_components` components.
        null_model: Intercept-only model on the same labels.
        likelihood_ratio: Test of `model` against `null_model`.
        predictions: Test rows' actual and predicted classes and probabilities.
        confusion: Confusion matrix report on the test set.
        roc: Pairwise ROC report on the test set.
    """

    seed: int
    split: Split
    balanced: BalancedTrainingSet
    standardization: StandardizationParameters
    projection: PCAProjection
    model: TrainedModel
    null_model: TrainedModel
    likelihood_ratio: LikelihoodRatioTest
    predictions: pl.DataFrame
    confusion: ConfusionMatrixReport
    roc: MulticlassROCReport

    def summary(self) -> dict[str, Any]:
        """Headline metrics of the run."""
        return {
            "seed": self.seed,
            "train_rows": self.split.train.height,
            "test_rows": self.split.test.height,
            "balanced_rows": self.balanced.data.height,
            "accuracy": self.confusion.accuracy,
            "kappa": self.confusion.kappa,
            "no_information_rate": self.confusion.no_information_rate,
            "nir_p_value": self.confusion.nir_p_value,
            "mean_auc": self.roc.mean_auc,
            "aic": self.model.aic,
            "pseudo_r2": self.likelihood_ratio.pseudo_r2,
        }


class FetalHealthPipeline:
    """Orchestrates a single run: Split → Balance → Standardize → PCA → Fit → Evaluate.

    Scaling and PCA parameters are fit on the balanced training set only and are
    applied unchanged to the test set.
    """

    def __init__(
        self,
        splitter: DatasetSplitter,
        balancer: ClassBalancer,
        standardizer: Standardizer,
        reducer: PCAReducer,
        classifier: MultinomialLogitClassifier,
        confusion_evaluator: ConfusionMatrixEvaluator,
        roc_evaluator: MulticlassROCEvaluator,
        n_components: int = 3,
        class_order: Sequence[str] = CLASS_ORDER,
        target: str = TARGET_COLUMN,
    ) -> None:
        self._splitter = splitter
        self._balancer = balancer
        self._standardizer = standardizer
        self._reducer = reducer
        self._classifier = classifier
        self._confusion_evaluator = confusion_evaluator
        self._roc_evaluator = roc_evaluator
        self._n_components = n_components
        self._class_order = tuple(class_order)
        self._target = target

    def run(self, dataset: pl.DataFrame, seed: int) -> PipelineResult:
        """Run every stage on `dataset` with a generator seeded by `seed`.

        Raises:
            FetalHealthError: Any domain error of a stage, after logging it.
            ValueError: If `n_components` exceeds the number of predictors.
        """
        with logger.contextualize(seed=seed):
            try:
                return self._run(dataset, seed)
            except (FetalHealthError, ValueError) as e:
                logger.error(f"Pipeline failed ({type(e).__name__}): {e}")
                raise

    def fit_components(self, dataset: pl.DataFrame, seed: int) -> PCAProjection:
        """Fit the PCA of a run without modeling, to inspect the variance explained."""
        rng = np.random.default_rng(seed)
        split = self._splitter.split(dataset, rng)
        balanced = self._balancer.balance(split.train, rng)
        X_train, _ = features_and_labels(balanced.data, self._target)
        params = self._standardizer.fit(X_train)
        return self._reducer.fit(self._standardizer.apply(X_train, params))

    def _check_components(self, dataset: pl.DataFrame) -> None:
        n_predictors = len([c for c in dataset.columns if c != self._target])
        if not 1 <= self._n_components <= n_predictors:
            raise ValueError(
                f"Number of components must be between 1 and {n_predictors}, "
                f"got {self._n_components}"
            )

    def _run(self, dataset: pl.DataFrame, seed: int) -> PipelineResult:
        self._check_components(dataset)
        rng = np.random.default_rng(seed)

        # 1. Split
        split = self._splitter.split(dataset, rng)
        logger.info(
            f"Split {dataset.height} rows into "
            f"{split.train.height} train / {split.test.height} test"
        )

        # 2. Balance the training set
        balanced = self._balancer.balance(split.train, rng)
        X_train, y_train = features_and_labels(balanced.data, self._target)
        X_test, y_test = features_and_labels(split.test, self._target)

        # 3. Standardize and reduce, fitting on the balanced training set only
        params = self._standardizer.fit(X_train)
        projection = self._reducer.fit(self._standardizer.apply(X_train, params))
        explained = projection.explained_variance_ratio[: self._n_components].sum()
        logger.info(
            f"First {self._n_components} components explain {explained:.1%} of the variance"
        )
        pca_train = self._transform(X_train, params, projection)
        pca_test = self._transform(X_test, params, projection)

        # 4. Fit the model and its baseline
        model = self._classifier.fit(pca_train, y_train)
        null_model = self._classifier.fit_null(y_train)
        lrt = likelihood_ratio_test(model, null_model)

        # 5. Evaluate on the held-out rows
        probabilities = self._classifier.predict_proba(model, pca_test)
        predicted = self._classifier.predict_class(model, pca_test)
        confusion = self._confusion_evaluator.evaluate(y_test, predicted, self._class_order)
        roc = self._roc_evaluator.evaluate(
            y_test, self._align_probabilities(model, probabilities), self._class_order
        )

        predictions = pl.DataFrame(
            {
                "actual": y_test.cast(pl.String),
                "predicted": predicted,
                **{
                    f"prob_{label}": probabilities[:, i]
                    for i, label in enumerate(model.classes)
                },
            }
        )

        logger.success(
            f"Run finished: accuracy={confusion.accuracy:.4f} "
            f"(NIR={confusion.no_information_rate:.4f}, p={confusion.nir_p_value:.3g}), "
            f"mean AUC={roc.mean_auc:.4f}"
        )

        return PipelineResult(
            seed=seed,
            split=split,
            balanced=balanced,
            standardization=params,
            projection=projection,
            model=model,
            null_model=null_model,
            likelihood_ratio=lrt,
            predictions=predictions,
            confusion=confusion,
            roc=roc,
        )

    def _transform(
        self,
        X: pl.DataFrame,
        params: StandardizationParameters,
        projection: PCAProjection,
    ) -> pl.DataFrame:
        standardized = self._standardizer.apply(X, params)
        return self._reducer.project(standardized, projection, self._n_components)

    def _align_probabilities(self, model: TrainedModel, probabilities: np.ndarray) -> np.ndarray:
        """Probability columns in class order, zero for classes the model never saw."""
        aligned = np.zeros((probabilities.shape[0], len(self._class_order)))
        for i, label in enumerate(model.classes):
            aligned[:, self._class_order.index(label)] = probabilities[:, i]
        return aligned


def create_pipeline(
    settings: PipelineSettings | None = None,
    class_order: Sequence[str] = CLASS_ORDER,
    target: str = TARGET_COLUMN,
) -> FetalHealthPipeline:
    """Create a pipeline with default components configured from `settings`."""
    settings = settings or PipelineSettings()
    return FetalHealthPipeline(
        splitter=DatasetSplitter(train_fraction=settings.train_fraction),
        balancer=ClassBalancer(
            minority_probability=settings.minority_probability,
            subset_size=settings.subset_size,
            majority_class=settings.majority_class,
            class_order=class_order,
            target=target,
        ),
        standardizer=Standardizer(),
        reducer=PCAReducer(),
        classifier=MultinomialLogitClassifier(
            max_iter=settings.max_iter, class_order=class_order
        ),
        confusion_evaluator=ConfusionMatrixEvaluator(),
        roc_evaluator=MulticlassROCEvaluator(),
        n_components=settings.n_components,
        class_order=class_order,
        target=target,
    )


__all__ = ["PipelineResult", "FetalHealthPipeline", "create_pipeline"]
