"""Multinomial logistic regression modeling."""

from fetal_health.core.modeling.classifiers import Classifier, MultinomialLogitClassifier
from fetal_health.core.modeling.models import (
    INTERCEPT_TERM,
    LikelihoodRatioTest,
    TrainedModel,
    information_matrix,
    likelihood_ratio_test,
)

__all__ = [
    "Classifier",
    "MultinomialLogitClassifier",
    "INTERCEPT_TERM",
    "LikelihoodRatioTest",
    "TrainedModel",
    "information_matrix",
    "likelihood_ratio_test",
]
