"""Exceptions raised by the fetal health workflow.

Every error is fatal to the current pipeline run. They carry the offending
value (fraction, column, labels...) as attributes so callers can report it.
"""

from collections.abc import Iterable


class FetalHealthError(Exception):
    """Base exception for workflow errors."""


class InvalidFractionError(FetalHealthError):
    """Raised when a train fraction is not strictly between 0 and 1."""

    def __init__(self, fraction: float):
        self.fraction = fraction
        super().__init__(f"Train fraction must be in the open interval (0, 1), got {fraction!r}")


class EmptyDatasetError(FetalHealthError):
    """Raised when an operation receives a dataset without rows."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation} an empty dataset")


class DegenerateSubsetError(FetalHealthError):
    """Raised when a pairwise subset does not contain two distinct classes."""

    def __init__(self, expected: Iterable[str], present: Iterable[str]):
        self.expected = tuple(expected)
        self.present = tuple(present)
        super().__init__(
            f"Pairwise subset {list(self.expected)} needs 2 distinct classes, "
            f"found {list(self.present)}"
        )


class InvalidProbabilityError(FetalHealthError):
    """Raised when a target minority probability is not strictly between 0 and 1."""

    def __init__(self, probability: float):
        self.probability = probability
        super().__init__(
            f"Minority probability must be in the open interval (0, 1), got {probability!r}"
        )


class ZeroVarianceError(FetalHealthError):
    """Raised when a column cannot be standardized because its deviation is ~0."""

    def __init__(self, column: str, std: float | None):
        self.column = column
        self.std = std
        super().__init__(f"Column '{column}' has zero or undefined standard deviation ({std})")


class SchemaMismatchError(FetalHealthError):
    """Raised when a frame's columns differ from the ones seen at fit time."""

    def __init__(self, expected: Iterable[str], actual: Iterable[str]):
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        missing = [c for c in self.expected if c not in self.actual]
        unexpected = [c for c in self.actual if c not in self.expected]
        detail = f"missing={missing}, unexpected={unexpected}"
        if not missing and not unexpected:
            detail = "columns are in a different order"
        super().__init__(f"Schema mismatch: {detail}")


class ConvergenceError(FetalHealthError):
    """Raised when the classifier optimizer exhausts its iteration budget."""

    def __init__(self, max_iter: int, reason: str = ""):
        self.max_iter = max_iter
        self.reason = reason
        message = f"Optimizer did not converge within {max_iter} iterations"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnknownLabelError(FetalHealthError):
    """Raised when labels are found outside of the declared class order."""

    def __init__(self, labels: Iterable[object], class_order: Iterable[str]):
        self.labels = tuple(labels)
        self.class_order = tuple(class_order)
        super().__init__(
            f"Labels {list(self.labels)} are not part of the class order {list(self.class_order)}"
        )


__all__ = [
    "FetalHealthError",
    "InvalidFractionError",
    "EmptyDatasetError",
    "DegenerateSubsetError",
    "InvalidProbabilityError",
    "ZeroVarianceError",
    "SchemaMismatchError",
    "ConvergenceError",
    "UnknownLabelError",
]
