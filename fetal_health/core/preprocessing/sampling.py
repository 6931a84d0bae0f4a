"""Combined over/under-sampling of a two-class sample.

The sampler reaches a target size and a target minority share in one pass:
a class whose target count exceeds its available rows is over-sampled with
`RandomOverSampler` (all original rows kept, duplicates drawn with replacement)
and a class whose target count is below its available rows is under-sampled
without replacement with `RandomUnderSampler`.
"""

from collections import Counter
from dataclasses import dataclass

from imblearn.over_sampling import RandomOverSampler
from imblearn.under_sampling import RandomUnderSampler
import numpy as np

from fetal_health.errors import DegenerateSubsetError, InvalidProbabilityError


@dataclass(frozen=True, slots=True)
class ResampleTargets:
    """Number of rows to draw for the minority and majority classes."""

    minority: int
    majority: int

    @property
    def total(self) -> int:
        return self.minority + self.majority


def _random_seed(rng: np.random.Generator) -> int:
    """Draws an integer seed for estimators that do not accept a Generator."""
    return int(rng.integers(0, np.iinfo(np.int32).max))


class CombinedOverUnderSampler:
    """Resamples a binary sample to `size` rows with minority share `probability`."""

    def __init__(self, probability: float = 0.47, size: int | None = None) -> None:
        """Initialize the sampler.

        Args:
            probability: Target share of the minority class, in (0, 1).
            size: Target number of rows. Defaults to the size of the input sample.

        Raises:
            InvalidProbabilityError: If `probability` is outside (0, 1).
        """
        if not 0.0 < probability < 1.0:
            raise InvalidProbabilityError(probability)
        if size is not None and size < 2:
            raise ValueError(f"Target size must be at least 2, got {size}")
        self._probability = probability
        self._size = size

    @property
    def probability(self) -> float:
        return self._probability

    def targets(self, n_samples: int) -> ResampleTargets:
        """Target class counts for an input of `n_samples` rows."""
        size = self._size if self._size is not None else n_samples
        minority = int(round(self._probability * size))
        minority = min(max(minority, 1), size - 1)
        return ResampleTargets(minority=minority, majority=size - minority)

    def fit_resample_indices(
        self,
        y: np.ndarray,
        minority_class: str,
        majority_class: str,
        rng: np.random.Generator,
    ) -> np.ndarray:
        """Positions of `y` forming the resampled sample.

        Every retained position appears once, grouped by class, and the
        duplicates drawn by over-sampling are appended after them.

        Raises:
            DegenerateSubsetError: If `y` does not hold both classes.
        """
        counts = Counter(y.tolist())
        present = [c for c in (majority_class, minority_class) if counts.get(c, 0) > 0]
        if len(present) < 2 or len(counts) != 2:
            raise DegenerateSubsetError(
                expected=(majority_class, minority_class), present=sorted(counts, key=str)
            )

        targets = self.targets(len(y))
        wanted = {minority_class: targets.minority, majority_class: targets.majority}

        under = {c: n for c, n in wanted.items() if n < counts[c]}
        over = {c: n for c, n in wanted.items() if n > counts[c]}

        X = np.arange(len(y)).reshape(-1, 1)
        if under:
            sampler = RandomUnderSampler(
                sampling_strategy=under,  # type: ignore[arg-type]
                random_state=_random_seed(rng),
            )
            X, y = sampler.fit_resample(X, y)  # type: ignore[assignment]
        if over:
            sampler = RandomOverSampler(
                sampling_strategy=over,  # type: ignore[arg-type]
                random_state=_random_seed(rng),
            )
            X, y = sampler.fit_resample(X, y)  # type: ignore[assignment]

        return np.asarray(X).ravel()


__all__ = ["ResampleTargets", "CombinedOverUnderSampler"]
