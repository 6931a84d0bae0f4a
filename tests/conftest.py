"""Shared fixtures for the test suite."""

from collections.abc import Callable, Mapping

import numpy as np
import polars as pl
import pytest

from fetal_health.core.data import TARGET_COLUMN

# ============================================================================
# Synthetic cardiotocography data
# ============================================================================

PREDICTORS = (
    "baseline_value",
    "accelerations",
    "abnormal_short_term_variability",
    "mean_value_of_short_term_variability",
    "histogram_mean",
)

# Per-class means and shared deviations, loosely modeled on the real dataset.
CLASS_MEANS: dict[str, tuple[float, ...]] = {
    "Normal": (132.0, 0.0040, 42.0, 1.40, 138.0),
    "Suspect": (142.0, 0.0010, 62.0, 0.70, 145.0),
    "Pathological": (131.0, 0.0008, 64.0, 1.60, 115.0),
}
CLASS_STDS = (9.0, 0.0030, 15.0, 0.80, 14.0)

type FrameFactory = Callable[..., pl.DataFrame]


def build_ctg_frame(counts: Mapping[str, int], seed: int = 0) -> pl.DataFrame:
    """Rows of non-negative predictors drawn around each class mean, grouped by class."""
    rng = np.random.default_rng(seed)
    blocks = []
    labels: list[str] = []
    for label, n in counts.items():
        values = rng.normal(CLASS_MEANS[label], CLASS_STDS, size=(n, len(PREDICTORS)))
        blocks.append(np.abs(values))
        labels.extend([label] * n)

    data = np.vstack(blocks)
    return pl.DataFrame(
        {
            **{name: data[:, i] for i, name in enumerate(PREDICTORS)},
            TARGET_COLUMN: labels,
        }
    )


@pytest.fixture
def make_ctg_frame() -> FrameFactory:
    """Factory for synthetic frames with the given class counts."""
    return build_ctg_frame


@pytest.fixture
def ctg_frame() -> pl.DataFrame:
    """An imbalanced frame: 700 Normal, 150 Suspect and 100 Pathological rows."""
    return build_ctg_frame({"Normal": 700, "Suspect": 150, "Pathological": 100}, seed=42)


@pytest.fixture
def rng() -> np.random.Generator:
    """A freshly seeded generator."""
    return np.random.default_rng(1234)
