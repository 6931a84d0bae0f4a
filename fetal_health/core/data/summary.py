"""Descriptive statistics of the outcome classes."""

import polars as pl

from fetal_health.core.data.classes import TARGET_COLUMN


def class_distribution(df: pl.DataFrame, target: str = TARGET_COLUMN) -> pl.DataFrame:
    """Counts and proportions of each class, in class order.

    Returns:
        A frame with columns `target`, `count` and `proportion`.
    """
    return (
        df.group_by(target)
        .len(name="count")
        .with_columns((pl.col("count") / pl.col("count").sum()).alias("proportion"))
        .sort(target)
    )


def class_means(df: pl.DataFrame, target: str = TARGET_COLUMN) -> pl.DataFrame:
    """Mean of every predictor within each class."""
    predictors = [c for c in df.columns if c != target]
    return df.group_by(target).agg(pl.col(predictors).mean()).sort(target)


def imbalance_ratio(df: pl.DataFrame, target: str = TARGET_COLUMN) -> float:
    """Ratio between the most and the least frequent classes."""
    counts = df[target].value_counts()["count"]
    return float(counts.max()) / float(counts.min())  # type: ignore[arg-type]


__all__ = ["class_distribution", "class_means", "imbalance_ratio"]
