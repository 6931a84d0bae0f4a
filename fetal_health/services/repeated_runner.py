"""Runs the modeling pipeline over several seeds."""

from collections.abc import Sequence
from typing import Any

from joblib import Parallel, delayed
from loguru import logger
import numpy as np
import polars as pl

from fetal_health.config.logging import configure_logging
from fetal_health.core.pipeline import FetalHealthPipeline
from fetal_health.settings import FetalHealthSettings


def _run_summary(
    pipeline: FetalHealthPipeline,
    dataset: pl.DataFrame,
    seed: int,
    settings: FetalHealthSettings | None = None,
) -> dict[str, Any]:
    # Worker processes start with loguru's default sink.
    if settings is not None:
        configure_logging(settings)
    return pipeline.run(dataset, seed).summary()


def derive_seeds(base_seed: int, n_runs: int) -> list[int]:
    """Independent run seeds derived from one base seed."""
    children = np.random.SeedSequence(base_seed).generate_state(n_runs)
    return [int(seed) for seed in children]


class RepeatedRunner:
    """Executes independent pipeline runs, one per seed, in parallel.

    Runs share no mutable state: each one builds its own generator from its seed.
    """

    def __init__(
        self,
        pipeline: FetalHealthPipeline,
        n_jobs: int = 1,
        settings: FetalHealthSettings | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            pipeline: The pipeline to run.
            n_jobs: Number of parallel jobs (-1 uses every core).
            settings: Settings each run configures its logging from. Left
                untouched when None.
        """
        self._pipeline = pipeline
        self._n_jobs = n_jobs
        self._settings = settings

    def run(self, dataset: pl.DataFrame, seeds: Sequence[int]) -> pl.DataFrame:
        """Run the pipeline once per seed.

        Returns:
            One row of headline metrics per seed, in `seeds` order.
        """
        if not seeds:
            raise ValueError("At least one seed is required")

        logger.info(f"Running {len(seeds)} pipeline runs with n_jobs={self._n_jobs}")
        summaries = Parallel(n_jobs=self._n_jobs)(
            delayed(_run_summary)(self._pipeline, dataset, seed, self._settings)
            for seed in seeds
        )
        return pl.DataFrame(list(summaries))

    @staticmethod
    def aggregate(results: pl.DataFrame) -> pl.DataFrame:
        """Mean and standard deviation of every metric across runs."""
        metrics = [c for c in results.columns if c != "seed"]
        return results.select(
            *[
                expr
                for metric in metrics
                for expr in (
                    pl.col(metric).mean().alias(f"{metric}_mean"),
                    pl.col(metric).std().alias(f"{metric}_std"),
                )
            ]
        )


__all__ = ["RepeatedRunner", "derive_seeds"]
