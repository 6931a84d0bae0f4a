"""CLI for running the modeling pipeline."""

from pathlib import Path
from typing import Any, Optional

from loguru import logger
import polars as pl
import typer
from typing_extensions import Annotated

from fetal_health.cli.data import DatasetArgument, load_dataset
from fetal_health.containers import container
from fetal_health.core.pipeline import PipelineResult
from fetal_health.errors import FetalHealthError
from fetal_health.services import derive_seeds

app = typer.Typer()


def _pipeline_overrides(**options: Any) -> dict[str, Any]:
    return {name: value for name, value in options.items() if value is not None}


def _export(result: PipelineResult, output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    frames: dict[str, pl.DataFrame] = {
        "coefficients": result.model.coefficient_table(),
        "likelihood_ratio": result.likelihood_ratio.to_frame(),
        "scree": result.projection.scree_table(),
        "confusion_matrix": result.confusion.matrix_frame(),
        "class_statistics": result.confusion.by_class_frame(),
        "overall_statistics": result.confusion.overall_frame(),
        "auc": result.roc.auc_frame(),
        "roc_curves": result.roc.curve_frame(),
        "predictions": result.predictions,
    }
    for name, frame in frames.items():
        frame.write_csv(output_dir / f"{name}.csv")
    logger.info(f"Wrote {len(frames)} result tables to {output_dir}")


@app.command("run")
def run(
    path: DatasetArgument = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", "-s", help="Seed of the split and resampling."),
    ] = None,
    train_fraction: Annotated[
        Optional[float],
        typer.Option("--train-fraction", "-t", help="Share of rows used for training."),
    ] = None,
    minority_probability: Annotated[
        Optional[float],
        typer.Option("--minority-probability", "-p", help="Target minority share per subset."),
    ] = None,
    n_components: Annotated[
        Optional[int],
        typer.Option("--components", "-k", min=1, help="Principal components kept."),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Directory to write the result tables to."),
    ] = None,
):
    """Runs split, balancing, PCA, model fitting and evaluation once."""
    df = load_dataset(path)
    settings = container.settings().pipeline.model_copy(
        update=_pipeline_overrides(
            train_fraction=train_fraction,
            minority_probability=minority_probability,
            n_components=n_components,
        )
    )
    seed = settings.random_seed if seed is None else seed

    try:
        result = container.pipeline(settings=settings).run(df, seed)
    except (FetalHealthError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(result.model.coefficient_table())
    typer.echo(result.likelihood_ratio.to_frame())
    typer.echo(result.confusion.matrix_frame())
    typer.echo(result.confusion.overall_frame())
    typer.echo(result.confusion.by_class_frame())
    typer.echo(result.roc.auc_frame())

    if output_dir is not None:
        _export(result, output_dir)


@app.command("repeat")
def repeat(
    path: DatasetArgument = None,
    runs: Annotated[
        int,
        typer.Option("--runs", "-n", min=1, help="Number of independent runs."),
    ] = 10,
    jobs: Annotated[
        int,
        typer.Option("--jobs", "-j", help="Number of parallel jobs (-1 for all cores)."),
    ] = 1,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", "-s", help="Base seed the run seeds are derived from."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="CSV file to write the per-run metrics to."),
    ] = None,
):
    """Runs the pipeline with several seeds and summarizes the metrics."""
    df = load_dataset(path)
    base_seed = container.settings().pipeline.random_seed if seed is None else seed

    try:
        runner = container.repeated_runner(n_jobs=jobs)
        results = runner.run(df, derive_seeds(base_seed, runs))
    except (FetalHealthError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(results)
    typer.echo(runner.aggregate(results))

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        results.write_csv(output)
