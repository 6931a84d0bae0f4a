"""CLI for inspecting the dataset before modeling."""

from pathlib import Path
from typing import Optional

import polars as pl
import typer
from typing_extensions import Annotated

from fetal_health.containers import container
from fetal_health.core.data import class_distribution, class_means, imbalance_ratio
from fetal_health.errors import FetalHealthError

app = typer.Typer()

DatasetArgument = Annotated[
    Optional[Path],
    typer.Argument(
        help="CSV file with the predictors and the fetal_health column. "
        "Defaults to data/raw/fetal_health.csv under the project root.",
    ),
]


def load_dataset(path: Path | None) -> pl.DataFrame:
    """Load the dataset at `path`, or at the configured location."""
    path = path or container.settings().paths.dataset_path
    try:
        return container.dataset_loader().load(path)
    except (FetalHealthError, FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command("describe")
def describe(path: DatasetArgument = None):
    """Shows the class distribution and the per-class predictor means."""
    df = load_dataset(path)

    typer.echo(f"Rows: {df.height}, predictors: {df.width - 1}")
    typer.echo(class_distribution(df))
    typer.echo(f"Imbalance ratio (majority/minority): {imbalance_ratio(df):.2f}")
    typer.echo(class_means(df))


@app.command("pca")
def pca(
    path: DatasetArgument = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", "-s", help="Seed of the split and resampling."),
    ] = None,
):
    """Shows the variance explained by each principal component of the balanced training set.

    Use the cumulative proportion to decide how many components to keep.
    """
    df = load_dataset(path)
    settings = container.settings().pipeline
    seed = settings.random_seed if seed is None else seed

    try:
        projection = container.pipeline().fit_components(df, seed)
    except (FetalHealthError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    with pl.Config(tbl_rows=-1):
        typer.echo(projection.scree_table())
