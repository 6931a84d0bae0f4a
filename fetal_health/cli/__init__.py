"""CLI entry point for the fetal health workflow."""

import typer

from fetal_health.config.logging import configure_logging
from fetal_health.containers import container

from .data import app as data
from .model import app as model

app = typer.Typer()
app.add_typer(data, name="data", help="Dataset inspection commands.")
app.add_typer(model, name="model", help="Model fitting and evaluation commands.")


@app.callback()
def main():
    """Fetal health classification from cardiotocography features."""
    configure_logging(container.settings())
