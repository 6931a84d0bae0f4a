"""Shared fixtures for CLI unit tests."""

from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import polars as pl
import pytest
from typer.testing import CliRunner

from fetal_health.core.pipeline import create_pipeline
from fetal_health.services import RepeatedRunner
from fetal_health.settings import PathSettings, PipelineSettings


@pytest.fixture
def runner() -> CliRunner:
    """Fixture providing a CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_container() -> Generator[MagicMock, None, None]:
    """Fixture providing a mocked DI container.

    Patches the container in all CLI modules to ensure mock is used.
    """
    mock = MagicMock()

    with (
        patch("fetal_health.cli.container", mock),
        patch("fetal_health.cli.data.container", mock),
        patch("fetal_health.cli.model.container", mock),
    ):
        yield mock


@pytest.fixture
def mock_settings(mock_container: MagicMock, tmp_path: Path) -> MagicMock:
    """Fixture providing settings with real pipeline defaults and a temporary root."""
    settings = MagicMock()
    settings.paths = PathSettings(project_root=tmp_path)
    settings.pipeline = PipelineSettings()
    mock_container.settings.return_value = settings
    return settings


@pytest.fixture
def mock_loader(mock_container: MagicMock, ctg_frame: pl.DataFrame) -> MagicMock:
    """Fixture providing a dataset loader that returns the synthetic frame."""
    loader = MagicMock()
    loader.load.return_value = ctg_frame
    mock_container.dataset_loader.return_value = loader
    return loader


@pytest.fixture
def pipeline_settings_calls(mock_container: MagicMock) -> list[PipelineSettings | None]:
    """Wires the container to real pipelines and records the settings each one got."""
    calls: list[PipelineSettings | None] = []

    def build(settings: PipelineSettings | None = None):
        calls.append(settings)
        return create_pipeline(settings)

    mock_container.pipeline.side_effect = build
    mock_container.repeated_runner.side_effect = lambda n_jobs=1: RepeatedRunner(
        create_pipeline(), n_jobs=n_jobs
    )
    return calls
