"""Tests for data CLI commands."""

from unittest.mock import MagicMock

import pytest

from fetal_health.cli.data import app
from fetal_health.errors import UnknownLabelError

pytestmark = pytest.mark.usefixtures("mock_settings")


class DescribeDescribeCommand:
    """Tests for the `data describe` command."""

    def it_shows_the_class_distribution(self, runner, mock_loader: MagicMock) -> None:
        result = runner.invoke(app, ["describe", "data.csv"])

        assert result.exit_code == 0, result.output
        assert "Rows: 950, predictors: 5" in result.output
        assert "Pathological" in result.output
        assert "Imbalance ratio (majority/minority): 7.00" in result.output

    def it_defaults_to_the_configured_dataset(
        self, runner, mock_loader: MagicMock, mock_settings: MagicMock
    ) -> None:
        result = runner.invoke(app, ["describe"])

        assert result.exit_code == 0, result.output
        mock_loader.load.assert_called_once_with(mock_settings.paths.dataset_path)

    def it_exits_with_an_error_when_loading_fails(self, runner, mock_loader: MagicMock) -> None:
        mock_loader.load.side_effect = UnknownLabelError([4], ["Normal"])

        result = runner.invoke(app, ["describe", "data.csv"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def it_exits_with_an_error_when_the_file_is_missing(
        self, runner, mock_loader: MagicMock
    ) -> None:
        mock_loader.load.side_effect = FileNotFoundError("Dataset file not found: data.csv")

        result = runner.invoke(app, ["describe", "data.csv"])

        assert result.exit_code == 1
        assert "not found" in result.output


@pytest.mark.usefixtures("mock_loader", "pipeline_settings_calls")
class DescribePcaCommand:
    """Tests for the `data pca` command."""

    def it_shows_the_scree_table(self, runner) -> None:
        result = runner.invoke(app, ["pca", "data.csv", "--seed", "3"])

        assert result.exit_code == 0, result.output
        for component in ("PC1", "PC5"):
            assert component in result.output
        assert "cumulative_proportion" in result.output
