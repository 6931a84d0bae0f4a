"""Application settings using Pydantic Settings.

This module defines the FetalHealthSettings class which loads configuration
from environment variables and .env files using pydantic-settings. Nested
groups are addressed with a double underscore, e.g.
`FETAL_HEALTH_PIPELINE__RANDOM_SEED=7`.
"""

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).resolve().parents[1]


class PathSettings(BaseModel):
    """Path-related settings."""

    project_root: Path = Field(default_factory=_get_project_root)

    @property
    def data_dir(self) -> Path:
        return self.project_root / "data"

    @property
    def raw_data_dir(self) -> Path:
        return self.data_dir / "raw"

    @property
    def dataset_path(self) -> Path:
        return self.raw_data_dir / "fetal_health.csv"

    @property
    def reports_dir(self) -> Path:
        return self.project_root / "reports"


class PipelineSettings(BaseModel):
    """Parameters of a modeling run.

    Ranges are validated by the components themselves so that an invalid value
    surfaces as the corresponding domain error.
    """

    train_fraction: float = Field(default=0.8, description="Share of rows used for training")
    random_seed: int = Field(default=2022, description="Seed of the run's random generator")
    minority_probability: float = Field(
        default=0.47,
        description="Target minority share of each pairwise resampled subset",
    )
    subset_size: int | None = Field(
        default=None,
        description="Target size of each resampled subset; defaults to the subset's size",
    )
    majority_class: str | None = Field(
        default=None,
        description="Majority class for balancing; the most frequent one when unset",
    )
    n_components: int = Field(default=3, ge=1, description="Principal components kept")
    max_iter: int = Field(default=500, ge=1, description="Optimizer iteration budget")


class LoggingSettings(BaseModel):
    """Logging-related settings."""

    level: str = Field(default="INFO", description="Minimum level of emitted records")
    serialize: bool = Field(default=False, description="Emit records as JSON lines")


class FetalHealthSettings(BaseSettings):
    """Root settings class that composes all settings groups."""

    model_config = SettingsConfigDict(
        env_prefix="FETAL_HEALTH_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Include variable values in tracebacks")
    paths: PathSettings = Field(default_factory=PathSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
