"""Loading of the cardiotocography dataset from delimited text files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger
import polars as pl

from fetal_health.core.data.classes import TARGET_COLUMN, FetalHealth
from fetal_health.errors import EmptyDatasetError, SchemaMismatchError, UnknownLabelError


class CsvDatasetLoader:
    """Loads the fetal health CSV into a frame of numeric predictors and class labels.

    The response column is stored as ordinal codes (1, 2, 3) in the raw file and is
    mapped once, through `FetalHealth`, to its class labels.

    Example:
        ```python
        loader = CsvDatasetLoader()
        df = loader.load(Path("data/raw/fetal_health.csv"))
        ```
    """

    def __init__(self, target: str = TARGET_COLUMN, separator: str = ",") -> None:
        """Initialize the loader.

        Args:
            target: Name of the response column.
            separator: Field separator of the file.
        """
        self._target = target
        self._separator = separator

    def load(self, path: Path | str) -> pl.DataFrame:
        """Read and validate the dataset at `path`.

        Raises:
            FileNotFoundError: If the file does not exist.
            EmptyDatasetError: If the file has no data rows.
            SchemaMismatchError: If the response column is missing.
            UnknownLabelError: If a response code is not a declared class.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Dataset file not found: {path}")

        read_options: dict[str, Any] = {
            "separator": self._separator,
            "infer_schema_length": None,
        }
        raw = pl.read_csv(path, **read_options)
        logger.info(f"Loaded {raw.height} rows and {raw.width} columns from {path}")
        return self.transform(raw)

    def transform(self, raw: pl.DataFrame) -> pl.DataFrame:
        """Validate a raw frame and map its response codes to class labels."""
        if self._target not in raw.columns:
            raise SchemaMismatchError(
                expected=[*raw.columns, self._target],
                actual=raw.columns,
            )
        if raw.height == 0:
            raise EmptyDatasetError("load")

        predictors = [c for c in raw.columns if c != self._target]
        non_numeric = [c for c in predictors if not raw.schema[c].is_numeric()]
        if non_numeric:
            raise ValueError(f"Predictor columns must be numeric, got {non_numeric}")

        with_nulls = [c for c in raw.columns if raw[c].null_count() > 0]
        if with_nulls:
            raise ValueError(f"Columns with missing values: {with_nulls}")

        mapping = FetalHealth.code_mapping()
        codes = raw[self._target].cast(pl.Float64, strict=False)
        known = codes.is_in([float(code) for code in mapping]).fill_null(False)
        if not known.all():
            unknown = raw.filter(~known)[self._target].unique().to_list()
            raise UnknownLabelError(unknown, FetalHealth.labels())

        return raw.with_columns(
            pl.col(predictors).cast(pl.Float64),
            codes.cast(pl.Int64)
            .replace_strict(mapping, return_dtype=pl.String)
            .cast(FetalHealth.dtype())
            .alias(self._target),
        )


def features_and_labels(
    df: pl.DataFrame, target: str = TARGET_COLUMN
) -> tuple[pl.DataFrame, pl.Series]:
    """Separate the predictor columns from the response column."""
    if target not in df.columns:
        raise SchemaMismatchError(expected=[*df.columns, target], actual=df.columns)
    return df.drop(target), df[target]


__all__ = ["CsvDatasetLoader", "features_and_labels"]
