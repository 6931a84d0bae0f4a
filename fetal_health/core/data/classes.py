"""Outcome classes of the fetal health dataset."""

import enum
from typing import NamedTuple

import polars as pl


class ClassChoice(NamedTuple):
    """Ordinal code and display label of an outcome class."""

    code: int
    label: str

    def __repr__(self):
        return self.label

    def __str__(self):
        return self.label


class FetalHealth(enum.Enum):
    """Fetal health classes, in their clinical (and modeling) order.

    The first member is the reference class of the multinomial model and, by
    convention, the majority class of the dataset.
    """

    NORMAL = ClassChoice(1, "Normal")
    SUSPECT = ClassChoice(2, "Suspect")
    PATHOLOGICAL = ClassChoice(3, "Pathological")

    def __str__(self) -> str:
        return self.label

    @property
    def code(self) -> int:
        return self.value.code

    @property
    def label(self) -> str:
        return self.value.label

    @classmethod
    def from_code(cls, code: int | float) -> "FetalHealth":
        for member in cls:
            if member.code == code:
                return member
        raise ValueError(f"Unknown fetal health code: {code}")

    @classmethod
    def from_label(cls, label: str) -> "FetalHealth":
        for member in cls:
            if member.label == label or member.name.lower() == label.lower():
                return member
        raise ValueError(f"Unknown fetal health label: {label}")

    @classmethod
    def labels(cls) -> tuple[str, ...]:
        """Labels in class order."""
        return tuple(member.label for member in cls)

    @classmethod
    def code_mapping(cls) -> dict[int, str]:
        return {member.code: member.label for member in cls}

    @classmethod
    def dtype(cls) -> pl.Enum:
        """Polars dtype that keeps the class order when sorting or grouping."""
        return pl.Enum(cls.labels())

    @classmethod
    def _missing_(cls, value):  # type: ignore[override]
        if isinstance(value, ClassChoice):
            for member in cls:
                if member.value == value:
                    return member
        if isinstance(value, str):
            for member in cls:
                if member.label == value or member.name.lower() == value.lower():
                    return member
        if isinstance(value, int | float) and not isinstance(value, bool):
            for member in cls:
                if member.code == value:
                    return member
        return None


TARGET_COLUMN = "fetal_health"
"""Name of the response column in the raw and processed data."""

CLASS_ORDER: tuple[str, ...] = FetalHealth.labels()
"""Default class order used by the modeling and evaluation components."""
