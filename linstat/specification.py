"""
Validated model specifications.

A specification names the columns a model uses. ``validate`` checks the
names against a dataset's schema before any numeric work starts, so bad
references fail with ``InvalidSpecError`` instead of deep inside a solver.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

from .dataset import ColumnType, Dataset
from .errors import InvalidSpecError


def _check_columns_exist(dataset: Dataset, names: Sequence[str]) -> None:
    missing = [name for name in names if name not in dataset]
    if missing:
        raise InvalidSpecError(f"Columns not found in data: {missing}. Available columns: {list(dataset.columns)}")


@dataclass(frozen=True)
class RegressionSpec:
    """Response column plus an ordered, non-empty tuple of predictor columns."""

    response: str
    predictors: Tuple[str, ...]

    def __post_init__(self):
        if isinstance(self.predictors, str):
            object.__setattr__(self, "predictors", (self.predictors,))
        else:
            object.__setattr__(self, "predictors", tuple(self.predictors))

    def validate(self, dataset: Dataset) -> "RegressionSpec":
        if not self.predictors:
            raise InvalidSpecError("Select at least one predictor variable.")

        duplicated = sorted({p for p in self.predictors if self.predictors.count(p) > 1})
        if duplicated:
            raise InvalidSpecError(f"Predictor columns listed more than once: {duplicated}")

        if self.response in self.predictors:
            raise InvalidSpecError(f"Response column '{self.response}' cannot also be a predictor.")

        _check_columns_exist(dataset, [self.response, *self.predictors])

        if dataset.column_type(self.response) is not ColumnType.NUMERIC:
            raise InvalidSpecError(
                f"Response column '{self.response}' must be numeric, "
                f"but it is tagged {dataset.column_type(self.response).value}."
            )

        text_predictors = [p for p in self.predictors if dataset.column_type(p) is ColumnType.TEXT]
        if text_predictors:
            raise InvalidSpecError(
                f"Text columns cannot be used as predictors: {text_predictors}. "
                "Tag them as categorical to dummy-encode them."
            )
        return self


@dataclass(frozen=True)
class AnovaSpec:
    """One categorical factor column and one numeric response column."""

    factor: str
    response: str

    def validate(self, dataset: Dataset) -> "AnovaSpec":
        if self.factor == self.response:
            raise InvalidSpecError(f"Factor and response must be different columns, got '{self.factor}' for both.")

        _check_columns_exist(dataset, [self.factor, self.response])

        if dataset.column_type(self.response) is not ColumnType.NUMERIC:
            raise InvalidSpecError(
                f"Response column '{self.response}' must be numeric, "
                f"but it is tagged {dataset.column_type(self.response).value}."
            )
        if dataset.column_type(self.factor) is ColumnType.NUMERIC:
            raise InvalidSpecError(
                f"Factor column '{self.factor}' is tagged numeric. Tag it as categorical "
                "(Dataset.with_column_type) to treat each distinct value as a group."
            )
        return self
