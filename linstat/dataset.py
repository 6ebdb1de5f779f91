"""
Typed tabular dataset and deterministic train/test splitting.

A ``Dataset`` wraps a pandas DataFrame and tags every column with an
explicit ``ColumnType``. Design-matrix construction reads those tags instead
of guessing from dtypes, so dummy encoding is the same for every run on the
same data.

Datasets are never changed in place: ``take`` and ``with_column_type``
return new instances, and ``to_pandas`` hands back a copy.
"""

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .errors import InsufficientDataError, InvalidSpecError
from .parameters import DEFAULT_SEED, DEFAULT_SPLIT_FRACTION, MIN_TRAIN_ROWS, validate_split_fraction

LOGGER = logging.getLogger(__name__)


class ColumnType(Enum):
    """Semantic type attached to each dataset column."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    TEXT = "text"


def detect_categorical_columns(df: pd.DataFrame, column_names: List[str]) -> List[str]:
    """
    Detect which columns should be treated as categorical.

    Categorical columns are identified by their pandas dtype:
    - object and string dtypes (including the "str" default of pandas 3)
    - category
    - bool

    Args:
        df: Input pandas DataFrame
        column_names: List of column names to check

    Returns:
        List of column names that are categorical

    Example:
        >>> df = pd.DataFrame({'age': [25, 30], 'dept': ['Sales', 'IT']})
        >>> detect_categorical_columns(df, ['age', 'dept'])
        ['dept']
    """
    return [
        col
        for col in column_names
        if col in df.columns
        and (
            pd.api.types.is_string_dtype(df[col].dtype)
            or isinstance(df[col].dtype, pd.CategoricalDtype)
            or pd.api.types.is_bool_dtype(df[col].dtype)
        )
    ]


def infer_column_types(df: pd.DataFrame) -> Dict[str, ColumnType]:
    """Tag numeric dtypes as NUMERIC and everything else as CATEGORICAL."""
    categorical = set(detect_categorical_columns(df, list(df.columns)))
    types = {}
    for col in df.columns:
        if col in categorical or not pd.api.types.is_numeric_dtype(df[col]):
            types[col] = ColumnType.CATEGORICAL
        else:
            types[col] = ColumnType.NUMERIC
    return types


class Dataset:
    """Immutable table of equally long, named and typed columns."""

    def __init__(self, frame: pd.DataFrame, column_types: Mapping[str, Union[ColumnType, str]]):
        if not isinstance(frame, pd.DataFrame):
            raise TypeError(f"Dataset expects a pandas DataFrame, got {type(frame).__name__}.")

        columns = list(frame.columns)
        duplicates = sorted({str(c) for c in columns if columns.count(c) > 1})
        if duplicates:
            raise InvalidSpecError(f"Duplicate column names are not allowed: {duplicates}")
        if len(frame) < 1:
            raise InsufficientDataError("A dataset needs at least one row.")

        untyped = [c for c in columns if c not in column_types]
        if untyped:
            raise InvalidSpecError(f"No column type given for columns: {untyped}")
        unknown = [c for c in column_types if c not in columns]
        if unknown:
            raise InvalidSpecError(f"Column types given for columns not in the data: {unknown}")

        types = {}
        for col in columns:
            ctype = ColumnType(column_types[col])
            if ctype is ColumnType.NUMERIC and not pd.api.types.is_numeric_dtype(frame[col]):
                raise InvalidSpecError(f"Column '{col}' is tagged numeric but holds {frame[col].dtype} values.")
            types[col] = ctype

        self._frame = frame.reset_index(drop=True).copy()
        self._types = types

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_pandas(cls, df: pd.DataFrame, column_types: Optional[Mapping[str, Union[ColumnType, str]]] = None) -> "Dataset":
        """Build a dataset, inferring the type of any column not listed in ``column_types``."""
        types = infer_column_types(df)
        if column_types:
            types.update({name: ColumnType(ctype) for name, ctype in column_types.items()})
        return cls(df, types)

    @classmethod
    def from_columns(
        cls,
        columns: Mapping[str, Sequence],
        column_types: Optional[Mapping[str, Union[ColumnType, str]]] = None,
    ) -> "Dataset":
        lengths = {name: len(values) for name, values in columns.items()}
        if len(set(lengths.values())) > 1:
            raise InvalidSpecError(f"All columns must have the same length, got {lengths}")
        return cls.from_pandas(pd.DataFrame(dict(columns)), column_types)

    # ------------------------------------------------------------------
    # Schema access
    # ------------------------------------------------------------------

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(self._frame.columns)

    @property
    def column_types(self) -> Dict[str, ColumnType]:
        return dict(self._types)

    @property
    def n_rows(self) -> int:
        return len(self._frame)

    def __len__(self) -> int:
        return self.n_rows

    def __contains__(self, name) -> bool:
        return name in self._types

    def __repr__(self) -> str:
        schema = ", ".join(f"{name}:{ctype.value}" for name, ctype in self._types.items())
        return f"Dataset(n_rows={self.n_rows}, columns=[{schema}])"

    def column_type(self, name: str) -> ColumnType:
        if name not in self._types:
            raise InvalidSpecError(f"Column '{name}' not found in dataset. Available columns: {list(self.columns)}")
        return self._types[name]

    def column(self, name: str) -> pd.Series:
        """Return a copy of one column."""
        self.column_type(name)
        return self._frame[name].copy()

    def numeric_columns(self) -> List[str]:
        return [name for name, ctype in self._types.items() if ctype is ColumnType.NUMERIC]

    # ------------------------------------------------------------------
    # Derivation (always returns a new dataset)
    # ------------------------------------------------------------------

    def take(self, indices: Iterable[int]) -> "Dataset":
        """Return the rows at the given positions, renumbered from zero."""
        idx = [int(i) for i in indices]
        out_of_range = [i for i in idx if i < 0 or i >= self.n_rows]
        if out_of_range:
            raise InvalidSpecError(f"Row indices out of range for {self.n_rows} rows: {out_of_range[:10]}")
        return Dataset(self._frame.iloc[idx], self._types)

    def with_column_type(self, name: str, column_type: Union[ColumnType, str]) -> "Dataset":
        self.column_type(name)
        types = dict(self._types)
        types[name] = ColumnType(column_type)
        return Dataset(self._frame, types)

    def to_pandas(self) -> pd.DataFrame:
        return self._frame.copy()


# =============================================================================
# Ingestion helpers
# =============================================================================


def read_delimited(source, sep: str = ",", column_types=None) -> Dataset:
    """Read a delimited file (path or buffer) with a header row into a Dataset."""
    df = pd.read_csv(source, sep=sep)
    LOGGER.info(f"Loaded {len(df)} rows and {len(df.columns)} columns.")
    return Dataset.from_pandas(df, column_types)


def read_pasted_text(text: str, column_types=None) -> Dataset:
    """Read tab-separated text copied from a spreadsheet, header row first."""
    return read_delimited(io.StringIO(text), sep="\t", column_types=column_types)


# =============================================================================
# Train/test splitting
# =============================================================================


@dataclass(frozen=True)
class Split:
    """Disjoint, sorted train and test row positions covering the whole dataset."""

    train: Tuple[int, ...]
    test: Tuple[int, ...]
    fraction: float
    seed: int

    @property
    def n_rows(self) -> int:
        return len(self.train) + len(self.test)


def split_rows(n_rows: int, fraction: float = DEFAULT_SPLIT_FRACTION, seed: int = DEFAULT_SEED) -> Split:
    """
    Partition ``range(n_rows)`` into train and test positions.

    The training set holds ``round(n_rows * fraction)`` rows drawn without
    replacement from a generator seeded with ``seed``; both index sets are
    returned in ascending row order.

    Raises:
        InvalidSpecError: If ``fraction`` is outside [0.5, 1.0]
        InsufficientDataError: If fewer than 2 rows would be used for training
    """
    fraction = validate_split_fraction(fraction)
    n_train = int(round(n_rows * fraction))
    if n_train < MIN_TRAIN_ROWS:
        raise InsufficientDataError(
            f"Cannot perform split with {fraction:.0%} of {n_rows} rows: only {n_train} training row(s). "
            f"At least {MIN_TRAIN_ROWS} are required."
        )

    rng = np.random.default_rng(seed)
    train = tuple(sorted(int(i) for i in rng.permutation(n_rows)[:n_train]))
    chosen = set(train)
    test = tuple(i for i in range(n_rows) if i not in chosen)

    LOGGER.info(f"Split {n_rows} rows into {len(train)} training and {len(test)} test rows (seed={seed}).")
    return Split(train=train, test=test, fraction=fraction, seed=int(seed))
