"""
Helper functions shared by model fitting, prediction and ANOVA.
"""

from typing import Dict, Iterable

import numpy as np
import pandas as pd


def count_missing_values(df: pd.DataFrame, numeric_columns: Iterable[str], other_columns: Iterable[str] = ()) -> Dict[str, int]:
    """
    Count unusable cells per column.

    Numeric columns count NaN and +/-Inf; all other columns count only
    missing values (None/NaN).

    Args:
        df: Input pandas DataFrame
        numeric_columns: Columns that must hold finite numbers
        other_columns: Columns that only need to be present

    Returns:
        Mapping of column name to number of bad cells, for columns with at
        least one bad cell

    Example:
        >>> df = pd.DataFrame({'x': [1.0, np.inf], 'g': ['a', None]})
        >>> count_missing_values(df, ['x'], ['g'])
        {'x': 1, 'g': 1}
    """
    counts = {}
    for col in numeric_columns:
        values = pd.to_numeric(df[col], errors="coerce").to_numpy(dtype=float)
        bad = int(np.sum(~np.isfinite(values)))
        if bad:
            counts[col] = bad
    for col in other_columns:
        bad = int(df[col].isna().sum())
        if bad:
            counts[col] = bad
    return counts
