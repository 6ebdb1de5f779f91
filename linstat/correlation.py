import logging

import numpy as np
import pandas as pd

from .dataset import Dataset
from .errors import InsufficientColumnsError
from .parameters import CORRELATION_DECIMALS

LOGGER = logging.getLogger(__name__)


def correlate(dataset: Dataset, decimals: int = CORRELATION_DECIMALS) -> pd.DataFrame:
    """
    Pairwise Pearson correlation matrix of the numeric columns.

    Non-numeric columns are left out. Values are rounded to ``decimals``
    places and the diagonal is exactly 1.

    Raises:
        InsufficientColumnsError: If fewer than 2 numeric columns exist
    """
    numeric_cols = dataset.numeric_columns()
    if len(numeric_cols) < 2:
        raise InsufficientColumnsError(
            f"Correlation needs at least 2 numeric columns, found {len(numeric_cols)}: {numeric_cols}"
        )

    skipped = [c for c in dataset.columns if c not in numeric_cols]
    if skipped:
        LOGGER.debug(f"Excluding non-numeric columns from correlation: {skipped}")

    corr = dataset.to_pandas()[numeric_cols].astype(float).corr(method="pearson")
    values = corr.to_numpy(copy=True)
    np.fill_diagonal(values, 1.0)
    # Symmetrize before rounding so both triangles match exactly
    values = (values + values.T) / 2
    return pd.DataFrame(values, index=numeric_cols, columns=numeric_cols).round(decimals)
