import logging

import numpy as np
import pandas as pd

from ..dataset import Dataset
from ..errors import DegenerateResponseError, InsufficientDataError, InvalidSpecError, MissingValueError
from ..regression import count_missing_values, observed_levels
from ..specification import AnovaSpec

LOGGER = logging.getLogger(__name__)


def validate_anova_data(dataset: Dataset, factor: str, response: str):
    """
    Validate data for one-way ANOVA analysis requirements.

    The checks run in order: column references → missing values → response
    variation → number of groups → residual degrees of freedom.

    Parameters
    ----------
    dataset : Dataset
        Source data
    factor : str
        Name of the categorical grouping column
    response : str
        Name of the numeric response column

    Returns
    -------
    tuple
        (work_df, levels) - DataFrame holding only the two columns, and the
        sorted factor levels

    Raises
    ------
    InvalidSpecError
        If a column is absent, mistyped, or the factor has fewer than 2 levels
    MissingValueError
        If either column has missing or non-finite values
    DegenerateResponseError
        If the response has fewer than 2 distinct values
    InsufficientDataError
        If there are no residual degrees of freedom (n - k < 1)
    """
    AnovaSpec(factor, response).validate(dataset)
    work_df = dataset.to_pandas()[[factor, response]]

    missing_info = count_missing_values(work_df, [response], [factor])
    if missing_info:
        raise MissingValueError(
            f"Missing or infinite values detected in the selected variables: {missing_info}. "
            "ANOVA requires complete data."
        )

    if np.unique(work_df[response].to_numpy(dtype=float)).size < 2:
        raise DegenerateResponseError(f"Insufficient variation in the response variable '{response}' for ANOVA.")

    if work_df[factor].map(type).nunique() > 1:
        # Mixed label types (e.g. 1 and "a") cannot be sorted; compare them as text
        LOGGER.warning(f"Factor '{factor}' mixes label types; levels are compared as text.")
        work_df = work_df.assign(**{factor: work_df[factor].astype(str)})

    levels = observed_levels(work_df[factor])
    n_groups = len(levels)
    if n_groups < 2:
        raise InvalidSpecError(f"Factor '{factor}' has only {n_groups} level(s). ANOVA requires at least 2 groups for comparison.")

    df_within = len(work_df) - n_groups
    if df_within < 1:
        raise InsufficientDataError(
            f"{len(work_df)} observations in {n_groups} groups leave no residual degrees of freedom. "
            "At least one group needs 2 or more observations."
        )

    return work_df, levels


def group_statistics(work_df: pd.DataFrame, factor: str, response: str, levels) -> pd.DataFrame:
    """Count, mean and standard deviation of the response per factor level."""
    group_stats = work_df.groupby(factor, observed=True)[response].agg(["count", "mean", "std"]).reindex(levels)
    group_stats.columns = ["n", "mean", "std"]
    return group_stats
