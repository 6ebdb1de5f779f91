"""
One-way ANOVA implementation.

The total variation of the response is split into a between-group part
(differences of the group means from the grand mean) and a within-group
part (spread of observations around their group mean):

    SS_total = SS_between + SS_within

The F statistic compares the two mean squares; a small p-value means at
least one group mean differs from the others.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd
from scipy import stats

from ..dataset import ColumnType, Dataset
from ..parameters import DEFAULT_ALPHA, validate_alpha
from ..regression import PredictorEncoding, encode_design
from .utils import group_statistics, validate_anova_data

LOGGER = logging.getLogger(__name__)


def _read_only(values) -> np.ndarray:
    arr = np.array(values, dtype=float, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class ANOVAResult:
    factor: str
    response: str
    levels: Tuple
    group_sizes: Tuple[int, ...]
    group_means: Tuple[float, ...]
    group_stds: Tuple[float, ...]
    ss_between: float
    ss_within: float
    df_between: int
    df_within: int
    f_statistic: float
    p_value: float
    alpha: float
    response_values: np.ndarray
    groups: Tuple
    residuals: np.ndarray
    fitted_values: np.ndarray
    design: np.ndarray

    @property
    def ss_total(self) -> float:
        return self.ss_between + self.ss_within

    @property
    def ms_between(self) -> float:
        return self.ss_between / self.df_between

    @property
    def ms_within(self) -> float:
        return self.ss_within / self.df_within

    @property
    def eta_squared(self) -> float:
        return self.ss_between / self.ss_total

    @property
    def significant(self) -> bool:
        return bool(self.p_value < self.alpha)

    @property
    def n_groups(self) -> int:
        return len(self.levels)

    @property
    def n_obs(self) -> int:
        return int(sum(self.group_sizes))

    def anova_table(self) -> pd.DataFrame:
        """ANOVA table with Between Groups, Within Groups and Total rows."""
        return pd.DataFrame(
            {
                "Source": ["Between Groups", "Within Groups", "Total"],
                "Sum of Squares": [self.ss_between, self.ss_within, self.ss_total],
                "df": [self.df_between, self.df_within, self.df_between + self.df_within],
                "Mean Square": [self.ms_between, self.ms_within, np.nan],  # Total row doesn't have Mean Square
                "F": [self.f_statistic, np.nan, np.nan],
                "p-value": [self.p_value, np.nan, np.nan],
            }
        )

    def group_summary(self) -> pd.DataFrame:
        """Per-level size, mean and standard deviation (boxplot input)."""
        return pd.DataFrame(
            {
                "Group": list(self.levels),
                "N": list(self.group_sizes),
                "Mean": list(self.group_means),
                "Std Dev": list(self.group_stds),
            }
        )


def run_one_way_anova(dataset: Dataset, factor: str, response: str, alpha=DEFAULT_ALPHA) -> ANOVAResult:
    """
    Perform one-way ANOVA of ``response`` grouped by ``factor``.

    Parameters:
    -----------
    dataset : Dataset
        Source data
    factor : str
        Categorical grouping column
    response : str
        Numeric dependent variable column
    alpha : float, default=0.05
        Significance level for the F-test

    Returns:
    --------
    ANOVAResult
        Sums of squares, degrees of freedom, F statistic and p-value, plus
        residuals and the dummy-coded design for downstream diagnostics
    """
    alpha = validate_alpha(alpha)
    work_df, levels = validate_anova_data(dataset, factor, response)

    y = work_df[response].to_numpy(dtype=float)
    group_stats = group_statistics(work_df, factor, response, levels)
    means = group_stats["mean"].to_numpy(dtype=float)
    sizes = group_stats["n"].to_numpy(dtype=int)

    codes = pd.Categorical(work_df[factor], categories=levels).codes
    fitted = means[codes]
    resid = y - fitted
    grand_mean = y.mean()

    ss_between = float(np.sum(sizes * (means - grand_mean) ** 2))
    ss_within = float(np.sum(resid**2))
    df_between = len(levels) - 1
    df_within = len(y) - len(levels)

    ms_between = ss_between / df_between
    ms_within = ss_within / df_within
    if ms_within > 0:
        f_statistic = ms_between / ms_within
        p_value = float(stats.f.sf(f_statistic, df_between, df_within))
    else:
        LOGGER.warning(f"No variation within the groups of '{factor}'; F statistic is infinite.")
        f_statistic = np.inf
        p_value = 0.0

    encoding = PredictorEncoding(factor, ColumnType.CATEGORICAL, tuple(levels))
    design = encode_design(work_df, [encoding])

    return ANOVAResult(
        factor=factor,
        response=response,
        levels=tuple(levels),
        group_sizes=tuple(int(n) for n in sizes),
        group_means=tuple(float(m) for m in means),
        group_stds=tuple(float(s) for s in group_stats["std"]),
        ss_between=ss_between,
        ss_within=ss_within,
        df_between=int(df_between),
        df_within=int(df_within),
        f_statistic=float(f_statistic),
        p_value=p_value,
        alpha=alpha,
        response_values=_read_only(y),
        groups=tuple(work_df[factor]),
        residuals=_read_only(resid),
        fitted_values=_read_only(fitted),
        design=design.values,
    )
