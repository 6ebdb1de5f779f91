"""
Tukey HSD (Honest Significant Difference) post-hoc comparisons.

After a significant one-way ANOVA, Tukey's test compares every pair of
group means while holding the family-wise error rate at alpha. With
unequal group sizes this is the Tukey-Kramer procedure: the standard error
of a pair is sqrt(MS_within / 2 * (1/n₁ + 1/n₂)) and intervals and
p-values come from the studentized range distribution with k groups and
n - k degrees of freedom.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.multicomp import pairwise_tukeyhsd

from ..errors import PostHocError
from ..parameters import DEFAULT_ALPHA, validate_alpha
from .anova import ANOVAResult

LOGGER = logging.getLogger(__name__)

METHOD = "Tukey HSD (Honest Significant Difference)"


@dataclass(frozen=True)
class PairwiseComparison:
    group_1: object
    group_2: object
    mean_difference: float
    lower: float
    upper: float
    p_adjusted: float
    reject: bool

    @property
    def comparison(self) -> str:
        return f"{self.group_1}-{self.group_2}"


@dataclass(frozen=True)
class PostHocComparison:
    """All pairwise comparisons of one ANOVA factor, or the reason they failed."""

    method: str
    alpha: float
    comparisons: Tuple[PairwiseComparison, ...] = ()
    q_critical: Optional[float] = None
    df: Optional[int] = None
    n_groups: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def n_significant(self) -> int:
        return sum(1 for c in self.comparisons if c.reject)

    def to_frame(self) -> pd.DataFrame:
        columns = ["Comparison", "Group 1", "Group 2", "Mean Difference", "Lower CI", "Upper CI", "Corrected P-Value", "Reject H0"]
        return pd.DataFrame(
            [
                [c.comparison, c.group_1, c.group_2, c.mean_difference, c.lower, c.upper, c.p_adjusted, c.reject]
                for c in self.comparisons
            ],
            columns=columns,
        )


def tukey_kramer_interval(mean_difference, ms_within, n_1, n_2, n_groups, df_within, alpha=DEFAULT_ALPHA) -> Tuple[float, float]:
    """Simultaneous confidence interval for one pair of group means."""
    se = np.sqrt(ms_within / 2.0 * (1.0 / n_1 + 1.0 / n_2))
    q_crit = stats.studentized_range.ppf(1 - alpha, n_groups, df_within)
    return float(mean_difference - q_crit * se), float(mean_difference + q_crit * se)


def run_tukey_test(anova_result: ANOVAResult, alpha: float = DEFAULT_ALPHA) -> PostHocComparison:
    """
    Run Tukey HSD on the groups of a one-way ANOVA.

    Levels are taken in sorted order; for levels Lᵢ < Lⱼ the pair is
    reported as "Lⱼ-Lᵢ" with mean difference x̄ⱼ - x̄ᵢ.

    Raises:
        PostHocError: If there are fewer than 2 groups, no residual degrees of
            freedom, or no variation within the groups
    """
    alpha = validate_alpha(alpha)
    if anova_result.n_groups < 2:
        raise PostHocError(f"Tukey HSD needs at least 2 groups, factor '{anova_result.factor}' has {anova_result.n_groups}.")
    if anova_result.df_within < 1:
        raise PostHocError("Tukey HSD needs at least one residual degree of freedom.")
    if not anova_result.ms_within > 0:
        raise PostHocError(f"No variation within the groups of '{anova_result.factor}'; Tukey intervals are undefined.")

    tukey_result = pairwise_tukeyhsd(
        np.asarray(anova_result.response_values, dtype=float),
        np.asarray(anova_result.groups, dtype=object),
        alpha=alpha,
    )

    groupsunique = tukey_result.groupsunique
    n_groups = len(groupsunique)
    df_within = anova_result.df_within
    ms_within = anova_result.ms_within
    group_sizes = dict(zip(anova_result.levels, anova_result.group_sizes))
    # pairwise_tukeyhsd orders pairs like combinations of groupsunique and reports mean(second) - mean(first)
    first, second = np.triu_indices(n_groups, 1)
    mean_diffs = np.asarray(tukey_result.meandiffs, dtype=float)
    std_pairs = np.asarray(tukey_result.std_pairs, dtype=float)

    q_crit = float(stats.studentized_range.ppf(1 - alpha, n_groups, df_within))
    p_adjusted = stats.studentized_range.sf(np.abs(mean_diffs) / std_pairs, n_groups, df_within)

    comparisons = []
    for i, j, diff, p in zip(first, second, mean_diffs, p_adjusted):
        lower, upper = tukey_kramer_interval(
            diff, ms_within, group_sizes[groupsunique[j]], group_sizes[groupsunique[i]], n_groups, df_within, alpha
        )
        comparisons.append(
            PairwiseComparison(
                group_1=groupsunique[j],
                group_2=groupsunique[i],
                mean_difference=float(diff),
                lower=lower,
                upper=upper,
                p_adjusted=float(p),
                reject=bool(p < alpha),
            )
        )

    LOGGER.info(f"Tukey HSD on '{anova_result.factor}': {len(comparisons)} comparisons at alpha={alpha}")
    return PostHocComparison(
        method=METHOD,
        alpha=alpha,
        comparisons=tuple(comparisons),
        q_critical=q_crit,
        df=df_within,
        n_groups=int(n_groups),
    )


def failed_comparison(error: Exception, alpha: float = DEFAULT_ALPHA) -> PostHocComparison:
    """Post-hoc result carrying the reason the comparison could not run."""
    return PostHocComparison(method=METHOD, alpha=alpha, error=str(error))
