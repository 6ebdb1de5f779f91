"""
One-way ANOVA and post-hoc comparisons.

Key Components:
---------------
- anova: sum-of-squares decomposition and F-test
- tukey_core: Tukey HSD pairwise comparisons (Tukey-Kramer for unequal groups)
- utils: input validation and per-group statistics
"""

from .anova import ANOVAResult, run_one_way_anova
from .tukey_core import PairwiseComparison, PostHocComparison, failed_comparison, run_tukey_test, tukey_kramer_interval
from .utils import group_statistics, validate_anova_data

__all__ = [
    # ANOVA
    "ANOVAResult",
    "run_one_way_anova",
    # Tukey HSD
    "PairwiseComparison",
    "PostHocComparison",
    "run_tukey_test",
    "tukey_kramer_interval",
    "failed_comparison",
    # Helpers
    "validate_anova_data",
    "group_statistics",
]
