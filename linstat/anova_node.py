"""
One-way ANOVA with residual diagnostics and Tukey HSD post-hoc comparisons.
"""

import logging
from typing import Tuple

from .dataset import Dataset
from .diagnostics import AnovaDiagnostics, run_anova_diagnostics
from .errors import PostHocError
from .parameters import DEFAULT_ALPHA, validate_alpha
from .post_hoc import ANOVAResult, PostHocComparison, failed_comparison, run_one_way_anova, run_tukey_test

LOGGER = logging.getLogger(__name__)


def fit_anova(
    dataset: Dataset, factor: str, response: str, alpha: float = DEFAULT_ALPHA
) -> Tuple[ANOVAResult, AnovaDiagnostics, PostHocComparison]:
    """
    Run one-way ANOVA of ``response`` by ``factor``.

    A failing post-hoc comparison does not invalidate the ANOVA: it is
    returned as a PostHocComparison whose ``error`` explains the failure.
    """
    alpha = validate_alpha(alpha)

    # Step 1: Sum-of-squares decomposition and F-test
    anova_result = run_one_way_anova(dataset, factor, response, alpha=alpha)
    conclusion = "Significant Difference Found" if anova_result.significant else "No Difference Found"
    LOGGER.info(f"ANOVA of '{response}' by '{factor}': F={anova_result.f_statistic:.4f}, p={anova_result.p_value:.4g} ({conclusion})")

    # Step 2: Normality and homoscedasticity of the residuals
    diagnostics = run_anova_diagnostics(anova_result.residuals, anova_result.design, alpha)

    # Step 3: Pairwise comparisons
    try:
        post_hoc = run_tukey_test(anova_result, alpha)
    except PostHocError as e:
        LOGGER.warning(f"Tukey HSD could not be computed: {e}")
        post_hoc = failed_comparison(e, alpha)

    return anova_result, diagnostics, post_hoc
