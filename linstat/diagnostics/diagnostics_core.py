"""
Run the assumption tests for a fitted regression or ANOVA model.

Every test is run on its own: if one cannot be computed it is logged and
reported as "not applicable", and the remaining tests still run.
"""

import logging
from typing import Callable, NamedTuple

import numpy as np

from ..errors import StatisticsError
from ..parameters import DEFAULT_ALPHA, validate_alpha
from ..regression import FittedModel
from .autocorrelation_tests import run_durbin_watson_test
from .heteroskedasticity_tests import run_breusch_pagan_test
from .multicollinearity_tests import run_vif_test
from .normality_tests import run_lilliefors_test
from .utils import DiagnosticResult, not_applicable

LOGGER = logging.getLogger(__name__)


class RegressionDiagnostics(NamedTuple):
    autocorrelation: DiagnosticResult
    heteroskedasticity: DiagnosticResult
    normality: DiagnosticResult
    multicollinearity: DiagnosticResult


class AnovaDiagnostics(NamedTuple):
    normality: DiagnosticResult
    heteroskedasticity: DiagnosticResult


def run_isolated(test_name: str, alpha: float, test: Callable[[], DiagnosticResult]) -> DiagnosticResult:
    """Run one test, turning a computational failure into a "not applicable" result."""
    try:
        return test()
    except (StatisticsError, ValueError, np.linalg.LinAlgError) as e:
        LOGGER.warning(f"{test_name} test could not be computed: {e}")
        return not_applicable(test_name, str(e), alpha)


def run_regression_diagnostics(model: FittedModel, alpha: float = DEFAULT_ALPHA) -> RegressionDiagnostics:
    """Run Durbin-Watson, Breusch-Pagan, Lilliefors and VIF on a fitted model."""
    alpha = validate_alpha(alpha)
    resid = model.residuals
    X = model.design.values

    return RegressionDiagnostics(
        autocorrelation=run_isolated("Durbin-Watson", alpha, lambda: run_durbin_watson_test(resid, X, alpha)),
        heteroskedasticity=run_isolated("Breusch-Pagan", alpha, lambda: run_breusch_pagan_test(resid, X, alpha)),
        normality=run_isolated("Lilliefors", alpha, lambda: run_lilliefors_test(resid, alpha)),
        multicollinearity=run_isolated("Variance Inflation Factor", alpha, lambda: run_vif_test(model.design, alpha=alpha)),
    )


def run_anova_diagnostics(residuals, design, alpha: float = DEFAULT_ALPHA) -> AnovaDiagnostics:
    """Run Lilliefors and Breusch-Pagan on the residuals of a one-way ANOVA."""
    alpha = validate_alpha(alpha)
    return AnovaDiagnostics(
        normality=run_isolated("Lilliefors", alpha, lambda: run_lilliefors_test(residuals, alpha)),
        heteroskedasticity=run_isolated("Breusch-Pagan", alpha, lambda: run_breusch_pagan_test(residuals, design, alpha)),
    )
