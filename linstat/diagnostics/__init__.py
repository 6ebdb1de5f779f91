"""
Regression assumption tests.

Key Components:
---------------
- autocorrelation_tests: Durbin-Watson with exact / normal-approximation p-values
- heteroskedasticity_tests: studentized Breusch-Pagan
- normality_tests: Lilliefors
- multicollinearity_tests: (generalized) variance inflation factors
- diagnostics_core: runs the tests independently of each other

All tests decide at α = 0.05 unless told otherwise: the null hypothesis is
rejected when the p-value is below α.
"""

from .autocorrelation_tests import durbin_watson_pvalue, run_durbin_watson_test
from .diagnostics_core import (
    AnovaDiagnostics,
    RegressionDiagnostics,
    run_anova_diagnostics,
    run_isolated,
    run_regression_diagnostics,
)
from .heteroskedasticity_tests import run_breusch_pagan_test
from .multicollinearity_tests import compute_vifs, run_vif_test
from .normality_tests import run_lilliefors_test
from .utils import (
    AUTOCORRELATION_PRESENT,
    HETEROSCEDASTICITY_PRESENT,
    HOMOSCEDASTICITY,
    NO_AUTOCORRELATION,
    NO_MULTICOLLINEARITY,
    NOT_APPLICABLE,
    POTENTIAL_MULTICOLLINEARITY,
    RESIDUALS_NORMAL,
    RESIDUALS_NOT_NORMAL,
    DiagnosticResult,
)

__all__ = [
    # Test functions
    "run_durbin_watson_test",
    "durbin_watson_pvalue",
    "run_breusch_pagan_test",
    "run_lilliefors_test",
    "run_vif_test",
    "compute_vifs",
    # Orchestration
    "run_isolated",
    "run_regression_diagnostics",
    "run_anova_diagnostics",
    "RegressionDiagnostics",
    "AnovaDiagnostics",
    # Results
    "DiagnosticResult",
    "NOT_APPLICABLE",
    "AUTOCORRELATION_PRESENT",
    "NO_AUTOCORRELATION",
    "HETEROSCEDASTICITY_PRESENT",
    "HOMOSCEDASTICITY",
    "RESIDUALS_NOT_NORMAL",
    "RESIDUALS_NORMAL",
    "POTENTIAL_MULTICOLLINEARITY",
    "NO_MULTICOLLINEARITY",
]
