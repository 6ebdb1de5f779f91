"""
Result type and verdict labels shared by the assumption tests.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..parameters import DEFAULT_ALPHA

NOT_APPLICABLE = "not applicable"

AUTOCORRELATION_PRESENT = "autocorrelation present"
NO_AUTOCORRELATION = "no autocorrelation"
HETEROSCEDASTICITY_PRESENT = "heteroscedasticity present"
HOMOSCEDASTICITY = "homoscedasticity"
RESIDUALS_NOT_NORMAL = "residuals not normal"
RESIDUALS_NORMAL = "residuals normal"
POTENTIAL_MULTICOLLINEARITY = "potential multicollinearity"
NO_MULTICOLLINEARITY = "no multicollinearity"


@dataclass(frozen=True)
class DiagnosticResult:
    """
    Outcome of one assumption test.

    ``rejected`` is None and ``decision`` is "not applicable" when the test
    could not be run; ``reason`` then says why. For the VIF check,
    ``values`` holds one inflation factor per predictor and ``flagged`` the
    predictors at or above the threshold.
    """

    test: str
    decision: str
    statistic: Optional[float] = None
    p_value: Optional[float] = None
    rejected: Optional[bool] = None
    alpha: float = DEFAULT_ALPHA
    df: Optional[float] = None
    values: Dict[str, float] = field(default_factory=dict)
    flagged: Tuple[str, ...] = ()
    reason: Optional[str] = None

    @property
    def applicable(self) -> bool:
        return self.decision != NOT_APPLICABLE


def p_value_result(test, statistic, p_value, alpha, rejected_label, accepted_label, df=None) -> DiagnosticResult:
    """Build a result whose verdict is "rejected" when ``p_value < alpha``."""
    rejected = bool(p_value < alpha)
    return DiagnosticResult(
        test=test,
        decision=rejected_label if rejected else accepted_label,
        statistic=float(statistic),
        p_value=float(p_value),
        rejected=rejected,
        alpha=alpha,
        df=None if df is None else float(df),
    )


def not_applicable(test: str, reason: str, alpha: float = DEFAULT_ALPHA) -> DiagnosticResult:
    return DiagnosticResult(test=test, decision=NOT_APPLICABLE, alpha=alpha, reason=reason)
