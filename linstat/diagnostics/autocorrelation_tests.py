"""
Durbin-Watson test for first-order autocorrelation of regression residuals.

What is Autocorrelation?
------------------------
OLS assumes the errors of consecutive observations are independent. When
a residual tends to be followed by one of the same sign (positive
autocorrelation), standard errors are too small and p-values too
optimistic.

The statistic

    d = Σ(eₜ − eₜ₋₁)² / Σeₜ²

is close to 2 for independent errors, below 2 for positive and above 2 for
negative autocorrelation. Its null distribution depends on the design
matrix, so the p-value is computed from the design:

- n < 100: exactly, from the eigenvalues of M·A·M (M the residual-maker,
  A the difference matrix) with Imhof's inversion formula
- otherwise: from a normal approximation with the exact mean and variance
"""

import logging

import numpy as np
from scipy import integrate, stats
from statsmodels.stats.stattools import durbin_watson

from ..errors import InsufficientDataError
from ..linalg import annihilator, as_matrix, inverse_from_r, qr_decompose
from ..parameters import DEFAULT_ALPHA, DW_EXACT_MAX_N
from .utils import AUTOCORRELATION_PRESENT, NO_AUTOCORRELATION, DiagnosticResult, p_value_result

LOGGER = logging.getLogger(__name__)

ALTERNATIVES = ("greater", "less", "two-sided")


def _difference_matrix(n: int) -> np.ndarray:
    A = 2.0 * np.eye(n) - np.eye(n, k=1) - np.eye(n, k=-1)
    A[0, 0] = A[-1, -1] = 1.0
    return A


def _imhof_lower_tail(weights: np.ndarray) -> float:
    """P(Σ wᵢ zᵢ² < 0) for independent standard normal zᵢ (Imhof, 1961)."""

    def integrand(u):
        if u == 0.0:
            return 0.5 * float(np.sum(weights))
        wu = weights * u
        theta = 0.5 * np.sum(np.arctan(wu))
        log_rho = 0.25 * np.sum(np.log1p(wu * wu))
        return np.sin(theta) / (u * np.exp(log_rho))

    integral, _ = integrate.quad(integrand, 0.0, np.inf, limit=200)
    return 0.5 - integral / np.pi


def _exact_lower_tail(d: float, X: np.ndarray) -> float:
    n, k = X.shape
    Q, _ = qr_decompose(X)
    M = annihilator(Q)
    eigenvalues = np.sort(np.linalg.eigvalsh(M @ _difference_matrix(n) @ M))[::-1][: n - k]
    return _imhof_lower_tail(eigenvalues - d)


def _normal_moments(X: np.ndarray):
    n, k = X.shape
    _, R = qr_decompose(X)
    xtx_inv = inverse_from_r(R)

    AX = 2.0 * X
    AX[1:] -= X[:-1]
    AX[:-1] -= X[1:]
    AX[0] = X[0] - X[1]
    AX[-1] = X[-1] - X[-2]

    XAXQ = X.T @ AX @ xtx_inv
    P = 2.0 * (n - 1) - np.trace(XAXQ)
    Q = 2.0 * (3 * n - 4) - 2.0 * np.trace(AX.T @ AX @ xtx_inv) + np.trace(XAXQ @ XAXQ)
    mean = P / (n - k)
    var = 2.0 / ((n - k) * (n - k + 2)) * (Q - P * mean)
    return mean, var


def durbin_watson_pvalue(d: float, design, alternative: str = "greater", exact=None) -> float:
    """
    P-value of the Durbin-Watson statistic ``d`` for a given design matrix.

    Args:
        d: Observed statistic
        design: Design matrix (with intercept) the residuals came from
        alternative: "greater" tests for positive autocorrelation, "less" for
            negative and "two-sided" for either
        exact: Force (True) or disable (False) the exact computation; by
            default it is used for fewer than 100 observations

    Returns:
        P-value in [0, 1]
    """
    if alternative not in ALTERNATIVES:
        raise ValueError(f"alternative must be one of {ALTERNATIVES}, got '{alternative}'")

    X = as_matrix(design)
    n, k = X.shape
    if n <= k:
        raise InsufficientDataError(f"Durbin-Watson test needs more observations ({n}) than parameters ({k}).")
    if exact is None:
        exact = n < DW_EXACT_MAX_N

    if exact:
        lower = _exact_lower_tail(d, X)
        if -1e-8 <= lower <= 1.0 + 1e-8:
            lower = min(max(lower, 0.0), 1.0)
            if alternative == "greater":
                return float(lower)
            if alternative == "less":
                return float(1.0 - lower)
            return float(min(1.0, 2.0 * min(lower, 1.0 - lower)))
        LOGGER.debug(f"Exact Durbin-Watson p-value out of range ({lower}); using normal approximation.")

    mean, var = _normal_moments(X)
    sd = np.sqrt(var)
    if alternative == "greater":
        p = stats.norm.cdf(d, loc=mean, scale=sd)
    elif alternative == "less":
        p = stats.norm.sf(d, loc=mean, scale=sd)
    else:
        p = 2.0 * stats.norm.sf(abs(d - mean), scale=sd)
    return float(np.clip(p, 0.0, 1.0))


def run_durbin_watson_test(residuals, design, alpha: float = DEFAULT_ALPHA, alternative: str = "greater") -> DiagnosticResult:
    """
    Run the Durbin-Watson test on residuals taken in row order.

    Interpretation:
    ---------------
    - High p-value (≥ α): no autocorrelation detected
    - Low p-value (< α): autocorrelation present

    Raises:
        InsufficientDataError: If all residuals are zero or there are too few rows
    """
    resid = np.asarray(residuals, dtype=float)
    if resid.size < 3:
        raise InsufficientDataError("Durbin-Watson test needs at least 3 residuals.")
    if not np.any(resid != 0):
        raise InsufficientDataError("All residuals are zero (perfect fit); autocorrelation cannot be assessed.")

    d = float(durbin_watson(resid))
    p_value = durbin_watson_pvalue(d, design, alternative)
    return p_value_result("Durbin-Watson", d, p_value, alpha, AUTOCORRELATION_PRESENT, NO_AUTOCORRELATION)
