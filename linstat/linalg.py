"""
Dense linear-algebra kernel for least-squares fitting.

All solves go through a Householder QR factorization of the design matrix
instead of inverting XᵗX directly. The same factorization gives the rank
check, (XᵗX)⁻¹ for standard errors, and the residual-maker matrix used by
the Durbin-Watson p-value.
"""

from typing import NamedTuple, Optional, Sequence

import numpy as np
from scipy.linalg import solve_triangular

from .errors import RankDeficiencyError
from .parameters import RANK_TOLERANCE


class LeastSquaresSolution(NamedTuple):
    coefficients: np.ndarray
    xtx_inverse: np.ndarray
    q: np.ndarray
    r: np.ndarray


def as_matrix(values) -> np.ndarray:
    """Return ``values`` as a 2-D float array (1-D input becomes one column)."""
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2:
        raise ValueError(f"Expected a 1-D or 2-D array, got {arr.ndim} dimensions.")
    return arr


def qr_decompose(X: np.ndarray):
    """Reduced QR factorization, ``X = Q @ R`` with R upper triangular."""
    return np.linalg.qr(as_matrix(X), mode="reduced")


def check_full_rank(
    X: np.ndarray,
    R: np.ndarray,
    column_names: Optional[Sequence[str]] = None,
    tol: float = RANK_TOLERANCE,
) -> None:
    """
    Raise ``RankDeficiencyError`` unless X has full column rank.

    Column j is treated as dependent on the columns before it when the part
    of it left after projecting out those columns, ``|R[j, j]|``, is below
    ``tol`` times its own norm.
    """
    X = as_matrix(X)
    n_rows, n_cols = X.shape
    if n_rows < n_cols:
        raise RankDeficiencyError(f"Design matrix has {n_cols} columns but only {n_rows} rows; it cannot have full column rank.")
    if not np.all(np.isfinite(R)):
        raise RankDeficiencyError("Design matrix factorization produced non-finite values.")

    norms = np.linalg.norm(X, axis=0)
    diag = np.abs(np.diag(R))
    deficient = (norms == 0) | (diag < tol * norms)
    if np.any(deficient):
        names = list(column_names) if column_names is not None else [f"x{j}" for j in range(n_cols)]
        offending = [names[j] for j in np.flatnonzero(deficient)]
        raise RankDeficiencyError(
            f"Design matrix is not of full column rank. Columns {offending} are constant or (nearly) "
            "linear combinations of other columns. Remove redundant predictors and try again."
        )


def inverse_from_r(R: np.ndarray) -> np.ndarray:
    """Return (XᵗX)⁻¹ = R⁻¹R⁻ᵀ from the triangular QR factor."""
    r_inv = solve_triangular(R, np.eye(R.shape[0]), lower=False)
    return r_inv @ r_inv.T


def solve_least_squares(
    X: np.ndarray,
    y: np.ndarray,
    column_names: Optional[Sequence[str]] = None,
    tol: float = RANK_TOLERANCE,
) -> LeastSquaresSolution:
    """Minimize ``||y - X b||`` after checking that X has full column rank."""
    X = as_matrix(X)
    y = np.asarray(y, dtype=float).ravel()
    if X.shape[0] != y.shape[0]:
        raise ValueError(f"Design matrix has {X.shape[0]} rows but response has {y.shape[0]} values.")

    Q, R = qr_decompose(X)
    check_full_rank(X, R, column_names, tol)
    coefficients = solve_triangular(R, Q.T @ y, lower=False)
    return LeastSquaresSolution(coefficients, inverse_from_r(R), Q, R)


def row_quadratic_forms(X0: np.ndarray, A: np.ndarray) -> np.ndarray:
    """Return ``x_i' A x_i`` for every row ``x_i`` of ``X0``."""
    X0 = as_matrix(X0)
    return np.einsum("ij,jk,ik->i", X0, A, X0)


def annihilator(Q: np.ndarray) -> np.ndarray:
    """Residual-maker matrix ``M = I - Q Qᵗ`` for an orthonormal basis Q."""
    return np.eye(Q.shape[0]) - Q @ Q.T
