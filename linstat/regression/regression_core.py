"""
Core regression functionality for OLS (Ordinary Least Squares) modeling.

This module handles:
- Design matrix construction (intercept, numeric passthrough, dummy encoding)
- OLS model fitting through a QR factorization
- Coefficient inference (standard errors, t-tests, confidence intervals)
- Model summary extraction

What is OLS Regression?
-----------------------
OLS finds the coefficients (β values) that minimize the sum of squared
differences between actual and predicted values:

    y = β₀ + β₁*X₁ + β₂*X₂ + ... + error

The β values tell you how much the response changes when a predictor
increases by one unit, holding the other predictors fixed.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from ..dataset import ColumnType, Dataset
from ..errors import DegenerateResponseError, InsufficientDataError, MissingValueError, SchemaMismatchError
from ..linalg import solve_least_squares
from ..parameters import DEFAULT_CONFIDENCE, RANK_TOLERANCE, SMALL_SAMPLE_MARGIN
from ..specification import RegressionSpec
from .utils import count_missing_values

LOGGER = logging.getLogger(__name__)

INTERCEPT = "const"


def _read_only(values) -> np.ndarray:
    arr = np.array(values, dtype=float, copy=True)
    arr.setflags(write=False)
    return arr


# =============================================================================
# Design Matrix
# =============================================================================


@dataclass(frozen=True)
class PredictorEncoding:
    """How one predictor column maps onto design-matrix columns."""

    name: str
    column_type: ColumnType
    levels: Tuple = ()

    @property
    def reference_level(self):
        return self.levels[0] if self.levels else None

    @property
    def encoded_columns(self) -> Tuple[str, ...]:
        if self.column_type is ColumnType.NUMERIC:
            return (self.name,)
        # First level is the reference and gets no indicator column
        return tuple(f"{self.name}_{level}" for level in self.levels[1:])


@dataclass(frozen=True, eq=False)
class DesignMatrix:
    values: np.ndarray
    column_names: Tuple[str, ...]
    encodings: Tuple[PredictorEncoding, ...]

    @property
    def n_rows(self) -> int:
        return self.values.shape[0]

    @property
    def n_columns(self) -> int:
        return self.values.shape[1]

    def term_columns(self) -> Dict[str, List[int]]:
        """Map each predictor to the positions of its columns in ``values``."""
        positions = {}
        start = 1
        for enc in self.encodings:
            width = len(enc.encoded_columns)
            positions[enc.name] = list(range(start, start + width))
            start += width
        return positions

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.values, columns=list(self.column_names))


def observed_levels(series: pd.Series) -> list:
    """Levels present in ``series``, keeping a categorical dtype's own order."""
    if isinstance(series.dtype, pd.CategoricalDtype):
        return list(series.cat.remove_unused_categories().cat.categories)
    return list(pd.Categorical(series).categories)


def learn_encodings(df: pd.DataFrame, predictors: Sequence[str], column_types: Dict[str, ColumnType]) -> Tuple[PredictorEncoding, ...]:
    """
    Decide the design-matrix encoding of each predictor from the training rows.

    Numeric predictors pass through unchanged. Categorical predictors are
    dummy encoded with their first level (sorted order) as the reference,
    so a predictor with k levels contributes k-1 indicator columns.

    Raises:
        InsufficientDataError: If a categorical predictor has fewer than 2 levels
    """
    encodings = []
    categorical_cols = []
    for name in predictors:
        ctype = column_types[name]
        if ctype is ColumnType.NUMERIC:
            encodings.append(PredictorEncoding(name, ctype))
            continue

        levels = observed_levels(df[name])
        if len(levels) < 2:
            raise InsufficientDataError(
                f"Categorical predictor '{name}' has only {len(levels)} level(s) in the training data. "
                "At least 2 levels are needed to estimate an effect."
            )
        encodings.append(PredictorEncoding(name, ctype, tuple(levels)))
        categorical_cols.append(name)

    if categorical_cols:
        LOGGER.info(f"Encoded categorical columns: {categorical_cols}")
    return tuple(encodings)


def encode_design(df: pd.DataFrame, encodings: Sequence[PredictorEncoding]) -> DesignMatrix:
    """
    Build the design matrix for ``df`` with a fixed set of encodings.

    Raises:
        SchemaMismatchError: If a numeric predictor holds non-numeric values or
            a categorical predictor holds a level not in its encoding
    """
    blocks = [pd.DataFrame({INTERCEPT: np.ones(len(df))}, index=df.index)]
    for enc in encodings:
        series = df[enc.name]
        if enc.column_type is ColumnType.NUMERIC:
            try:
                numeric = pd.to_numeric(series, errors="raise").astype(float)
            except (TypeError, ValueError) as e:
                raise SchemaMismatchError(f"Predictor '{enc.name}' must be numeric: {e}") from e
            blocks.append(numeric.to_frame(enc.name))
            continue

        unseen = sorted({str(v) for v in series[~series.isin(enc.levels)]})
        if unseen:
            raise SchemaMismatchError(
                f"Predictor '{enc.name}' has level(s) {unseen} that were not seen during fitting. "
                f"Known levels: {list(enc.levels)}"
            )
        dummies = pd.get_dummies(
            pd.Categorical(series, categories=list(enc.levels)),
            prefix=enc.name,
            drop_first=True,
            dtype=float,
        )
        dummies.index = df.index
        dummies.columns = list(enc.encoded_columns)
        blocks.append(dummies)

    X = pd.concat(blocks, axis=1)
    return DesignMatrix(values=_read_only(X.to_numpy(dtype=float)), column_names=tuple(X.columns), encodings=tuple(encodings))


# =============================================================================
# Fitted Model
# =============================================================================


@dataclass(frozen=True, eq=False)
class FittedModel:
    """
    Immutable result of an OLS fit.

    Holds the design matrix, estimates and residuals of the training rows,
    together with the inference quantities needed by the diagnostics and
    the predictor.
    """

    response: str
    predictors: Tuple[str, ...]
    design: DesignMatrix
    response_values: np.ndarray
    coefficients: np.ndarray
    fitted_values: np.ndarray
    residuals: np.ndarray
    xtx_inverse: np.ndarray
    orthonormal_basis: np.ndarray
    df_resid: int
    sigma2: float
    std_errors: np.ndarray
    t_values: np.ndarray
    p_values: np.ndarray
    conf_int: np.ndarray
    r_squared: float
    adj_r_squared: float
    f_statistic: float
    f_pvalue: float
    train_indices: Tuple[int, ...]
    test_indices: Tuple[int, ...]

    @property
    def n_obs(self) -> int:
        return len(self.response_values)

    @property
    def df_model(self) -> int:
        return self.design.n_columns - 1

    @property
    def residual_std_error(self) -> float:
        return float(np.sqrt(self.sigma2))

    @property
    def params(self) -> pd.Series:
        return pd.Series(self.coefficients, index=list(self.design.column_names))


def fit_ols_model(
    dataset: Dataset,
    response: str,
    predictors: Sequence[str],
    train_indices: Optional[Sequence[int]] = None,
    tol: float = RANK_TOLERANCE,
) -> FittedModel:
    """
    Fit an Ordinary Least Squares (OLS) regression model.

    An intercept column is always added. The normal equations are never
    formed explicitly: the design matrix is factored as X = QR and the
    coefficients come from the triangular system Rβ = Qᵗy.

    Args:
        dataset: Source data
        response: Name of the numeric response (y) column
        predictors: Names of the predictor (X) columns
        train_indices: Row positions to fit on (default: all rows)
        tol: Relative tolerance of the rank check

    Returns:
        FittedModel with coefficients, residuals and summary statistics

    Raises:
        InvalidSpecError: If columns are missing or the response is a predictor
        MissingValueError: If the training rows contain missing/non-finite values
        DegenerateResponseError: If the response has fewer than 2 distinct values
        InsufficientDataError: If fewer than 1 residual degree of freedom remains
        RankDeficiencyError: If predictors are perfectly (or nearly) collinear
    """
    spec = RegressionSpec(response, tuple(predictors)).validate(dataset)
    column_types = dataset.column_types

    if train_indices is None:
        train = tuple(range(dataset.n_rows))
    else:
        train = tuple(sorted({int(i) for i in train_indices}))
    work_df = dataset.take(train).to_pandas()[[spec.response, *spec.predictors]]

    # Check for missing values
    numeric_cols = [c for c in work_df.columns if column_types[c] is ColumnType.NUMERIC]
    other_cols = [c for c in work_df.columns if column_types[c] is not ColumnType.NUMERIC]
    missing_info = count_missing_values(work_df, numeric_cols, other_cols)
    if missing_info:
        raise MissingValueError(
            f"Missing values detected in {sum(missing_info.values())} cells across columns: {missing_info}. "
            "Please clean your data before fitting the model."
        )

    y = work_df[spec.response].to_numpy(dtype=float)
    if np.unique(y).size < 2:
        raise DegenerateResponseError(f"Response column '{spec.response}' has no variation in the training data.")

    encodings = learn_encodings(work_df, spec.predictors, column_types)
    design = encode_design(work_df, encodings)

    n_obs, n_params = design.values.shape
    df_resid = n_obs - n_params
    if df_resid < 1:
        raise InsufficientDataError(
            f"Insufficient data for regression. {n_obs} observations for {n_params} parameters leaves "
            f"{df_resid} residual degrees of freedom. At least {n_params + 1} rows are required."
        )

    if n_obs < n_params + SMALL_SAMPLE_MARGIN:
        LOGGER.warning(
            f"Small sample size detected: n={n_obs} observations with k={n_params} parameters. "
            f"Ideally, you should have at least n > k + {SMALL_SAMPLE_MARGIN} for reliable results. "
            "Results may be unreliable."
        )

    solution = solve_least_squares(design.values, y, design.column_names, tol)
    beta = solution.coefficients
    fitted = design.values @ beta
    resid = y - fitted

    sse = float(resid @ resid)
    sst = float(np.sum((y - y.mean()) ** 2))
    sigma2 = sse / df_resid
    df_model = n_params - 1

    with np.errstate(divide="ignore", invalid="ignore"):
        std_errors = np.sqrt(sigma2 * np.diag(solution.xtx_inverse))
        t_values = beta / std_errors
        f_statistic = (sst - sse) / df_model / sigma2

    p_values = 2 * stats.t.sf(np.abs(t_values), df_resid)
    t_crit = stats.t.ppf(0.5 + DEFAULT_CONFIDENCE / 2, df_resid)
    conf_int = np.column_stack([beta - t_crit * std_errors, beta + t_crit * std_errors])

    r_squared = float(np.clip(1.0 - sse / sst, 0.0, 1.0))
    adj_r_squared = 1.0 - (1.0 - r_squared) * (n_obs - 1) / df_resid

    train_set = set(train)
    test = tuple(i for i in range(dataset.n_rows) if i not in train_set)

    return FittedModel(
        response=spec.response,
        predictors=spec.predictors,
        design=design,
        response_values=_read_only(y),
        coefficients=_read_only(beta),
        fitted_values=_read_only(fitted),
        residuals=_read_only(resid),
        xtx_inverse=_read_only(solution.xtx_inverse),
        orthonormal_basis=_read_only(solution.q),
        df_resid=int(df_resid),
        sigma2=float(sigma2),
        std_errors=_read_only(std_errors),
        t_values=_read_only(t_values),
        p_values=_read_only(p_values),
        conf_int=_read_only(conf_int),
        r_squared=r_squared,
        adj_r_squared=float(adj_r_squared),
        f_statistic=float(f_statistic),
        f_pvalue=float(stats.f.sf(f_statistic, df_model, df_resid)),
        train_indices=train,
        test_indices=test,
    )


def extract_model_summary(model: FittedModel) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Extract model summary statistics in a structured format.

    Coefficient Table:
    - Variable: Name of predictor (or 'const' for intercept)
    - Coefficient (β): How much y changes when this predictor increases by 1
    - Std Error: Uncertainty in the coefficient estimate
    - t-statistic: Coefficient divided by standard error
    - P>|t|: Two-sided p-value for the hypothesis β = 0
    - [0.025 / 0.975]: 95% confidence interval of the coefficient

    Model Metrics:
    - R², Adjusted R², residual standard error
    - F-statistic and its p-value (is the model better than the mean alone?)
    - Number of observations and degrees of freedom

    Args:
        model: Fitted OLS model

    Returns:
        Tuple of (coefficient_table, metrics_table)
    """
    coef_table = pd.DataFrame(
        {
            "Variable": list(model.design.column_names),
            "Coefficient": model.coefficients,
            "Std Error": model.std_errors,
            "t-statistic": model.t_values,
            "P>|t|": model.p_values,
            "[0.025": model.conf_int[:, 0],
            "0.975]": model.conf_int[:, 1],
        }
    )

    metrics_table = pd.DataFrame(
        {
            "Metric": [
                "R-squared",
                "Adjusted R-squared",
                "Residual Std Error",
                "F-statistic",
                "Prob (F-statistic)",
                "No. Observations",
                "Df Residuals",
                "Df Model",
            ],
            "Value": [
                model.r_squared,
                model.adj_r_squared,
                model.residual_std_error,
                model.f_statistic,
                model.f_pvalue,
                float(model.n_obs),
                float(model.df_resid),
                float(model.df_model),
            ],
        }
    )

    return coef_table, metrics_table
