"""
Point predictions and prediction intervals from a fitted OLS model.

For a new observation x₀ the interval is

    ŷ ± t_{(1+c)/2, df} · σ̂ · sqrt(1 + x₀ᵗ (XᵗX)⁻¹ x₀)

so it covers both the uncertainty of the estimated mean and the noise of a
single new response.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy import stats

from ..dataset import ColumnType, Dataset
from ..errors import InsufficientDataError, MissingValueError, ModelNotFitError, SchemaMismatchError
from ..linalg import row_quadratic_forms
from ..parameters import DEFAULT_CONFIDENCE, validate_confidence
from ..regression import FittedModel, count_missing_values, encode_design

LOGGER = logging.getLogger(__name__)

Rows = Union[Dataset, pd.DataFrame, Mapping]


def _read_only(values) -> np.ndarray:
    arr = np.array(values, dtype=float, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class PredictionResult:
    fit: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    confidence: float
    row_indices: Tuple[int, ...] = ()
    actual: Optional[np.ndarray] = None
    residuals: Optional[np.ndarray] = None
    mse: Optional[float] = None

    def __len__(self) -> int:
        return len(self.fit)

    def to_frame(self) -> pd.DataFrame:
        """Predicted, Lower_Bound and Upper_Bound per row, plus Actual and Residuals when known."""
        frame = pd.DataFrame({"Predicted": self.fit, "Lower_Bound": self.lower, "Upper_Bound": self.upper})
        if self.actual is not None:
            frame["Actual"] = self.actual
            frame["Residuals"] = self.residuals
        if self.row_indices:
            frame.index = list(self.row_indices)
        return frame


def _as_frame(new_rows: Rows) -> pd.DataFrame:
    if isinstance(new_rows, Dataset):
        return new_rows.to_pandas()
    if isinstance(new_rows, pd.DataFrame):
        return new_rows.reset_index(drop=True)
    new_rows = dict(new_rows)
    if not any(pd.api.types.is_list_like(v) for v in new_rows.values()):
        # A mapping of scalars is a single new row
        return pd.DataFrame([new_rows])
    return pd.DataFrame(new_rows)


def predict(model: Optional[FittedModel], new_rows: Rows, confidence: float = DEFAULT_CONFIDENCE) -> PredictionResult:
    """
    Predict the response for ``new_rows`` with prediction intervals.

    Args:
        model: Fitted OLS model
        new_rows: Dataset, DataFrame or column mapping holding every predictor
        confidence: Coverage of the prediction interval, in (0, 1)

    Returns:
        PredictionResult with fit, lower and upper bound per row

    Raises:
        ModelNotFitError: If no model has been fitted
        SchemaMismatchError: If a predictor column is missing or holds an
            unseen category / non-numeric value
        MissingValueError: If a predictor value is missing
    """
    if model is None:
        raise ModelNotFitError("No fitted model available. Fit a regression model before predicting.")
    confidence = validate_confidence(confidence)

    df = _as_frame(new_rows)
    missing_cols = [p for p in model.predictors if p not in df.columns]
    if missing_cols:
        raise SchemaMismatchError(f"Prediction data is missing predictor column(s): {missing_cols}")

    encodings = model.design.encodings
    numeric_cols = [e.name for e in encodings if e.column_type is ColumnType.NUMERIC]
    other_cols = [e.name for e in encodings if e.column_type is not ColumnType.NUMERIC]
    missing_info = count_missing_values(df, [], numeric_cols + other_cols)
    if missing_info:
        raise MissingValueError(f"Missing predictor values in prediction data: {missing_info}")

    X0 = encode_design(df, encodings).values
    if not np.all(np.isfinite(X0)):
        raise MissingValueError("Prediction data contains non-finite predictor values.")

    fit = X0 @ model.coefficients
    leverage = row_quadratic_forms(X0, model.xtx_inverse)
    t_crit = stats.t.ppf((1 + confidence) / 2, model.df_resid)
    half_width = t_crit * model.residual_std_error * np.sqrt(1 + leverage)

    return PredictionResult(
        fit=_read_only(fit),
        lower=_read_only(fit - half_width),
        upper=_read_only(fit + half_width),
        confidence=confidence,
    )


def evaluate_test_split(model: Optional[FittedModel], dataset: Dataset, confidence: float = DEFAULT_CONFIDENCE) -> PredictionResult:
    """
    Predict the held-out rows of ``dataset`` and compare them to the actual response.

    The mean squared error of the test rows is reported as the accuracy score.

    Raises:
        ModelNotFitError: If no model has been fitted
        InsufficientDataError: If the model was fitted on every row
    """
    if model is None:
        raise ModelNotFitError("No fitted model available. Fit a regression model before evaluating it.")
    if not model.test_indices:
        raise InsufficientDataError("The model has no test rows. Use a split fraction below 1.0 to hold out data.")

    test_df = dataset.take(model.test_indices).to_pandas()
    result = predict(model, test_df, confidence)

    actual = pd.to_numeric(test_df[model.response], errors="coerce").to_numpy(dtype=float)
    if not np.all(np.isfinite(actual)):
        raise MissingValueError(f"Response column '{model.response}' has missing values in the test rows.")
    residuals = actual - result.fit
    mse = float(np.mean(residuals**2))
    LOGGER.info(f"Test split: {len(actual)} rows, MSE={mse:.4f}")

    return PredictionResult(
        fit=result.fit,
        lower=result.lower,
        upper=result.upper,
        confidence=result.confidence,
        row_indices=tuple(model.test_indices),
        actual=_read_only(actual),
        residuals=_read_only(residuals),
        mse=mse,
    )
