"""
OLS regression package.

Key Components:
---------------
- regression_core: design matrix construction, OLS fitting and summaries
- utils: missing-value helpers shared with prediction and ANOVA
"""

from .regression_core import (
    INTERCEPT,
    DesignMatrix,
    FittedModel,
    PredictorEncoding,
    encode_design,
    extract_model_summary,
    fit_ols_model,
    learn_encodings,
    observed_levels,
)
from .utils import count_missing_values

__all__ = [
    "INTERCEPT",
    "DesignMatrix",
    "FittedModel",
    "PredictorEncoding",
    "encode_design",
    "extract_model_summary",
    "fit_ols_model",
    "learn_encodings",
    "observed_levels",
    "count_missing_values",
]
