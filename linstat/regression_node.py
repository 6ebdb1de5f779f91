"""
Multiple linear regression with assumption checks.

Splits the dataset into training and test rows, fits an OLS model on the
training rows and runs the Durbin-Watson, Breusch-Pagan, Lilliefors and VIF
diagnostics on its residuals.
"""

import logging
from typing import Sequence, Tuple

from .dataset import Dataset, split_rows
from .diagnostics import RegressionDiagnostics, run_regression_diagnostics
from .parameters import DEFAULT_ALPHA, DEFAULT_SEED, DEFAULT_SPLIT_FRACTION, validate_alpha
from .regression import FittedModel, fit_ols_model
from .specification import RegressionSpec

LOGGER = logging.getLogger(__name__)


def fit_regression(
    dataset: Dataset,
    response: str,
    predictors: Sequence[str],
    split_fraction: float = DEFAULT_SPLIT_FRACTION,
    seed: int = DEFAULT_SEED,
    alpha: float = DEFAULT_ALPHA,
) -> Tuple[FittedModel, RegressionDiagnostics]:
    """
    Fit ``response ~ predictors`` on a seeded training split and diagnose it.

    Args:
        dataset: Source data
        response: Numeric response column
        predictors: Predictor columns (numeric or categorical)
        split_fraction: Share of rows used for training, in [0.5, 1.0]
        seed: Seed of the row shuffle
        alpha: Significance level of the diagnostics

    Returns:
        Tuple of (fitted model, regression diagnostics)
    """
    alpha = validate_alpha(alpha)

    # Step 1: Check column references before any numeric work
    RegressionSpec(response, tuple(predictors)).validate(dataset)

    # Step 2: Deterministic train/test split
    split = split_rows(dataset.n_rows, split_fraction, seed)

    # Step 3: Fit on the training rows
    model = fit_ols_model(dataset, response, predictors, train_indices=split.train)
    LOGGER.info(f"Fitted '{response}' on {model.n_obs} rows: R²={model.r_squared:.4f}, adj. R²={model.adj_r_squared:.4f}")

    # Step 4: Assumption checks on the training residuals
    diagnostics = run_regression_diagnostics(model, alpha)
    return model, diagnostics
