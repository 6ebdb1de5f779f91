"""
Explicit analysis session.

The calling layer owns one ``AnalysisSession`` per user. It holds the
current dataset and the most recent fitted model and ANOVA run, and passes
them explicitly into the stateless engine functions.
"""

import logging
from typing import Optional, Sequence, Tuple

import pandas as pd

from .anova_node import fit_anova
from .correlation import correlate
from .dataset import Dataset
from .diagnostics import AnovaDiagnostics, RegressionDiagnostics
from .errors import InvalidSpecError, ModelNotFitError
from .parameters import CORRELATION_DECIMALS, DEFAULT_ALPHA, DEFAULT_CONFIDENCE, DEFAULT_SEED, DEFAULT_SPLIT_FRACTION
from .post_hoc import ANOVAResult, PostHocComparison
from .prediction import PredictionResult, evaluate_test_split, predict
from .regression import FittedModel
from .regression_node import fit_regression

LOGGER = logging.getLogger(__name__)


class AnalysisSession:
    def __init__(self, dataset: Optional[Dataset] = None):
        self.dataset = None
        self.model: Optional[FittedModel] = None
        self.regression_diagnostics: Optional[RegressionDiagnostics] = None
        self.anova: Optional[Tuple[ANOVAResult, AnovaDiagnostics, PostHocComparison]] = None
        if dataset is not None:
            self.load(dataset)

    def load(self, data) -> Dataset:
        """Replace the current dataset and forget results computed on the previous one."""
        if isinstance(data, pd.DataFrame):
            data = Dataset.from_pandas(data)
        if not isinstance(data, Dataset):
            raise InvalidSpecError(f"Expected a Dataset or DataFrame, got {type(data).__name__}")
        self.dataset = data
        self.model = None
        self.regression_diagnostics = None
        self.anova = None
        LOGGER.info(f"Session loaded {data!r}")
        return data

    def _require_dataset(self) -> Dataset:
        if self.dataset is None:
            raise InvalidSpecError("No dataset loaded. Call load() first.")
        return self.dataset

    def _require_model(self) -> FittedModel:
        if self.model is None:
            raise ModelNotFitError("No regression model has been fitted in this session. Call run_regression() first.")
        return self.model

    def run_regression(
        self,
        response: str,
        predictors: Sequence[str],
        split_fraction: float = DEFAULT_SPLIT_FRACTION,
        seed: int = DEFAULT_SEED,
        alpha: float = DEFAULT_ALPHA,
    ) -> Tuple[FittedModel, RegressionDiagnostics]:
        model, diagnostics = fit_regression(self._require_dataset(), response, predictors, split_fraction, seed, alpha)
        self.model = model
        self.regression_diagnostics = diagnostics
        return model, diagnostics

    def run_anova(self, factor: str, response: str, alpha: float = DEFAULT_ALPHA):
        self.anova = fit_anova(self._require_dataset(), factor, response, alpha)
        return self.anova

    def predict(self, rows, confidence: float = DEFAULT_CONFIDENCE) -> PredictionResult:
        return predict(self._require_model(), rows, confidence)

    def predict_test_split(self, confidence: float = DEFAULT_CONFIDENCE) -> PredictionResult:
        return evaluate_test_split(self._require_model(), self._require_dataset(), confidence)

    def correlation(self, decimals: int = CORRELATION_DECIMALS) -> pd.DataFrame:
        return correlate(self._require_dataset(), decimals)
