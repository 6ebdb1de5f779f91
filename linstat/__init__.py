"""
linstat: linear models with assumption checks.

This package fits multiple linear regression and one-way ANOVA models,
tests the classical assumptions behind them and produces prediction
intervals.

Entry points:
- fit_regression: seeded train/test split, OLS fit and residual diagnostics
- fit_anova: one-way ANOVA, residual diagnostics and Tukey HSD
- predict / evaluate_test_split: prediction intervals for new or held-out rows
- correlate: Pearson correlation matrix of the numeric columns
- AnalysisSession: holds the current dataset and most recent model
"""

from .anova_node import fit_anova
from .correlation import correlate
from .dataset import ColumnType, Dataset, Split, read_delimited, read_pasted_text, split_rows
from .diagnostics import AnovaDiagnostics, DiagnosticResult, RegressionDiagnostics
from .errors import (
    DegenerateResponseError,
    InsufficientColumnsError,
    InsufficientDataError,
    InvalidSpecError,
    MissingValueError,
    ModelNotFitError,
    PostHocError,
    RankDeficiencyError,
    SchemaMismatchError,
    StatisticsError,
)
from .post_hoc import ANOVAResult, PairwiseComparison, PostHocComparison
from .prediction import PredictionResult, evaluate_test_split, predict
from .regression import FittedModel, extract_model_summary
from .regression_node import fit_regression
from .session import AnalysisSession
from .specification import AnovaSpec, RegressionSpec

__version__ = "0.1.0"

__all__ = [
    "fit_regression",
    "fit_anova",
    "predict",
    "evaluate_test_split",
    "correlate",
    "extract_model_summary",
    "AnalysisSession",
    "Dataset",
    "ColumnType",
    "Split",
    "split_rows",
    "read_delimited",
    "read_pasted_text",
    "RegressionSpec",
    "AnovaSpec",
    "FittedModel",
    "RegressionDiagnostics",
    "AnovaDiagnostics",
    "DiagnosticResult",
    "ANOVAResult",
    "PostHocComparison",
    "PairwiseComparison",
    "PredictionResult",
    "StatisticsError",
    "InvalidSpecError",
    "InsufficientDataError",
    "DegenerateResponseError",
    "RankDeficiencyError",
    "MissingValueError",
    "SchemaMismatchError",
    "ModelNotFitError",
    "InsufficientColumnsError",
    "PostHocError",
]
