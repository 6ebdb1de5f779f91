"""
Prediction from fitted regression models.

Key Components:
---------------
- prediction_core: point predictions, prediction intervals and test-split evaluation
"""

from .prediction_core import PredictionResult, evaluate_test_split, predict

__all__ = ["PredictionResult", "predict", "evaluate_test_split"]
