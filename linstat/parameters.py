"""
Default settings and range checks shared by the modeling engine.

Each setting carries a default plus the allowed range, so the analysis
functions can validate caller-supplied values the same way everywhere.
"""

from .errors import InvalidSpecError

# Significance level (α) used by every hypothesis test
DEFAULT_ALPHA = 0.05
MIN_ALPHA = 0.0
MAX_ALPHA = 0.5

# Prediction interval level
DEFAULT_CONFIDENCE = 0.95

# Train/test split
DEFAULT_SPLIT_FRACTION = 0.70
MIN_SPLIT_FRACTION = 0.5
MAX_SPLIT_FRACTION = 1.0
DEFAULT_SEED = 123
MIN_TRAIN_ROWS = 2

# Diagnostics
VIF_THRESHOLD = 10.0
DW_EXACT_MAX_N = 100
LILLIEFORS_MIN_N = 5

# Fitting
RANK_TOLERANCE = 1e-7
SMALL_SAMPLE_MARGIN = 20

# Correlation display precision
CORRELATION_DECIMALS = 2


def validate_alpha(alpha: float) -> float:
    """Return ``alpha`` as a float, or raise if it is outside (0, 0.5]."""
    alpha = float(alpha)
    if not (MIN_ALPHA < alpha <= MAX_ALPHA):
        raise InvalidSpecError(f"Significance level must be in ({MIN_ALPHA}, {MAX_ALPHA}], got {alpha}.")
    return alpha


def validate_confidence(confidence: float) -> float:
    """Return ``confidence`` as a float, or raise if it is outside (0, 1)."""
    confidence = float(confidence)
    if not (0.0 < confidence < 1.0):
        raise InvalidSpecError(f"Confidence level must be strictly between 0 and 1, got {confidence}.")
    return confidence


def validate_split_fraction(fraction: float) -> float:
    """Return ``fraction`` as a float, or raise if it is outside [0.5, 1.0]."""
    fraction = float(fraction)
    if not (MIN_SPLIT_FRACTION <= fraction <= MAX_SPLIT_FRACTION):
        raise InvalidSpecError(
            f"Train/test split fraction must be between {MIN_SPLIT_FRACTION} and {MAX_SPLIT_FRACTION}, got {fraction}."
        )
    return fraction
