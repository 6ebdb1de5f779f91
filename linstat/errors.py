"""
Error taxonomy for the linear modeling engine.

Every failure is raised as a subclass of ``StatisticsError``, which itself
derives from ``ValueError`` so callers that only catch ``ValueError`` keep
working.
"""


class StatisticsError(ValueError):
    """Base class for all engine failures."""


class InvalidSpecError(StatisticsError):
    """A model specification references missing or unsuitable columns."""


class InsufficientDataError(StatisticsError):
    """Not enough rows, degrees of freedom or levels to proceed."""


class DegenerateResponseError(InsufficientDataError):
    """The response variable does not vary enough to be modeled."""


class RankDeficiencyError(StatisticsError):
    """The design matrix is singular or too ill-conditioned to solve."""


class MissingValueError(StatisticsError):
    """A required column contains missing or non-finite values."""


class SchemaMismatchError(StatisticsError):
    """Prediction input does not match the schema the model was fit on."""


class ModelNotFitError(StatisticsError):
    """An operation needs a fitted model but none is available."""


class InsufficientColumnsError(StatisticsError):
    """Too few columns of the required type are present."""


class PostHocError(StatisticsError):
    """A post-hoc comparison could not be computed."""
