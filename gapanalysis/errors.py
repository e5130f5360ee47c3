"""
Exception hierarchy for gap analysis runs.

Fatal errors abort the whole run. Recoverable per-species conditions are
never raised; they are reported as Diagnostic records instead.
"""


class GapAnalysisError(Exception):
    """Base class for all gap analysis errors."""


class ConfigurationError(GapAnalysisError, ValueError):
    """Malformed input table, missing table, or invalid parameter."""


class DataMismatchError(GapAnalysisError, ValueError):
    """Species, occurrence data and distribution rasters do not line up."""


class UndefinedScoreError(GapAnalysisError, ValueError):
    """Both ex-situ and in-situ scores are missing for a species."""
