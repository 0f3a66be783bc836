"""
Custom exceptions for the analysis core.
"""


class HoopCoachError(Exception):
    """Base error for the analysis core."""
    pass


class TemplateError(HoopCoachError):
    """Template document is malformed or unknown."""
    pass


class AnalysisError(HoopCoachError):
    """Analysis could not be started for the given input."""
    pass
