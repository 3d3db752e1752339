"""Exceptions raised while planning, running and recording award searches."""


class AwardSweepError(Exception):
    """Base error for award-sweep failures."""


class ValidationError(AwardSweepError):
    """Raised when search parameters are invalid or out of range."""


class NormalizationError(AwardSweepError):
    """Raised when a scraped award record is malformed.

    The whole batch the record came from is rejected.
    """

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record


class EngineError(AwardSweepError):
    """Raised when an engine fails to run a search."""


class SetupError(AwardSweepError):
    """Raised when an engine cannot be initialized (missing credentials, login failure)."""


class StorageError(AwardSweepError):
    """Raised when the award database cannot be read or written."""
