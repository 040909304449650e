"""
Exceptions surfaced to callers of the pipeline.

Geometry and text edge cases never raise; they degrade to defined
fallback values inside the modules that handle them.
"""


class ScanLayerError(Exception):
    """Base class for all pipeline errors."""


class InvalidInputError(ScanLayerError):
    """Source file is unreadable, empty, too large or structurally invalid."""


class OcrTimeoutError(ScanLayerError):
    """The OCR engine did not finish within the polling window."""

    def __init__(self, attempts: int, interval: float):
        self.attempts = attempts
        self.interval = interval
        super().__init__(
            f"OCR operation did not complete after {attempts} polls "
            f"({attempts * interval:.0f}s)"
        )


class OcrEngineError(ScanLayerError):
    """The OCR engine reported a failure."""


class InternalError(ScanLayerError):
    """An invariant of the pipeline was violated."""


class RateLimitExceeded(ScanLayerError):
    """A client exceeded its request quota."""

    def __init__(self, key: str, retry_after: float):
        self.key = key
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded for {key}, retry in {retry_after:.1f}s")
