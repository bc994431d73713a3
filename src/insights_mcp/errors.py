"""Exception types shared across the insights pipeline."""


class DataFetchError(Exception):
    """Raised by a data source when an upstream query fails."""

    def __init__(self, message: str, field: str | None = None, last_error: Exception | None = None):
        super().__init__(message)
        self.field = field
        self.last_error = last_error


class GenerationError(Exception):
    """Raised when a text-generation call fails or times out."""

    def __init__(self, message: str, fragment: str | None = None, last_error: Exception | None = None):
        super().__init__(message)
        self.fragment = fragment
        self.last_error = last_error


class InsightsLogicError(AssertionError):
    """An internal invariant was violated. Never handled at runtime."""

    pass
