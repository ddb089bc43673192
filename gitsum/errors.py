"""Exception hierarchy for gitsum.

Every failure the pipeline can surface derives from `GitsumError`, so callers
(the CLI and the HTTP service) can catch a single base class and map the
concrete subclass to an exit status or HTTP status code.
"""

from typing import Optional


class GitsumError(Exception):
    """Base exception for the whole application."""


class ConfigurationError(GitsumError):
    """Missing repository identity or credential. Raised before any network call."""


class RetrievalError(GitsumError):
    """The repository content could not be fetched from GitHub."""

    def __init__(self, message: str, target: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.target = target
        self.status_code = status_code


class TokenBudgetExceeded(GitsumError):
    """A file is too large to be submitted to the language model."""

    def __init__(self, name: str, token_count: int, limit: int):
        super().__init__(f"{name} is too large: {token_count} tokens (limit {limit})")
        self.name = name
        self.token_count = token_count
        self.limit = limit


class SummarizationError(GitsumError):
    """Base class for failures of a single summarization call."""


class InvalidResponseError(SummarizationError):
    """The model answer is not JSON matching `{"summary": str}`."""

    def __init__(self, raw: str, error: str):
        super().__init__(f"Invalid model response: {raw}: {error}")
        self.raw = raw
        self.error = error


class TransportError(SummarizationError):
    """The completion request could not be completed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(GitsumError):
    """A named folder or file does not exist in the loaded content."""

    def __init__(self, message: str, name: str = ""):
        super().__init__(message)
        self.name = name


class EmptyRepositoryError(NotFoundError):
    """No folders were loaded for the repository."""

    def __init__(self, message: str = "No folders loaded"):
        super().__init__(message)


__all__ = [
    "ConfigurationError",
    "EmptyRepositoryError",
    "GitsumError",
    "InvalidResponseError",
    "NotFoundError",
    "RetrievalError",
    "SummarizationError",
    "TokenBudgetExceeded",
    "TransportError",
]
