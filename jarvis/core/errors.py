"""
Application errors for clean API error handling.

Use ServiceUnavailableError when a dependency (embeddings, LLM, the document
index) is misconfigured or unreachable so the API can return 503 with a
user-facing message.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. embeddings API, LLM) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ModelUnavailableError(ServiceUnavailableError):
    """Raised when a completion or embedding call fails or times out."""


class EmptyIndexError(ServiceUnavailableError):
    """Raised when retrieval is attempted without an indexed document."""

    def __init__(self, message: str = "Document not indexed") -> None:
        super().__init__(message)
