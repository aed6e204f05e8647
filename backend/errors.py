"""
Error taxonomy shared by the file store, the model provider and the HTTP layer.
"""


class RepoAnalystError(Exception):
    """Base class for all errors raised by this service."""


class NotFound(RepoAnalystError):
    """Repository, branch or path does not exist (or is not visible with the current token)."""


class RateLimited(RepoAnalystError):
    """The file store refused the request because of its rate limit."""

    def __init__(self, message: str = "GitHub API rate limit exceeded; configure GITHUB_TOKEN", retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class FileStoreError(RepoAnalystError):
    """Any other file store failure. `transient` marks failures worth retrying."""

    def __init__(self, message: str, status_code: int | None = None, transient: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.transient = transient


class ProviderError(RepoAnalystError):
    """The model provider call failed."""


class ProviderNotConfigured(ProviderError):
    """No model provider credentials are available."""


class UnparseableResponse(RepoAnalystError):
    """The model returned text from which no JSON object could be recovered."""

    def __init__(self, raw: str):
        super().__init__("model did not return parseable JSON")
        self.raw = raw
