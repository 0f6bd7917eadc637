"""Exceptions raised by the portfolio pipeline."""

from typing import Optional


class FolioLabError(Exception):
    """Base exception for pipeline failures.

    ``stage`` names the part of the pipeline that produced the error so
    callers can attribute it without parsing the message.
    """

    stage = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if stage:
            self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


class SourceControlError(FolioLabError):
    """Raised when the source-control host call fails."""

    stage = "github"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        stage: Optional[str] = None,
    ) -> None:
        super().__init__(message, stage)
        self.status_code = status_code


class NotFoundError(SourceControlError):
    """Raised when the requested repository, file or README does not exist."""


class RateLimitError(SourceControlError):
    """Raised when the host enforces a rate limit."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message, status_code)
        self.retry_after = retry_after


class GenerationError(FolioLabError):
    """Raised when an LLM provider cannot produce a summary."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message, stage=f"generation:{provider}")
        self.provider = provider


class UpstreamUnavailableError(GenerationError):
    """The provider did not answer: network failure, timeout or non-2xx status."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(provider, message)
        self.status_code = status_code


class MalformedResponseError(GenerationError):
    """The provider answered, but not with a usable JSON object."""
