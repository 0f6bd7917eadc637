"""Core domain layer."""

from foliolab.core.entities import (
    AnalysisResult,
    ConfigInfo,
    FrameworkInfo,
    OwnerType,
    PackageInfo,
    ProjectStructure,
    RepoSummary,
    Repository,
    RepositoryMetadata,
    RepositoryOwner,
    SourceFileInfo,
    UserIntroduction,
)
from foliolab.core.errors import (
    FolioLabError,
    GenerationError,
    MalformedResponseError,
    NotFoundError,
    RateLimitError,
    SourceControlError,
    UpstreamUnavailableError,
)
from foliolab.core.interfaces import LLMProvider, SourceControlHost

__all__ = [
    "AnalysisResult",
    "ConfigInfo",
    "FrameworkInfo",
    "OwnerType",
    "PackageInfo",
    "ProjectStructure",
    "RepoSummary",
    "Repository",
    "RepositoryMetadata",
    "RepositoryOwner",
    "SourceFileInfo",
    "UserIntroduction",
    "FolioLabError",
    "GenerationError",
    "MalformedResponseError",
    "NotFoundError",
    "RateLimitError",
    "SourceControlError",
    "UpstreamUnavailableError",
    "LLMProvider",
    "SourceControlHost",
]
