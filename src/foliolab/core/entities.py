"""Core domain entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class OwnerType(str, Enum):
    """Kind of account owning a repository."""

    USER = "User"
    ORGANIZATION = "Organization"


@dataclass
class RepositoryOwner:
    """Owner of a repository."""

    login: str
    type: OwnerType = OwnerType.USER
    avatar_url: Optional[str] = None


@dataclass
class RepositoryMetadata:
    """Metadata shown next to a repository in the portfolio."""

    stars: int = 0
    language: Optional[str] = None
    topics: list[str] = field(default_factory=list)
    updated_at: str = ""
    homepage: Optional[str] = None

    def __post_init__(self) -> None:
        self.topics = list(dict.fromkeys(self.topics))


@dataclass
class RepoSummary:
    """Generated summary of a repository."""

    summary: str
    key_features: list[str]

    @classmethod
    def from_dict(cls, data: Any) -> "RepoSummary":
        """Validate a decoded provider answer.

        Raises:
            ValueError: if ``summary`` is not a non-blank string or
                ``keyFeatures`` is not a list of strings.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        summary = data.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            raise ValueError("'summary' must be a non-empty string")
        return cls(summary=summary, key_features=_string_list(data, "keyFeatures"))

    def to_dict(self) -> dict[str, Any]:
        return {"summary": self.summary, "keyFeatures": list(self.key_features)}


@dataclass
class UserIntroduction:
    """Generated introduction of the portfolio owner."""

    introduction: str
    skills: list[str]
    interests: list[str]

    @classmethod
    def from_dict(cls, data: Any) -> "UserIntroduction":
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        introduction = data.get("introduction")
        if not isinstance(introduction, str) or not introduction.strip():
            raise ValueError("'introduction' must be a non-empty string")
        return cls(
            introduction=introduction,
            skills=_string_list(data, "skills"),
            interests=_string_list(data, "interests"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "introduction": self.introduction,
            "skills": list(self.skills),
            "interests": list(self.interests),
        }


@dataclass
class Repository:
    """A GitHub repository visible to the pipeline."""

    id: int
    name: str
    url: str
    owner: RepositoryOwner
    metadata: RepositoryMetadata = field(default_factory=RepositoryMetadata)
    description: Optional[str] = None
    display_name: Optional[str] = None
    summary: Optional[str] = None
    selected: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Name cannot be empty")
        if not self.url:
            raise ValueError("URL cannot be empty")

    @property
    def full_name(self) -> str:
        return f"{self.owner.login}/{self.name}"

    def apply_summary(self, result: RepoSummary, display_name: Optional[str] = None) -> None:
        """Store a successful generation result."""
        self.summary = result.summary
        if display_name:
            self.display_name = display_name

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "url": self.url,
            "summary": self.summary,
            "selected": self.selected,
            "owner": {
                "login": self.owner.login,
                "type": self.owner.type.value,
                "avatarUrl": self.owner.avatar_url,
            },
            "metadata": {
                "id": self.id,
                "stars": self.metadata.stars,
                "language": self.metadata.language,
                "topics": list(self.metadata.topics),
                "updatedAt": self.metadata.updated_at,
                "url": self.metadata.homepage,
            },
        }


@dataclass
class PackageInfo:
    """Parsed package manifest."""

    name: str
    type: str
    dependencies: list[str] = field(default_factory=list)
    scripts: list[str] = field(default_factory=list)
    description: Optional[str] = None


@dataclass
class ConfigInfo:
    """Detected configuration file."""

    name: str
    type: str
    framework: Optional[str] = None


@dataclass
class SourceFileInfo:
    """Detected root-level source file."""

    name: str
    extension: str
    language: str
    is_entry_point: bool
    size: Optional[int] = None


@dataclass
class FrameworkInfo:
    """Framework match with its accumulated confidence."""

    framework: str
    confidence: int
    indicators: list[str] = field(default_factory=list)


@dataclass
class ProjectStructure:
    """Inferred shape of a repository without a usable README."""

    root_files: list[str] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)
    package_files: list[PackageInfo] = field(default_factory=list)
    config_files: list[ConfigInfo] = field(default_factory=list)
    source_files: list[SourceFileInfo] = field(default_factory=list)
    framework_indicators: list[FrameworkInfo] = field(default_factory=list)
    project_type: str = "Unknown"
    tech_stack: list[str] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "ProjectStructure":
        return cls()


@dataclass
class AnalysisResult:
    """Outcome of analyzing one repository in a batch."""

    repository: Repository
    summary: Optional[RepoSummary] = None
    error: Optional[Exception] = None
    used_structure_fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.summary is not None and self.error is None


def _string_list(data: dict, key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{key}' must be a list of strings")
    return list(value)
