"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from foliolab.core.entities import Repository


class SourceControlHost(ABC):
    """Interface for the source-control host holding the user's repositories."""

    @abstractmethod
    async def get_authenticated_user(self) -> dict[str, Any]:
        """Return the authenticated account (``login``, ``avatar_url``)."""
        pass

    @abstractmethod
    async def list_user_repos(self) -> list[Repository]:
        """List the authenticated user's public repositories, newest update first."""
        pass

    @abstractmethod
    async def list_orgs_for_user(self) -> list[dict[str, Any]]:
        """List organizations the authenticated user belongs to."""
        pass

    @abstractmethod
    async def list_org_repos(self, org: str) -> list[Repository]:
        """List an organization's public repositories, newest update first."""
        pass

    @abstractmethod
    async def get_root_contents(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """List root-level entries (``name``, ``type``, ``size``) of a repository."""
        pass

    @abstractmethod
    async def get_file_raw(self, owner: str, repo: str, path: str) -> str:
        """Fetch raw text content of a file."""
        pass

    @abstractmethod
    async def get_readme(self, owner: str, repo: str) -> Optional[str]:
        """Fetch raw README text, or None if the repository has none."""
        pass


class LLMProvider(ABC):
    """Interface for chat-completion style LLM providers."""

    name: str

    @abstractmethod
    async def complete(self, system_prompt: str, user_content: str) -> Any:
        """Send prompt and content, return the decoded JSON response envelope."""
        pass
