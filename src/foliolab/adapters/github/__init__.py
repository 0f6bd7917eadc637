"""GitHub adapter."""

from foliolab.adapters.github.client import GitHubClient

__all__ = ["GitHubClient"]
