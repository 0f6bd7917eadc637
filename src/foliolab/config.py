"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class OpenAIConfig:
    """Settings for the key-holder's OpenAI-compatible endpoint."""
    model: str = "gpt-4o"
    base_url: str = "https://api.openai.com/v1"
    temperature: float = 0.7
    max_tokens: int = 500
    timeout: float = 60.0


@dataclass
class DefaultProviderConfig:
    """Provider used when the caller supplies no API key."""
    name: str = "groq"
    model: str = "llama-3.3-70b-versatile"
    base_url: str = "https://api.groq.com/openai/v1"
    temperature: float = 0.7
    max_tokens: int = 500
    timeout: float = 60.0


@dataclass
class GitHubConfig:
    """GitHub API settings."""
    api_base: str = "https://api.github.com"
    per_page: int = 100
    timeout: float = 30.0
    portfolio_repo_name: str = "foliolab-vercel"
    resolve_display_names: bool = True
    readme_batch_size: int = 5


@dataclass
class AnalysisConfig:
    """Repository analysis settings."""
    max_readme_length: int = 2000
    request_delay: float = 0.0


@dataclass
class PromptsConfig:
    """Prompts for LLM."""
    summary: str = (
        "Generate a concise project summary and key features list from the "
        "repository information. Keep the summary under 150 words and limit "
        "key features to 3-5 bullet points."
    )
    summary_format: str = (
        "Respond with JSON in this format: "
        "{ 'summary': string, 'keyFeatures': string[] }"
    )
    introduction: str = (
        "Based on the repository information, generate a professional "
        "introduction that highlights the developer's expertise, interests, "
        "and technical focus. Include a list of their primary skills and "
        "areas of interest."
    )
    introduction_format: str = (
        "Respond with JSON in this format: "
        "{ 'introduction': string, 'skills': string[], 'interests': string[] }"
    )


@dataclass
class Settings:
    """Application settings."""

    # API keys (from environment only)
    openai_api_key: Optional[str] = None
    default_provider_api_key: Optional[str] = None
    github_token: Optional[str] = None

    # Config sections
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    default_provider: DefaultProviderConfig = field(default_factory=DefaultProviderConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    prompts: PromptsConfig = field(default_factory=PromptsConfig)

    @property
    def portfolio_repo_name(self) -> str:
        return self.github.portfolio_repo_name

    @property
    def max_readme_length(self) -> int:
        return self.analysis.max_readme_length


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        default_provider_api_key=os.getenv("GROQ_API_KEY") or None,
        github_token=os.getenv("GITHUB_TOKEN") or None,
    )

    sections = {
        "openai": settings.openai,
        "default_provider": settings.default_provider,
        "github": settings.github,
        "analysis": settings.analysis,
        "prompts": settings.prompts,
    }
    for name, section in sections.items():
        for key, value in (config.get(name) or {}).items():
            if not hasattr(section, key):
                raise ValueError(f"Unknown setting '{name}.{key}' in {config_path}")
            setattr(section, key, value)

    # Environment overrides for the OpenAI-compatible endpoint
    base_url = os.getenv("OPENAI_API_BASE_URL")
    if base_url:
        settings.openai.base_url = base_url.rstrip("/")
    model = os.getenv("OPENAI_API_MODEL")
    if model:
        settings.openai.model = model

    return settings
