"""Business logic use cases."""

import asyncio
import json
import logging
from typing import Any, Callable, Optional, TypeVar

from foliolab.adapters.github import GitHubClient
from foliolab.adapters.llm import ChatCompletionClient, decode_response
from foliolab.analysis import analyze_project_structure, generate_project_summary
from foliolab.config import Settings
from foliolab.core import (
    AnalysisResult,
    FolioLabError,
    GenerationError,
    LLMProvider,
    Repository,
    RepositoryMetadata,
    RepoSummary,
    SourceControlError,
    SourceControlHost,
    UserIntroduction,
)
from foliolab.readme import clean_readme_content, extract_title_from_readme

logger = logging.getLogger(__name__)

T = TypeVar("T")

HostFactory = Callable[[str], SourceControlHost]
ProviderFactory = Callable[[Optional[str]], LLMProvider]


def is_portfolio_artifact(name: str, portfolio_repo_name: str) -> bool:
    """True for repositories produced by earlier portfolio deployments."""
    lowered = name.lower()
    return (
        "-folio" in lowered
        or "github.io" in lowered
        or lowered == portfolio_repo_name.lower()
    )


class RepositoryLister:
    """Lists the repositories a user can put in their portfolio."""

    def __init__(self, settings: Settings, host_factory: Optional[HostFactory] = None) -> None:
        self.settings = settings
        self.host_factory = host_factory or (lambda token: GitHubClient(token, settings.github))

    async def get_repositories(self, access_token: str) -> list[Repository]:
        """User repositories followed by those of every organization they belong to."""
        host = self.host_factory(access_token)

        user_repos = self._filter(await host.list_user_repos())
        logger.info("Fetched %d user repositories", len(user_repos))

        org_repos: list[Repository] = []
        for org in await self._list_organizations(host):
            org_repos.extend(self._filter(await self._list_org_repos(host, org)))

        repositories = self._deduplicate(user_repos + org_repos)

        if self.settings.github.resolve_display_names:
            await self._resolve_display_names(host, repositories)

        return repositories

    def _filter(self, repositories: list[Repository]) -> list[Repository]:
        return [
            repo for repo in repositories
            if not is_portfolio_artifact(repo.name, self.settings.portfolio_repo_name)
        ]

    def _deduplicate(self, repositories: list[Repository]) -> list[Repository]:
        unique: dict[int, Repository] = {}
        for repo in repositories:
            unique.setdefault(repo.id, repo)
        return list(unique.values())

    async def _list_organizations(self, host: SourceControlHost) -> list[str]:
        try:
            orgs = await host.list_orgs_for_user()
        except SourceControlError as e:
            logger.warning("Failed to fetch user organizations: %s", e)
            return []
        return [org["login"] for org in orgs if org.get("login")]

    async def _list_org_repos(self, host: SourceControlHost, org: str) -> list[Repository]:
        try:
            repos = await host.list_org_repos(org)
        except Exception as e:
            logger.warning("Failed to fetch repositories for org %s: %s", org, e)
            return []
        logger.info("Fetched %d repositories for org %s", len(repos), org)
        return repos

    async def _resolve_display_names(
        self, host: SourceControlHost, repositories: list[Repository]
    ) -> None:
        """Take display names from README titles, a few READMEs at a time."""
        batch_size = max(1, self.settings.github.readme_batch_size)
        for start in range(0, len(repositories), batch_size):
            batch = repositories[start:start + batch_size]
            await asyncio.gather(*(self._resolve_display_name(host, repo) for repo in batch))

    async def _resolve_display_name(self, host: SourceControlHost, repo: Repository) -> None:
        try:
            readme = await host.get_readme(repo.owner.login, repo.name)
        except SourceControlError as e:
            logger.warning("Failed to process README for %s: %s", repo.full_name, e)
            return
        title = extract_title_from_readme(readme)
        if title:
            repo.display_name = title


class SummaryGenerator:
    """Generates repository summaries and the owner introduction with an LLM."""

    def __init__(
        self,
        settings: Settings,
        provider_factory: Optional[ProviderFactory] = None,
        host_factory: Optional[HostFactory] = None,
    ) -> None:
        self.settings = settings
        self.provider_factory = provider_factory or self.select_provider
        self.host_factory = host_factory or (lambda token: GitHubClient(token, settings.github))

    def select_provider(self, api_key: Optional[str] = None) -> LLMProvider:
        """OpenAI with the caller's key, the default provider without one."""
        if api_key:
            config = self.settings.openai
            return ChatCompletionClient(
                name="openai",
                base_url=config.base_url,
                model=config.model,
                api_key=api_key,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                timeout=config.timeout,
            )

        config = self.settings.default_provider
        return ChatCompletionClient(
            name=config.name,
            base_url=config.base_url,
            model=config.model,
            api_key=self.settings.default_provider_api_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )

    def build_user_content(
        self,
        name: str,
        description: str,
        readme: str,
        metadata: Optional[RepositoryMetadata] = None,
        readme_label: str = "README",
    ) -> str:
        lines = [
            f"Repository Name: {name}",
            f"Description: {description or 'No description provided'}",
        ]

        if metadata:
            if metadata.language:
                lines.append(f"Primary Language: {metadata.language}")
            if metadata.topics:
                lines.append(f"Topics: {', '.join(metadata.topics)}")
            lines.append(f"Stars: {metadata.stars}")
            if metadata.homepage:
                lines.append(f"Homepage: {metadata.homepage}")

        max_length = self.settings.max_readme_length
        if len(readme) > max_length:
            readme = readme[:max_length] + "..."
        lines.append(f"{readme_label}:\n{readme or 'Not available'}")

        return "\n".join(lines)

    async def generate_repo_summary(
        self,
        name: str,
        description: str,
        readme: str,
        api_key: Optional[str] = None,
        custom_prompt: Optional[str] = None,
        metadata: Optional[RepositoryMetadata] = None,
        access_token: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> RepoSummary:
        """Summarize a repository from its cleaned README.

        Without README text, the repository's structure is analyzed instead
        when ``access_token`` and ``owner`` are given; otherwise generation
        proceeds from name, description and metadata alone.

        Raises:
            GenerationError: if the provider fails or answers with an invalid
                summary.
        """
        readme = (readme or "").strip()
        readme_label = "README"

        if not readme and access_token and owner:
            logger.info("No README for %s/%s, analyzing project structure", owner, name)
            structure = await analyze_project_structure(self.host_factory(access_token), owner, name)
            readme = generate_project_summary(structure)
            readme_label = "Project Structure Analysis"

        prompt = f"{custom_prompt or self.settings.prompts.summary} {self.settings.prompts.summary_format}"
        user_content = self.build_user_content(name, description, readme, metadata, readme_label)

        logger.info(
            "Generating summary for %s (readme length %d, custom prompt: %s)",
            name, len(readme), bool(custom_prompt),
        )
        return await self._generate(api_key, prompt, user_content, RepoSummary.from_dict)

    async def generate_user_introduction(
        self, repositories: list[Repository], api_key: Optional[str] = None
    ) -> UserIntroduction:
        """Introduce the portfolio owner based on their analyzed repositories."""
        repo_info = [
            {
                "name": repo.display_name or repo.name,
                "description": repo.description,
                "language": repo.metadata.language,
                "topics": repo.metadata.topics,
                "summary": repo.summary,
            }
            for repo in repositories
        ]
        prompts = self.settings.prompts
        prompt = f"{prompts.introduction} {prompts.introduction_format}"
        user_content = json.dumps(repo_info, indent=2, ensure_ascii=False)

        logger.info("Generating user introduction from %d repositories", len(repositories))
        return await self._generate(api_key, prompt, user_content, UserIntroduction.from_dict)

    async def _generate(
        self,
        api_key: Optional[str],
        prompt: str,
        user_content: str,
        build: Callable[[Any], T],
    ) -> T:
        provider = self.provider_factory(api_key)
        try:
            envelope = await provider.complete(prompt, user_content)
            return decode_response(envelope, build, provider.name)
        except GenerationError as e:
            logger.error("Generation with %s failed: %s", provider.name, e)
            raise


class PortfolioAnalysisService:
    """Runs the README → summary pipeline for the user's selected repositories."""

    def __init__(
        self,
        settings: Settings,
        summary_generator: SummaryGenerator,
        host_factory: Optional[HostFactory] = None,
    ) -> None:
        self.settings = settings
        self.summary_generator = summary_generator
        self.host_factory = host_factory or (lambda token: GitHubClient(token, settings.github))

    async def analyze_repository(
        self,
        repository: Repository,
        access_token: str,
        api_key: Optional[str] = None,
        custom_prompt: Optional[str] = None,
    ) -> AnalysisResult:
        """Analyze one repository; the repository changes only on success."""
        host = self.host_factory(access_token)
        readme = ""

        try:
            raw_readme = await host.get_readme(repository.owner.login, repository.name)
            readme = clean_readme_content(raw_readme or "")
            display_name = extract_title_from_readme(raw_readme)

            summary = await self.summary_generator.generate_repo_summary(
                repository.name,
                repository.description or "",
                readme,
                api_key=api_key,
                custom_prompt=custom_prompt,
                metadata=repository.metadata,
                access_token=access_token,
                owner=repository.owner.login,
            )
        except FolioLabError as e:
            logger.error("Failed to analyze %s: %s", repository.full_name, e)
            return AnalysisResult(repository=repository, error=e, used_structure_fallback=not readme)

        repository.apply_summary(summary, display_name)
        logger.info("Generated summary for %s", repository.full_name)
        return AnalysisResult(
            repository=repository, summary=summary, used_structure_fallback=not readme
        )

    async def analyze_selected(
        self,
        repositories: list[Repository],
        access_token: str,
        api_key: Optional[str] = None,
        custom_prompt: Optional[str] = None,
    ) -> list[AnalysisResult]:
        """Analyze selected repositories one at a time.

        Provider rate limits rule out concurrent calls. A failure is reported
        in that repository's result and does not stop the batch.
        """
        selected = [repo for repo in repositories if repo.selected]
        results: list[AnalysisResult] = []
        delay = self.settings.analysis.request_delay

        for index, repository in enumerate(selected):
            if index and delay > 0:
                await asyncio.sleep(delay)
            results.append(
                await self.analyze_repository(repository, access_token, api_key, custom_prompt)
            )

        failed = sum(1 for result in results if not result.ok)
        logger.info("Analyzed %d repositories, %d failed", len(results), failed)
        return results

    async def generate_introduction(
        self, repositories: list[Repository], api_key: Optional[str] = None
    ) -> UserIntroduction:
        """Owner introduction from the repositories that have a summary."""
        summarized = [repo for repo in repositories if repo.summary]
        return await self.summary_generator.generate_user_introduction(summarized, api_key)
