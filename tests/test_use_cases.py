"""Tests for use cases."""

import json
from unittest.mock import AsyncMock, Mock

import pytest

from foliolab.adapters.llm import ChatCompletionClient
from foliolab.config import Settings
from foliolab.core import (
    MalformedResponseError,
    OwnerType,
    Repository,
    RepositoryMetadata,
    RepositoryOwner,
    SourceControlError,
    UpstreamUnavailableError,
)
from foliolab.use_cases import (
    PortfolioAnalysisService,
    RepositoryLister,
    SummaryGenerator,
    is_portfolio_artifact,
)


def _repo(repo_id: int, name: str, owner: str = "alice", org: bool = False, **kwargs) -> Repository:
    return Repository(
        id=repo_id,
        name=name,
        url=f"https://github.com/{owner}/{name}",
        owner=RepositoryOwner(login=owner, type=OwnerType.ORGANIZATION if org else OwnerType.USER),
        **kwargs,
    )


def _envelope(summary: str = "A useful tool.", features=("fast",)) -> dict:
    content = json.dumps({"summary": summary, "keyFeatures": list(features)})
    return {"choices": [{"message": {"content": content}}]}


def _provider(name: str = "openai", envelope=None, error=None) -> AsyncMock:
    provider = AsyncMock()
    provider.name = name
    if error is not None:
        provider.complete.side_effect = error
    else:
        provider.complete.return_value = envelope if envelope is not None else _envelope()
    return provider


@pytest.fixture
def settings() -> Settings:
    settings = Settings()
    settings.github.resolve_display_names = False
    return settings


@pytest.mark.parametrize(
    "name, expected",
    [
        ("my-folio", True),
        ("alice.github.io", True),
        ("FolioLab-Vercel", True),
        ("foliolab-vercel", True),
        ("folio", False),
        ("portfolio-site", False),
        ("tool", False),
    ],
)
def test_is_portfolio_artifact(name: str, expected: bool) -> None:
    assert is_portfolio_artifact(name, "foliolab-vercel") is expected


@pytest.mark.asyncio
async def test_lister_merges_filters_and_deduplicates(settings: Settings) -> None:
    host = AsyncMock()
    host.list_user_repos.return_value = [_repo(1, "tool"), _repo(2, "alice.github.io")]
    host.list_orgs_for_user.return_value = [{"login": "acme"}]
    host.list_org_repos.return_value = [
        _repo(1, "tool"),
        _repo(3, "platform", owner="acme", org=True),
        _repo(4, "acme-folio", owner="acme", org=True),
    ]
    lister = RepositoryLister(settings, host_factory=lambda token: host)

    repositories = await lister.get_repositories("gh-token")

    assert [repo.id for repo in repositories] == [1, 3]
    assert repositories[1].owner.type == OwnerType.ORGANIZATION
    host.list_org_repos.assert_awaited_once_with("acme")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [SourceControlError("403 Forbidden", status_code=403), KeyError("html_url"), ValueError("bad record")],
)
async def test_lister_skips_failing_organization(settings: Settings, error: Exception) -> None:
    """Test that one organization failing does not hide the others."""
    host = AsyncMock()
    host.list_user_repos.return_value = [_repo(1, "tool")]
    host.list_orgs_for_user.return_value = [{"login": "broken"}, {"login": "acme"}]

    async def list_org_repos(org):
        if org == "broken":
            raise error
        return [_repo(3, "platform", owner="acme", org=True)]

    host.list_org_repos.side_effect = list_org_repos
    lister = RepositoryLister(settings, host_factory=lambda token: host)

    repositories = await lister.get_repositories("gh-token")

    assert [repo.name for repo in repositories] == ["tool", "platform"]


@pytest.mark.asyncio
async def test_lister_org_listing_failure_means_no_orgs(settings: Settings) -> None:
    host = AsyncMock()
    host.list_user_repos.return_value = [_repo(1, "tool")]
    host.list_orgs_for_user.side_effect = SourceControlError("boom", status_code=500)
    lister = RepositoryLister(settings, host_factory=lambda token: host)

    repositories = await lister.get_repositories("gh-token")

    assert [repo.name for repo in repositories] == ["tool"]
    host.list_org_repos.assert_not_called()


@pytest.mark.asyncio
async def test_lister_user_repo_failure_propagates(settings: Settings) -> None:
    host = AsyncMock()
    host.list_user_repos.side_effect = SourceControlError("Bad credentials", status_code=401)
    lister = RepositoryLister(settings, host_factory=lambda token: host)

    with pytest.raises(SourceControlError):
        await lister.get_repositories("bad-token")


@pytest.mark.asyncio
async def test_lister_resolves_display_names(settings: Settings) -> None:
    settings.github.resolve_display_names = True
    settings.github.readme_batch_size = 2
    host = AsyncMock()
    host.list_user_repos.return_value = [_repo(1, "tool"), _repo(2, "lib"), _repo(3, "app")]
    host.list_orgs_for_user.return_value = []

    async def get_readme(owner, name):
        if name == "tool":
            return "# Tool Deluxe\n\nText"
        if name == "lib":
            raise SourceControlError("boom", status_code=500)
        return None

    host.get_readme.side_effect = get_readme
    lister = RepositoryLister(settings, host_factory=lambda token: host)

    repositories = await lister.get_repositories("gh-token")

    assert [repo.display_name for repo in repositories] == ["Tool Deluxe", None, None]
    assert host.get_readme.await_count == 3


def test_select_provider_with_key(settings: Settings) -> None:
    provider = SummaryGenerator(settings).select_provider("sk-user")

    assert isinstance(provider, ChatCompletionClient)
    assert provider.name == "openai"
    assert provider.model == "gpt-4o"
    assert provider.api_key == "sk-user"


def test_select_provider_without_key(settings: Settings) -> None:
    settings.default_provider_api_key = "gsk-server"

    provider = SummaryGenerator(settings).select_provider(None)

    assert provider.name == "groq"
    assert provider.model == "llama-3.3-70b-versatile"
    assert provider.api_key == "gsk-server"


def test_build_user_content(settings: Settings) -> None:
    generator = SummaryGenerator(settings)
    metadata = RepositoryMetadata(stars=12, language="Rust", topics=["cli"], homepage="https://tool.dev")

    content = generator.build_user_content("tool", "", "x" * 2500, metadata)

    assert "Repository Name: tool" in content
    assert "Description: No description provided" in content
    assert "Primary Language: Rust" in content
    assert "Topics: cli" in content
    assert "Stars: 12" in content
    assert "Homepage: https://tool.dev" in content
    assert content.endswith("README:\n" + "x" * 2000 + "...")


def test_build_user_content_without_readme(settings: Settings) -> None:
    content = SummaryGenerator(settings).build_user_content("tool", "A tool", "")

    assert content == "Repository Name: tool\nDescription: A tool\nREADME:\nNot available"


@pytest.mark.asyncio
async def test_generate_repo_summary(settings: Settings) -> None:
    provider = _provider()
    factory = Mock(return_value=provider)
    generator = SummaryGenerator(settings, provider_factory=factory)

    summary = await generator.generate_repo_summary("tool", "A tool", "# Tool\n\nDoes things.", api_key="sk-user")

    assert summary.summary == "A useful tool."
    assert summary.key_features == ["fast"]
    factory.assert_called_once_with("sk-user")
    prompt, user_content = provider.complete.call_args.args
    assert prompt.startswith(settings.prompts.summary)
    assert prompt.endswith(settings.prompts.summary_format)
    assert "README:\n# Tool" in user_content


@pytest.mark.asyncio
async def test_generate_repo_summary_custom_prompt(settings: Settings) -> None:
    provider = _provider()
    generator = SummaryGenerator(settings, provider_factory=lambda key: provider)

    await generator.generate_repo_summary("tool", "", "readme", custom_prompt="Write like a pirate.")

    prompt = provider.complete.call_args.args[0]
    assert prompt == f"Write like a pirate. {settings.prompts.summary_format}"


@pytest.mark.asyncio
async def test_generate_repo_summary_from_name_only(settings: Settings) -> None:
    """Test that an empty README without a token still produces a summary."""
    provider = _provider()
    host_factory = Mock()
    generator = SummaryGenerator(settings, provider_factory=lambda key: provider, host_factory=host_factory)

    summary = await generator.generate_repo_summary("tool", "A tool", "")

    assert summary.summary == "A useful tool."
    host_factory.assert_not_called()
    assert "README:\nNot available" in provider.complete.call_args.args[1]


@pytest.mark.asyncio
async def test_generate_repo_summary_structure_fallback(settings: Settings) -> None:
    provider = _provider()
    host = AsyncMock()
    host.get_root_contents.return_value = [
        {"name": "go.mod", "type": "file"},
        {"name": "main.go", "type": "file"},
    ]
    host.get_file_raw.return_value = "module x\n\nrequire github.com/gin-gonic/gin v1.9.1\n"
    generator = SummaryGenerator(
        settings, provider_factory=lambda key: provider, host_factory=lambda token: host
    )

    await generator.generate_repo_summary("api", "", "   ", access_token="gh-token", owner="alice")

    user_content = provider.complete.call_args.args[1]
    assert "Project Structure Analysis:\nThis is a Go project" in user_content
    host.get_root_contents.assert_awaited_once_with("alice", "api")


@pytest.mark.asyncio
async def test_generate_repo_summary_malformed(settings: Settings) -> None:
    provider = _provider(envelope={"choices": [{"message": {"content": '{"summary":"x"}'}}]})
    generator = SummaryGenerator(settings, provider_factory=lambda key: provider)

    with pytest.raises(MalformedResponseError, match="Invalid response from openai"):
        await generator.generate_repo_summary("tool", "", "readme")


@pytest.mark.asyncio
async def test_generate_user_introduction(settings: Settings) -> None:
    content = json.dumps({"introduction": "I build CLIs.", "skills": ["Rust"], "interests": ["tooling"]})
    provider = _provider(envelope={"choices": [{"message": {"content": content}}]})
    generator = SummaryGenerator(settings, provider_factory=lambda key: provider)
    repo = _repo(1, "tool", summary="A tool.", display_name="Tool")

    introduction = await generator.generate_user_introduction([repo])

    assert introduction.skills == ["Rust"]
    repo_info = json.loads(provider.complete.call_args.args[1])
    assert repo_info[0]["name"] == "Tool"
    assert repo_info[0]["summary"] == "A tool."


@pytest.mark.asyncio
async def test_analyze_repository_success(settings: Settings) -> None:
    host = AsyncMock()
    host.get_readme.return_value = "# Tool Deluxe\n\n## License\n\nMIT\n\n## Usage\n\nRun it."
    provider = _provider()
    generator = SummaryGenerator(settings, provider_factory=lambda key: provider)
    service = PortfolioAnalysisService(settings, generator, host_factory=lambda token: host)
    repo = _repo(1, "tool")

    result = await service.analyze_repository(repo, "gh-token")

    assert result.ok
    assert not result.used_structure_fallback
    assert repo.summary == "A useful tool."
    assert repo.display_name == "Tool Deluxe"
    user_content = provider.complete.call_args.args[1]
    assert "## Usage" in user_content
    assert "MIT" not in user_content


@pytest.mark.asyncio
async def test_analyze_repository_failure_leaves_repo_untouched(settings: Settings) -> None:
    host = AsyncMock()
    host.get_readme.return_value = "# Tool Deluxe\n\nText."
    provider = _provider(error=UpstreamUnavailableError("openai", "openai API error 401"))
    generator = SummaryGenerator(settings, provider_factory=lambda key: provider)
    service = PortfolioAnalysisService(settings, generator, host_factory=lambda token: host)
    repo = _repo(1, "tool", summary="Old summary.")

    result = await service.analyze_repository(repo, "gh-token", api_key="sk-bad")

    assert not result.ok
    assert isinstance(result.error, UpstreamUnavailableError)
    assert result.error.stage == "generation:openai"
    assert repo.summary == "Old summary."
    assert repo.display_name is None


@pytest.mark.asyncio
async def test_analyze_selected_sequential_and_isolated(settings: Settings) -> None:
    """Test that repositories run in order and one failure does not stop the batch."""
    host = AsyncMock()
    host.get_readme.side_effect = lambda owner, name: f"# {name}\n\nAbout {name}."
    calls = []

    async def complete(prompt, user_content):
        name = user_content.split("\n", 1)[0].removeprefix("Repository Name: ")
        calls.append(name)
        if name == "beta":
            raise UpstreamUnavailableError("openai", "openai request timed out after 60s")
        return _envelope(summary=f"Summary of {name}.")

    provider = AsyncMock()
    provider.name = "openai"
    provider.complete.side_effect = complete
    generator = SummaryGenerator(settings, provider_factory=lambda key: provider)
    service = PortfolioAnalysisService(settings, generator, host_factory=lambda token: host)
    repositories = [
        _repo(1, "alpha", selected=True),
        _repo(2, "skipped"),
        _repo(3, "beta", selected=True),
        _repo(4, "gamma", selected=True),
    ]

    results = await service.analyze_selected(repositories, "gh-token", api_key="sk-user")

    assert calls == ["alpha", "beta", "gamma"]
    assert [result.ok for result in results] == [True, False, True]
    assert repositories[0].summary == "Summary of alpha."
    assert repositories[1].summary is None
    assert repositories[2].summary is None
    assert repositories[3].summary == "Summary of gamma."


@pytest.mark.asyncio
async def test_analyze_repository_readme_error_reported(settings: Settings) -> None:
    host = AsyncMock()
    host.get_readme.side_effect = SourceControlError("GitHub API error 500", status_code=500)
    generator = SummaryGenerator(settings, provider_factory=lambda key: _provider())
    service = PortfolioAnalysisService(settings, generator, host_factory=lambda token: host)

    result = await service.analyze_repository(_repo(1, "tool"), "gh-token")

    assert not result.ok
    assert isinstance(result.error, SourceControlError)


@pytest.mark.asyncio
async def test_generate_introduction_uses_summarized_repos(settings: Settings) -> None:
    generator = AsyncMock()
    service = PortfolioAnalysisService(settings, generator, host_factory=lambda token: AsyncMock())
    done = _repo(1, "tool", summary="A tool.")
    pending = _repo(2, "lib")

    await service.generate_introduction([done, pending], api_key="sk-user")

    generator.generate_user_introduction.assert_awaited_once_with([done], "sk-user")
