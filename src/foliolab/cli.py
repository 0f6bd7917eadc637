"""CLI entry point for FolioLab."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from foliolab.config import Settings, get_settings
from foliolab.core import AnalysisResult, FolioLabError
from foliolab.use_cases import PortfolioAnalysisService, RepositoryLister, SummaryGenerator

app = typer.Typer(help="Generate portfolio summaries for your GitHub repositories.")


def _require_token(settings: Settings, token: Optional[str]) -> str:
    token = token or settings.github_token
    if not token:
        print("✗ GitHub token not found: pass --token or set GITHUB_TOKEN")
        raise typer.Exit(code=1)
    return token


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def repos(
    token: Optional[str] = typer.Option(None, "--token", help="GitHub access token"),
    config: Path = typer.Option(Path("config.yaml"), "--config", help="YAML config file"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """List repositories available for the portfolio."""
    _configure_logging(debug)
    settings = get_settings(config)
    asyncio.run(async_list(settings, _require_token(settings, token)))


@app.command()
def analyze(
    names: list[str] = typer.Argument(..., help="Repository names to analyze"),
    token: Optional[str] = typer.Option(None, "--token", help="GitHub access token"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="OpenAI API key"),
    prompt: Optional[str] = typer.Option(None, "--prompt", help="Custom summary prompt"),
    output: Optional[Path] = typer.Option(None, "--output", help="Write results as JSON"),
    intro: bool = typer.Option(False, "--intro", help="Also generate an owner introduction"),
    config: Path = typer.Option(Path("config.yaml"), "--config", help="YAML config file"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Summarize the named repositories, one at a time."""
    _configure_logging(debug)
    settings = get_settings(config)
    access_token = _require_token(settings, token)
    asyncio.run(
        async_analyze(
            settings, access_token, names, api_key or settings.openai_api_key, prompt, output, intro
        )
    )


async def async_list(settings: Settings, access_token: str) -> None:
    repositories = await RepositoryLister(settings).get_repositories(access_token)

    print(f"\n📦 Repositories: {len(repositories)}")
    for repo in repositories:
        title = f" ({repo.display_name})" if repo.display_name else ""
        language = repo.metadata.language or "-"
        print(f"  • {repo.full_name}{title} [{language}, ★ {repo.metadata.stars}]")
        if repo.description:
            print(f"    └─ {repo.description}")


async def async_analyze(
    settings: Settings,
    access_token: str,
    names: list[str],
    api_key: Optional[str],
    custom_prompt: Optional[str],
    output: Optional[Path],
    intro: bool,
) -> None:
    """Async implementation of the analyze command."""
    repositories = await RepositoryLister(settings).get_repositories(access_token)

    wanted = {name.lower() for name in names}
    for repo in repositories:
        repo.selected = repo.name.lower() in wanted or repo.full_name.lower() in wanted

    missing = wanted - {
        key for repo in repositories if repo.selected
        for key in (repo.name.lower(), repo.full_name.lower())
    }
    for name in sorted(missing):
        print(f"⚠️  Repository not found: {name}")

    provider = "openai" if api_key else settings.default_provider.name
    print(f"\n🔍 Analyzing {sum(r.selected for r in repositories)} repositories with {provider}")

    service = PortfolioAnalysisService(settings, SummaryGenerator(settings))
    results = await service.analyze_selected(repositories, access_token, api_key, custom_prompt)

    for result in results:
        _print_result(result)

    introduction = None
    if intro and any(result.ok for result in results):
        try:
            introduction = await service.generate_introduction(repositories, api_key)
            print(f"\n👤 {introduction.introduction}")
            print(f"  • Skills: {', '.join(introduction.skills)}")
            print(f"  • Interests: {', '.join(introduction.interests)}")
        except FolioLabError as e:
            print(f"\n⚠️  Failed to generate introduction: {e}")

    if output:
        payload = {
            "repositories": [
                {
                    **result.repository.to_dict(),
                    "keyFeatures": result.summary.key_features if result.summary else [],
                    "error": str(result.error) if result.error else None,
                }
                for result in results
            ],
            "introduction": introduction.to_dict() if introduction else None,
        }
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"\n📄 Results saved to {output}")


def _print_result(result: AnalysisResult) -> None:
    repo = result.repository
    print(f"\n💻 {repo.display_name or repo.name} ({repo.url})")
    if result.used_structure_fallback:
        print("  └─ No README, summary based on project structure")
    if not result.ok:
        print(f"  └─ ❌ {result.error}")
        return
    print(f"  {result.summary.summary}")
    for feature in result.summary.key_features:
        print(f"    - {feature}")


if __name__ == "__main__":
    app()
