"""Tests for project structure analysis and framework detection."""

import json
from unittest.mock import AsyncMock

import pytest

from foliolab.analysis import detect_frameworks, analyze_project_structure
from foliolab.analysis.frameworks import FrameworkPattern, score_framework
from foliolab.analysis.structure import determine_project_type, extract_tech_stack, is_entry_point
from foliolab.core import NotFoundError, PackageInfo, SourceControlError, SourceFileInfo


def _file(name: str, size: int = 100) -> dict:
    return {"name": name, "type": "file", "size": size}


def _dir(name: str) -> dict:
    return {"name": name, "type": "dir"}


def _host(contents: list, files: dict | None = None) -> AsyncMock:
    files = files or {}
    host = AsyncMock()
    host.get_root_contents.return_value = contents

    async def get_file_raw(owner, repo, path):
        if path not in files:
            raise NotFoundError(f"{path} not found", status_code=404)
        return files[path]

    host.get_file_raw.side_effect = get_file_raw
    return host


@pytest.mark.asyncio
async def test_analyze_go_project() -> None:
    host = _host(
        [_file("go.mod"), _file("main.go")],
        {"go.mod": "module example.com/app\n\nrequire github.com/gin-gonic/gin v1.9.1\n"},
    )

    structure = await analyze_project_structure(host, "alice", "api")

    assert structure.project_type == "Go"
    assert "Go" in structure.tech_stack
    assert structure.root_files == ["go.mod", "main.go"]
    assert structure.package_files[0].dependencies == ["github.com/gin-gonic/gin"]
    assert structure.source_files[0].is_entry_point
    host.get_root_contents.assert_awaited_once_with("alice", "api")


@pytest.mark.asyncio
async def test_analyze_react_project() -> None:
    package_json = json.dumps({
        "description": "Dashboard",
        "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0"},
        "devDependencies": {"vite": "^5.0.0"},
    })
    host = _host(
        [_file("package.json"), _file("vite.config.js"), _file("index.ts"), _dir("src"), _dir("tests")],
        {"package.json": package_json},
    )

    structure = await analyze_project_structure(host, "alice", "dash")

    assert structure.project_type == "React"
    assert structure.tech_stack[0] == "React"
    assert "react" in structure.tech_stack
    assert structure.directories == ["src", "tests"]
    assert structure.config_files[0].type == "build"
    assert structure.config_files[0].framework == "Vite"


@pytest.mark.asyncio
async def test_analyze_language_fallback() -> None:
    host = _host([_file("solver.py"), _file("utils.py"), _file("notes.txt")])

    structure = await analyze_project_structure(host, "alice", "scripts")

    assert structure.project_type == "Python Project"
    assert structure.framework_indicators == []
    assert structure.tech_stack == ["Python"]


@pytest.mark.asyncio
async def test_analyze_manifest_fetch_failure_skips_manifest() -> None:
    host = _host([_file("requirements.txt"), _file("app.py")])

    structure = await analyze_project_structure(host, "alice", "svc")

    assert structure.package_files == []
    assert structure.project_type != "Unknown"


@pytest.mark.asyncio
async def test_analyze_failure_returns_unknown() -> None:
    host = AsyncMock()
    host.get_root_contents.side_effect = SourceControlError("boom", status_code=500)

    structure = await analyze_project_structure(host, "alice", "broken")

    assert structure.project_type == "Unknown"
    assert structure.root_files == []
    assert structure.tech_stack == []


@pytest.mark.asyncio
async def test_analyze_non_list_contents_returns_unknown() -> None:
    host = AsyncMock()
    host.get_root_contents.return_value = {"message": "This is a file"}

    structure = await analyze_project_structure(host, "alice", "odd")

    assert structure.project_type == "Unknown"


def test_detect_frameworks_ties_keep_catalog_order() -> None:
    frameworks = detect_frameworks(["package.json"], [], [])

    assert frameworks[0].framework == "React"
    assert all(f.confidence == 30 for f in frameworks)


def test_detect_frameworks_threshold_is_exclusive() -> None:
    catalog = (FrameworkPattern("Tooling", configs=("tool.cfg",)),)

    assert detect_frameworks(["tool.cfg"], [], [], catalog=catalog) == []


def test_detect_frameworks_sorted_by_confidence() -> None:
    packages = [PackageInfo(name="package.json", type="package.json", dependencies=["next", "react"])]

    frameworks = detect_frameworks(["package.json", "next.config.js"], ["pages"], packages)
    confidences = [f.confidence for f in frameworks]

    assert frameworks[0].framework == "Next.js"
    assert confidences == sorted(confidences, reverse=True)


def test_score_framework_monotonic() -> None:
    """Test that adding evidence never lowers a framework's confidence."""
    pattern = FrameworkPattern(
        "Django", files=("manage.py",), dependencies=("django",), patterns=("settings.py",)
    )
    packages = [PackageInfo(name="requirements.txt", type="requirements.txt", dependencies=["django"])]

    base = score_framework(pattern, ["manage.py"], [], [])
    more = score_framework(pattern, ["manage.py", "settings.py"], [], packages)

    assert base.confidence == 30
    assert more.confidence == 30 + 25 + 40
    assert "Uses django" in more.indicators


def test_score_framework_dependency_counts_once() -> None:
    pattern = FrameworkPattern("Flask", dependencies=("flask",))
    packages = [
        PackageInfo(name="requirements.txt", type="requirements.txt", dependencies=["flask", "flask-cors"]),
        PackageInfo(name="Pipfile", type="Pipfile", dependencies=["flask"]),
    ]

    assert score_framework(pattern, [], [], packages).confidence == 40


def test_determine_project_type_tie_takes_first_seen_language() -> None:
    files = [
        SourceFileInfo(name="a.rb", extension=".rb", language="Ruby", is_entry_point=False),
        SourceFileInfo(name="b.go", extension=".go", language="Go", is_entry_point=False),
    ]

    assert determine_project_type([], files) == "Ruby Project"
    assert determine_project_type([], []) == "Unknown"


def test_extract_tech_stack_deduplicates() -> None:
    files = [
        SourceFileInfo(name="a.py", extension=".py", language="Python", is_entry_point=False),
        SourceFileInfo(name="b.py", extension=".py", language="Python", is_entry_point=False),
    ]
    packages = [PackageInfo(name="requirements.txt", type="requirements.txt", dependencies=["redis", "tqdm"])]

    assert extract_tech_stack([], files, packages) == ["Python", "redis"]


@pytest.mark.parametrize(
    "name, expected",
    [("main.go", True), ("Main.java", True), ("APP.PY", True), ("domain.go", False), ("mainframe.js", False)],
)
def test_is_entry_point(name: str, expected: bool) -> None:
    assert is_entry_point(name) is expected


@pytest.mark.asyncio
async def test_analyze_one_bad_manifest_keeps_the_rest() -> None:
    """Test that an unexpected error on one manifest only loses that manifest."""
    host = _host([_file("package.json"), _file("go.mod"), _file("main.go")])

    async def get_file_raw(owner, repo, path):
        if path == "package.json":
            raise KeyError("content")
        return "module x\n\nrequire github.com/gin-gonic/gin v1.9.1\n"

    host.get_file_raw.side_effect = get_file_raw

    structure = await analyze_project_structure(host, "alice", "api")

    assert structure.project_type == "Go"
    assert [p.type for p in structure.package_files] == ["go.mod"]
    assert structure.root_files == ["package.json", "go.mod", "main.go"]
