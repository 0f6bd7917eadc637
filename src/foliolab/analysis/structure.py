"""Project structure analysis for repositories without a usable README."""

import logging
from collections import Counter
from typing import Any, Optional

from foliolab.analysis.frameworks import detect_frameworks
from foliolab.analysis.manifests import is_package_file, parse_manifest
from foliolab.core.entities import (
    ConfigInfo,
    FrameworkInfo,
    PackageInfo,
    ProjectStructure,
    SourceFileInfo,
)
from foliolab.core.interfaces import SourceControlHost

logger = logging.getLogger(__name__)

CONFIG_PATTERNS = (
    "webpack.config", "vite.config", "rollup.config", "babel.config",
    "eslint", "prettier", "tsconfig", "jest.config", "cypress.config",
    "docker", "nginx.conf", "apache.conf", ".env", "config.yml", "config.yaml",
)

# Substring -> tool name, first match wins
CONFIG_TOOLS = (
    ("webpack", "Webpack"),
    ("vite", "Vite"),
    ("rollup", "Rollup"),
    ("babel", "Babel"),
    ("eslint", "ESLint"),
    ("prettier", "Prettier"),
    ("tsconfig", "TypeScript"),
    ("jest", "Jest"),
    ("cypress", "Cypress"),
    ("docker", "Docker"),
    ("nginx", "Nginx"),
    ("apache", "Apache"),
)

LANGUAGES = {
    ".js": "JavaScript",
    ".ts": "TypeScript",
    ".jsx": "React",
    ".tsx": "React",
    ".py": "Python",
    ".java": "Java",
    ".go": "Go",
    ".rs": "Rust",
    ".rb": "Ruby",
    ".php": "PHP",
    ".cpp": "C++",
    ".c": "C",
    ".cs": "C#",
    ".swift": "Swift",
    ".kt": "Kotlin",
    ".dart": "Dart",
    ".vue": "Vue.js",
    ".svelte": "Svelte",
}

ENTRY_POINTS = {
    name.lower()
    for name in (
        "main.js", "main.ts", "index.js", "index.ts", "app.js", "app.ts",
        "server.js", "server.ts", "main.py", "app.py", "main.go",
        "main.rs", "lib.rs", "Main.java", "Application.java",
    )
}

MAJOR_TECHNOLOGIES = (
    "react", "vue", "angular", "express", "django", "flask", "spring",
    "rails", "laravel", "mongodb", "postgresql", "mysql", "redis",
    "docker", "kubernetes", "aws", "azure", "gcp", "firebase",
    "graphql", "apollo", "prisma", "typeorm", "sequelize",
)


def get_file_extension(file_name: str) -> str:
    last_dot = file_name.rfind(".")
    return file_name[last_dot:].lower() if last_dot > 0 else ""


def is_config_file(file_name: str) -> bool:
    lowered = file_name.lower()
    return any(pattern in lowered for pattern in CONFIG_PATTERNS)


def is_source_file(file_name: str) -> bool:
    return get_file_extension(file_name) in LANGUAGES


def get_config_type(file_name: str) -> str:
    lowered = file_name.lower()
    if any(tool in lowered for tool in ("webpack", "vite", "rollup")):
        return "build"
    if any(tool in lowered for tool in ("docker", "nginx", "apache")):
        return "deployment"
    if any(tool in lowered for tool in ("jest", "cypress", "test")):
        return "testing"
    if any(tool in lowered for tool in ("eslint", "prettier", "lint")):
        return "linting"
    return "config"


def get_config_framework(file_name: str) -> Optional[str]:
    lowered = file_name.lower()
    return next((tool for key, tool in CONFIG_TOOLS if key in lowered), None)


def get_language(extension: str) -> str:
    return LANGUAGES.get(extension, extension[1:].upper())


def is_entry_point(file_name: str) -> bool:
    return file_name.lower() in ENTRY_POINTS


def is_major_technology(dependency: str) -> bool:
    lowered = dependency.lower()
    return any(tech in lowered for tech in MAJOR_TECHNOLOGIES)


def most_common_language(languages: list[str]) -> Optional[str]:
    """Most frequent language; the first seen wins a tie."""
    if not languages:
        return None
    return Counter(languages).most_common(1)[0][0]


def determine_project_type(
    frameworks: list[FrameworkInfo], source_files: list[SourceFileInfo]
) -> str:
    if frameworks:
        return frameworks[0].framework

    language = most_common_language([f.language for f in source_files])
    if language:
        return f"{language} Project"
    return "Unknown"


def extract_tech_stack(
    frameworks: list[FrameworkInfo],
    source_files: list[SourceFileInfo],
    package_files: list[PackageInfo],
) -> list[str]:
    stack = [f.framework for f in frameworks]
    stack.extend(f.language for f in source_files if f.language)
    stack.extend(
        dep for pkg in package_files for dep in pkg.dependencies if is_major_technology(dep)
    )
    return list(dict.fromkeys(stack))


async def _analyze_package_file(
    host: SourceControlHost, owner: str, repo: str, file_name: str
) -> Optional[PackageInfo]:
    try:
        content = await host.get_file_raw(owner, repo, file_name)
        return parse_manifest(file_name, content)
    except Exception as e:
        logger.warning("Failed to analyze %s in %s/%s: %s", file_name, owner, repo, e)
        return None


async def _analyze_file(
    host: SourceControlHost,
    owner: str,
    repo: str,
    entry: dict[str, Any],
    structure: ProjectStructure,
) -> None:
    name = entry["name"]

    if is_package_file(name):
        package = await _analyze_package_file(host, owner, repo, name)
        if package:
            structure.package_files.append(package)

    if is_config_file(name):
        structure.config_files.append(
            ConfigInfo(name=name, type=get_config_type(name), framework=get_config_framework(name))
        )

    if is_source_file(name):
        extension = get_file_extension(name)
        structure.source_files.append(
            SourceFileInfo(
                name=name,
                extension=extension,
                language=get_language(extension),
                is_entry_point=is_entry_point(name),
                size=entry.get("size"),
            )
        )


async def analyze_project_structure(
    host: SourceControlHost, owner: str, repo: str
) -> ProjectStructure:
    """Infer language, dependencies and frameworks from a repository's root.

    Never raises: any failure yields an empty structure of type "Unknown".
    """
    try:
        contents = await host.get_root_contents(owner, repo)
        if not isinstance(contents, list):
            raise TypeError("repository contents is not a list")

        structure = ProjectStructure()
        for entry in contents:
            if entry.get("type") == "file":
                structure.root_files.append(entry["name"])
                await _analyze_file(host, owner, repo, entry, structure)
            elif entry.get("type") == "dir":
                structure.directories.append(entry["name"])

        structure.framework_indicators = detect_frameworks(
            structure.root_files, structure.directories, structure.package_files
        )
        structure.project_type = determine_project_type(
            structure.framework_indicators, structure.source_files
        )
        structure.tech_stack = extract_tech_stack(
            structure.framework_indicators, structure.source_files, structure.package_files
        )
        logger.info(
            "Analyzed %s/%s: %s (%d frameworks)",
            owner, repo, structure.project_type, len(structure.framework_indicators),
        )
        return structure
    except Exception as e:
        logger.warning("Failed to analyze project structure for %s/%s: %s", owner, repo, e)
        return ProjectStructure.empty()
