"""Framework detection catalog and scoring.

The catalog is static data; ``score_framework`` is the only place where
signal weights are applied.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from foliolab.core.entities import FrameworkInfo, PackageInfo

ROOT_FILE_WEIGHT = 30
DEPENDENCY_WEIGHT = 40
CONFIG_WEIGHT = 20
FILE_PATTERN_WEIGHT = 25
DIRECTORY_PATTERN_WEIGHT = 15
MIN_CONFIDENCE = 20


@dataclass(frozen=True)
class FrameworkPattern:
    """Evidence that identifies one framework.

    ``patterns`` ending in ``/`` name top-level directories, others name
    root-level files.
    """

    name: str
    files: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    configs: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()


FRAMEWORK_PATTERNS: tuple[FrameworkPattern, ...] = (
    FrameworkPattern(
        "React",
        files=("package.json",),
        dependencies=("react", "@types/react", "react-dom"),
        configs=("vite.config.js", "webpack.config.js", "craco.config.js"),
        patterns=("src/App.jsx", "src/App.tsx", "public/index.html"),
    ),
    FrameworkPattern(
        "Next.js",
        files=("package.json", "next.config.js", "next.config.mjs"),
        dependencies=("next",),
        patterns=("pages/", "app/", "src/pages/", "src/app/"),
    ),
    FrameworkPattern(
        "Vue.js",
        files=("package.json",),
        dependencies=("vue", "@vue/cli"),
        configs=("vue.config.js", "vite.config.js"),
        patterns=("src/App.vue", "src/main.js"),
    ),
    FrameworkPattern(
        "Angular",
        files=("package.json", "angular.json"),
        dependencies=("@angular/core", "@angular/cli"),
        patterns=("src/app/", "src/main.ts"),
    ),
    FrameworkPattern(
        "Express.js",
        files=("package.json",),
        dependencies=("express",),
        patterns=("server.js", "app.js", "index.js", "src/server.js"),
    ),
    FrameworkPattern(
        "Django",
        files=("requirements.txt", "manage.py", "pyproject.toml"),
        dependencies=("django",),
        patterns=("settings.py", "urls.py", "wsgi.py"),
    ),
    FrameworkPattern(
        "Flask",
        files=("requirements.txt", "app.py"),
        dependencies=("flask",),
        patterns=("app.py", "main.py", "run.py"),
    ),
    FrameworkPattern(
        "Spring Boot",
        files=("pom.xml", "build.gradle"),
        dependencies=("spring-boot",),
        patterns=("src/main/java/", "Application.java"),
    ),
    FrameworkPattern(
        "Ruby on Rails",
        files=("Gemfile", "config/application.rb"),
        dependencies=("rails",),
        patterns=("app/", "config/", "db/"),
    ),
    FrameworkPattern(
        "Laravel",
        files=("composer.json", "artisan"),
        dependencies=("laravel/framework",),
        patterns=("app/", "routes/", "resources/"),
    ),
    FrameworkPattern(
        "Rust",
        files=("Cargo.toml",),
        patterns=("src/main.rs", "src/lib.rs"),
    ),
    FrameworkPattern(
        "Go",
        files=("go.mod", "go.sum"),
        patterns=("main.go", "cmd/", "internal/"),
    ),
    FrameworkPattern(
        "Python",
        files=("requirements.txt", "setup.py", "pyproject.toml", "Pipfile"),
        patterns=("main.py", "app.py", "__init__.py"),
    ),
    FrameworkPattern(
        "Mobile App (React Native)",
        files=("package.json",),
        dependencies=("react-native", "@react-native"),
        configs=("metro.config.js", "react-native.config.js"),
        patterns=("App.js", "App.tsx", "index.js"),
    ),
    FrameworkPattern(
        "Mobile App (Flutter)",
        files=("pubspec.yaml",),
        patterns=("lib/main.dart", "android/", "ios/"),
    ),
    FrameworkPattern(
        "Desktop App (Electron)",
        files=("package.json",),
        dependencies=("electron",),
        patterns=("main.js", "src/main/", "public/electron.js"),
    ),
)


def score_framework(
    pattern: FrameworkPattern,
    root_files: Iterable[str],
    directories: Iterable[str],
    package_files: Iterable[PackageInfo],
) -> FrameworkInfo:
    """Accumulate the confidence of one framework from the repository's evidence."""
    root_files = set(root_files)
    directories = set(directories)
    dependencies = [dep for pkg in package_files for dep in pkg.dependencies]

    confidence = 0
    indicators: list[str] = []

    for file in pattern.files:
        if file in root_files:
            confidence += ROOT_FILE_WEIGHT
            indicators.append(f"Has {file}")

    for dep in pattern.dependencies:
        if any(dep in name for name in dependencies):
            confidence += DEPENDENCY_WEIGHT
            indicators.append(f"Uses {dep}")

    for config in pattern.configs:
        if config in root_files:
            confidence += CONFIG_WEIGHT
            indicators.append(f"Has {config}")

    for entry in pattern.patterns:
        if entry.endswith("/"):
            dir_name = entry[:-1]
            if dir_name in directories:
                confidence += DIRECTORY_PATTERN_WEIGHT
                indicators.append(f"Has {dir_name}/ directory")
        elif entry in root_files:
            confidence += FILE_PATTERN_WEIGHT
            indicators.append(f"Has {entry}")

    return FrameworkInfo(framework=pattern.name, confidence=confidence, indicators=indicators)


def detect_frameworks(
    root_files: Iterable[str],
    directories: Iterable[str],
    package_files: Iterable[PackageInfo],
    catalog: Optional[tuple[FrameworkPattern, ...]] = None,
) -> list[FrameworkInfo]:
    """Frameworks scoring above the threshold, best first, ties in catalog order."""
    root_files = list(root_files)
    directories = list(directories)
    package_files = list(package_files)

    matches = [
        score_framework(pattern, root_files, directories, package_files)
        for pattern in (catalog if catalog is not None else FRAMEWORK_PATTERNS)
    ]
    qualified = [match for match in matches if match.confidence > MIN_CONFIDENCE]
    return sorted(qualified, key=lambda match: match.confidence, reverse=True)
