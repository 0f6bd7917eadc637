"""Package manifest parsers.

Each parser takes raw file content and returns a ``PackageInfo``. Malformed
content degrades to empty dependency lists instead of raising.
"""

import json
import logging
import re
import xml.etree.ElementTree as ET
from typing import Callable, Optional

import yaml

from foliolab.core.entities import PackageInfo

logger = logging.getLogger(__name__)

PACKAGE_FILES = {
    "package.json",
    "requirements.txt",
    "cargo.toml",
    "go.mod",
    "go.sum",
    "pom.xml",
    "build.gradle",
    "gemfile",
    "composer.json",
    "pubspec.yaml",
}

_VERSION_PINS = ("==", ">=", "<=")
_GEM = re.compile(r"""^\s*gem\s+['"]([^'"]+)['"]""")


def is_package_file(file_name: str) -> bool:
    return file_name.lower() in PACKAGE_FILES


def parse_package_json(content: str) -> PackageInfo:
    """Dependencies, dev dependencies, scripts and description of package.json."""
    try:
        pkg = json.loads(content)
        if not isinstance(pkg, dict):
            raise ValueError("package.json is not an object")
        description = pkg.get("description")
        return PackageInfo(
            name="package.json",
            type="package.json",
            dependencies=[
                *(pkg.get("dependencies") or {}).keys(),
                *(pkg.get("devDependencies") or {}).keys(),
            ],
            scripts=list((pkg.get("scripts") or {}).keys()),
            description=description if isinstance(description, str) and description else None,
        )
    except (ValueError, AttributeError) as e:
        logger.warning("Failed to parse package.json: %s", e)
        return PackageInfo(name="package.json", type="package.json")


def parse_requirements_txt(content: str) -> PackageInfo:
    dependencies = []
    for line in content.split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        for pin in _VERSION_PINS:
            line = line.split(pin)[0]
        dependencies.append(line.strip())

    return PackageInfo(name="requirements.txt", type="requirements.txt", dependencies=dependencies)


def parse_cargo_toml(content: str) -> PackageInfo:
    dependencies = []
    in_dependencies = False

    for line in content.split("\n"):
        stripped = line.strip()
        if stripped == "[dependencies]":
            in_dependencies = True
            continue
        if stripped.startswith("["):
            in_dependencies = False
            continue
        if in_dependencies and "=" in stripped and not stripped.startswith("#"):
            dep = stripped.split("=")[0].strip()
            if dep:
                dependencies.append(dep)

    return PackageInfo(name="Cargo.toml", type="Cargo.toml", dependencies=dependencies)


def parse_go_mod(content: str) -> PackageInfo:
    """Module paths from ``require`` lines and ``require ( ... )`` blocks."""
    dependencies = []
    in_block = False

    for line in content.split("\n"):
        stripped = line.split("//")[0].strip()
        if in_block:
            if stripped.startswith(")"):
                in_block = False
            elif stripped:
                dependencies.append(stripped.split()[0])
            continue
        if stripped.startswith("require "):
            rest = stripped[len("require "):].strip()
            if rest.startswith("("):
                in_block = True
            elif rest:
                dependencies.append(rest.split()[0])

    return PackageInfo(name="go.mod", type="go.mod", dependencies=dependencies)


def parse_composer_json(content: str) -> PackageInfo:
    try:
        pkg = json.loads(content)
        if not isinstance(pkg, dict):
            raise ValueError("composer.json is not an object")
        description = pkg.get("description")
        return PackageInfo(
            name="composer.json",
            type="composer.json",
            dependencies=[
                *(pkg.get("require") or {}).keys(),
                *(pkg.get("require-dev") or {}).keys(),
            ],
            scripts=list((pkg.get("scripts") or {}).keys()),
            description=description if isinstance(description, str) and description else None,
        )
    except (ValueError, AttributeError) as e:
        logger.warning("Failed to parse composer.json: %s", e)
        return PackageInfo(name="composer.json", type="composer.json")


def parse_pubspec_yaml(content: str) -> PackageInfo:
    try:
        spec = yaml.safe_load(content) or {}
        if not isinstance(spec, dict):
            raise ValueError("pubspec.yaml is not a mapping")
        description = spec.get("description")
        return PackageInfo(
            name="pubspec.yaml",
            type="pubspec.yaml",
            dependencies=[
                *(spec.get("dependencies") or {}).keys(),
                *(spec.get("dev_dependencies") or {}).keys(),
            ],
            description=description if isinstance(description, str) and description else None,
        )
    except (yaml.YAMLError, ValueError, AttributeError) as e:
        logger.warning("Failed to parse pubspec.yaml: %s", e)
        return PackageInfo(name="pubspec.yaml", type="pubspec.yaml")


def parse_gemfile(content: str) -> PackageInfo:
    dependencies = [m.group(1) for m in map(_GEM.match, content.split("\n")) if m]
    return PackageInfo(name="Gemfile", type="Gemfile", dependencies=dependencies)


def parse_pom_xml(content: str) -> PackageInfo:
    """artifactIds of the declared Maven dependencies."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        logger.warning("Failed to parse pom.xml: %s", e)
        return PackageInfo(name="pom.xml", type="pom.xml")

    namespace = root.tag[1:].split("}")[0] if root.tag.startswith("{") else ""
    prefix = f"{{{namespace}}}" if namespace else ""
    dependencies = []
    for dep in root.iter(f"{prefix}dependency"):
        artifact = dep.find(f"{prefix}artifactId")
        if artifact is not None and artifact.text:
            dependencies.append(artifact.text.strip())

    return PackageInfo(name="pom.xml", type="pom.xml", dependencies=dependencies)


PARSERS: dict[str, Callable[[str], PackageInfo]] = {
    "package.json": parse_package_json,
    "requirements.txt": parse_requirements_txt,
    "cargo.toml": parse_cargo_toml,
    "go.mod": parse_go_mod,
    "composer.json": parse_composer_json,
    "pubspec.yaml": parse_pubspec_yaml,
    "gemfile": parse_gemfile,
    "pom.xml": parse_pom_xml,
}


def parse_manifest(file_name: str, content: str) -> Optional[PackageInfo]:
    """Parse a manifest by file name; None for manifests without a parser."""
    parser = PARSERS.get(file_name.lower())
    if parser is None:
        return None
    return parser(content)
