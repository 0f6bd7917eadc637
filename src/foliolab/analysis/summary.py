"""Natural-language description of an inferred project structure."""

from foliolab.core.entities import ProjectStructure

MAX_STACK_ENTRIES = 5


def _features(structure: ProjectStructure) -> list[str]:
    directories = set(structure.directories)
    features = []

    if directories & {"api", "server"}:
        features.append("backend API")
    if directories & {"client", "frontend"}:
        features.append("frontend interface")
    if "mobile" in directories or any(
        "Mobile" in f.framework for f in structure.framework_indicators
    ):
        features.append("mobile application")
    if directories & {"docs", "documentation"}:
        features.append("comprehensive documentation")
    if directories & {"tests", "test"}:
        features.append("test suite")

    return features


def generate_project_summary(structure: ProjectStructure) -> str:
    """Describe the structure in a short paragraph, used in place of a README.

    Clauses without content are omitted; an empty structure yields "".
    """
    parts = []

    if structure.project_type != "Unknown":
        parts.append(f"This is a {structure.project_type} project")

    if structure.tech_stack:
        parts.append(f"built with {', '.join(structure.tech_stack[:MAX_STACK_ENTRIES])}")

    features = _features(structure)
    if features:
        parts.append(f"featuring {', '.join(features)}")

    description = next((p.description for p in structure.package_files if p.description), None)
    if description:
        parts.append(f"Description: {description}")

    if not parts:
        return ""
    return ". ".join(parts).rstrip(".") + "."
