"""README cleaning and section extraction."""

from foliolab.readme.cleaner import (
    clean_readme_content,
    cleanup_whitespace,
    extract_title_from_readme,
    remove_badges,
    remove_boilerplate_sections,
)
from foliolab.readme.sections import extract_relevant_sections, limit_section_length

__all__ = [
    "clean_readme_content",
    "cleanup_whitespace",
    "extract_relevant_sections",
    "extract_title_from_readme",
    "limit_section_length",
    "remove_badges",
    "remove_boilerplate_sections",
]
