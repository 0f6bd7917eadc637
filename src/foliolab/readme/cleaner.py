"""README cleanup before LLM processing.

Cleaning is an ordered list of independent text rewrite rules. Each rule is
pattern based rather than a Markdown parser: an unrecognized badge passes
through unchanged, but prose is never stripped.
"""

import re
from typing import Callable, Optional

from bs4 import BeautifulSoup

from foliolab.readme.sections import extract_relevant_sections, heading_of, split_sections

Rule = Callable[[str], str]

_LINK_TARGET = r"\]\([^)]*\)"

BADGE_PATTERNS = [
    # Shields.io badges: [![text](shield-url)](link-url)
    re.compile(r"\[!\[[^\]]*\]\([^)]*shields\.io[^)]*\)" + _LINK_TARGET),
    # PyPI badges
    re.compile(r"\[!\[PyPI[^\]]*\]\([^)]*pypi\.org[^)]*\)" + _LINK_TARGET),
    # GitHub workflow/action badges
    re.compile(r"\[!\[[^\]]*\]\([^)]*github\.com[^)]*/(?:workflows|actions)/[^)]*\)" + _LINK_TARGET),
    # License, version, release, CI, coverage, docs and download badges by alt text
    re.compile(
        r"\[!\[[^\]]*\b(?:license|version|release|changelog|tests?|build|ci|coverage|codecov"
        r"|docs|documentation|downloads?|install)\b[^\]]*\]\([^)]*\)" + _LINK_TARGET,
        re.I,
    ),
    # Other badge hosting services
    re.compile(r"\[!\[[^\]]*\]\([^)]*(?:badge\.fury\.io|badgen\.net)[^)]*\)" + _LINK_TARGET),
    # Standalone badge images without links
    re.compile(r"!\[[^\]]*\]\([^)]*(?:shields\.io|badge\.fury\.io|badgen\.net)[^)]*\)"),
]

# Inline HTML images, optionally wrapped in a link
_HTML_IMAGE = re.compile(r"<a\b[^>]*>\s*<img\b[^>]*>\s*</a>|<img\b[^>]*>", re.I)
_HTML_BADGE_SRC = re.compile(
    r"shields\.io|badge\.fury\.io|badgen\.net|/badge\.svg|codecov\.io/.+/badge", re.I
)
_EMPTY_HTML_PARAGRAPH = re.compile(r"<(p|div)\b[^>]*>\s*</\1>", re.I)

BOILERPLATE_HEADING = re.compile(
    r"^(?:[^\w\s]+\s*)?(?:"
    r"Licen[sc]e|Licensing"
    r"|Code of Conduct|Contributor Code of Conduct|Contributing Guidelines"
    r"|Security|Security Policy|Reporting Security Issues"
    r"|Changelog|Change Log|Release Notes|Version History"
    r"|Support|Getting Help|Help|Community"
    r"|Acknowledge?ments?|Credits?|Thanks?"
    r"|Contributing|How to Contribute|Contribution Guidelines"
    r"|FAQ|Frequently Asked Questions"
    r"|Troubleshooting|Common Issues|Known Issues"
    r"|Table of Contents?|Contents?|TOC"
    r")\s*:?$",
    re.I,
)

NOISE_PATTERNS = [
    # Horizontal rules
    re.compile(r"^[ \t]*(?:-{3,}|={3,}|\*{3,})[ \t]*$", re.M),
    # Lines holding nothing but a linked image
    re.compile(r"^[ \t]*\[!\[.*?\]\(.*?\)\]\(.*?\)[ \t]*$", re.M),
    # Empty fenced code blocks
    re.compile(r"^```[\w+-]*[ \t]*\n[ \t]*```[ \t]*$", re.M),
    # Table of contents anchor links
    re.compile(r"^[ \t]*[-*][ \t]*\[[^\]]*\]\(#[^)]*\)[ \t]*$", re.M),
]

_BLANK_RUN = re.compile(r"\n(?:[ \t]*\n){2,}")


def collapse_blank_lines(text: str) -> str:
    return _BLANK_RUN.sub("\n\n", text).strip()


def _remove_html_badges(text: str) -> str:
    def replace(match: re.Match) -> str:
        image = BeautifulSoup(match.group(0), "html.parser").find("img")
        src = image.get("src", "") if image else ""
        if isinstance(src, str) and _HTML_BADGE_SRC.search(src):
            return ""
        return match.group(0)

    text = _HTML_IMAGE.sub(replace, text)
    return _EMPTY_HTML_PARAGRAPH.sub("", text)


def remove_badges(readme: str) -> str:
    """Remove shields and other status badges from README content."""
    if not readme:
        return readme

    cleaned = readme
    for pattern in BADGE_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    if "<img" in cleaned.lower():
        cleaned = _remove_html_badges(cleaned)

    return collapse_blank_lines(cleaned)


def remove_boilerplate_sections(content: str) -> str:
    """Drop license, changelog, contributing and similar sections wholesale.

    A section runs from its heading to the next heading of the same or a
    higher level, so nested subsections go with it.
    """
    if not content:
        return content

    kept: list[str] = []
    skip_level: Optional[int] = None
    for section in split_sections(content):
        level, title = heading_of(section)
        if level is not None:
            if skip_level is not None and level <= skip_level:
                skip_level = None
            if skip_level is None and BOILERPLATE_HEADING.match(title):
                skip_level = level
        if skip_level is None:
            kept.append(section)

    return "\n".join(kept)


def cleanup_whitespace(content: str) -> str:
    """Final removal of layout noise and excess blank lines."""
    if not content:
        return content

    cleaned = content
    for pattern in NOISE_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return collapse_blank_lines(cleaned)


README_RULES: tuple[Rule, ...] = (
    remove_badges,
    remove_boilerplate_sections,
    extract_relevant_sections,
    cleanup_whitespace,
)


def clean_readme_content(readme: str, rules: tuple[Rule, ...] = README_RULES) -> str:
    """Reduce a README to the content describing what the project is and does.

    An empty result means no usable README.
    """
    if not readme:
        return ""

    cleaned = readme
    for rule in rules:
        cleaned = rule(cleaned)
    return cleaned


def extract_title_from_readme(readme: Optional[str]) -> Optional[str]:
    """Return the text of the first ``# `` heading, used as display name."""
    if not readme:
        return None

    for line in readme.split("\n"):
        stripped = line.strip()
        if stripped.startswith("# "):
            return stripped[2:].strip() or None
    return None
