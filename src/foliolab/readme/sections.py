"""Markdown section splitting and prioritization."""

import re
from typing import Optional

# Headings may be indented by up to three spaces; closing hashes are dropped.
HEADING = re.compile(r"^ {0,3}(#{1,6})\s+(.+?)\s*#*\s*$")
FENCE = re.compile(r"^ {0,3}(?:```|~~~)")

PRIORITY_HEADINGS = [
    re.compile(r"^#+\s*(?:[^\w\s]+\s*)?(?:Description|About|Overview|What is|Introduction|Summary)\b", re.I),
    re.compile(r"^#+\s*(?:[^\w\s]+\s*)?(?:Features|Key Features|Highlights|What it does)\b", re.I),
    re.compile(r"^#+\s*(?:[^\w\s]+\s*)?(?:Quick Start|Getting Started|Quickstart)\b", re.I),
    re.compile(r"^#+\s*(?:[^\w\s]+\s*)?(?:Installation|Setup|Install)\b", re.I),
    re.compile(r"^#+\s*(?:[^\w\s]+\s*)?(?:Usage|How to use|Examples?|Demo)\b", re.I),
    re.compile(r"^#+\s*(?:[^\w\s]+\s*)?(?:API|Documentation|Docs)\b", re.I),
    re.compile(r"^#+\s*(?:[^\w\s]+\s*)?(?:Architecture|Design|How it works)\b", re.I),
    re.compile(r"^#+\s*(?:[^\w\s]+\s*)?(?:Requirements|Prerequisites|Dependencies)\b", re.I),
    re.compile(r"^#+\s*(?:[^\w\s]+\s*)?(?:Configuration|Config|Settings)\b", re.I),
]

PRIORITY_SECTION_LIMIT = 500
FALLBACK_SECTION_LIMIT = 200
MIN_CONTENT_LENGTH = 800
MIN_SECTION_LENGTH = 50

_SENTENCE_END = re.compile(r"[.!?](?=\s|$)")


def split_sections(text: str) -> list[str]:
    """Split Markdown into sections, each starting at a heading line.

    The first section holds everything before the second heading boundary,
    so a leading title heading stays with its intro. Lines inside fenced code
    blocks never start a section.
    """
    sections: list[list[str]] = [[]]
    in_fence = False
    for line in text.split("\n"):
        if FENCE.match(line):
            in_fence = not in_fence
        elif not in_fence and HEADING.match(line) and sections[-1]:
            sections.append([])
        sections[-1].append(line)
    return ["\n".join(lines) for lines in sections]


def heading_of(section: str) -> tuple[Optional[int], str]:
    """Return (level, title) of the section's heading line, or (None, "")."""
    match = HEADING.match(section.split("\n", 1)[0])
    if not match:
        return None, ""
    return len(match.group(1)), match.group(2)


def is_priority_section(section: str) -> bool:
    header = section.split("\n", 1)[0].lstrip(" ")
    return any(pattern.match(header) for pattern in PRIORITY_HEADINGS)


def limit_section_length(section: str, max_length: int) -> str:
    """Truncate a section to at most ``max_length`` characters.

    Prefers ending after the last complete sentence that fits; otherwise cuts
    at the last whitespace before the limit. A code fence left open by the
    cut is dropped together with everything after it.
    """
    if len(section) <= max_length:
        return section

    window = section[:max_length]
    header_end = section.find("\n")
    if header_end == -1:
        header_end = len(section)

    sentence_end = -1
    for match in _SENTENCE_END.finditer(window):
        sentence_end = match.end()
    if sentence_end > header_end:
        return _drop_open_fence(window[:sentence_end])

    boundary = max(window.rfind(" "), window.rfind("\n"))
    if boundary > 0:
        return _drop_open_fence(window[:boundary].rstrip())
    return _drop_open_fence(window)


def _drop_open_fence(text: str) -> str:
    lines = text.split("\n")
    open_at: Optional[int] = None
    for index, line in enumerate(lines):
        if FENCE.match(line):
            open_at = index if open_at is None else None
    if open_at is None:
        return text
    return "\n".join(lines[:open_at]).rstrip()


def extract_relevant_sections(
    text: str,
    priority_limit: int = PRIORITY_SECTION_LIMIT,
    fallback_limit: int = FALLBACK_SECTION_LIMIT,
    min_content_length: int = MIN_CONTENT_LENGTH,
    min_section_length: int = MIN_SECTION_LENGTH,
) -> str:
    """Keep the title block and the sections that describe what a project does.

    Priority sections (description, features, usage, ...) are kept in full up
    to ``priority_limit`` characters each. When the result is still thin, the
    remaining sections are added with a stricter limit.
    """
    if not text:
        return text

    sections = split_sections(text)
    kept: dict[int, str] = {0: sections[0]}

    for index, section in enumerate(sections[1:], start=1):
        if is_priority_section(section):
            kept[index] = limit_section_length(section, priority_limit).rstrip()

    if len(_join(kept)) < min_content_length:
        for index, section in enumerate(sections[1:], start=1):
            if index in kept:
                continue
            limited = limit_section_length(section, fallback_limit).strip()
            # Too short to carry signal
            if len(limited) >= min_section_length:
                kept[index] = limited

    return _join(kept)


def _join(kept: dict[int, str]) -> str:
    return "\n\n".join(kept[index] for index in sorted(kept))
