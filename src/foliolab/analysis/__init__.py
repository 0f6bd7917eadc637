"""Project structure inference for repositories without a README."""

from foliolab.analysis.frameworks import FRAMEWORK_PATTERNS, FrameworkPattern, detect_frameworks
from foliolab.analysis.structure import analyze_project_structure
from foliolab.analysis.summary import generate_project_summary

__all__ = [
    "FRAMEWORK_PATTERNS",
    "FrameworkPattern",
    "analyze_project_structure",
    "detect_frameworks",
    "generate_project_summary",
]
