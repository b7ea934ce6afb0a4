"""Rule-based pattern detectors."""

from __future__ import annotations

from codeqa.detectors.base import BaseDetector, Rule
from codeqa.detectors.complexity import ComplexityDetector
from codeqa.detectors.performance import PerformanceDetector
from codeqa.detectors.security import SecurityDetector
from codeqa.models import Issue, SourceUnit

DETECTORS: dict[str, type[BaseDetector]] = {
    "security": SecurityDetector,
    "performance": PerformanceDetector,
    "complexity": ComplexityDetector,
}

_INSTANCES: tuple[BaseDetector, ...] = tuple(cls() for cls in DETECTORS.values())


def run_detectors(unit: SourceUnit) -> list[Issue]:
    """Run every registered detector against one unit, in registry order."""
    issues: list[Issue] = []
    for detector in _INSTANCES:
        issues.extend(detector.detect(unit))
    return issues


__all__ = [
    "DETECTORS",
    "BaseDetector",
    "ComplexityDetector",
    "PerformanceDetector",
    "Rule",
    "SecurityDetector",
    "run_detectors",
]
