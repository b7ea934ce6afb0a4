"""Main analysis runner / orchestrator."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from codeqa.aggregator import build_report
from codeqa.config import CodeQAConfig
from codeqa.detectors import run_detectors
from codeqa.errors import EmptyInputError
from codeqa.extractor import ModelExtractor
from codeqa.heuristics import analyze_documentation, analyze_test_coverage
from codeqa.logging import get_logger
from codeqa.metrics import FileMetrics, duplication_issues, scan_unit
from codeqa.models import Issue, Report, SourceUnit
from codeqa.parallel import check_cancelled, map_ordered
from codeqa.providers import create_provider
from codeqa.providers.base import BaseProvider
from codeqa.sources import GitHubFetcher, SourceSet, gather_units, is_github_url

logger = get_logger("runner")


@dataclass(frozen=True)
class UnitResult:
    """Static analysis output for one source unit."""

    path: str
    issues: list[Issue] = field(default_factory=list)
    metrics: FileMetrics | None = None


def analyze_unit(unit: SourceUnit) -> UnitResult:
    """Run the pattern detectors and the metrics scanner on one unit."""
    metrics = scan_unit(unit)
    issues = run_detectors(unit)
    issues.extend(duplication_issues(unit, metrics))
    return UnitResult(path=unit.path, issues=issues, metrics=metrics)


class QualityPipeline:
    """Runs every analysis stage and builds one Report.

    Stages run in a fixed order (per-unit static analysis, model extraction,
    project heuristics) and the Report is only built once all of them have
    completed, so a cancelled run never yields a partial Report.
    """

    def __init__(
        self,
        provider: BaseProvider | None = None,
        concurrency: int = 8,
        ai_concurrency: int = 2,
    ):
        self.concurrency = max(1, concurrency)
        self.extractor = ModelExtractor(provider, concurrency=ai_concurrency)

    @classmethod
    def from_config(cls, config: CodeQAConfig, use_ai: bool = True) -> QualityPipeline:
        provider = create_provider(config.provider, config.model) if use_ai else None
        return cls(provider, concurrency=config.concurrency, ai_concurrency=config.ai_concurrency)

    @property
    def provider(self) -> BaseProvider | None:
        return self.extractor.provider

    def analyze(
        self,
        units: list[SourceUnit],
        cancel: threading.Event | None = None,
        project_paths: Iterable[str] = (),
    ) -> Report:
        units = list(units)
        check_cancelled(cancel)
        logger.info("Analyzing %d file(s)", len(units))

        issues: list[Issue] = []
        for result in map_ordered(analyze_unit, units, self.concurrency, cancel):
            issues.extend(result.issues)
        logger.debug("Static analysis found %d issue(s)", len(issues))

        if self.extractor.enabled:
            issues.extend(self.extractor.extract_issues(units, cancel))
        else:
            logger.info("No AI provider configured, skipping AI analysis")

        check_cancelled(cancel)
        issues.extend(analyze_test_coverage(units))
        issues.extend(analyze_documentation(units, project_paths))

        report = build_report(units, issues)
        logger.info("Analysis complete: %d issue(s)", report.summary.issue_count)
        return report


@dataclass(frozen=True)
class AnalysisResult:
    report: Report
    source: SourceSet
    provider: BaseProvider | None = None


def load_source(target: str, config: CodeQAConfig) -> SourceSet:
    """Resolve `target` to a local path or, failing that, a GitHub repository."""
    if Path(target).exists() or not (is_github_url(target) or _looks_like_slug(target)):
        return gather_units(target, config)
    with GitHubFetcher(config=config) as fetcher:
        return fetcher.fetch(target)


def _looks_like_slug(target: str) -> bool:
    parts = target.strip().split("/")
    return len(parts) == 2 and all(parts) and not target.startswith((".", "/"))


def run_analysis(
    target: str,
    config: CodeQAConfig,
    use_ai: bool = True,
    cancel: threading.Event | None = None,
) -> AnalysisResult:
    """Gather `target` and analyze it with the configured provider.

    Raises EmptyInputError when the target holds no supported files and
    SourceFetchError when a remote repository cannot be read.
    """
    source = load_source(target, config)
    if not source.units:
        raise EmptyInputError()

    pipeline = QualityPipeline.from_config(config, use_ai=use_ai)
    report = pipeline.analyze(source.units, cancel=cancel, project_paths=source.other_paths)
    return AnalysisResult(report=report, source=source, provider=pipeline.provider)
