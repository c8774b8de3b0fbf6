"""Weighted statement coverage across a component and its dependency closure.

Raw coverage follows the Istanbul ``coverage-final.json`` layout: a mapping
of file path to a record whose ``s`` member maps statement ids to hit counts.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import DEFAULT_COVERAGE_PATH
from ..logging import get_logger
from ..models import AggregatedCoverage, FileCoverageInfo, LowestCoverage
from ..stores import AnalysisCache
from .categorizer import FileCategorizer
from .dependency_graph import DependencyGraphBuilder

_LOGGER = get_logger("analyzers.coverage")

CoverageRecord = Mapping[str, Any]
RawCoverage = Mapping[str, CoverageRecord]


def round_percentage(value: float) -> float:
    """Round half-up to two decimals (``Math.round``-style, not banker's rounding)."""
    return math.floor(value * 100 + 0.5) / 100


def statement_counts(record: Optional[CoverageRecord]) -> Tuple[int, int]:
    """Return ``(covered, total)`` statements for one coverage record."""
    if not record:
        return 0, 0
    hits = record.get("s")
    if not isinstance(hits, Mapping):
        return 0, 0
    total = len(hits)
    covered = sum(1 for count in hits.values() if isinstance(count, (int, float)) and count > 0)
    return covered, total


def find_coverage_for_file(
    file_path: Path | str, coverage: RawCoverage, project_root: Path | str
) -> Optional[CoverageRecord]:
    """Locate the record for ``file_path`` despite differing path normalisation."""
    path = str(file_path)
    root = str(project_root)
    if path in coverage:
        return coverage[path]

    relative = path[len(root) :] if path.startswith(root) else path
    variants = [
        relative,
        relative[1:] if relative.startswith("/") else f"/{relative}",
        relative if relative.startswith("/") else f"/{relative}",
    ]
    for variant in variants:
        if variant in coverage:
            return coverage[variant]

    for key, record in coverage.items():
        if key.endswith(relative) or key.endswith(relative[1:]):
            return record
    return None


class CoverageAggregator:
    """Combines per-file coverage using file-category weights."""

    def __init__(self, graph_builder: DependencyGraphBuilder, categorizer: FileCategorizer) -> None:
        self._graphs = graph_builder
        self._categorizer = categorizer

    def aggregate(
        self,
        entry_file: Path | str,
        project_root: Path | str,
        raw_coverage: RawCoverage,
    ) -> AggregatedCoverage:
        entry = Path(entry_file).resolve()
        root = Path(project_root).resolve()
        graph = self._graphs.build(entry, root)

        files = [entry, *sorted(graph.all_dependencies - {entry})]
        analyzed: List[FileCoverageInfo] = []
        for path in files:
            category = self._categorizer.categorize(path, root)
            record = find_coverage_for_file(path, raw_coverage, root)
            covered, total = statement_counts(record)
            percentage = covered / total * 100 if total > 0 else 0.0
            analyzed.append(
                FileCoverageInfo(
                    file_path=path,
                    category=category.category,
                    weight=category.weight,
                    covered=covered,
                    total=total,
                    percentage=round_percentage(percentage),
                )
            )

        weighted_covered = 0.0
        weighted_total = 0.0
        for info in analyzed:
            if info.weight > 0 and info.total > 0:
                weighted_covered += info.covered * info.weight
                weighted_total += info.total * info.weight
        aggregate = weighted_covered / weighted_total * 100 if weighted_total > 0 else 0.0

        uncovered = [info.file_path for info in analyzed if info.total > 0 and info.percentage == 0]

        lowest: Optional[LowestCoverage] = None
        for info in analyzed:
            if info.weight <= 0 or info.total <= 0 or info.percentage <= 0:
                continue
            if lowest is None or info.percentage < lowest.percentage:
                lowest = LowestCoverage(path=info.file_path, percentage=info.percentage)

        _LOGGER.debug(
            "Aggregated coverage for %s over %d files: %.2f%%", entry, len(analyzed), aggregate
        )
        return AggregatedCoverage(
            component_file=entry,
            component_coverage=analyzed[0].percentage,
            aggregate_coverage=round_percentage(aggregate),
            total_files=len(analyzed),
            files_analyzed=analyzed,
            uncovered_files=uncovered,
            lowest_coverage_file=lowest,
        )


class CoverageLoader:
    """Reads an Istanbul JSON report, cached by the report's mtime."""

    def __init__(self, cache: AnalysisCache | None = None) -> None:
        self._cache = cache if cache is not None else AnalysisCache()

    def load(
        self, project_root: Path | str, coverage_path: str = DEFAULT_COVERAGE_PATH
    ) -> Optional[Dict[str, Any]]:
        report = (Path(project_root) / coverage_path).resolve()
        try:
            mtime_ns = report.stat().st_mtime_ns
        except OSError:
            _LOGGER.debug("No coverage report at %s", report)
            return None

        cached = self._cache.get_coverage(report, mtime_ns)
        if cached is not None:
            return cached

        try:
            data = json.loads(report.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            _LOGGER.debug("Failed to read coverage report %s: %s", report, exc)
            return None
        if not isinstance(data, dict):
            _LOGGER.debug("Coverage report %s is not a JSON object", report)
            return None

        self._cache.store_coverage(report, data, mtime_ns)
        return data


__all__ = [
    "CoverageAggregator",
    "CoverageLoader",
    "find_coverage_for_file",
    "round_percentage",
    "statement_counts",
]
