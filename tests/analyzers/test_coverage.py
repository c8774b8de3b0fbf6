"""Tests for weighted coverage aggregation."""

from __future__ import annotations

from typing import Dict

from tests._fixtures.repo_builder import RepoBuilder
from uigraph.analyzers.coverage import find_coverage_for_file, round_percentage, statement_counts
from uigraph.engine import AnalysisEngine
from uigraph.models import FileCategory, LowestCoverage


def _record(*hits: int) -> Dict[str, object]:
    return {
        "statementMap": {str(index): {} for index in range(len(hits))},
        "s": {str(index): count for index, count in enumerate(hits)},
    }


def _write_component_tree(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/page.tsx": """
            import { Card } from "./Card";
            import type { Item } from "./types";
            export default function Page() { return <Card />; }
            """,
            "src/Card.tsx": """
            import { formatPrice } from "./lib/format";
            import { clamp } from "./lib/helpers";
            export const Card = () => <div>{formatPrice(clamp(1))}</div>;
            """,
            "src/lib/format.ts": "export const formatPrice = (n: number) => n.toFixed(2);\n",
            "src/lib/helpers.ts": "export function clamp(n: number) { return Math.max(0, n); }\n",
            "src/types.ts": "export interface Item { id: string }\n",
        }
    )


def test_round_percentage_rounds_half_up() -> None:
    assert round_percentage(0.125) == 0.13
    assert round_percentage(63.63636) == 63.64
    assert round_percentage(50.0) == 50.0


def test_statement_counts() -> None:
    assert statement_counts(_record(1, 0, 3)) == (2, 3)
    assert statement_counts({"statementMap": {}}) == (0, 0)
    assert statement_counts(None) == (0, 0)


def test_find_coverage_tolerates_path_normalisation(repo_builder: RepoBuilder) -> None:
    root = repo_builder.path()
    exact = _record(1)
    relative = _record(2)
    suffixed = _record(3)
    coverage = {
        str(root / "src/page.tsx"): exact,
        "src/Card.tsx": relative,
        "/ci/checkout/src/lib/helpers.ts": suffixed,
    }

    assert find_coverage_for_file(root / "src/page.tsx", coverage, root) is exact
    assert find_coverage_for_file(root / "src/Card.tsx", coverage, root) is relative
    assert find_coverage_for_file(root / "src/lib/helpers.ts", coverage, root) is suffixed
    assert find_coverage_for_file(root / "src/other.ts", coverage, root) is None


def test_weighted_aggregate_matches_category_weights(
    engine: AnalysisEngine, repo_builder: RepoBuilder
) -> None:
    _write_component_tree(repo_builder)
    root = repo_builder.path()
    raw = {
        str(root / "src/page.tsx"): _record(1, 1, 2, 5),
        "/src/Card.tsx": _record(1, 0, 3, 0),
        "src/lib/format.ts": _record(0, 0, 0, 0),
        "/ci/checkout/src/lib/helpers.ts": _record(4, 1),
    }

    result = engine.aggregate_coverage(root / "src/page.tsx", root, raw)

    assert result.component_file == root / "src/page.tsx"
    assert result.component_coverage == 100.0
    assert result.aggregate_coverage == 63.64
    assert result.total_files == 5
    by_path = {info.file_path: info for info in result.files_analyzed}
    assert by_path[root / "src/Card.tsx"].percentage == 50.0
    assert by_path[root / "src/lib/format.ts"].category is FileCategory.UTILITY
    assert by_path[root / "src/lib/helpers.ts"].weight == 0.5
    assert by_path[root / "src/types.ts"].category is FileCategory.TYPE
    assert by_path[root / "src/types.ts"].total == 0
    assert result.uncovered_files == [root / "src/lib/format.ts"]
    assert result.lowest_coverage_file == LowestCoverage(root / "src/Card.tsx", 50.0)


def test_aggregate_without_coverage_data_is_zero(
    engine: AnalysisEngine, repo_builder: RepoBuilder
) -> None:
    _write_component_tree(repo_builder)

    result = engine.aggregate_coverage(repo_builder.file("src/page.tsx"), raw_coverage={})

    assert result.component_coverage == 0.0
    assert result.aggregate_coverage == 0.0
    assert result.uncovered_files == []
    assert result.lowest_coverage_file is None


def test_loader_reads_default_report_and_caches_it(
    engine: AnalysisEngine, repo_builder: RepoBuilder
) -> None:
    _write_component_tree(repo_builder)
    repo_builder.write_json(
        "coverage/coverage-final.json",
        {"src/page.tsx": _record(1, 0)},
    )

    first = engine.load_coverage()

    assert first == {"src/page.tsx": _record(1, 0)}
    assert engine.load_coverage() is first
    assert engine.aggregate_coverage(repo_builder.file("src/page.tsx")).component_coverage == 50.0


def test_loader_returns_none_for_missing_or_malformed_reports(
    engine: AnalysisEngine, repo_builder: RepoBuilder
) -> None:
    assert engine.load_coverage() is None

    repo_builder.write({"coverage/coverage-final.json": "{not json"})

    assert engine.load_coverage() is None
    assert engine.aggregate_coverage(repo_builder.file("src/page.tsx")).aggregate_coverage == 0.0
