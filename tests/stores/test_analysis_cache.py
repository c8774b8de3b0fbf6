"""Tests for the analysis cache store."""

from __future__ import annotations

from pathlib import Path

from uigraph.models import (
    DependencyGraph,
    FileCategory,
    FileCategoryResult,
    LibraryUsageInfo,
)
from uigraph.stores import AnalysisCache


def test_resolution_cache_distinguishes_negative_hits() -> None:
    cache = AnalysisCache()
    source = Path("/app/src/page.tsx")

    assert cache.get_resolution(source, "./missing") == (False, None)

    cache.store_resolution(source, "./missing", None)

    assert cache.get_resolution(source, "./missing") == (True, None)


def test_graph_cache_is_validated_by_mtime() -> None:
    cache = AnalysisCache()
    entry = Path("/app/src/page.tsx")
    graph = DependencyGraph(root=entry, all_dependencies={Path("/app/src/a.ts")})

    cache.store_graph(entry, graph, mtime_ns=10)

    assert cache.get_graph(entry, 10) is graph
    assert cache.get_graph(entry, 11) is None


def test_invalidate_graphs_cascades_to_dependents() -> None:
    cache = AnalysisCache()
    page = Path("/app/page.tsx")
    card = Path("/app/card.tsx")
    other = Path("/app/other.tsx")
    cache.store_graph(page, DependencyGraph(root=page, all_dependencies={card}), 1)
    cache.store_graph(card, DependencyGraph(root=card), 1)
    cache.store_graph(other, DependencyGraph(root=other), 1)

    cache.invalidate_graphs(card)

    stats = cache.graph_stats()
    assert stats.size == 1
    assert stats.entries == [str(other)]


def test_invalidate_drops_entries_touching_the_file() -> None:
    cache = AnalysisCache()
    page = Path("/app/page.tsx")
    card = Path("/app/card.tsx")
    button = Path("/app/button.tsx")
    result = FileCategoryResult(FileCategory.CORE, 1.0, "Component file (contains UI markup)")

    cache.store_category(card, result, mtime_ns=1)
    cache.store_resolution(page, "./card", card)
    cache.store_resolution(page, "./button", button)
    cache.store_resolution(page, "./gone", None)
    cache.store_library_usage(page, "Page", LibraryUsageInfo(), touched=[page, card])
    cache.store_library_usage(button, "Button", LibraryUsageInfo(), touched=[button])

    cache.invalidate(card)

    assert cache.get_category(card, 1) is None
    assert cache.get_resolution(page, "./card") == (False, None)
    assert cache.get_resolution(page, "./gone") == (False, None)
    assert cache.get_resolution(page, "./button") == (True, button)
    assert cache.get_library_usage(page, "Page") is None
    assert cache.get_library_usage(button, "Button") is not None

    # Repeated invalidation is harmless.
    cache.invalidate(card)


def test_clear_empties_every_cache() -> None:
    cache = AnalysisCache()
    path = Path("/app/page.tsx")
    cache.store_resolution(path, "./x", None)
    cache.store_graph(path, DependencyGraph(root=path), 1)
    cache.store_coverage(path, {"a": {}}, 1)

    cache.clear()

    assert set(cache.sizes().values()) == {0}


def test_parse_and_export_entries_follow_mtime() -> None:
    cache = AnalysisCache()
    path = Path("/app/src/values.ts")
    cache.store_exports(path, {}, mtime_ns=1)

    assert cache.get_exports(path, 1) == {}
    assert cache.get_exports(path, 2) is None
    assert cache.get_parsed(path, 1) is None


def test_project_config_change_drops_resolution_state() -> None:
    cache = AnalysisCache()
    page = Path("/app/src/page.tsx")
    card = Path("/app/src/card.tsx")
    tsconfig = Path("/app/tsconfig.json")
    cache.store_config_lookup(page.parent, tsconfig)
    cache.store_compiler_paths(tsconfig, None)
    cache.store_resolution(page, "@/card", card)
    cache.store_graph(page, DependencyGraph(root=page), 1)
    cache.store_category(card, FileCategoryResult(FileCategory.CORE, 1.0, "core"), 1)

    cache.invalidate(tsconfig)

    assert cache.get_config_lookup(page.parent) == (False, None)
    assert cache.get_compiler_paths(tsconfig) == (False, None)
    assert cache.get_resolution(page, "@/card") == (False, None)
    assert cache.get_graph(page, 1) is None
    assert cache.get_category(card, 1) is not None
