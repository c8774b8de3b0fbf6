"""Entry point that wires the resolvers and analyzers around one shared cache."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .analyzers.categorizer import FileCategorizer
from .analyzers.component_parser import ComponentParser, LibraryMatcher
from .analyzers.coverage import CoverageAggregator, CoverageLoader
from .analyzers.dependency_graph import DependencyGraphBuilder
from .analyzers.library_usage import LibraryUsageAnalyzer
from .config import UIGraphConfig, load_config
from .logging import get_logger
from .models import (
    AggregatedCoverage,
    CacheStats,
    DependencyGraph,
    ExportBinding,
    FileCategoryResult,
    ImportInfo,
    LibraryUsageInfo,
)
from .parsing.tree_sitter import SourceParser
from .resolvers.base import find_project_root
from .resolvers.exports import ExportResolver
from .resolvers.module import ModuleResolver
from .stores import AnalysisCache


class AnalysisEngine:
    """Cross-file analysis session for one project.

    Every component shares the engine's :class:`AnalysisCache`; two engines
    never share state. When ``config`` is omitted it is loaded from
    ``.uigraph.yml`` under ``project_root`` (defaults when absent).
    """

    def __init__(
        self,
        project_root: Path | str | None = None,
        config: UIGraphConfig | None = None,
    ) -> None:
        self.project_root = Path(project_root).resolve() if project_root is not None else None
        if config is None:
            config = load_config(self.project_root) if self.project_root else UIGraphConfig()
        self.config = config
        self.logger = get_logger("engine")

        self.cache = AnalysisCache()
        self.parser = SourceParser(self.cache)
        self.modules = ModuleResolver(config.resolver, self.cache)
        self.exports = ExportResolver(self.modules, self.parser, self.cache)
        self.graphs = DependencyGraphBuilder(self.modules, self.parser, self.cache)
        self.categorizer = FileCategorizer(self.parser, self.cache)
        self.components = ComponentParser(
            self.parser, LibraryMatcher(config.libraries), config.class_helpers
        )
        self.library_usage = LibraryUsageAnalyzer(
            self.modules, self.exports, self.components, self.cache
        )
        self.coverage = CoverageAggregator(self.graphs, self.categorizer)
        self.coverage_loader = CoverageLoader(self.cache)

    # ------------------------------------------------------------------
    # Resolution

    def resolve(self, specifier: str, from_file: Path | str) -> Optional[Path]:
        return self.modules.resolve(specifier, Path(from_file).resolve())

    def resolve_export(self, name: str, file_path: Path | str) -> Optional[ExportBinding]:
        return self.exports.resolve_export(name, Path(file_path).resolve())

    # ------------------------------------------------------------------
    # Analyses

    def build_dependency_graph(
        self, entry_file: Path | str, project_root: Path | str | None = None
    ) -> DependencyGraph:
        entry = Path(entry_file).resolve()
        return self.graphs.build(entry, self._root_for(entry, project_root))

    def categorize(
        self, file_path: Path | str, project_root: Path | str | None = None
    ) -> FileCategoryResult:
        path = Path(file_path).resolve()
        return self.categorizer.categorize(path, self._root_for(path, project_root))

    def analyze_component(
        self, context_file: Path | str, component_name: str, import_specifier: str
    ) -> LibraryUsageInfo:
        return self.library_usage.analyze(
            Path(context_file).resolve(), component_name, import_specifier
        )

    def analyze_file_imports(self, file_path: Path | str) -> Dict[str, ImportInfo]:
        return self.library_usage.analyze_file_imports(Path(file_path).resolve())

    def aggregate_coverage(
        self,
        entry_file: Path | str,
        project_root: Path | str | None = None,
        raw_coverage: Mapping[str, Any] | None = None,
    ) -> AggregatedCoverage:
        """Weighted coverage of ``entry_file``; loads the project report when none is given."""
        entry = Path(entry_file).resolve()
        root = self._root_for(entry, project_root)
        if raw_coverage is None:
            raw_coverage = self.load_coverage(root) or {}
        return self.coverage.aggregate(entry, root, raw_coverage)

    def load_coverage(
        self, project_root: Path | str | None = None, coverage_path: str | None = None
    ) -> Optional[Dict[str, Any]]:
        root = Path(project_root).resolve() if project_root is not None else self.project_root
        if root is None:
            raise ValueError("project_root is required when the engine has none")
        return self.coverage_loader.load(root, coverage_path or self.config.coverage.path)

    # ------------------------------------------------------------------
    # Cache management

    def invalidate(self, file_path: Path | str) -> None:
        self.cache.invalidate(Path(file_path).resolve())

    def clear(self) -> None:
        self.cache.clear()
        self.logger.debug("Cleared analysis caches")

    def cache_stats(self) -> CacheStats:
        return self.graphs.stats()

    def _root_for(self, path: Path, project_root: Path | str | None) -> Path:
        if project_root is not None:
            return Path(project_root).resolve()
        if self.project_root is not None:
            return self.project_root
        found = find_project_root(path, self.config.resolver.root_markers)
        return found if found is not None else path.parent


__all__ = ["AnalysisEngine"]
