"""Transitive closure of in-project files reachable from an entry file."""

from __future__ import annotations

from pathlib import Path
from typing import List, Set

from tree_sitter import Node

from ..logging import get_logger
from ..models import CacheStats, DependencyGraph
from ..parsing.tree_sitter import ParsedModule, SourceParser
from ..parsing.visitor import SyntaxVisitor
from ..resolvers.base import is_external_location
from ..resolvers.module import ModuleResolver
from ..stores import AnalysisCache

_LOGGER = get_logger("analyzers.dependency_graph")


class _SpecifierCollector(SyntaxVisitor):
    """Collects every module specifier a file depends on, in source order."""

    def __init__(self, module: ParsedModule) -> None:
        super().__init__(module)
        self.specifiers: List[str] = []

    def visit_import_statement(self, node: Node) -> None:
        source = node.child_by_field_name("source")
        if source is not None:
            self._add(source)
        for child in node.named_children:
            if child.type == "import_require_clause":
                source = child.child_by_field_name("source") or next(
                    (item for item in child.named_children if item.type == "string"), None
                )
                self._add(source)

    def visit_export_statement(self, node: Node) -> None:
        source = node.child_by_field_name("source")
        if source is not None:
            self._add(source)
        self.generic_visit(node)

    def visit_call_expression(self, node: Node) -> None:
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if function is not None and arguments is not None and arguments.named_children:
            is_dynamic_import = function.type == "import"
            is_require = function.type == "identifier" and self.module.text(function) == "require"
            if is_dynamic_import or is_require:
                self._add(arguments.named_children[0])
        self.generic_visit(node)

    def _add(self, node: Node | None) -> None:
        if node is None:
            return
        value = self.module.string_value(node)
        if value:
            self.specifiers.append(value)


def extract_specifiers(module: ParsedModule) -> List[str]:
    """Static, side-effect, re-export, dynamic ``import()`` and ``require()`` sources."""
    collector = _SpecifierCollector(module)
    collector.visit(module.root)
    return collector.specifiers


class DependencyGraphBuilder:
    """Builds and caches dependency closures.

    Traversal is depth-first with a visited set kept apart from the result
    set. A file that is already visited is never added again, so the entry
    file can not become its own dependency and the first occurrence of a file
    fixes its place in the closure.
    """

    def __init__(
        self,
        module_resolver: ModuleResolver,
        parser: SourceParser,
        cache: AnalysisCache | None = None,
    ) -> None:
        self._modules = module_resolver
        self._parser = parser
        self._cache = cache if cache is not None else AnalysisCache()

    def build(self, entry_file: Path | str, project_root: Path | str) -> DependencyGraph:
        entry = Path(entry_file).resolve()
        root = Path(project_root).resolve()

        mtime_ns = _mtime_ns(entry)
        if mtime_ns is not None:
            cached = self._cache.get_graph(entry, mtime_ns)
            if cached is not None:
                _LOGGER.debug("Dependency graph cache hit for %s", entry)
                return cached

        dependencies: Set[Path] = set()
        visited: Set[Path] = set()
        self._collect(entry, root, dependencies, visited)
        graph = DependencyGraph(root=entry, all_dependencies=dependencies)

        # A missing entry file has no mtime to validate against.
        if mtime_ns is not None:
            self._cache.store_graph(entry, graph, mtime_ns)
        _LOGGER.debug("Built dependency graph for %s: %d files", entry, len(dependencies))
        return graph

    def invalidate(self, path: Path | str) -> None:
        self._cache.invalidate_graphs(Path(path).resolve())

    def clear(self) -> None:
        self._cache.clear_graphs()

    def stats(self) -> CacheStats:
        return self._cache.graph_stats()

    def _collect(
        self,
        path: Path,
        project_root: Path,
        dependencies: Set[Path],
        visited: Set[Path],
    ) -> None:
        if path in visited:
            return
        visited.add(path)

        module = self._parser.parse(path)
        if module is None:
            return

        for specifier in extract_specifiers(module):
            resolved = self._modules.resolve(specifier, path)
            if resolved is None:
                continue
            if is_external_location(resolved):
                continue
            if not _is_within(resolved, project_root):
                continue
            if resolved in visited:
                continue
            dependencies.add(resolved)
            self._collect(resolved, project_root, dependencies, visited)


def _mtime_ns(path: Path) -> int | None:
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return None


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


__all__ = ["DependencyGraphBuilder", "extract_specifiers"]
