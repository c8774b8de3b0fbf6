"""In-memory caches shared by one analysis session."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, Optional, Tuple

from ..config import PROJECT_CONFIG_NAMES
from ..logging import get_logger
from ..models import (
    CacheStats,
    DependencyGraph,
    ExportEntry,
    FileCategoryResult,
    LibraryUsageInfo,
)

if TYPE_CHECKING:  # pragma: no cover
    from ..parsing.tree_sitter import ParsedModule
    from ..resolvers.tsconfig import CompilerPaths

_LOGGER = get_logger("cache")


@dataclass
class _ParsedEntry:
    module: "ParsedModule"
    mtime_ns: int


@dataclass
class _ExportsEntry:
    exports: Dict[str, ExportEntry]
    mtime_ns: int


@dataclass
class _GraphEntry:
    graph: DependencyGraph
    mtime_ns: int


@dataclass
class _CategoryEntry:
    result: FileCategoryResult
    mtime_ns: int


@dataclass
class _UsageEntry:
    info: LibraryUsageInfo
    touched: FrozenSet[Path]


@dataclass
class _CoverageEntry:
    mtime_ns: int
    data: Dict[str, Any]


class AnalysisCache:
    """Holds every derived artifact of an analysis session, keyed by file path.

    One instance is owned by each engine, so separate sessions (per project,
    per test) never share state. Entries derived from a single file carry
    that file's ``st_mtime_ns`` and miss once it changes. Entries are never
    persisted.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._parsed: Dict[Path, _ParsedEntry] = {}
        self._exports: Dict[Path, _ExportsEntry] = {}
        self._resolutions: Dict[Tuple[Path, str], Optional[Path]] = {}
        self._config_lookups: Dict[Path, Optional[Path]] = {}
        self._compiler_paths: Dict[Path, Optional["CompilerPaths"]] = {}
        self._graphs: Dict[Path, _GraphEntry] = {}
        self._categories: Dict[Path, _CategoryEntry] = {}
        self._library_usage: Dict[Tuple[Path, str], _UsageEntry] = {}
        self._coverage: Dict[Path, _CoverageEntry] = {}

    # ------------------------------------------------------------------
    # Parsed modules

    def get_parsed(self, path: Path, mtime_ns: int) -> Optional["ParsedModule"]:
        with self._lock:
            cached = self._parsed.get(path)
            if cached is None or cached.mtime_ns != mtime_ns:
                return None
            return cached.module

    def store_parsed(self, path: Path, module: "ParsedModule", mtime_ns: int) -> None:
        with self._lock:
            self._parsed[path] = _ParsedEntry(module=module, mtime_ns=mtime_ns)

    # ------------------------------------------------------------------
    # Export maps

    def get_exports(self, path: Path, mtime_ns: int) -> Optional[Dict[str, ExportEntry]]:
        with self._lock:
            cached = self._exports.get(path)
            if cached is None or cached.mtime_ns != mtime_ns:
                return None
            return cached.exports

    def store_exports(
        self, path: Path, exports: Dict[str, ExportEntry], mtime_ns: int
    ) -> None:
        with self._lock:
            self._exports[path] = _ExportsEntry(exports=exports, mtime_ns=mtime_ns)

    # ------------------------------------------------------------------
    # Module resolutions

    def get_resolution(self, from_file: Path, specifier: str) -> Tuple[bool, Optional[Path]]:
        """Return ``(hit, resolved)``; negative results are cached hits too."""
        with self._lock:
            key = (from_file, specifier)
            if key in self._resolutions:
                return True, self._resolutions[key]
            return False, None

    def store_resolution(
        self, from_file: Path, specifier: str, resolved: Optional[Path]
    ) -> None:
        with self._lock:
            self._resolutions[(from_file, specifier)] = resolved

    # ------------------------------------------------------------------
    # tsconfig/jsconfig discovery

    def get_config_lookup(self, directory: Path) -> Tuple[bool, Optional[Path]]:
        """Return ``(hit, config_file)`` for the nearest project config above ``directory``."""
        with self._lock:
            if directory in self._config_lookups:
                return True, self._config_lookups[directory]
            return False, None

    def store_config_lookup(self, directory: Path, config_file: Optional[Path]) -> None:
        with self._lock:
            self._config_lookups[directory] = config_file

    def get_compiler_paths(
        self, config_file: Path
    ) -> Tuple[bool, Optional["CompilerPaths"]]:
        with self._lock:
            if config_file in self._compiler_paths:
                return True, self._compiler_paths[config_file]
            return False, None

    def store_compiler_paths(
        self, config_file: Path, settings: Optional["CompilerPaths"]
    ) -> None:
        with self._lock:
            self._compiler_paths[config_file] = settings

    # ------------------------------------------------------------------
    # Dependency graphs

    def get_graph(self, entry: Path, mtime_ns: int) -> Optional[DependencyGraph]:
        with self._lock:
            cached = self._graphs.get(entry)
            if cached is None or cached.mtime_ns != mtime_ns:
                return None
            return cached.graph

    def store_graph(self, entry: Path, graph: DependencyGraph, mtime_ns: int) -> None:
        with self._lock:
            self._graphs[entry] = _GraphEntry(graph=graph, mtime_ns=mtime_ns)

    def invalidate_graphs(self, path: Path) -> None:
        """Drop the graph rooted at ``path`` and every graph that contains it."""
        with self._lock:
            self._graphs.pop(path, None)
            stale = [
                entry
                for entry, cached in self._graphs.items()
                if path in cached.graph.all_dependencies
            ]
            for entry in stale:
                del self._graphs[entry]
            if stale:
                _LOGGER.debug("Invalidated %d dependent graphs for %s", len(stale), path)

    def clear_graphs(self) -> None:
        with self._lock:
            self._graphs.clear()

    def graph_stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._graphs),
                entries=[str(entry) for entry in self._graphs],
            )

    # ------------------------------------------------------------------
    # File categories

    def get_category(self, path: Path, mtime_ns: int) -> Optional[FileCategoryResult]:
        with self._lock:
            cached = self._categories.get(path)
            if cached is None or cached.mtime_ns != mtime_ns:
                return None
            return cached.result

    def store_category(self, path: Path, result: FileCategoryResult, mtime_ns: int) -> None:
        with self._lock:
            self._categories[path] = _CategoryEntry(result=result, mtime_ns=mtime_ns)

    # ------------------------------------------------------------------
    # Library usage

    def get_library_usage(self, path: Path, component: str) -> Optional[_UsageEntry]:
        with self._lock:
            return self._library_usage.get((path, component))

    def store_library_usage(
        self,
        path: Path,
        component: str,
        info: LibraryUsageInfo,
        touched: Iterable[Path],
    ) -> None:
        with self._lock:
            self._library_usage[(path, component)] = _UsageEntry(
                info=info, touched=frozenset(touched)
            )

    # ------------------------------------------------------------------
    # Loaded coverage reports

    def get_coverage(self, path: Path, mtime_ns: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            cached = self._coverage.get(path)
            if cached is None or cached.mtime_ns != mtime_ns:
                return None
            return cached.data

    def store_coverage(self, path: Path, data: Dict[str, Any], mtime_ns: int) -> None:
        with self._lock:
            self._coverage[path] = _CoverageEntry(mtime_ns=mtime_ns, data=data)

    # ------------------------------------------------------------------
    # Invalidation

    def invalidate(self, path: Path) -> None:
        """Forget everything derived from ``path``. Safe to call repeatedly."""
        with self._lock:
            self._parsed.pop(path, None)
            self._exports.pop(path, None)
            self._categories.pop(path, None)
            self._coverage.pop(path, None)

            if path.name in PROJECT_CONFIG_NAMES:
                # Alias settings feed every resolution, so nothing downstream survives.
                self._drop_resolution_state()
                _LOGGER.debug("Project config %s changed; dropped resolution state", path)
                return

            # A created or deleted file can change any miss, so misses go too.
            stale_resolutions = [
                key
                for key, resolved in self._resolutions.items()
                if key[0] == path or resolved is None or resolved == path
            ]
            missed_from = set()
            for key in stale_resolutions:
                if self._resolutions.pop(key) is None:
                    missed_from.add(key[0])

            stale_usage = [
                key
                for key, entry in self._library_usage.items()
                if key[0] == path or path in entry.touched
            ]
            for key in stale_usage:
                del self._library_usage[key]

            self.invalidate_graphs(path)
            # Graphs built past a miss may now reach ``path``.
            for from_file in missed_from:
                self.invalidate_graphs(from_file)
            _LOGGER.debug("Invalidated cached entries for %s", path)

    def clear(self) -> None:
        with self._lock:
            self._parsed.clear()
            self._exports.clear()
            self._categories.clear()
            self._coverage.clear()
            self._drop_resolution_state()

    def _drop_resolution_state(self) -> None:
        self._config_lookups.clear()
        self._compiler_paths.clear()
        self._resolutions.clear()
        self._graphs.clear()
        self._library_usage.clear()

    def sizes(self) -> Dict[str, int]:
        """Entry counts per cache, for diagnostics."""
        with self._lock:
            return {
                "parsed": len(self._parsed),
                "exports": len(self._exports),
                "resolutions": len(self._resolutions),
                "config_lookups": len(self._config_lookups),
                "compiler_paths": len(self._compiler_paths),
                "graphs": len(self._graphs),
                "categories": len(self._categories),
                "library_usage": len(self._library_usage),
                "coverage": len(self._coverage),
            }


__all__ = ["AnalysisCache"]
