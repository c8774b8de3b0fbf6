"""Determines which UI libraries a component uses, directly or through local components."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Set, Tuple

from ..logging import get_logger
from ..models import ImportInfo, LibraryEvidence, LibraryUsageInfo
from ..resolvers.exports import ExportResolver
from ..resolvers.module import ModuleResolver
from ..stores import AnalysisCache
from .component_parser import ComponentParser, LibraryMatcher

_LOGGER = get_logger("analyzers.library_usage")

EVIDENCE_SEPARATOR = " → "

UsageKey = Tuple[Path, str]


class LibraryUsageAnalyzer:
    """Follows local components through their bodies to the libraries they render.

    Results are cached per ``(resolved file, component name)`` together with
    the set of files the analysis read, so that invalidating any of those
    files drops the cached answer. Import cycles are cut by a visited set
    that starts with the top-level key.
    """

    def __init__(
        self,
        module_resolver: ModuleResolver,
        export_resolver: ExportResolver,
        component_parser: ComponentParser,
        cache: AnalysisCache | None = None,
    ) -> None:
        self._modules = module_resolver
        self._exports = export_resolver
        self._components = component_parser
        self._cache = cache if cache is not None else AnalysisCache()

    @property
    def matcher(self) -> LibraryMatcher:
        return self._components.matcher

    def analyze(
        self, context_file: Path | str, component_name: str, import_specifier: str
    ) -> LibraryUsageInfo:
        """Return library usage for ``component_name`` imported via ``import_specifier``."""
        library = self.matcher.detect(import_specifier)
        if library is not None:
            return LibraryUsageInfo(library=library)

        resolved = self._modules.resolve(import_specifier, Path(context_file))
        if resolved is None:
            return LibraryUsageInfo()

        cached = self._cache.get_library_usage(resolved, component_name)
        if cached is not None:
            return cached.info

        info, touched = self._analyze_local(resolved, component_name, {(resolved, component_name)})
        self._cache.store_library_usage(resolved, component_name, info, touched)
        return info

    def analyze_file_imports(self, file_path: Path | str) -> Dict[str, ImportInfo]:
        """Map every imported local name in a file to its source and library."""
        imports = self._components.import_map(Path(file_path))
        return {
            name: ImportInfo(import_source=source, library=self.matcher.detect(source))
            for name, source in imports.items()
        }

    def _analyze_local(
        self, path: Path, component_name: str, visited: Set[UsageKey]
    ) -> Tuple[LibraryUsageInfo, Set[Path]]:
        chain: Set[Tuple[Path, str]] = set()
        binding = self._exports.resolve_export(component_name, path, chain)
        actual_file = binding.file_path if binding is not None else path
        actual_name = binding.local_name if binding is not None else component_name
        touched = {path, actual_file} | {file for file, _ in chain}

        style = self._components.parse_component_body(actual_file, actual_name)
        if style is None:
            _LOGGER.debug("No definition of %s found in %s", actual_name, actual_file)
            return LibraryUsageInfo(is_local_component=True), touched

        internal: Set[str] = set()
        evidence = []
        if style.direct_library is not None:
            internal.add(style.direct_library)

        for used in style.used_components:
            library = self.matcher.detect(used.import_source)
            if library is not None:
                internal.add(library)
                evidence.append(LibraryEvidence(component_name=used.name, library=library))
                continue

            nested_path = self._modules.resolve(used.import_source, actual_file)
            if nested_path is None:
                continue
            key = (nested_path, used.name)
            if key in visited:
                continue
            visited.add(key)

            cached = self._cache.get_library_usage(nested_path, used.name)
            if cached is not None:
                nested, nested_touched = cached.info, set(cached.touched)
            else:
                nested, nested_touched = self._analyze_local(nested_path, used.name, visited)
                self._cache.store_library_usage(nested_path, used.name, nested, nested_touched)
            touched |= nested_touched

            if nested.library is not None:
                internal.add(nested.library)
                evidence.append(LibraryEvidence(component_name=used.name, library=nested.library))
            internal |= nested.internal_libraries
            for item in nested.evidence:
                evidence.append(
                    LibraryEvidence(
                        component_name=f"{used.name}{EVIDENCE_SEPARATOR}{item.component_name}",
                        library=item.library,
                    )
                )

        info = LibraryUsageInfo(
            library=style.direct_library,
            internal_libraries=internal,
            evidence=evidence,
            is_local_component=True,
        )
        return info, touched


__all__ = ["EVIDENCE_SEPARATOR", "LibraryUsageAnalyzer"]
