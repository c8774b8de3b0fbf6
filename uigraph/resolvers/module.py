"""Maps import specifiers to files on disk."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from ..config import ResolverConfig
from ..logging import get_logger
from ..stores import AnalysisCache
from .base import (
    ResolverStrategy,
    find_project_root,
    is_directory_specifier,
    join_specifier,
    probe_module,
)
from .tsconfig import TsconfigResolver

_LOGGER = get_logger("resolvers.module")


class AliasRootResolver(ResolverStrategy):
    """Resolves ``@/x``-style aliases against the nearest project root."""

    name = "alias-root"

    def __init__(
        self,
        alias_prefixes: Sequence[str],
        root_markers: Sequence[str],
        extensions: Sequence[str],
    ) -> None:
        self._alias_prefixes = list(alias_prefixes)
        self._root_markers = list(root_markers)
        self._extensions = list(extensions)

    def resolve(self, specifier: str, from_file: Path) -> Optional[Path]:
        prefix = next((p for p in self._alias_prefixes if specifier.startswith(p)), None)
        if prefix is None:
            return None
        project_root = find_project_root(from_file, self._root_markers)
        if project_root is None:
            return None
        remainder = specifier[len(prefix) :]
        found = probe_module(
            join_specifier(project_root, remainder),
            self._extensions,
            directory_only=is_directory_specifier(remainder),
        )
        return found.resolve() if found is not None else None


class RelativeResolver(ResolverStrategy):
    """Probes extensions and index files next to the importing file."""

    name = "relative"

    def __init__(self, extensions: Sequence[str]) -> None:
        self._extensions = list(extensions)

    def resolve(self, specifier: str, from_file: Path) -> Optional[Path]:
        if not specifier.startswith("."):
            return None
        found = probe_module(
            join_specifier(from_file.parent, specifier),
            self._extensions,
            directory_only=is_directory_specifier(specifier),
        )
        return found.resolve() if found is not None else None


class ModuleResolver:
    """Resolves ``(specifier, from_file)`` pairs through an ordered strategy chain.

    Bare package specifiers short-circuit to ``None`` before any filesystem
    access. Otherwise the structured tsconfig resolver runs first, then the
    alias-root and relative probes; the first hit wins. Every outcome,
    including a miss, is cached per pair. :meth:`resolve` never raises.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        cache: AnalysisCache | None = None,
        strategies: Sequence[ResolverStrategy] | None = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self._cache = cache if cache is not None else AnalysisCache()
        if strategies is None:
            strategies = default_strategies(self.config, self._cache)
        self._strategies: List[ResolverStrategy] = list(strategies)

    def resolve(self, specifier: str, from_file: Path | str) -> Optional[Path]:
        from_file = Path(from_file)
        hit, cached = self._cache.get_resolution(from_file, specifier)
        if hit:
            return cached

        resolved: Optional[Path] = None
        if self.is_external(specifier):
            _LOGGER.debug("Treating %r as external", specifier)
        else:
            resolved = self._run_strategies(specifier, from_file)
            if resolved is None:
                _LOGGER.debug("Could not resolve %r from %s", specifier, from_file)

        self._cache.store_resolution(from_file, specifier, resolved)
        return resolved

    def is_external(self, specifier: str) -> bool:
        """Return True for specifiers that name packages rather than project files."""
        if any(specifier.startswith(prefix) for prefix in self.config.reserved_prefixes):
            return True
        if specifier.startswith("."):
            return False
        return not any(specifier.startswith(prefix) for prefix in self.config.alias_prefixes)

    def _run_strategies(self, specifier: str, from_file: Path) -> Optional[Path]:
        for strategy in self._strategies:
            try:
                resolved = strategy.resolve(specifier, from_file)
            except (OSError, ValueError) as exc:
                _LOGGER.debug(
                    "%s resolver failed for %r from %s: %s",
                    strategy.name,
                    specifier,
                    from_file,
                    exc,
                )
                continue
            if resolved is not None:
                return resolved
        return None


def default_strategies(
    config: ResolverConfig, cache: AnalysisCache | None = None
) -> List[ResolverStrategy]:
    """Structured resolver first, then alias-root and relative probing."""
    return [
        TsconfigResolver(config.extensions, cache),
        AliasRootResolver(config.alias_prefixes, config.root_markers, config.extensions),
        RelativeResolver(config.extensions),
    ]


__all__ = [
    "AliasRootResolver",
    "ModuleResolver",
    "RelativeResolver",
    "default_strategies",
]
