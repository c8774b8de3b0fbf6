"""tsconfig/jsconfig aware module resolution."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..config import PROJECT_CONFIG_NAMES
from ..logging import get_logger
from ..stores import AnalysisCache
from .base import (
    ResolverStrategy,
    is_directory_specifier,
    is_external_location,
    join_specifier,
    probe_extensions,
    probe_index,
)

_LOGGER = get_logger("resolvers.tsconfig")

_MAIN_FIELDS = ("module", "main")


@dataclass
class CompilerPaths:
    """The `baseUrl`/`paths` settings that apply to a source directory."""

    config_file: Path
    base_url: Optional[Path] = None
    path_base: Optional[Path] = None
    paths: List[Tuple[str, List[str]]] = field(default_factory=list)

    def expand(self, specifier: str) -> List[Path]:
        """Return candidate locations for a non-relative specifier, best match first."""
        candidates: List[Path] = []
        base = self.path_base or self.config_file.parent
        for pattern, targets in self._ordered_patterns():
            captured = _match_pattern(pattern, specifier)
            if captured is None:
                continue
            for target in targets:
                candidates.append(base / target.replace("*", captured, 1))
            break
        if self.base_url is not None:
            candidates.append(self.base_url / specifier)
        return candidates

    def _ordered_patterns(self) -> List[Tuple[str, List[str]]]:
        # Exact patterns win, then the longest prefix before the wildcard.
        def _rank(item: Tuple[str, List[str]]) -> Tuple[int, int]:
            pattern = item[0]
            if "*" not in pattern:
                return (0, -len(pattern))
            return (1, -len(pattern.split("*", 1)[0]))

        return sorted(self.paths, key=_rank)


class TsconfigResolver(ResolverStrategy):
    """Resolves relative and `paths`-aliased specifiers the way the TypeScript compiler does."""

    name = "tsconfig"

    def __init__(self, extensions: Sequence[str], cache: AnalysisCache | None = None) -> None:
        self._extensions = list(extensions)
        self._cache = cache if cache is not None else AnalysisCache()

    def resolve(self, specifier: str, from_file: Path) -> Optional[Path]:
        directory_only = is_directory_specifier(specifier)
        if specifier.startswith("."):
            candidates = [join_specifier(from_file.parent, specifier)]
        else:
            settings = self.settings_for(from_file)
            if settings is None:
                return None
            candidates = [Path(os.path.normpath(path)) for path in settings.expand(specifier)]

        for candidate in candidates:
            resolved = self._probe(candidate, directory_only=directory_only)
            if resolved is None:
                continue
            resolved = resolved.resolve()
            if is_external_location(resolved):
                _LOGGER.debug("Rejected %s for %r: external location", resolved, specifier)
                return None
            return resolved
        return None

    def settings_for(self, from_file: Path) -> Optional[CompilerPaths]:
        config_file = self._nearest_config(from_file.parent)
        if config_file is None:
            return None
        settings = self._load_settings(config_file, set())
        if settings is not None and not settings.paths:
            referenced = self._referenced_settings(config_file, from_file)
            if referenced is not None:
                return referenced
        return settings

    # ------------------------------------------------------------------
    # Probing

    def _probe(self, base: Path, *, directory_only: bool = False) -> Optional[Path]:
        if not directory_only:
            if base.is_file():
                return base
            found = probe_extensions(base, self._extensions)
            if found is not None:
                return found
        if base.is_dir():
            manifest_entry = self._probe_package_manifest(base)
            if manifest_entry is not None:
                return manifest_entry
            return probe_index(base, self._extensions)
        return None

    def _probe_package_manifest(self, directory: Path) -> Optional[Path]:
        manifest = _load_json(directory / "package.json")
        if not manifest:
            return None
        for field_name in _MAIN_FIELDS:
            entry = manifest.get(field_name)
            if not isinstance(entry, str) or not entry:
                continue
            target = directory / entry
            if target.is_file():
                return target
            found = probe_extensions(target, self._extensions)
            if found is None and target.is_dir():
                found = probe_index(target, self._extensions)
            if found is not None:
                return found
        return None

    # ------------------------------------------------------------------
    # Config discovery

    def _nearest_config(self, directory: Path) -> Optional[Path]:
        visited: List[Path] = []
        current = directory
        found: Optional[Path] = None
        while True:
            hit, cached = self._cache.get_config_lookup(current)
            if hit:
                found = cached
                break
            visited.append(current)
            found = next(
                (current / name for name in PROJECT_CONFIG_NAMES if (current / name).is_file()),
                None,
            )
            if found is not None or current.parent == current:
                break
            current = current.parent
        for directory_seen in visited:
            self._cache.store_config_lookup(directory_seen, found)
        return found

    def _load_settings(self, config_file: Path, seen: set) -> Optional[CompilerPaths]:
        hit, cached = self._cache.get_compiler_paths(config_file)
        if hit:
            return cached
        if config_file in seen:
            return None
        seen.add(config_file)

        data = _load_json(config_file)
        if data is None:
            self._cache.store_compiler_paths(config_file, None)
            return None

        inherited: Optional[CompilerPaths] = None
        extends = data.get("extends")
        if isinstance(extends, str) and extends.startswith("."):
            parent_file = (config_file.parent / extends).resolve()
            if parent_file.suffix != ".json":
                parent_file = parent_file.with_name(parent_file.name + ".json")
            inherited = self._load_settings(parent_file, seen)

        options = data.get("compilerOptions")
        options = options if isinstance(options, dict) else {}
        settings = CompilerPaths(config_file=config_file)
        if inherited is not None:
            settings.base_url = inherited.base_url
            settings.path_base = inherited.path_base
            settings.paths = list(inherited.paths)

        base_url = options.get("baseUrl")
        if isinstance(base_url, str):
            settings.base_url = (config_file.parent / base_url).resolve()
            settings.path_base = settings.base_url

        raw_paths = options.get("paths")
        if isinstance(raw_paths, dict):
            settings.paths = [
                (str(pattern), [str(target) for target in targets if isinstance(target, str)])
                for pattern, targets in raw_paths.items()
                if isinstance(targets, list)
            ]
            if not isinstance(base_url, str):
                settings.path_base = config_file.parent

        self._cache.store_compiler_paths(config_file, settings)
        return settings

    def _referenced_settings(
        self, config_file: Path, from_file: Path
    ) -> Optional[CompilerPaths]:
        data = _load_json(config_file) or {}
        references = data.get("references")
        if not isinstance(references, list):
            return None
        for reference in references:
            if not isinstance(reference, dict) or not isinstance(reference.get("path"), str):
                continue
            target = (config_file.parent / reference["path"]).resolve()
            if target.is_dir():
                target = target / "tsconfig.json"
            if not _is_within(from_file, target.parent):
                continue
            settings = self._load_settings(target, set())
            if settings is not None and settings.paths:
                return settings
        return None


def _match_pattern(pattern: str, specifier: str) -> Optional[str]:
    if "*" not in pattern:
        return "" if pattern == specifier else None
    prefix, suffix = pattern.split("*", 1)
    if not specifier.startswith(prefix) or not specifier.endswith(suffix):
        return None
    if len(specifier) < len(prefix) + len(suffix):
        return None
    return specifier[len(prefix) : len(specifier) - len(suffix)]


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.resolve().relative_to(directory.resolve())
    except ValueError:
        return False
    return True


def _load_json(path: Path) -> Optional[Dict[str, Any]]:
    """Read a JSON config, tolerating the comments and trailing commas tsconfig allows."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    try:
        data = json.loads(_strip_jsonc(text))
    except json.JSONDecodeError:
        _LOGGER.debug("Malformed JSON in %s", path)
        return None
    return data if isinstance(data, dict) else None


def _strip_jsonc(text: str) -> str:
    out: List[str] = []
    index = 0
    length = len(text)
    in_string = False
    while index < length:
        char = text[index]
        if in_string:
            out.append(char)
            if char == "\\" and index + 1 < length:
                out.append(text[index + 1])
                index += 2
                continue
            if char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            out.append(char)
            index += 1
            continue
        if text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
            continue
        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            index = length if end == -1 else end + 2
            continue
        if char == ",":
            lookahead = index + 1
            while lookahead < length and text[lookahead] in " \t\r\n":
                lookahead += 1
            if lookahead < length and text[lookahead] in "]}":
                index += 1
                continue
        out.append(char)
        index += 1
    return "".join(out)


__all__ = ["CompilerPaths", "TsconfigResolver"]
