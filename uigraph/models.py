"""Core data models shared across uigraph components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Set


class FileCategory(str, Enum):
    """Architectural role of a source file, driving its coverage weight."""

    CORE = "core"
    UTILITY = "utility"
    CONSTANT = "constant"
    TYPE = "type"

    @property
    def weight(self) -> float:
        return CATEGORY_WEIGHTS[self]


CATEGORY_WEIGHTS = {
    FileCategory.CORE: 1.0,
    FileCategory.UTILITY: 0.5,
    FileCategory.CONSTANT: 0.25,
    FileCategory.TYPE: 0.0,
}


@dataclass(frozen=True)
class ExportEntry:
    """One row of a file's export map."""

    local_name: str
    reexport_source: Optional[str] = None


@dataclass(frozen=True)
class ExportBinding:
    """Terminal definition an exported name resolves to."""

    name: str
    file_path: Path
    local_name: str
    is_reexport: bool = False


@dataclass
class DependencyGraph:
    """Transitive in-project dependencies reachable from an entry file."""

    root: Path
    all_dependencies: Set[Path] = field(default_factory=set)


@dataclass(frozen=True)
class FileCategoryResult:
    """Outcome of categorizing a single file."""

    category: FileCategory
    weight: float
    reason: str


@dataclass(frozen=True)
class LibraryEvidence:
    """Which component (possibly a chain of components) pulled in a library."""

    component_name: str
    library: str


@dataclass
class LibraryUsageInfo:
    """UI library usage of a component, direct and transitive."""

    library: Optional[str] = None
    internal_libraries: Set[str] = field(default_factory=set)
    evidence: List[LibraryEvidence] = field(default_factory=list)
    is_local_component: bool = False


@dataclass(frozen=True)
class UsedComponent:
    """A component rendered inside another component's body."""

    name: str
    import_source: str
    line: int
    column: int


@dataclass(frozen=True)
class ImportInfo:
    """Where an imported local name comes from and which UI library that is."""

    import_source: str
    library: Optional[str] = None


@dataclass
class ComponentStyleInfo:
    """Styling facts and nested component usage extracted from a component body."""

    class_tokens: List[str] = field(default_factory=list)
    inline_styles: List[str] = field(default_factory=list)
    used_components: List[UsedComponent] = field(default_factory=list)
    direct_library: Optional[str] = None


@dataclass
class FileCoverageInfo:
    """Statement coverage for a single file with its category weight."""

    file_path: Path
    category: FileCategory
    weight: float
    covered: int
    total: int
    percentage: float


@dataclass(frozen=True)
class LowestCoverage:
    path: Path
    percentage: float


@dataclass
class AggregatedCoverage:
    """Weighted coverage of a component and its dependency closure."""

    component_file: Path
    component_coverage: float
    aggregate_coverage: float
    total_files: int
    files_analyzed: List[FileCoverageInfo] = field(default_factory=list)
    uncovered_files: List[Path] = field(default_factory=list)
    lowest_coverage_file: Optional[LowestCoverage] = None


@dataclass(frozen=True)
class CacheStats:
    """Dependency graph cache statistics for diagnostics."""

    size: int
    entries: List[str]


@dataclass(frozen=True)
class LibraryFinding:
    """A component usage that pulls in a non-preferred UI library."""

    kind: str
    component: str
    libraries: List[str]
    line: int
    column: int
    message: str
