"""Cross-file analyzers built on the resolvers and the shared analysis cache."""

from __future__ import annotations

from .categorizer import FileCategorizer
from .component_parser import ComponentParser, LibraryMatcher
from .coverage import CoverageAggregator, CoverageLoader
from .dependency_graph import DependencyGraphBuilder
from .library_usage import LibraryUsageAnalyzer

__all__ = [
    "ComponentParser",
    "CoverageAggregator",
    "CoverageLoader",
    "DependencyGraphBuilder",
    "FileCategorizer",
    "LibraryMatcher",
    "LibraryUsageAnalyzer",
]
