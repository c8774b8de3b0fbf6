"""Mixed component library check built on the library usage analyzer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Mapping

from tree_sitter import Node

from .analyzers.component_parser import extract_import_map
from .logging import get_logger
from .models import LibraryFinding
from .parsing.tree_sitter import ParsedModule, node_position
from .parsing.visitor import SyntaxVisitor, root_identifier

if TYPE_CHECKING:  # pragma: no cover
    from .engine import AnalysisEngine

_LOGGER = get_logger("checks")

DEFAULT_PREFERRED_LIBRARY = "shadcn"
MAX_EVIDENCE = 3


@dataclass(frozen=True)
class ComponentUsage:
    """An imported component rendered in the checked file."""

    component: str
    import_source: str
    line: int
    column: int


class _UsageCollector(SyntaxVisitor):
    def __init__(self, module: ParsedModule, imports: Mapping[str, str]) -> None:
        super().__init__(module)
        self._imports = imports
        self.usages: List[ComponentUsage] = []

    def visit_jsx_opening_element(self, node: Node) -> None:
        self._record(node)
        self.generic_visit(node)

    def visit_jsx_self_closing_element(self, node: Node) -> None:
        self._record(node)
        self.generic_visit(node)

    def _record(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        if name_node.type in {"member_expression", "nested_identifier"}:
            name_node = root_identifier(name_node)
            if name_node is None:
                return
        elif name_node.type != "identifier":
            return

        name = self.module.text(name_node)
        if not name[:1].isupper():
            return
        import_source = self._imports.get(name)
        if import_source is None:
            return
        line, column = node_position(node)
        self.usages.append(ComponentUsage(name, import_source, line, column))


def collect_component_usages(module: ParsedModule) -> List[ComponentUsage]:
    """Return imported, capitalized markup tags in source order."""
    collector = _UsageCollector(module, extract_import_map(module))
    collector.visit(module.root)
    return collector.usages


class MixedLibraryCheck:
    """Reports components that come from, or wrap, a non-preferred UI library."""

    def __init__(
        self, engine: "AnalysisEngine", preferred: str = DEFAULT_PREFERRED_LIBRARY
    ) -> None:
        self.engine = engine
        self.preferred = preferred

    def check_file(self, file_path: Path | str) -> List[LibraryFinding]:
        path = Path(file_path).resolve()
        module = self.engine.parser.parse(path)
        if module is None:
            _LOGGER.debug("Skipping unparsable file %s", path)
            return []

        findings: List[LibraryFinding] = []
        for usage in collect_component_usages(module):
            info = self.engine.analyze_component(path, usage.component, usage.import_source)

            if info.library is not None and info.library != self.preferred:
                findings.append(
                    LibraryFinding(
                        kind="non-preferred",
                        component=usage.component,
                        libraries=[info.library],
                        line=usage.line,
                        column=usage.column,
                        message=(
                            f"Component <{usage.component}> is from {info.library}, "
                            f"but {self.preferred} is the preferred library."
                        ),
                    )
                )
                continue

            if not info.is_local_component:
                continue
            offending = sorted(lib for lib in info.internal_libraries if lib != self.preferred)
            if not offending:
                continue
            evidence = [
                item.component_name for item in info.evidence if item.library != self.preferred
            ][:MAX_EVIDENCE]
            findings.append(
                LibraryFinding(
                    kind="transitive",
                    component=usage.component,
                    libraries=offending,
                    line=usage.line,
                    column=usage.column,
                    message=(
                        f"Component <{usage.component}> internally uses {', '.join(offending)} "
                        f"components ({', '.join(evidence) or 'unknown'}). "
                        f"The preferred library is {self.preferred}."
                    ),
                )
            )
        return findings


__all__ = ["ComponentUsage", "MixedLibraryCheck", "collect_component_usages"]
