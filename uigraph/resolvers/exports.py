"""Follows re-export chains to the file that defines an exported name."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Set, Tuple

from tree_sitter import Node

from ..logging import get_logger
from ..models import ExportBinding, ExportEntry
from ..parsing.tree_sitter import ParsedModule, SourceParser
from ..parsing.visitor import FUNCTION_VALUE_TYPES, has_token
from ..stores import AnalysisCache
from .module import ModuleResolver

_LOGGER = get_logger("resolvers.exports")

_NAMED_DECLARATIONS = {
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
    "class_declaration",
    "abstract_class_declaration",
    "enum_declaration",
    "interface_declaration",
    "type_alias_declaration",
}
_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}

VisitedKey = Tuple[Path, str]


def extract_export_map(module: ParsedModule) -> Dict[str, ExportEntry]:
    """Build ``exported name -> ExportEntry`` for the top-level exports of a module."""
    exports: Dict[str, ExportEntry] = {}
    for statement in module.root.named_children:
        if statement.type != "export_statement":
            continue
        if has_token(statement, "default"):
            exports["default"] = ExportEntry(local_name=_default_local_name(module, statement))
            continue

        declaration = statement.child_by_field_name("declaration")
        if declaration is not None:
            for name in declared_names(module, declaration):
                exports[name] = ExportEntry(local_name=name)
            continue

        source_node = statement.child_by_field_name("source")
        source = module.string_value(source_node) if source_node is not None else None
        for clause in statement.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                if specifier.type != "export_specifier":
                    continue
                name_node = specifier.child_by_field_name("name")
                if name_node is None:
                    continue
                alias_node = specifier.child_by_field_name("alias")
                local_name = _export_name(module, name_node)
                exported = _export_name(module, alias_node) if alias_node is not None else local_name
                exports[exported] = ExportEntry(local_name=local_name, reexport_source=source)
    return exports


def declared_names(module: ParsedModule, declaration: Node) -> list[str]:
    """Names introduced by an exported declaration (identifier declarators only)."""
    if declaration.type in _NAMED_DECLARATIONS:
        name_node = declaration.child_by_field_name("name")
        return [module.text(name_node)] if name_node is not None else []
    if declaration.type in _VARIABLE_DECLARATIONS:
        names = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier":
                names.append(module.text(name_node))
        return names
    if declaration.type == "ambient_declaration":
        names = []
        for inner in declaration.named_children:
            names.extend(declared_names(module, inner))
        return names
    return []


def _default_local_name(module: ParsedModule, statement: Node) -> str:
    target = statement.child_by_field_name("declaration") or statement.child_by_field_name("value")
    if target is None:
        return "default"
    if target.type == "identifier":
        return module.text(target)
    if target.type in _NAMED_DECLARATIONS or target.type in FUNCTION_VALUE_TYPES:
        name_node = target.child_by_field_name("name")
        if name_node is not None:
            return module.text(name_node)
    return "default"


def _export_name(module: ParsedModule, node: Node) -> str:
    value = module.string_value(node)
    return value if value is not None else module.text(node)


class ExportResolver:
    """Resolves exported names to their defining file, following re-exports."""

    def __init__(
        self,
        module_resolver: ModuleResolver,
        parser: SourceParser,
        cache: AnalysisCache | None = None,
    ) -> None:
        self._modules = module_resolver
        self._parser = parser
        self._cache = cache if cache is not None else AnalysisCache()

    def export_map(self, path: Path) -> Dict[str, ExportEntry]:
        try:
            mtime_ns = path.stat().st_mtime_ns
        except OSError:
            return {}
        cached = self._cache.get_exports(path, mtime_ns)
        if cached is not None:
            return cached
        module = self._parser.parse(path)
        exports = extract_export_map(module) if module is not None else {}
        self._cache.store_exports(path, exports, mtime_ns)
        return exports

    def resolve_export(
        self,
        name: str,
        path: Path | str,
        visited: Optional[Set[VisitedKey]] = None,
    ) -> Optional[ExportBinding]:
        """Return the terminal binding of ``name`` exported from ``path``.

        ``visited`` holds the ``(file, name)`` pairs already on the chain; a
        repeated pair means a re-export cycle and yields ``None``.
        """
        path = Path(path)
        if visited is None:
            visited = set()
        key = (path, name)
        if key in visited:
            _LOGGER.debug("Re-export cycle at %s::%s", path, name)
            return None
        visited.add(key)

        entry = self.export_map(path).get(name)
        if entry is None:
            return None

        if entry.reexport_source is not None:
            target = self._modules.resolve(entry.reexport_source, path)
            if target is None:
                return None
            return self.resolve_export(entry.local_name, target, visited)

        return ExportBinding(
            name=name,
            file_path=path,
            local_name=entry.local_name,
            is_reexport=False,
        )


__all__ = ["ExportResolver", "declared_names", "extract_export_map"]
