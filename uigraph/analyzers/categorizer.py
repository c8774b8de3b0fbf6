"""Classifies source files by architectural role for coverage weighting.

Categories and weights:

- core (1.0): hooks, components, services, stores, API clients
- utility (0.5): formatters, validators, helpers
- constant (0.25): configuration, constants, enums
- type (0): declaration files and type-only modules
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node

from ..logging import get_logger
from ..models import FileCategory, FileCategoryResult
from ..parsing.tree_sitter import ParsedModule, SourceParser
from ..parsing.visitor import FUNCTION_VALUE_TYPES, MARKUP_TYPES, SyntaxVisitor, has_token
from ..stores import AnalysisCache

_LOGGER = get_logger("analyzers.categorizer")

_DECLARATION_SUFFIXES = (".d.ts", ".d.mts", ".d.cts")
_HOOK_RE = re.compile(r"^use[A-Z]")
_ROLE_SUFFIX_RULES = (
    (re.compile(r"\.service\.\w+$"), "Service file (*.service.* pattern)"),
    (re.compile(r"\.store\.\w+$"), "Store file (*.store.* pattern)"),
    (re.compile(r"\.api\.\w+$"), "API file (*.api.* pattern)"),
)

_TYPE_DECLARATIONS = {"interface_declaration", "type_alias_declaration", "ambient_declaration"}
_FUNCTION_DECLARATIONS = {
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
    "class_declaration",
    "abstract_class_declaration",
}
_CALLABLE_VALUE_TYPES = FUNCTION_VALUE_TYPES | {"class"}
_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}


@dataclass
class ExportShape:
    """What kinds of exports and constructs a module contains."""

    has_markup: bool = False
    has_function_exports: bool = False
    has_constant_exports: bool = False
    has_type_exports: bool = False

    @property
    def only_types(self) -> bool:
        return (
            self.has_type_exports
            and not self.has_function_exports
            and not self.has_constant_exports
        )

    @property
    def only_constants(self) -> bool:
        return (
            self.has_constant_exports
            and not self.has_function_exports
            and not self.has_type_exports
        )


class _ExportShapeVisitor(SyntaxVisitor):
    def __init__(self, module: ParsedModule) -> None:
        super().__init__(module)
        self.shape = ExportShape()

    def visit_jsx_element(self, node: Node) -> None:
        self.shape.has_markup = True
        self.generic_visit(node)

    def visit_jsx_self_closing_element(self, node: Node) -> None:
        self.shape.has_markup = True
        self.generic_visit(node)

    def visit_export_statement(self, node: Node) -> None:
        self._classify_export(node)
        self.generic_visit(node)

    def _classify_export(self, node: Node) -> None:
        shape = self.shape
        if has_token(node, "default"):
            target = node.child_by_field_name("declaration") or node.child_by_field_name("value")
            if target is not None and (
                target.type in _FUNCTION_DECLARATIONS or target.type in _CALLABLE_VALUE_TYPES
            ):
                shape.has_function_exports = True
            else:
                shape.has_constant_exports = True
            return

        if has_token(node, "type"):
            shape.has_type_exports = True
            return

        declaration = node.child_by_field_name("declaration")
        if declaration is None:
            # Re-export lists can not be classified without resolving them.
            if any(child.type == "export_clause" for child in node.named_children):
                shape.has_function_exports = True
            return

        if declaration.type in _TYPE_DECLARATIONS:
            shape.has_type_exports = True
        elif declaration.type in _FUNCTION_DECLARATIONS:
            shape.has_function_exports = True
        elif declaration.type == "enum_declaration":
            shape.has_constant_exports = True
        elif declaration.type in _VARIABLE_DECLARATIONS:
            values = [
                declarator.child_by_field_name("value")
                for declarator in declaration.named_children
                if declarator.type == "variable_declarator"
            ]
            if any(value is not None and value.type in _CALLABLE_VALUE_TYPES for value in values):
                shape.has_function_exports = True
            elif any(value is not None for value in values):
                shape.has_constant_exports = True


def analyze_export_shape(module: ParsedModule) -> ExportShape:
    visitor = _ExportShapeVisitor(module)
    visitor.visit(module.root)
    return visitor.shape


def _result(category: FileCategory, reason: str) -> FileCategoryResult:
    return FileCategoryResult(category=category, weight=category.weight, reason=reason)


class FileCategorizer:
    """Assigns each file one :class:`FileCategory`, first matching rule wins."""

    def __init__(self, parser: SourceParser, cache: AnalysisCache | None = None) -> None:
        self._parser = parser
        self._cache = cache if cache is not None else AnalysisCache()

    def categorize(self, file_path: Path | str, project_root: Path | str | None = None) -> FileCategoryResult:
        path = Path(file_path)
        name = path.name

        if name.endswith(_DECLARATION_SUFFIXES):
            return _result(FileCategory.TYPE, "TypeScript declaration file (.d.ts)")

        if _HOOK_RE.match(name):
            return _result(FileCategory.CORE, "React hook (use* pattern)")

        for pattern, reason in _ROLE_SUFFIX_RULES:
            if pattern.search(name):
                return _result(FileCategory.CORE, reason)

        try:
            mtime_ns = path.stat().st_mtime_ns
        except OSError:
            return _result(FileCategory.UTILITY, "File not found, defaulting to utility")

        cached = self._cache.get_category(path, mtime_ns)
        if cached is not None:
            return cached

        result = self._categorize_by_exports(path)
        self._cache.store_category(path, result, mtime_ns)
        return result

    def _categorize_by_exports(self, path: Path) -> FileCategoryResult:
        module = self._parser.parse(path)
        if module is None:
            _LOGGER.debug("Could not parse %s; categorizing as utility", path)
            return _result(FileCategory.UTILITY, "Failed to parse file, defaulting to utility")

        shape = analyze_export_shape(module)
        if shape.has_markup:
            return _result(FileCategory.CORE, "Component file (contains UI markup)")
        if shape.only_types:
            return _result(FileCategory.TYPE, "File contains only type/interface exports")
        if shape.only_constants:
            return _result(FileCategory.CONSTANT, "File contains only constant/enum exports")
        return _result(FileCategory.UTILITY, "General utility file with function exports")


__all__ = ["ExportShape", "FileCategorizer", "analyze_export_shape"]
