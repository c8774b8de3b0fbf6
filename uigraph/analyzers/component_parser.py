"""Parses a single component body for styling facts and nested component usage."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from tree_sitter import Node

from ..config import DEFAULT_CLASS_HELPERS, DEFAULT_LIBRARY_PATTERNS
from ..models import ComponentStyleInfo, UsedComponent
from ..parsing.tree_sitter import ParsedModule, SourceParser, node_position
from ..parsing.visitor import FUNCTION_VALUE_TYPES, SyntaxVisitor, root_identifier

_CLASS_ATTRIBUTES = {"className", "class"}
_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}
_NAMED_FUNCTIONS = {
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
}


class LibraryMatcher:
    """Matches import specifiers against known UI library signatures."""

    def __init__(self, patterns: Mapping[str, Sequence[str]] | None = None) -> None:
        source = DEFAULT_LIBRARY_PATTERNS if patterns is None else patterns
        self._patterns = [(library, list(values)) for library, values in source.items()]

    @property
    def libraries(self) -> List[str]:
        return [library for library, _ in self._patterns]

    def detect(self, import_source: str) -> Optional[str]:
        for library, patterns in self._patterns:
            if any(pattern in import_source for pattern in patterns):
                return library
        return None


def extract_import_map(module: ParsedModule) -> Dict[str, str]:
    """Map each imported local name (default, named, namespace) to its source."""
    imports: Dict[str, str] = {}
    for statement in module.root.named_children:
        if statement.type != "import_statement":
            continue
        source_node = statement.child_by_field_name("source")
        source = module.string_value(source_node) if source_node is not None else None
        if source is None:
            continue
        for clause in statement.named_children:
            if clause.type != "import_clause":
                continue
            for name in _clause_local_names(module, clause):
                imports[name] = source
    return imports


def _clause_local_names(module: ParsedModule, clause: Node) -> Iterable[str]:
    for child in clause.named_children:
        if child.type == "identifier":
            yield module.text(child)
        elif child.type == "namespace_import":
            identifier = next((n for n in child.named_children if n.type == "identifier"), None)
            if identifier is not None:
                yield module.text(identifier)
        elif child.type == "named_imports":
            for specifier in child.named_children:
                if specifier.type != "import_specifier":
                    continue
                local = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                if local is not None:
                    yield module.text(local)


def tokenize_classes(value: str) -> List[str]:
    return value.split()


def find_component_definition(module: ParsedModule, component_name: str) -> Optional[Node]:
    """Return the node whose subtree renders ``component_name``, or ``None``."""
    for statement in module.root.named_children:
        declaration = statement
        if statement.type == "export_statement":
            declaration = statement.child_by_field_name(
                "declaration"
            ) or statement.child_by_field_name("value")
            if declaration is None:
                continue

        if declaration.type in _NAMED_FUNCTIONS:
            name_node = declaration.child_by_field_name("name")
            if name_node is not None and module.text(name_node) == component_name:
                return declaration.child_by_field_name("body") or declaration
            continue

        if declaration.type not in _VARIABLE_DECLARATIONS:
            continue
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or module.text(name_node) != component_name:
                continue
            value = declarator.child_by_field_name("value")
            if value is None:
                continue
            if value.type in FUNCTION_VALUE_TYPES:
                return value.child_by_field_name("body") or value
            # Wrapped definitions such as forwardRef(...) or memo(...).
            if value.type == "call_expression":
                return value
    return None


class _StyleCollector(SyntaxVisitor):
    def __init__(
        self,
        module: ParsedModule,
        imports: Mapping[str, str],
        matcher: LibraryMatcher,
        class_helpers: Sequence[str],
    ) -> None:
        super().__init__(module)
        self._imports = imports
        self._matcher = matcher
        self._class_helpers = set(class_helpers)
        self.info = ComponentStyleInfo()

    def visit_jsx_opening_element(self, node: Node) -> None:
        self._inspect_tag(node)
        self.generic_visit(node)

    def visit_jsx_self_closing_element(self, node: Node) -> None:
        self._inspect_tag(node)
        self.generic_visit(node)

    def visit_call_expression(self, node: Node) -> None:
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if (
            function is not None
            and arguments is not None
            and function.type == "identifier"
            and self.module.text(function) in self._class_helpers
        ):
            for argument in arguments.named_children:
                self._collect_classes(argument)
        self.generic_visit(node)

    def _inspect_tag(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            if name_node.type == "identifier":
                self._record_component(name_node)
            elif name_node.type in {"member_expression", "nested_identifier"}:
                self._record_member_tag(name_node)

        for attribute in node.named_children:
            if attribute.type == "jsx_attribute":
                self._inspect_attribute(attribute)

    def _record_component(self, name_node: Node) -> None:
        name = self.module.text(name_node)
        if not name[:1].isupper():
            return
        import_source = self._imports.get(name)
        if import_source is None:
            return
        line, column = node_position(name_node)
        self.info.used_components.append(
            UsedComponent(name=name, import_source=import_source, line=line, column=column)
        )
        self._note_library(import_source)

    def _record_member_tag(self, name_node: Node) -> None:
        identifier = root_identifier(name_node)
        if identifier is None:
            return
        import_source = self._imports.get(self.module.text(identifier))
        if import_source is not None:
            self._note_library(import_source)

    def _note_library(self, import_source: str) -> None:
        library = self._matcher.detect(import_source)
        if library is not None and self.info.direct_library is None:
            self.info.direct_library = library

    def _inspect_attribute(self, attribute: Node) -> None:
        children = attribute.named_children
        if not children:
            return
        name = self.module.text(children[0])
        value = children[1] if len(children) > 1 else None
        if value is None:
            return
        if name in _CLASS_ATTRIBUTES:
            if value.type == "jsx_expression":
                for expression in value.named_children:
                    self._collect_classes(expression)
            else:
                self._collect_classes(value)
        elif name == "style" and value.type == "jsx_expression":
            self.info.inline_styles.append("[inline style]")

    def _collect_classes(self, node: Node) -> None:
        if node.type == "string":
            self.info.class_tokens.extend(tokenize_classes(self.module.text(node)[1:-1]))
        elif node.type == "template_string":
            for segment in self.module.template_segments(node):
                self.info.class_tokens.extend(tokenize_classes(segment))


class ComponentParser:
    """Extracts :class:`ComponentStyleInfo` for a named component in a file."""

    def __init__(
        self,
        parser: SourceParser,
        matcher: LibraryMatcher | None = None,
        class_helpers: Sequence[str] | None = None,
    ) -> None:
        self._parser = parser
        self.matcher = matcher or LibraryMatcher()
        self._class_helpers = list(DEFAULT_CLASS_HELPERS if class_helpers is None else class_helpers)

    def import_map(self, path: Path) -> Dict[str, str]:
        module = self._parser.parse(path)
        return extract_import_map(module) if module is not None else {}

    def parse_component_body(self, path: Path, component_name: str) -> Optional[ComponentStyleInfo]:
        module = self._parser.parse(path)
        if module is None:
            return None
        definition = find_component_definition(module, component_name)
        if definition is None:
            return None

        collector = _StyleCollector(
            module, extract_import_map(module), self.matcher, self._class_helpers
        )
        collector.visit(definition)
        info = collector.info
        info.class_tokens = list(dict.fromkeys(info.class_tokens))
        return info


__all__ = [
    "ComponentParser",
    "LibraryMatcher",
    "extract_import_map",
    "find_component_definition",
    "tokenize_classes",
]
