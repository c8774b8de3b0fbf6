"""Typed dispatch over tree-sitter syntax nodes."""

from __future__ import annotations

from tree_sitter import Node

from .tree_sitter import ParsedModule

FUNCTION_VALUE_TYPES = frozenset(
    {"arrow_function", "function", "function_expression", "generator_function"}
)

MARKUP_TYPES = frozenset({"jsx_element", "jsx_self_closing_element"})


class SyntaxVisitor:
    """Calls ``visit_<node type>`` for each named node.

    Nodes without a handler are descended into through their named children;
    a handler decides itself whether to call :meth:`generic_visit`. Only child
    links are followed, so traversal always terminates.
    """

    def __init__(self, module: ParsedModule) -> None:
        self.module = module

    def visit(self, node: Node) -> None:
        handler = getattr(self, f"visit_{node.type}", None)
        if handler is None:
            self.generic_visit(node)
        else:
            handler(node)

    def generic_visit(self, node: Node) -> None:
        for child in node.named_children:
            self.visit(child)


def has_token(node: Node, token: str) -> bool:
    """Return True when an anonymous keyword such as ``default`` is a direct child."""
    return any(not child.is_named and child.type == token for child in node.children)


def root_identifier(node: Node) -> Node | None:
    """Return the leftmost identifier of a (possibly nested) member name."""
    current: Node | None = node
    while current is not None:
        if current.type in {"identifier", "jsx_identifier"}:
            return current
        if current.type in {"member_expression", "nested_identifier"}:
            object_node = current.child_by_field_name("object")
            current = object_node if object_node is not None else (
                current.named_children[0] if current.named_children else None
            )
            continue
        return None
    return None


__all__ = [
    "FUNCTION_VALUE_TYPES",
    "MARKUP_TYPES",
    "SyntaxVisitor",
    "has_token",
    "root_identifier",
]
