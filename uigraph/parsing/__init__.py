"""Source parsing primitives."""

from .tree_sitter import ParsedModule, SourceParser
from .visitor import SyntaxVisitor

__all__ = ["ParsedModule", "SourceParser", "SyntaxVisitor"]
