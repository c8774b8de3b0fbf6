"""Tree-sitter powered parsing of TypeScript and JavaScript modules."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

from ..logging import get_logger
from ..stores import AnalysisCache

_LOGGER = get_logger("parser")

TSX = "tsx"
TYPESCRIPT = "typescript"

# .ts sources use the plain grammar so `<T>value` casts are not read as markup.
_GRAMMAR_BY_SUFFIX = {
    ".tsx": TSX,
    ".jsx": TSX,
    ".js": TSX,
    ".mjs": TSX,
    ".cjs": TSX,
    ".ts": TYPESCRIPT,
    ".mts": TYPESCRIPT,
    ".cts": TYPESCRIPT,
}

_LANGUAGE_FACTORIES = {
    TSX: tstypescript.language_tsx,
    TYPESCRIPT: tstypescript.language_typescript,
}


@dataclass
class ParsedModule:
    """A successfully parsed source file."""

    path: Path
    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def string_value(self, node: Node) -> Optional[str]:
        """Return the contents of a string literal or a substitution-free template."""
        if node.type == "string":
            return self.text(node)[1:-1]
        if node.type == "template_string":
            if any(child.type == "template_substitution" for child in node.named_children):
                return None
            return self.text(node)[1:-1]
        return None

    def template_segments(self, node: Node) -> List[str]:
        """Split a template literal into its static text segments."""
        segments: List[str] = []
        cursor = node.start_byte + 1
        for child in node.named_children:
            if child.type != "template_substitution":
                continue
            segments.append(self._slice(cursor, child.start_byte))
            cursor = child.end_byte
        segments.append(self._slice(cursor, node.end_byte - 1))
        return [segment for segment in segments if segment]

    def _slice(self, start: int, end: int) -> str:
        if end <= start:
            return ""
        return self.source[start:end].decode("utf-8", errors="ignore")


def grammar_for_path(path: Path) -> Optional[str]:
    return _GRAMMAR_BY_SUFFIX.get(path.suffix.lower())


def node_position(node: Node) -> Tuple[int, int]:
    """Return a 1-based line and 0-based column for ``node``."""
    row, column = node.start_point
    return row + 1, column


class SourceParser:
    """Parses source files into syntax trees, caching successes per path."""

    def __init__(self, cache: AnalysisCache | None = None) -> None:
        self._cache = cache if cache is not None else AnalysisCache()
        self._parsers: Dict[str, Parser] = {}

    def parse(self, path: Path) -> Optional[ParsedModule]:
        """Parse ``path``; missing, unsupported or malformed files yield ``None``."""
        grammar = grammar_for_path(path)
        if grammar is None:
            _LOGGER.debug("No grammar for %s", path)
            return None
        try:
            mtime_ns = path.stat().st_mtime_ns
        except OSError:
            _LOGGER.debug("Cannot stat %s", path)
            return None

        cached = self._cache.get_parsed(path, mtime_ns)
        if cached is not None:
            return cached
        try:
            source = path.read_bytes()
        except OSError:
            _LOGGER.debug("Cannot read %s", path)
            return None

        module = self.parse_source(source, grammar, path=path)
        if module is not None:
            self._cache.store_parsed(path, module, mtime_ns)
        return module

    def parse_source(
        self, source: bytes | str, grammar: str = TSX, *, path: Path | None = None
    ) -> Optional[ParsedModule]:
        if isinstance(source, str):
            source = source.encode("utf-8")
        tree = self._get_parser(grammar).parse(source)
        if tree.root_node.has_error:
            _LOGGER.debug("Syntax errors in %s; treating as unparsable", path or "<source>")
            return None
        return ParsedModule(path=path or Path("<source>"), source=source, tree=tree)

    def _get_parser(self, grammar: str) -> Parser:
        parser = self._parsers.get(grammar)
        if parser is not None:
            return parser
        language = Language(_LANGUAGE_FACTORIES[grammar]())
        parser = Parser(language)
        self._parsers[grammar] = parser
        return parser


__all__ = [
    "ParsedModule",
    "SourceParser",
    "TSX",
    "TYPESCRIPT",
    "grammar_for_path",
    "node_position",
]
