"""Tests for the tree-sitter source parser."""

from __future__ import annotations

from pathlib import Path

from tests._fixtures.repo_builder import RepoBuilder
from uigraph.parsing import SourceParser
from uigraph.parsing.tree_sitter import TYPESCRIPT, grammar_for_path
from uigraph.stores import AnalysisCache


def test_parse_returns_module_for_tsx(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/Button.tsx": """
            export function Button() {
              return <button className="px-2">Go</button>;
            }
            """
        }
    )
    parser = SourceParser()

    module = parser.parse(repo_builder.file("src/Button.tsx"))

    assert module is not None
    assert module.root.type == "program"


def test_parse_caches_successful_results(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/a.ts": "export const a = 1;\n"})
    cache = AnalysisCache()
    parser = SourceParser(cache)
    path = repo_builder.file("src/a.ts")

    first = parser.parse(path)

    assert first is not None
    assert parser.parse(path) is first
    assert cache.sizes()["parsed"] == 1


def test_parse_failures_yield_none(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/broken.tsx": "export const = <div>;\n", "README.md": "# hi\n"})
    parser = SourceParser()

    assert parser.parse(repo_builder.file("src/broken.tsx")) is None
    assert parser.parse(repo_builder.file("src/missing.tsx")) is None
    assert parser.parse(repo_builder.file("README.md")) is None


def test_plain_typescript_uses_non_jsx_grammar() -> None:
    parser = SourceParser()

    assert grammar_for_path(Path("cast.ts")) == TYPESCRIPT
    module = parser.parse_source("const n = <number>value;\n", TYPESCRIPT)

    assert module is not None


def test_template_segments_skip_substitutions() -> None:
    parser = SourceParser()
    module = parser.parse_source("const c = `px-2 ${size} text-sm`;\n")

    assert module is not None
    template = module.root.named_children[0].named_children[0].child_by_field_name("value")
    assert template.type == "template_string"
    assert module.string_value(template) is None
    assert [segment.split() for segment in module.template_segments(template)] == [
        ["px-2"],
        ["text-sm"],
    ]


def test_edited_file_is_reparsed(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/a.ts": 'import "./b";\n'})
    parser = SourceParser(AnalysisCache())
    path = repo_builder.file("src/a.ts")

    first = parser.parse(path)
    repo_builder.write({"src/a.ts": 'import "./c";\n'})
    repo_builder.touch("src/a.ts")
    second = parser.parse(path)

    assert first is not None and second is not None
    assert second is not first
    assert b"./c" in second.source
