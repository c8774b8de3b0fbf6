"""Tests for component body parsing."""

from __future__ import annotations

from tests._fixtures.repo_builder import RepoBuilder
from uigraph.analyzers.component_parser import ComponentParser, LibraryMatcher, extract_import_map
from uigraph.models import UsedComponent
from uigraph.parsing import SourceParser


def test_library_matcher_uses_table_order() -> None:
    matcher = LibraryMatcher()

    assert matcher.detect("@/components/ui/button") == "shadcn"
    assert matcher.detect("@radix-ui/react-dialog") == "shadcn"
    assert matcher.detect("@mui/material/Button") == "mui"
    assert matcher.detect("@emotion/styled") == "mui"
    assert matcher.detect("@chakra-ui/react") == "chakra"
    assert matcher.detect("antd") == "antd"
    assert matcher.detect("./Card") is None
    assert matcher.libraries == ["shadcn", "mui", "chakra", "antd"]


def test_library_matcher_accepts_custom_patterns() -> None:
    matcher = LibraryMatcher({"mantine": ["@mantine/"]})

    assert matcher.detect("@mantine/core") == "mantine"
    assert matcher.detect("@mui/material") is None


def test_extract_import_map_covers_specifier_kinds() -> None:
    module = SourceParser().parse_source(
        """
        import React from "react";
        import { Button, Card as Panel } from "@mui/material";
        import * as Dialog from "@radix-ui/react-dialog";
        import Layout, { Header } from "./Layout";
        """
    )

    assert module is not None
    assert extract_import_map(module) == {
        "React": "react",
        "Button": "@mui/material",
        "Panel": "@mui/material",
        "Dialog": "@radix-ui/react-dialog",
        "Layout": "./Layout",
        "Header": "./Layout",
    }


def test_parse_component_body_collects_styles_and_components(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/Card.tsx": """
            import { Button } from "@mui/material";
            import * as Dialog from "@radix-ui/react-dialog";
            import { Icon } from "./Icon";
            import { cn } from "../lib/utils";

            export function Card({ active }: { active: boolean }) {
              return (
                <div className="p-4 rounded" style={{ color: "red" }}>
                  <Dialog.Root />
                  <Button className={`px-2 ${active ? "on" : "off"} text-sm`} />
                  <Icon className={cn("h-4 w-4", active && "p-4")} />
                  <span class="inline">x</span>
                  <Local />
                </div>
              );
            }

            function Local() {
              return <em className="hidden" />;
            }
            """
        }
    )
    parser = ComponentParser(SourceParser())

    info = parser.parse_component_body(repo_builder.file("src/Card.tsx"), "Card")

    assert info is not None
    assert info.direct_library == "shadcn"
    assert [(used.name, used.import_source) for used in info.used_components] == [
        ("Button", "@mui/material"),
        ("Icon", "./Icon"),
    ]
    assert info.used_components[0] == UsedComponent("Button", "@mui/material", 10, 7)
    assert info.class_tokens == ["p-4", "rounded", "px-2", "text-sm", "h-4", "w-4", "inline"]
    assert info.inline_styles == ["[inline style]"]


def test_component_definition_forms(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/forms.tsx": """
            import { forwardRef, memo } from "react";
            import { Box } from "@chakra-ui/react";

            export const Arrow = () => <Box />;
            const Expression = function () { return <Box />; };
            export const Forwarded = forwardRef((props, ref) => <Box ref={ref} />);
            const Memoized = memo(() => <Box />);
            export default function Page() { return <Box />; }
            const NotAComponent = 42;
            """
        }
    )
    parser = ComponentParser(SourceParser())
    path = repo_builder.file("src/forms.tsx")

    for name in ("Arrow", "Expression", "Forwarded", "Memoized", "Page"):
        info = parser.parse_component_body(path, name)
        assert info is not None, name
        assert info.direct_library == "chakra", name

    assert parser.parse_component_body(path, "NotAComponent") is None
    assert parser.parse_component_body(path, "Missing") is None
    assert parser.parse_component_body(repo_builder.file("src/none.tsx"), "Page") is None
