"""Tests for the mixed component library check."""

from __future__ import annotations

from tests._fixtures.repo_builder import RepoBuilder
from uigraph.checks import MixedLibraryCheck
from uigraph.engine import AnalysisEngine


def test_direct_non_preferred_usage_is_reported(
    engine: AnalysisEngine, repo_builder: RepoBuilder
) -> None:
    repo_builder.write(
        {
            "src/page.tsx": """
            import { Button } from "@mui/material";
            import { Card } from "@/components/ui/card";

            export default function Page() {
              return (
                <Card>
                  <Button>Save</Button>
                </Card>
              );
            }
            """
        }
    )

    findings = MixedLibraryCheck(engine, preferred="shadcn").check_file(
        repo_builder.file("src/page.tsx")
    )

    assert len(findings) == 1
    finding = findings[0]
    assert finding.kind == "non-preferred"
    assert finding.component == "Button"
    assert finding.libraries == ["mui"]
    assert (finding.line, finding.column) == (7, 6)
    assert finding.message == "Component <Button> is from mui, but shadcn is the preferred library."


def test_transitive_usage_names_internal_components(
    engine: AnalysisEngine, repo_builder: RepoBuilder
) -> None:
    repo_builder.write(
        {
            "src/page.tsx": """
            import { Outer } from "./Outer";
            export const Page = () => <Outer />;
            """,
            "src/Outer.tsx": """
            import { Inner } from "./Inner";
            export const Outer = () => <Inner />;
            """,
            "src/Inner.tsx": """
            import { Button } from "@mui/material";
            export const Inner = () => <Button />;
            """,
        }
    )

    findings = MixedLibraryCheck(engine).check_file(repo_builder.file("src/page.tsx"))

    assert [finding.kind for finding in findings] == ["transitive"]
    assert findings[0].message == (
        "Component <Outer> internally uses mui components (Inner, Inner → Button). "
        "The preferred library is shadcn."
    )


def test_member_tags_use_their_namespace_import(
    engine: AnalysisEngine, repo_builder: RepoBuilder
) -> None:
    repo_builder.write(
        {
            "src/page.tsx": """
            import * as Chakra from "@chakra-ui/react";
            export const Page = () => <Chakra.Box />;
            """
        }
    )

    findings = MixedLibraryCheck(engine, preferred="mui").check_file(
        repo_builder.file("src/page.tsx")
    )

    assert [(finding.component, finding.libraries) for finding in findings] == [
        ("Chakra", ["chakra"])
    ]


def test_preferred_library_and_unparsable_files_are_clean(
    engine: AnalysisEngine, repo_builder: RepoBuilder
) -> None:
    repo_builder.write(
        {
            "src/page.tsx": """
            import { Button } from "@/components/ui/button";
            const Local = () => <span />;
            export const Page = () => <div><Button /><Local /></div>;
            """,
            "src/broken.tsx": "export const = <div>;\n",
        }
    )
    check = MixedLibraryCheck(engine)

    assert check.check_file(repo_builder.file("src/page.tsx")) == []
    assert check.check_file(repo_builder.file("src/broken.tsx")) == []
