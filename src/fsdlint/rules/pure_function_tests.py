"""Require a co-located test file for exported utility functions."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from fsdlint.analysis.engine import RuleMeta
from fsdlint.rules.common import extension, is_test_file

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from tree_sitter import Node as TSNode

    from fsdlint.analysis.engine import FileContext, Finding

RULE_ID = "require-pure-function-tests"
DEFAULT_DIRECTORIES: tuple[str, ...] = ("shared/utils",)

_CHECKED_EXTENSIONS: frozenset[str] = frozenset({".ts", ".js"})

# Textual, not semantic: `export function`, `export const x =`, or an export
# list that mentions a function.
_EXPORTED_FUNCTION_RE = re.compile(r"export\s+(function|const\s+\w+\s*=|{[^}]*function)")
_TEST_CASE_RE = re.compile(r"\b(it|test)(\.\w+)?\s*\(")


def candidate_test_files(path: Path) -> tuple[Path, Path]:
    """Return the ``.spec`` and ``.test`` siblings of *path*."""
    return (
        path.with_name(f"{path.stem}.spec{path.suffix}"),
        path.with_name(f"{path.stem}.test{path.suffix}"),
    )


class PureFunctionTestsRule:
    meta = RuleMeta(
        id=RULE_ID,
        description="Require test files for utility functions in shared/utils/",
        severity="warning",
        messages={
            "missingTestFile": "Missing test file for utility functions. Create {testFile}",
            "noTestsFound": "Test file exists but contains no test cases",
        },
    )
    node_types = frozenset({"program"})

    def __init__(self, directories: Sequence[str] = DEFAULT_DIRECTORIES) -> None:
        if isinstance(directories, str) or not all(isinstance(d, str) for d in directories):
            msg = f"{RULE_ID}: directories must be a list of paths"
            raise ValueError(msg)
        self.markers = tuple("/" + d.strip("/") + "/" for d in directories)

    def applies_to(self, rel_path: str) -> bool:
        return (
            any(marker in "/" + rel_path for marker in self.markers)
            and extension(rel_path) in _CHECKED_EXTENSIONS
            and not is_test_file(rel_path)
        )

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        if not self.applies_to(ctx.rel_path):
            return []
        if _EXPORTED_FUNCTION_RE.search(ctx.unit.text) is None:
            return []

        fs = ctx.run.fs
        spec_file, test_file = candidate_test_files(ctx.unit.path)
        existing = next((p for p in (spec_file, test_file) if fs.exists(p)), None)
        if existing is None:
            return [
                ctx.finding(
                    None,
                    "missingTestFile",
                    suggestion=f"Create {spec_file.name}",
                    testFile=spec_file.name,
                )
            ]

        if _TEST_CASE_RE.search(fs.read_text(existing)) is None:
            return [ctx.finding(None, "noTestsFound", testFile=existing.name)]
        return []

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        return []
