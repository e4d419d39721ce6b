"""Require every feature slice to contain its baseline files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fsdlint.analysis.engine import RuleMeta

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from tree_sitter import Node as TSNode

    from fsdlint.analysis.engine import FileContext, Finding

RULE_ID = "feature-slice-baseline"

# ``{slice}`` is replaced by the slice directory name.
DEFAULT_FILES: tuple[str, ...] = (
    "api.ts",
    "api.spec.ts",
    "hooks.ts",
    "hooks.spec.ts",
    "README.md",
    "ui/{slice}.page.tsx",
    "ui/{slice}.page.spec.tsx",
)


class SliceBaselineRule:
    """Reports each missing baseline file once per slice.

    The report is attached to the first analyzed file of the slice so the
    outcome does not depend on the order in which files are processed.
    """

    meta = RuleMeta(
        id=RULE_ID,
        description="Enforce required baseline files in feature slices",
        severity="warning",
        messages={
            "missingBaseline": "Feature slice missing required file: {filename}",
        },
    )
    node_types = frozenset({"program"})

    def __init__(self, files: Sequence[str] = DEFAULT_FILES) -> None:
        if isinstance(files, str) or not all(isinstance(f, str) for f in files):
            msg = f"{RULE_ID}: files must be a list of slice-relative paths"
            raise ValueError(msg)
        self.files = tuple(files)

    def expected_files(self, slice_name: str) -> list[str]:
        return [f.replace("{slice}", slice_name) for f in self.files]

    def slice_dir(self, ctx: FileContext, slice_name: str) -> Path:
        return ctx.run.project_root / ctx.run.source_root / "features" / slice_name

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        return self.check(ctx)

    def on_unparsed(self, ctx: FileContext) -> list[Finding]:
        return self.check(ctx)

    def check(self, ctx: FileContext) -> list[Finding]:
        """Report missing baseline files if *ctx* is the owner of a feature slice."""
        coordinate = ctx.coordinate
        if coordinate is None or coordinate.layer != "features" or coordinate.slice is None:
            return []
        if not ctx.run.owns_slice(ctx.rel_path, coordinate):
            return []

        base = self.slice_dir(ctx, coordinate.slice)
        return [
            ctx.finding(None, "missingBaseline", suggestion=f"Create {filename}", filename=filename)
            for filename in self.expected_files(coordinate.slice)
            if not ctx.run.fs.exists(base / filename)
        ]

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        return []
