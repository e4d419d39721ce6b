"""Limit UI component files to a line budget and a single default export."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fsdlint.analysis.engine import RuleMeta
from fsdlint.analysis.source import is_default_export
from fsdlint.rules.common import in_ui_dir, is_component_file, is_test_file

if TYPE_CHECKING:
    from tree_sitter import Node as TSNode

    from fsdlint.analysis.engine import FileContext, Finding

RULE_ID = "limit-component-lines"
DEFAULT_MAX_LINES = 200

_COUNTER = "default_exports"


class ComponentShapeRule:
    meta = RuleMeta(
        id=RULE_ID,
        description="Limit component files to 200 lines and single default export",
        severity="warning",
        messages={
            "tooManyLines": (
                "Component file exceeds {maxLines} lines ({lines}). "
                "Split into smaller components."
            ),
            "multipleDefaultExports": (
                "Component file has multiple default exports. "
                "Each file should export exactly one component."
            ),
        },
    )
    node_types = frozenset({"export_statement"})

    def __init__(self, max_lines: int = DEFAULT_MAX_LINES) -> None:
        if not isinstance(max_lines, int) or isinstance(max_lines, bool) or max_lines < 1:
            msg = f"{RULE_ID}: max_lines must be a positive integer, got {max_lines!r}"
            raise ValueError(msg)
        self.max_lines = max_lines

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        if not is_default_export(node) or is_test_file(ctx.rel_path):
            return []
        count = ctx.state.get(_COUNTER, 0) + 1
        ctx.state[_COUNTER] = count
        if count > 1:
            return [ctx.finding(node, "multipleDefaultExports", suggestion="export { Name }")]
        return []

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        ctx.state.pop(_COUNTER, None)
        rel_path = ctx.rel_path
        if not (in_ui_dir(rel_path) and is_component_file(rel_path)) or is_test_file(rel_path):
            return []

        lines = len(ctx.unit.lines)
        if lines <= self.max_lines:
            return []
        return [
            ctx.finding(
                None,
                "tooManyLines",
                suggestion="Extract sub-components into sibling files",
                lines=lines,
                maxLines=self.max_lines,
            )
        ]
