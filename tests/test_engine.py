"""Tests for fsdlint.analysis.engine: dispatch, error isolation, parse errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from conftest import DEFAULT_ALIASES, write

from fsdlint.analysis.engine import (
    INTERNAL_ERROR_MESSAGE,
    PARSE_ERROR_RULE,
    RuleEngine,
    RuleMeta,
    RunContext,
)
from fsdlint.analysis.layers import LayerCoordinate, default_hierarchy

if TYPE_CHECKING:
    from pathlib import Path

    from tree_sitter import Node as TSNode

    from fsdlint.analysis.engine import FileContext, Finding


class ImportCounter:
    """Reports every import statement, then a summary on file exit."""

    meta = RuleMeta(
        id="import-counter",
        description="counts imports",
        severity="warning",
        messages={"seen": "import {n}", "total": "{n} imports"},
        message_severities={"total": "error"},
    )
    node_types = frozenset({"import_statement"})

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        n = ctx.state.get("n", 0) + 1
        ctx.state["n"] = n
        return [ctx.finding(node, "seen", n=n)]

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        return [ctx.finding(None, "total", n=ctx.state.get("n", 0))]


class Exploding:
    """Fails on the first import statement."""

    meta = RuleMeta(
        id="exploding",
        description="always fails",
        severity="error",
        messages={"never": "never"},
    )
    node_types = frozenset({"import_statement"})

    def __init__(self) -> None:
        self.calls = 0

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        self.calls += 1
        msg = "boom"
        raise RuntimeError(msg)

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        self.calls += 1
        return []


class PathOnly:
    """Reports the file path, with or without a syntax tree."""

    meta = RuleMeta(
        id="path-only",
        description="reports paths",
        severity="warning",
        messages={"path": "saw {path}"},
    )
    node_types = frozenset({"program"})

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        return self.on_unparsed(ctx)

    def on_unparsed(self, ctx: FileContext) -> list[Finding]:
        return [ctx.finding(None, "path", path=ctx.rel_path)]

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        return []


def _run(project: Path, rel_path: str) -> RunContext:
    return RunContext.build(
        project_root=project,
        source_root="app",
        aliases=DEFAULT_ALIASES,
        hierarchy=default_hierarchy(),
        files=[rel_path],
    )


SOURCE = "import a from './a';\nimport b from './b';\n"


class TestDispatch:
    """Tests for traversal order and violation construction."""

    def test_order_and_ids(self, tmp_project: Path) -> None:
        rel = "app/shared/lib/x.ts"
        path = write(tmp_project, rel, SOURCE)
        violations = RuleEngine([ImportCounter()]).analyze_source(path, rel, _run(tmp_project, rel))

        assert [v.message for v in violations] == ["import 1", "import 2", "2 imports"]
        assert [v.id for v in violations] == [f"{rel}#1", f"{rel}#2", f"{rel}#3"]
        assert [(v.line, v.column) for v in violations] == [(1, 1), (2, 1), (1, 1)]
        assert violations[0].code == "import a from './a';"

    def test_message_severity(self, tmp_project: Path) -> None:
        rel = "app/shared/lib/x.ts"
        path = write(tmp_project, rel, SOURCE)
        violations = RuleEngine([ImportCounter()]).analyze_source(path, rel, _run(tmp_project, rel))
        assert [v.severity for v in violations] == ["warning", "warning", "error"]

    def test_severity_override(self, tmp_project: Path) -> None:
        rel = "app/shared/lib/x.ts"
        path = write(tmp_project, rel, SOURCE)
        engine = RuleEngine([ImportCounter()], {"import-counter": "error"})
        violations = engine.analyze_source(path, rel, _run(tmp_project, rel))
        assert {v.severity for v in violations} == {"error"}

    def test_state_is_per_file(self, tmp_project: Path) -> None:
        engine = RuleEngine([ImportCounter()])
        for rel in ("app/shared/lib/x.ts", "app/shared/lib/y.ts"):
            path = write(tmp_project, rel, SOURCE)
            violations = engine.analyze_source(path, rel, _run(tmp_project, rel))
            assert violations[-1].message == "2 imports"


class TestErrorIsolation:
    """Tests for rule failures and unparsable files."""

    def test_internal_error_disables_rule_for_file(self, tmp_project: Path) -> None:
        rel = "app/shared/lib/x.ts"
        path = write(tmp_project, rel, SOURCE)
        exploding = Exploding()
        engine = RuleEngine([exploding, ImportCounter()])
        violations = engine.analyze_source(path, rel, _run(tmp_project, rel))

        internal = [v for v in violations if v.message_id == INTERNAL_ERROR_MESSAGE]
        assert len(internal) == 1
        assert internal[0].rule == "exploding"
        assert internal[0].severity == "warning"
        assert "boom" in internal[0].message
        assert exploding.calls == 1
        # Other rules keep running.
        assert [v.message for v in violations if v.rule == "import-counter"] == [
            "import 1",
            "import 2",
            "2 imports",
        ]

    def test_parse_error(self, tmp_project: Path) -> None:
        rel = "app/shared/lib/broken.ts"
        path = write(tmp_project, rel, "export const = ;\n")
        violations = RuleEngine([ImportCounter()]).analyze_source(path, rel, _run(tmp_project, rel))

        assert len(violations) == 1
        assert violations[0].rule == PARSE_ERROR_RULE
        assert violations[0].severity == "error"
        assert violations[0].file == rel

    def test_unreadable_file(self, tmp_project: Path) -> None:
        rel = "app/shared/lib/missing.ts"
        violations = RuleEngine([ImportCounter()]).analyze_source(
            tmp_project / rel, rel, _run(tmp_project, rel)
        )
        assert [v.rule for v in violations] == [PARSE_ERROR_RULE]
        assert "Cannot read file" in violations[0].message


class TestRunContext:
    """Tests for slice ownership."""

    def test_first_sorted_file_owns_slice(self, tmp_project: Path) -> None:
        run = RunContext.build(
            project_root=tmp_project,
            source_root="app",
            aliases=DEFAULT_ALIASES,
            hierarchy=default_hierarchy(),
            files=["app/features/a/ui/Z.tsx", "app/features/a/api.ts", "app/shared/x.ts"],
        )
        coord = LayerCoordinate("features", "a")
        assert run.files[0] == "app/features/a/api.ts"
        assert run.owns_slice("app/features/a/api.ts", coord)
        assert not run.owns_slice("app/features/a/ui/Z.tsx", coord)


class TestUnparsedFiles:
    """Tests for path-based rules on files without a syntax tree."""

    def test_path_rules_run_after_parse_error(self, tmp_project: Path) -> None:
        rel = "app/shared/lib/broken.ts"
        path = write(tmp_project, rel, "export const = ;\n")
        engine = RuleEngine([ImportCounter(), PathOnly()])
        violations = engine.analyze_source(path, rel, _run(tmp_project, rel))

        assert [(v.rule, v.id) for v in violations] == [
            (PARSE_ERROR_RULE, f"{rel}#1"),
            ("path-only", f"{rel}#2"),
        ]
        assert violations[1].message == f"saw {rel}"
        assert violations[1].code == "export const = ;"

    def test_path_rules_run_for_unreadable_file(self, tmp_project: Path) -> None:
        rel = "app/shared/lib/missing.ts"
        engine = RuleEngine([PathOnly()])
        violations = engine.analyze_source(tmp_project / rel, rel, _run(tmp_project, rel))
        assert [v.rule for v in violations] == [PARSE_ERROR_RULE, "path-only"]
        assert violations[1].code == ""
