"""Tests for the limit-component-lines rule."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from conftest import run_rule

from fsdlint.rules.component_shape import ComponentShapeRule

if TYPE_CHECKING:
    from pathlib import Path

COMPONENT = "app/features/kanban/ui/Board.tsx"


def _component(lines: int) -> str:
    body = ["export function Board() {"]
    body.extend("  const x = 1;" for _ in range(lines - 2))
    body.append("}")
    return "\n".join(body) + "\n"


class TestLineLimit:
    """Tests for the component line budget."""

    def test_at_limit(self, tmp_project: Path) -> None:
        violations = run_rule(tmp_project, ComponentShapeRule(), COMPONENT, _component(200))
        assert violations == []

    def test_over_limit(self, tmp_project: Path) -> None:
        violations = run_rule(tmp_project, ComponentShapeRule(), COMPONENT, _component(201))
        assert len(violations) == 1
        v = violations[0]
        assert v.message_id == "tooManyLines"
        assert v.severity == "warning"
        assert v.message == (
            "Component file exceeds 200 lines (201). Split into smaller components."
        )
        assert (v.line, v.column) == (1, 1)

    def test_custom_limit(self, tmp_project: Path) -> None:
        violations = run_rule(
            tmp_project, ComponentShapeRule(max_lines=10), COMPONENT, _component(11)
        )
        assert [v.message_id for v in violations] == ["tooManyLines"]

    def test_outside_ui_dir(self, tmp_project: Path) -> None:
        violations = run_rule(
            tmp_project, ComponentShapeRule(), "app/features/kanban/Board.tsx", _component(300)
        )
        assert violations == []

    def test_non_component_extension(self, tmp_project: Path) -> None:
        violations = run_rule(
            tmp_project, ComponentShapeRule(), "app/features/kanban/ui/model.ts", _component(300)
        )
        assert violations == []

    def test_test_files_exempt(self, tmp_project: Path) -> None:
        violations = run_rule(
            tmp_project,
            ComponentShapeRule(),
            "app/features/kanban/ui/Board.spec.tsx",
            _component(300),
        )
        assert violations == []

    @pytest.mark.parametrize("bad", [0, -5, "200", True])
    def test_invalid_max_lines(self, bad: object) -> None:
        with pytest.raises(ValueError, match="max_lines"):
            ComponentShapeRule(max_lines=bad)  # type: ignore[arg-type]


class TestDefaultExports:
    """Tests for the single default export check."""

    def test_single_default_export(self, tmp_project: Path) -> None:
        violations = run_rule(
            tmp_project,
            ComponentShapeRule(),
            COMPONENT,
            "export default function Board() {\n  return null;\n}\nexport const x = 1;\n",
        )
        assert violations == []

    def test_second_default_export(self, tmp_project: Path) -> None:
        violations = run_rule(
            tmp_project,
            ComponentShapeRule(),
            "app/shared/lib/index.ts",
            "export default function a() {}\nexport default function b() {}\n",
        )
        assert [(v.message_id, v.line) for v in violations] == [("multipleDefaultExports", 2)]

    def test_test_files_not_counted(self, tmp_project: Path) -> None:
        violations = run_rule(
            tmp_project,
            ComponentShapeRule(),
            "app/shared/lib/index.spec.ts",
            "export default function a() {}\nexport default function b() {}\n",
        )
        assert violations == []
