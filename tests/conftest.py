"""Shared test fixtures for fsdlint."""

from __future__ import annotations

from pathlib import Path

import pytest

from fsdlint.analysis.engine import RuleEngine, RunContext
from fsdlint.analysis.layers import default_hierarchy

DEFAULT_ALIASES = {"~/": "app/", "@/": "app/"}


def write(root: Path, rel_path: str, text: str = "") -> Path:
    """Write *text* to ``root/rel_path``, creating parent directories."""
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def run_rule(project: Path, rule: object, rel_path: str, text: str) -> list:
    """Write one file into *project* and analyze it with a single rule."""
    path = write(project, rel_path, text)
    run = RunContext.build(
        project_root=project,
        source_root="app",
        aliases=DEFAULT_ALIASES,
        hierarchy=default_hierarchy(),
        files=[rel_path],
    )
    return RuleEngine([rule]).analyze_source(path, rel_path, run)


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """Create an empty front-end project with an ``app/`` source root."""
    project = tmp_path / "web"
    (project / "app").mkdir(parents=True)
    return project


@pytest.fixture()
def fsd_project(tmp_project: Path) -> Path:
    """Create a small, clean Feature-Sliced project.

    Layout:
    - app/pages/board/ui/BoardPage.tsx importing a widget and a feature
    - app/widgets/header/ui/Header.tsx importing shared ui
    - app/features/kanban/{api.ts, api.spec.ts, hooks.ts, hooks.spec.ts, README.md}
    - app/features/kanban/ui/kanban.page{.tsx,.spec.tsx}
    - app/entities/task/model.ts
    - app/shared/ui/Button.tsx
    """
    write(
        tmp_project,
        "app/pages/board/ui/BoardPage.tsx",
        "import { Header } from '~/widgets/header/ui/Header';\n"
        "import { KanbanPage } from '~/features/kanban/ui/kanban.page';\n"
        "\n"
        "export default function BoardPage() {\n"
        "  return <div><Header /><KanbanPage /></div>;\n"
        "}\n",
    )
    write(
        tmp_project,
        "app/widgets/header/ui/Header.tsx",
        "import { Button } from '~/shared/ui/Button';\n"
        "\n"
        "export function Header() {\n"
        "  return <Button label=\"menu\" />;\n"
        "}\n",
    )
    write(
        tmp_project,
        "app/features/kanban/api.ts",
        "import type { Task } from '~/entities/task/model';\n"
        "\n"
        "export interface TaskListResponse {\n"
        "  tasks: Task[];\n"
        "}\n",
    )
    write(tmp_project, "app/features/kanban/api.spec.ts", "it('works', () => {});\n")
    write(
        tmp_project,
        "app/features/kanban/hooks.ts",
        "import { useState } from 'react';\n"
        "\n"
        "export const useBoard = () => useState(0);\n",
    )
    write(tmp_project, "app/features/kanban/hooks.spec.ts", "it('works', () => {});\n")
    write(tmp_project, "app/features/kanban/README.md", "# Kanban\n")
    write(
        tmp_project,
        "app/features/kanban/ui/kanban.page.tsx",
        "import { useBoard } from '../hooks';\n"
        "\n"
        "export function KanbanPage() {\n"
        "  const [count] = useBoard();\n"
        "  return <span>{count}</span>;\n"
        "}\n",
    )
    write(
        tmp_project,
        "app/features/kanban/ui/kanban.page.spec.tsx",
        "it('renders', () => {});\n",
    )
    write(
        tmp_project,
        "app/entities/task/model.ts",
        "export interface Task {\n  id: string;\n}\n",
    )
    write(
        tmp_project,
        "app/shared/ui/Button.tsx",
        "export function Button(props: { label: string }) {\n"
        "  return <button>{props.label}</button>;\n"
        "}\n",
    )
    return tmp_project
