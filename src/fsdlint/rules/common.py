"""Path conventions shared by several rules."""

from __future__ import annotations

import posixpath
import re

COMPONENT_EXTENSIONS: frozenset[str] = frozenset({".tsx", ".jsx"})
UI_MARKER = "/ui/"
API_MARKER = "/api"

_TEST_FILE_RE = re.compile(r"\.(spec|test)\.[cm]?[jt]sx?$")
_HOOK_NAME_RE = re.compile(r"^use[A-Z0-9]")


def extension(rel_path: str) -> str:
    return posixpath.splitext(rel_path)[1]


def is_test_file(rel_path: str) -> bool:
    """Return True for ``*.spec.*`` / ``*.test.*`` files."""
    return _TEST_FILE_RE.search(rel_path) is not None


def is_component_file(rel_path: str) -> bool:
    return extension(rel_path) in COMPONENT_EXTENSIONS


def in_ui_dir(rel_path: str) -> bool:
    return UI_MARKER in "/" + rel_path


def mentions_api(rel_path: str) -> bool:
    return API_MARKER in "/" + rel_path


def hook_names(names: list[str]) -> list[str]:
    """Return the bindings that follow the ``useXxx`` hook naming convention (``user`` is not a hook)."""
    return [name for name in names if _HOOK_NAME_RE.match(name)]
