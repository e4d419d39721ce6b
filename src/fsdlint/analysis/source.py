"""Source units: tree-sitter parsing of TS/JS files and import statement helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from tree_sitter import Node as TSNode
    from tree_sitter import Tree

    from fsdlint.analysis.layers import LayerCoordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LangConfig:
    """Tree-sitter configuration for one dialect."""

    name: str
    language: Language
    jsx: bool


# ---- Grammar loaders ----


def _load_typescript() -> LangConfig:
    import tree_sitter_typescript as tstypescript

    return LangConfig(
        name="typescript",
        language=Language(tstypescript.language_typescript()),
        jsx=False,
    )


def _load_tsx() -> LangConfig:
    import tree_sitter_typescript as tstypescript

    return LangConfig(
        name="tsx",
        language=Language(tstypescript.language_tsx()),
        jsx=True,
    )


_EXTENSION_LOADERS: dict[str, Callable[[], LangConfig]] = {
    ".ts": _load_typescript,
    ".js": _load_tsx,
    ".mts": _load_typescript,
    ".tsx": _load_tsx,
    ".jsx": _load_tsx,
}

_LANG_CACHE: dict[str, LangConfig] = {}


def get_lang_config(extension: str) -> LangConfig | None:
    """Get the grammar config for a file extension, or ``None`` if not analyzed."""
    cached = _LANG_CACHE.get(extension)
    if cached is not None:
        return cached

    loader = _EXTENSION_LOADERS.get(extension)
    if loader is None:
        return None

    config = loader()
    _LANG_CACHE[extension] = config
    return config


def supported_extensions() -> frozenset[str]:
    return frozenset(_EXTENSION_LOADERS)


def clear_cache() -> None:
    """Clear the grammar cache (useful for testing)."""
    _LANG_CACHE.clear()


# ---------------------------------------------------------------------------
# Source units
# ---------------------------------------------------------------------------


class SourceParseError(Exception):
    """Raised when a file cannot be turned into a syntax tree."""

    def __init__(self, message: str, line: int = 1, column: int = 1) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


@dataclass(frozen=True)
class SourceUnit:
    """One analyzed file: path, text, syntax tree, and layer coordinate."""

    path: Path  # absolute path on disk
    rel_path: str  # project-relative POSIX path
    text: str
    tree: Tree | None  # None when the file could not be parsed
    coordinate: LayerCoordinate | None
    lang: LangConfig | None

    @property
    def root(self) -> TSNode:
        if self.tree is None:
            msg = f"{self.rel_path} has no syntax tree"
            raise ValueError(msg)
        return self.tree.root_node

    @cached_property
    def lines(self) -> list[str]:
        return self.text.splitlines()


def _first_error(node: TSNode) -> TSNode | None:
    """Return the first ERROR or MISSING node in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def parse_source(
    path: Path,
    rel_path: str,
    text: str,
    coordinate: LayerCoordinate | None,
) -> SourceUnit:
    """Parse *text* with the grammar selected by *path*'s extension.

    Raises
    ------
    SourceParseError
        When the extension is not analyzed or the tree contains syntax errors.
    """
    config = get_lang_config(path.suffix)
    if config is None:
        msg = f"Unsupported file extension: {path.suffix}"
        raise SourceParseError(msg)

    parser = Parser(config.language)
    tree = parser.parse(text.encode("utf-8"))

    if tree.root_node.has_error:
        bad = _first_error(tree.root_node)
        line, column = 1, 1
        if bad is not None:
            line = bad.start_point[0] + 1
            column = bad.start_point[1] + 1
        msg = f"Parsing error: unexpected syntax at {line}:{column}"
        raise SourceParseError(msg, line=line, column=column)

    logger.debug("Parsed %s with %s grammar", rel_path, config.name)
    return SourceUnit(
        path=path,
        rel_path=rel_path,
        text=text,
        tree=tree,
        coordinate=coordinate,
        lang=config,
    )


def walk(root: TSNode) -> Iterator[TSNode]:
    """Yield named nodes in document (pre-)order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.named_children))


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------


def node_text(node: TSNode | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def string_value(node: TSNode) -> str:
    """Return the contents of a ``string`` node without its quotes."""
    text = node_text(node)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    return text


def import_source(node: TSNode) -> str | None:
    """Extract the module specifier from an ``import_statement`` node."""
    for child in node.children:
        if child.type == "string":
            value = string_value(child)
            return value or None
    return None


def _has_type_keyword(node: TSNode) -> bool:
    return any(child.type == "type" and not child.is_named for child in node.children)


def is_type_only_import(node: TSNode) -> bool:
    """Return True when an import brings in types only.

    Covers ``import type {...} from '...'`` and named imports whose every
    specifier is marked inline, ``import { type A, type B } from '...'``.
    """
    if _has_type_keyword(node):
        return True
    clause = next((c for c in node.named_children if c.type == "import_clause"), None)
    if clause is None:
        return False
    parts = clause.named_children
    if len(parts) != 1 or parts[0].type != "named_imports":
        return False
    specifiers = [s for s in parts[0].named_children if s.type == "import_specifier"]
    return bool(specifiers) and all(_has_type_keyword(s) for s in specifiers)


def import_bindings(node: TSNode) -> list[str]:
    """Return the local binding names introduced by an ``import_statement``.

    Order follows the source: default binding, namespace binding, then named
    specifiers (their alias when renamed).  Inline type specifiers
    (``{ type A }``) bind no runtime value and are skipped.
    """
    names: list[str] = []
    clause = next((c for c in node.named_children if c.type == "import_clause"), None)
    if clause is None:
        return names

    for child in clause.named_children:
        if child.type == "identifier":
            names.append(node_text(child))
        elif child.type == "namespace_import":
            ident = next((c for c in child.named_children if c.type == "identifier"), None)
            if ident is not None:
                names.append(node_text(ident))
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier" or _has_type_keyword(spec):
                    continue
                local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                if local is not None:
                    names.append(
                        string_value(local) if local.type == "string" else node_text(local)
                    )
    return names


def is_default_export(node: TSNode) -> bool:
    """Return True for ``export default ...`` statements."""
    return node.type == "export_statement" and any(
        child.type == "default" and not child.is_named for child in node.children
    )
