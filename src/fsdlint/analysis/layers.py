"""Layer model: path classification, dependency hierarchy, and import resolution."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SHARED_LAYER = "shared"

# Ordered top (pages) to bottom (shared).
LAYER_NAMES: tuple[str, ...] = ("pages", "widgets", "features", "entities", "shared")
VALID_LAYERS: frozenset[str] = frozenset(LAYER_NAMES)

# Layers whose first sub-directory is a slice.  ``shared`` is split into
# segments (ui, lib, config) that are not isolated from one another.
SLICED_LAYERS: frozenset[str] = VALID_LAYERS - {SHARED_LAYER}

DEFAULT_HIERARCHY: dict[str, tuple[str, ...]] = {
    "pages": ("widgets", "features", "entities", "shared"),
    "widgets": ("features", "entities", "shared"),
    "features": ("entities", "shared"),
    "entities": ("shared",),
    "shared": ("shared",),
}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayerCoordinate:
    """Structural position of a file: its layer and (for sliced layers) its slice."""

    layer: str
    slice: str | None = None

    def __str__(self) -> str:
        if self.slice is None:
            return self.layer
        return f"{self.layer}/{self.slice}"


@dataclass(frozen=True)
class LayerHierarchy:
    """Directed adjacency table ``layer -> allowed target layers``."""

    allowed: dict[str, tuple[str, ...]]

    def allows(self, source: str, target: str) -> bool:
        """Return True if *source* layer may import from *target* layer."""
        return target in self.allowed.get(source, ())

    def allowed_targets(self, source: str) -> tuple[str, ...]:
        return self.allowed.get(source, ())


# ---------------------------------------------------------------------------
# Hierarchy parsing and validation
# ---------------------------------------------------------------------------


def _find_cycle(allowed: Mapping[str, tuple[str, ...]]) -> list[str] | None:
    """Return a dependency cycle between distinct layers, or None.

    Self-edges are ignored: a layer listing itself is a no-op for the
    direction check, which only runs between different layers.
    """
    visiting: set[str] = set()
    done: set[str] = set()
    stack: list[str] = []

    def visit(layer: str) -> list[str] | None:
        visiting.add(layer)
        stack.append(layer)
        for target in allowed.get(layer, ()):
            if target == layer or target in done:
                continue
            if target in visiting:
                return [*stack[stack.index(target) :], target]
            cycle = visit(target)
            if cycle is not None:
                return cycle
        stack.pop()
        visiting.discard(layer)
        done.add(layer)
        return None

    for layer in sorted(allowed):
        if layer not in done:
            cycle = visit(layer)
            if cycle is not None:
                return cycle
    return None


def parse_hierarchy(data: object) -> LayerHierarchy:
    """Parse and validate a ``layers:`` mapping into a LayerHierarchy.

    Raises
    ------
    ValueError
        When the table is not a mapping, names an unknown layer, omits a
        layer, or contains a cycle between distinct layers.
    """
    if not isinstance(data, dict):
        msg = "layers must be a mapping of layer -> list of allowed layers"
        raise ValueError(msg)

    allowed: dict[str, tuple[str, ...]] = {}
    for raw_layer, raw_targets in data.items():
        layer = str(raw_layer)
        if layer not in VALID_LAYERS:
            msg = f"layers: unknown layer '{layer}', must be one of {list(LAYER_NAMES)}"
            raise ValueError(msg)
        if raw_targets is None:
            raw_targets = []
        if not isinstance(raw_targets, list):
            msg = f"layers.{layer}: allowed layers must be a list"
            raise ValueError(msg)
        targets: list[str] = []
        for raw_target in raw_targets:
            target = str(raw_target)
            if target not in VALID_LAYERS:
                msg = (
                    f"layers.{layer}: unknown layer '{target}', "
                    f"must be one of {list(LAYER_NAMES)}"
                )
                raise ValueError(msg)
            if target not in targets:
                targets.append(target)
        allowed[layer] = tuple(targets)

    missing = [name for name in LAYER_NAMES if name not in allowed]
    if missing:
        msg = f"layers: missing definitions for {missing}"
        raise ValueError(msg)

    cycle = _find_cycle(allowed)
    if cycle is not None:
        msg = f"layers: dependency cycle {' -> '.join(cycle)}"
        raise ValueError(msg)

    return LayerHierarchy(allowed=allowed)


def default_hierarchy() -> LayerHierarchy:
    return LayerHierarchy(allowed=dict(DEFAULT_HIERARCHY))


# ---------------------------------------------------------------------------
# Path classification
# ---------------------------------------------------------------------------


def classify_path(path: str, source_root: str) -> LayerCoordinate | None:
    """Map a project-relative POSIX path to its layer coordinate.

    The path must live under ``<source_root>/<layer>/``.  For sliced layers
    the next segment is the slice, unless that segment is the file itself
    (``features/index.ts`` has no slice).  Paths outside the layered tree
    return ``None``.
    """
    root_parts = [p for p in source_root.strip("/").split("/") if p]
    parts = [p for p in path.split("/") if p]
    if parts[: len(root_parts)] != root_parts:
        return None
    rest = parts[len(root_parts) :]
    if not rest or rest[0] not in VALID_LAYERS:
        return None

    layer = rest[0]
    if layer not in SLICED_LAYERS or len(rest) < 2:
        return LayerCoordinate(layer=layer)

    segment = rest[1]
    is_file_segment = len(rest) == 2 and "." in segment
    if is_file_segment:
        return LayerCoordinate(layer=layer)
    return LayerCoordinate(layer=layer, slice=segment)


def resolve_import_path(
    import_path: str,
    importer: str,
    aliases: Mapping[str, str],
) -> str | None:
    """Resolve an import specifier to a project-relative POSIX path.

    Alias prefixes (``~/`` -> ``app/``) are expanded and relative paths are
    joined with the importer's directory.  Bare package imports (``react``,
    ``@reduxjs/toolkit``) return ``None``.
    """
    for prefix in sorted(aliases, key=len, reverse=True):
        if import_path.startswith(prefix):
            target = aliases[prefix].rstrip("/") + "/" + import_path[len(prefix) :]
            return posixpath.normpath(target)

    if import_path.startswith(("./", "../")) or import_path in (".", ".."):
        base = posixpath.dirname(importer)
        resolved = posixpath.normpath(posixpath.join(base, import_path))
        if resolved.startswith(".."):
            return None
        return resolved

    return None
