"""Rule engine: one AST pass per file, dispatching nodes to subscribed rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from fsdlint.analysis.layers import classify_path
from fsdlint.analysis.report import SEVERITY_ERROR, SEVERITY_WARNING, Violation
from fsdlint.analysis.source import SourceParseError, SourceUnit, parse_source, walk

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from tree_sitter import Node as TSNode

    from fsdlint.analysis.layers import LayerCoordinate, LayerHierarchy

logger = logging.getLogger(__name__)

PARSE_ERROR_RULE = "parse-error"
INTERNAL_ERROR_MESSAGE = "internalError"

_MAX_SNIPPET = 200


# ---------------------------------------------------------------------------
# Rule capability
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleMeta:
    """Static description of a rule: id, message templates, and severities."""

    id: str
    description: str
    severity: str  # default severity for every message
    messages: dict[str, str]  # message id -> str.format template
    message_severities: dict[str, str] = field(default_factory=dict)

    def severity_for(self, message_id: str) -> str:
        return self.message_severities.get(message_id, self.severity)


@dataclass(frozen=True)
class Finding:
    """A rule's raw report, turned into a Violation by the engine."""

    message_id: str
    line: int
    column: int
    code: str = ""
    suggestion: str = ""
    data: dict[str, Any] = field(default_factory=dict)


class Rule(Protocol):
    """Capability implemented by every rule.

    ``node_types`` lists the tree-sitter node types the rule subscribes to;
    ``on_node`` is called for each of them in document order and
    ``on_file_exit`` once the traversal of a file completes.  Rules that need
    only the file path may also define ``on_unparsed(ctx)``, which is called
    for files that could not be read or parsed.
    """

    meta: RuleMeta
    node_types: frozenset[str]

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]: ...

    def on_file_exit(self, ctx: FileContext) -> list[Finding]: ...


class FileSystem(Protocol):
    """Read-only filesystem handle used by cross-file rules."""

    def exists(self, path: Path) -> bool: ...

    def read_text(self, path: Path) -> str: ...


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunContext:
    """Run-wide, read-only inputs shared by every file."""

    project_root: Path
    source_root: str
    aliases: dict[str, str]
    hierarchy: LayerHierarchy
    files: tuple[str, ...] = ()  # analyzed project-relative paths, sorted
    fs: FileSystem = field(default_factory=LocalFileSystem)
    slice_owners: dict[LayerCoordinate, str] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        project_root: Path,
        source_root: str,
        aliases: dict[str, str],
        hierarchy: LayerHierarchy,
        files: Iterable[str] = (),
        fs: FileSystem | None = None,
    ) -> RunContext:
        """Build a context, indexing the first analyzed file of every slice."""
        ordered = tuple(sorted(files))
        owners: dict[LayerCoordinate, str] = {}
        for rel_path in ordered:
            coordinate = classify_path(rel_path, source_root)
            if coordinate is not None and coordinate.slice is not None:
                owners.setdefault(coordinate, rel_path)
        return cls(
            project_root=project_root,
            source_root=source_root,
            aliases=aliases,
            hierarchy=hierarchy,
            files=ordered,
            fs=fs if fs is not None else LocalFileSystem(),
            slice_owners=owners,
        )

    def owns_slice(self, rel_path: str, coordinate: LayerCoordinate) -> bool:
        """Return True if *rel_path* is the first analyzed file of its slice."""
        return self.slice_owners.get(coordinate, rel_path) == rel_path


@dataclass
class FileContext:
    """Per-file state handed to every rule invocation."""

    unit: SourceUnit
    run: RunContext
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def rel_path(self) -> str:
        return self.unit.rel_path

    @property
    def coordinate(self) -> LayerCoordinate | None:
        return self.unit.coordinate

    def finding(
        self,
        node: TSNode | None,
        message_id: str,
        *,
        suggestion: str = "",
        **data: Any,
    ) -> Finding:
        """Build a Finding located at *node* (or the file start when None)."""
        if node is None:
            line, column = 1, 1
        else:
            line = node.start_point[0] + 1
            column = node.start_point[1] + 1
        return Finding(
            message_id=message_id,
            line=line,
            column=column,
            code=snippet(self.unit.lines, line),
            suggestion=suggestion,
            data=data,
        )


def snippet(lines: Sequence[str], line: int) -> str:
    if not 1 <= line <= len(lines):
        return ""
    text = lines[line - 1].strip()
    if len(text) > _MAX_SNIPPET:
        text = text[: _MAX_SNIPPET - 3] + "..."
    return text


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class RuleEngine:
    """Dispatch table of rules keyed by node type, built once per run."""

    def __init__(self, rules: Sequence[Rule], severities: dict[str, str] | None = None) -> None:
        self.rules: tuple[Rule, ...] = tuple(rules)
        self.severities: dict[str, str] = dict(severities or {})
        self._dispatch: dict[str, list[Rule]] = {}
        for rule in self.rules:
            for node_type in sorted(rule.node_types):
                self._dispatch.setdefault(node_type, []).append(rule)

    def severity(self, rule: Rule, message_id: str) -> str:
        override = self.severities.get(rule.meta.id)
        if override is not None:
            return override
        return rule.meta.severity_for(message_id)

    def analyze_unit(self, unit: SourceUnit, run: RunContext) -> list[Violation]:
        """Traverse *unit* once and return its violations in discovery order.

        An exception raised by a rule becomes a single ``internalError``
        warning for that rule; the rule is skipped for the rest of the file
        and traversal continues.
        """
        ctx = FileContext(unit=unit, run=run)
        collected: list[tuple[Rule, Finding]] = []
        failed: set[str] = set()

        def invoke(rule: Rule, node: TSNode | None) -> None:
            try:
                if node is None:
                    findings = rule.on_file_exit(ctx)
                else:
                    findings = rule.on_node(node, ctx)
            except Exception as exc:
                failed.add(rule.meta.id)
                logger.warning("Rule %s failed on %s: %s", rule.meta.id, unit.rel_path, exc)
                collected.append((rule, _internal_error(ctx, node, rule, exc)))
                return
            collected.extend((rule, f) for f in findings)

        for node in walk(unit.root):
            for rule in self._dispatch.get(node.type, ()):
                if rule.meta.id not in failed:
                    invoke(rule, node)

        for rule in self.rules:
            if rule.meta.id not in failed:
                invoke(rule, None)

        return [
            self._to_violation(rule, finding, unit.rel_path, index)
            for index, (rule, finding) in enumerate(collected, start=1)
        ]

    def analyze_source(
        self, path: Path, rel_path: str, run: RunContext, text: str | None = None
    ) -> list[Violation]:
        """Read, parse, and analyze one file.

        Unreadable or unparsable files yield one ``parse-error`` violation,
        followed by the findings of rules that only need the file's path.
        """
        coordinate = classify_path(rel_path, run.source_root)
        try:
            if text is None:
                text = path.read_text(encoding="utf-8")
            unit = parse_source(path, rel_path, text, coordinate)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read file: %s", rel_path)
            failure = parse_error_violation(rel_path, f"Cannot read file: {exc}", 1, 1)
            return [failure, *self.analyze_unparsed(path, rel_path, "", coordinate, run)]
        except SourceParseError as exc:
            logger.warning("Cannot parse %s: %s", rel_path, exc)
            failure = parse_error_violation(rel_path, str(exc), exc.line, exc.column, text)
            return [failure, *self.analyze_unparsed(path, rel_path, text, coordinate, run)]

        return self.analyze_unit(unit, run)

    def analyze_unparsed(
        self,
        path: Path,
        rel_path: str,
        text: str,
        coordinate: LayerCoordinate | None,
        run: RunContext,
    ) -> list[Violation]:
        """Run the ``on_unparsed`` hook of path-based rules for a file with no tree.

        Violation numbering starts after the file's ``parse-error`` violation.
        """
        unit = SourceUnit(
            path=path,
            rel_path=rel_path,
            text=text,
            tree=None,
            coordinate=coordinate,
            lang=None,
        )
        ctx = FileContext(unit=unit, run=run)
        collected: list[tuple[Rule, Finding]] = []
        for rule in self.rules:
            hook = getattr(rule, "on_unparsed", None)
            if hook is None:
                continue
            try:
                findings = hook(ctx)
            except Exception as exc:
                logger.warning("Rule %s failed on %s: %s", rule.meta.id, rel_path, exc)
                collected.append((rule, _internal_error(ctx, None, rule, exc)))
                continue
            collected.extend((rule, f) for f in findings)

        return [
            self._to_violation(rule, finding, rel_path, index)
            for index, (rule, finding) in enumerate(collected, start=2)
        ]

    def _to_violation(self, rule: Rule, finding: Finding, rel_path: str, index: int) -> Violation:
        if finding.message_id == INTERNAL_ERROR_MESSAGE:
            severity = SEVERITY_WARNING
            message = str(finding.data.get("error", "internal error"))
        else:
            severity = self.severity(rule, finding.message_id)
            message = rule.meta.messages[finding.message_id].format(**finding.data)
        return Violation(
            id=f"{rel_path}#{index}",
            rule=rule.meta.id,
            message_id=finding.message_id,
            severity=severity,
            message=message,
            file=rel_path,
            line=finding.line,
            column=finding.column,
            code=finding.code,
            suggestion=finding.suggestion,
            description=rule.meta.description,
            data=dict(finding.data),
        )


def _internal_error(ctx: FileContext, node: TSNode | None, rule: Rule, exc: Exception) -> Finding:
    error = f"Rule '{rule.meta.id}' failed: {type(exc).__name__}: {exc}"
    return ctx.finding(node, INTERNAL_ERROR_MESSAGE, error=error)


def parse_error_violation(
    rel_path: str, message: str, line: int, column: int, text: str | None = None
) -> Violation:
    code = snippet(text.splitlines(), line) if text else ""
    return Violation(
        id=f"{rel_path}#1",
        rule=PARSE_ERROR_RULE,
        message_id="parseError",
        severity=SEVERITY_ERROR,
        message=message,
        file=rel_path,
        line=line,
        column=column,
        code=code,
        description="File could not be parsed; only path-based rules were applied to it.",
    )
