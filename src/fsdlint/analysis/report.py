"""Violation report: data model, run summary aggregation, and output formatters."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Violation:
    """A single rule violation, immutable once created."""

    id: str  # unique within a run: "<file>#<n>"
    rule: str  # rule id, e.g. "enforce-fsd-layer-boundaries"
    message_id: str  # e.g. "crossSliceImport"
    severity: str  # "error" | "warning"
    message: str
    file: str  # project-relative POSIX path
    line: int  # 1-based
    column: int  # 1-based
    code: str = ""  # offending snippet
    suggestion: str = ""
    description: str = ""
    data: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, object]:
        """Serialize to the ``RuleViolation`` wire shape."""
        return {
            "id": self.id,
            "rule": self.rule,
            "severity": self.severity,
            "message": self.message,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "code": self.code,
            "suggestion": self.suggestion,
            "description": self.description,
        }


@dataclass(frozen=True)
class RunSummary:
    """Aggregate counts for one run, derived from its violation list."""

    total_violations: int
    errors: int
    warnings: int
    rules: tuple[str, ...]
    execution_time: str
    timestamp: str

    def to_dict(self) -> dict[str, object]:
        return {
            "totalViolations": self.total_violations,
            "errors": self.errors,
            "warnings": self.warnings,
            "rules": list(self.rules),
            "executionTime": self.execution_time,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class RuleResults:
    """The analyzer's product: ordered violations plus their summary."""

    violations: tuple[Violation, ...]
    summary: RunSummary
    files_scanned: int = 0

    @property
    def has_errors(self) -> bool:
        return self.summary.errors > 0

    def to_dict(self) -> dict[str, object]:
        return {
            "violations": [v.to_dict() for v in self.violations],
            "summary": self.summary.to_dict(),
        }


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def format_duration(elapsed_ms: float) -> str:
    if elapsed_ms < 1000:
        return f"{elapsed_ms:.0f}ms"
    return f"{elapsed_ms / 1000:.2f}s"


def summarize(
    violations: tuple[Violation, ...] | list[Violation],
    *,
    elapsed_ms: float = 0.0,
    now: datetime | None = None,
) -> RunSummary:
    """Compute the RunSummary of *violations*.

    Pure apart from the timestamp: pass *now* to pin it.  Rule ids are listed
    in order of first appearance.
    """
    errors = sum(1 for v in violations if v.severity == SEVERITY_ERROR)
    warnings = sum(1 for v in violations if v.severity == SEVERITY_WARNING)
    rules = tuple(dict.fromkeys(v.rule for v in violations))
    stamp = now if now is not None else datetime.now(tz=timezone.utc)
    return RunSummary(
        total_violations=len(violations),
        errors=errors,
        warnings=warnings,
        rules=rules,
        execution_time=format_duration(elapsed_ms),
        timestamp=stamp.isoformat(),
    )


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_rich(results: RuleResults) -> str:
    """Format results as human-readable text grouped by file.

    Example output::

        app/features/kanban/ui/Board.tsx
          12:3  error    Slice "kanban" cannot import from slice "auth" ...  enforce-fsd-layer-boundaries

        1 problem (1 error, 0 warnings) in 14 files, 35ms
    """
    lines: list[str] = []
    current_file: str | None = None

    for v in results.violations:
        if v.file != current_file:
            if current_file is not None:
                lines.append("")
            lines.append(v.file)
            current_file = v.file
        marker = "✗" if v.severity == SEVERITY_ERROR else "!"
        lines.append(f"  {v.line}:{v.column}  {marker} {v.severity:<7}  {v.message}  {v.rule}")
        if v.suggestion:
            lines.append(f"      → {v.suggestion}")

    summary = results.summary
    if summary.total_violations:
        if lines:
            lines.append("")
        noun = "problem" if summary.total_violations == 1 else "problems"
        lines.append(
            f"{summary.total_violations} {noun} ({summary.errors} errors, "
            f"{summary.warnings} warnings) in {results.files_scanned} files, "
            f"{summary.execution_time}"
        )
    else:
        lines.append(
            f"✓ No violations found ({results.files_scanned} files, "
            f"{summary.execution_time})"
        )

    return "\n".join(lines)


def format_json(results: RuleResults) -> str:
    """Format results as the ``RuleResults`` JSON document."""
    return json.dumps(results.to_dict(), indent=2, ensure_ascii=False)


def format_porcelain(results: RuleResults) -> str:
    """Format results one violation per line.

    Format: ``file:line:column:severity:rule:message``.  Returns an empty
    string when there are no violations.
    """
    return "\n".join(
        f"{v.file}:{v.line}:{v.column}:{v.severity}:{v.rule}:{v.message}"
        for v in results.violations
    )
