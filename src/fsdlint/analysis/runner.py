"""Analysis orchestrator: load config, discover files, fan out per file, aggregate."""

from __future__ import annotations

import fnmatch
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from fsdlint.analysis.engine import RuleEngine, RunContext
from fsdlint.analysis.report import RuleResults, format_json, summarize
from fsdlint.analysis.source import supported_extensions
from fsdlint.config import load_config
from fsdlint.rules import build_rules

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from fsdlint.analysis.engine import FileSystem
    from fsdlint.analysis.report import Violation
    from fsdlint.config import ProjectConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LintError(Exception):
    """Raised when the analysis cannot run because of a configuration error."""


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------


def _rel_posix(path: Path, project_root: Path) -> str:
    return path.relative_to(project_root).as_posix()


def is_excluded(rel_path: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatch(rel_path, p) or fnmatch.fnmatch("/" + rel_path, p) for p in patterns)


def discover_files(project_root: Path, config: ProjectConfig) -> list[str]:
    """Return analyzable project-relative paths under the source root, sorted.

    Raises
    ------
    LintError
        When the configured source root does not exist.
    """
    source_dir = project_root / config.source_root
    if not source_dir.is_dir():
        msg = f"source root '{config.source_root}' not found in {project_root}"
        raise LintError(msg)

    extensions = supported_extensions()
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(source_dir):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for filename in filenames:
            if os.path.splitext(filename)[1] not in extensions:
                continue
            rel_path = _rel_posix(Path(dirpath) / filename, project_root)
            if is_excluded(rel_path, config.exclude):
                logger.debug("Excluded %s", rel_path)
                continue
            found.append(rel_path)

    found.sort()
    logger.debug("Discovered %d files under %s", len(found), source_dir)
    return found


def _explicit_files(project_root: Path, files: Iterable[Path]) -> list[str]:
    rel_paths: set[str] = set()
    extensions = supported_extensions()
    for file_path in files:
        absolute = file_path if file_path.is_absolute() else project_root / file_path
        try:
            rel_path = _rel_posix(absolute.resolve(), project_root.resolve())
        except ValueError:
            logger.warning("Skipping %s: outside project root", file_path)
            continue
        if absolute.suffix not in extensions:
            logger.debug("Skipping %s: unsupported extension", rel_path)
            continue
        rel_paths.add(rel_path)
    return sorted(rel_paths)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def analyze(
    project_root: Path,
    *,
    config: ProjectConfig | None = None,
    config_path: Path | None = None,
    files: Iterable[Path] | None = None,
    jobs: int = 1,
    fs: FileSystem | None = None,
    now: datetime | None = None,
) -> RuleResults:
    """Run every enabled rule over the project and return its RuleResults.

    Parameters
    ----------
    project_root:
        Root of the front-end project (where ``fsdlint.yml`` lives).
    config:
        Pre-built configuration; when *None* it is loaded from disk.
    files:
        Restrict the run to these files instead of scanning the source root.
    jobs:
        Number of worker threads.  Output is identical for any value.
    now:
        Pin the summary timestamp.

    Raises
    ------
    LintError
        When the configuration is invalid.
    """
    start = time.monotonic()
    project_root = project_root.resolve()

    if config is None:
        try:
            config = load_config(project_root, config_path)
        except ValueError as exc:
            msg = f"Invalid configuration: {exc}"
            raise LintError(msg) from exc

    try:
        rules, severities = build_rules(config)
    except ValueError as exc:
        msg = f"Invalid configuration: {exc}"
        raise LintError(msg) from exc

    rel_paths = (
        _explicit_files(project_root, files)
        if files is not None
        else discover_files(project_root, config)
    )

    run = RunContext.build(
        project_root=project_root,
        source_root=config.source_root,
        aliases=config.aliases,
        hierarchy=config.hierarchy,
        files=rel_paths,
        fs=fs,
    )
    engine = RuleEngine(rules, severities)

    def analyze_one(rel_path: str) -> list[Violation]:
        return engine.analyze_source(project_root / rel_path, rel_path, run)

    if jobs > 1 and len(run.files) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            per_file = list(executor.map(analyze_one, run.files))
    else:
        per_file = [analyze_one(rel_path) for rel_path in run.files]

    violations = tuple(v for file_violations in per_file for v in file_violations)
    elapsed = (time.monotonic() - start) * 1000
    summary = summarize(violations, elapsed_ms=elapsed, now=now)

    logger.info(
        "Analyzed %d files with %d rules: %d violations (%d errors, %d warnings)",
        len(run.files),
        len(rules),
        summary.total_violations,
        summary.errors,
        summary.warnings,
    )
    return RuleResults(violations=violations, summary=summary, files_scanned=len(run.files))


def write_results(results: RuleResults, output_path: Path) -> None:
    """Write the RuleResults JSON artifact consumed by the reporting UI."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(format_json(results) + "\n", encoding="utf-8")
    logger.debug("Wrote %s", output_path)
