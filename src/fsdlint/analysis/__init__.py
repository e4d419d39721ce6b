"""Analysis core: layer model, source parsing, rule engine, and reporting.

The orchestrator lives in :mod:`fsdlint.analysis.runner`; it is not
re-exported here because it depends on :mod:`fsdlint.rules`, which itself
imports this package.
"""

from fsdlint.analysis.engine import (
    FileContext,
    FileSystem,
    Finding,
    LocalFileSystem,
    Rule,
    RuleEngine,
    RuleMeta,
    RunContext,
)
from fsdlint.analysis.layers import (
    DEFAULT_HIERARCHY,
    LAYER_NAMES,
    LayerCoordinate,
    LayerHierarchy,
    classify_path,
    default_hierarchy,
    parse_hierarchy,
    resolve_import_path,
)
from fsdlint.analysis.report import (
    RuleResults,
    RunSummary,
    Violation,
    format_json,
    format_porcelain,
    format_rich,
    summarize,
)
from fsdlint.analysis.source import SourceParseError, SourceUnit, parse_source

__all__ = [
    "DEFAULT_HIERARCHY",
    "LAYER_NAMES",
    "FileContext",
    "FileSystem",
    "Finding",
    "LayerCoordinate",
    "LayerHierarchy",
    "LocalFileSystem",
    "Rule",
    "RuleEngine",
    "RuleMeta",
    "RuleResults",
    "RunContext",
    "RunSummary",
    "SourceParseError",
    "SourceUnit",
    "Violation",
    "classify_path",
    "default_hierarchy",
    "format_json",
    "format_porcelain",
    "format_rich",
    "parse_hierarchy",
    "parse_source",
    "resolve_import_path",
    "summarize",
]
