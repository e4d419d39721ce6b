"""Project configuration: parse ``fsdlint.yml`` and validate it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from fsdlint.analysis.layers import LayerHierarchy, default_hierarchy, parse_hierarchy

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CONFIG_FILENAMES: tuple[str, ...] = ("fsdlint.yml", "fsdlint.yaml", ".fsdlint.yml")

VALID_SEVERITIES: frozenset[str] = frozenset({"error", "warning"})
OFF = "off"

DEFAULT_SOURCE_ROOT = "app"
DEFAULT_ALIASES: dict[str, str] = {"~/": "app/", "@/": "app/"}
DEFAULT_OUTPUT = "ruleResults.json"
DEFAULT_EXCLUDE: tuple[str, ...] = (
    "*/node_modules/*",
    "*/build/*",
    "*/dist/*",
    "*/coverage/*",
    "*.d.ts",
)

_KNOWN_KEYS: frozenset[str] = frozenset(
    {"source_root", "aliases", "layers", "exclude", "output", "rules"}
)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleSettings:
    """Per-rule overrides: severity (``error``/``warning``/``off``) and options."""

    severity: str | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def enabled(self) -> bool:
        return self.severity != OFF


@dataclass(frozen=True)
class ProjectConfig:
    """Effective configuration for one analysis run."""

    source_root: str = DEFAULT_SOURCE_ROOT
    aliases: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ALIASES))
    hierarchy: LayerHierarchy = field(default_factory=default_hierarchy)
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE
    output: str = DEFAULT_OUTPUT
    rules: dict[str, RuleSettings] = field(default_factory=dict)

    def rule_settings(self, rule_id: str) -> RuleSettings:
        return self.rules.get(rule_id, RuleSettings())


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_rule_settings(rule_id: str, raw: object, known_rules: frozenset[str]) -> RuleSettings:
    if rule_id not in known_rules:
        msg = f"rules: unknown rule '{rule_id}', must be one of {sorted(known_rules)}"
        raise ValueError(msg)

    # YAML 1.1 reads a bare ``off`` as False and ``on`` as True.
    if isinstance(raw, bool):
        raw = None if raw else OFF

    if raw is None:
        severity: object = None
        options: dict[str, Any] = {}
    elif isinstance(raw, str):
        severity = raw
        options = {}
    elif isinstance(raw, dict):
        options = {str(k): v for k, v in raw.items() if k != "severity"}
        severity = raw.get("severity")
        if isinstance(severity, bool):
            severity = None if severity else OFF
    else:
        msg = f"rules.{rule_id}: expected a severity string or a mapping"
        raise ValueError(msg)

    if severity is not None:
        severity = str(severity)
        if severity == "warn":
            severity = "warning"
        if severity not in VALID_SEVERITIES and severity != OFF:
            msg = (
                f"rules.{rule_id}: invalid severity '{severity}', "
                f"must be one of {sorted(VALID_SEVERITIES | {OFF})}"
            )
            raise ValueError(msg)

    return RuleSettings(severity=severity, options=options)


def _parse_aliases(raw: object) -> dict[str, str]:
    if not isinstance(raw, dict):
        msg = "aliases must be a mapping of import prefix -> directory"
        raise ValueError(msg)
    aliases: dict[str, str] = {}
    for prefix, target in raw.items():
        prefix_str = str(prefix)
        if not prefix_str:
            msg = "aliases: prefix must not be empty"
            raise ValueError(msg)
        aliases[prefix_str] = str(target)
    return aliases


def parse_config(data: object, *, known_rules: frozenset[str]) -> ProjectConfig:
    """Build a ProjectConfig from an already-loaded YAML document.

    Raises
    ------
    ValueError
        When any section is malformed.
    """
    if data is None:
        return ProjectConfig()
    if not isinstance(data, dict):
        msg = "configuration must be a mapping"
        raise ValueError(msg)

    unknown = sorted(str(k) for k in data if k not in _KNOWN_KEYS)
    if unknown:
        msg = f"unknown configuration keys: {unknown}"
        raise ValueError(msg)

    defaults = ProjectConfig()

    source_root = str(data.get("source_root", defaults.source_root)).strip("/")
    if not source_root:
        msg = "source_root must not be empty"
        raise ValueError(msg)

    aliases = {prefix: f"{source_root}/" for prefix in DEFAULT_ALIASES}
    if "aliases" in data:
        aliases = _parse_aliases(data["aliases"])

    hierarchy = defaults.hierarchy
    if "layers" in data:
        hierarchy = parse_hierarchy(data["layers"])

    exclude = defaults.exclude
    if "exclude" in data:
        raw_exclude = data["exclude"]
        if not isinstance(raw_exclude, list):
            msg = "exclude must be a list of glob patterns"
            raise ValueError(msg)
        exclude = tuple(str(p) for p in raw_exclude)

    output = str(data.get("output", defaults.output))

    rules: dict[str, RuleSettings] = {}
    raw_rules = data.get("rules", {})
    if raw_rules is None:
        raw_rules = {}
    if not isinstance(raw_rules, dict):
        msg = "rules must be a mapping of rule id -> severity or settings"
        raise ValueError(msg)
    for rule_id, raw in raw_rules.items():
        rules[str(rule_id)] = _parse_rule_settings(str(rule_id), raw, known_rules)

    return ProjectConfig(
        source_root=source_root,
        aliases=aliases,
        hierarchy=hierarchy,
        exclude=exclude,
        output=output,
        rules=rules,
    )


def find_config(project_root: Path) -> Path | None:
    for name in CONFIG_FILENAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    return None


def load_config(project_root: Path, config_path: Path | None = None) -> ProjectConfig:
    """Load the project configuration, falling back to defaults when absent.

    Raises
    ------
    ValueError
        When the file exists but is not valid YAML or fails validation.
    """
    from fsdlint.rules import RULE_IDS

    if config_path is None:
        config_path = find_config(project_root)
    if config_path is None:
        logger.debug("No config file in %s, using defaults", project_root)
        return ProjectConfig()

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        msg = f"cannot read {config_path}: {exc}"
        raise ValueError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"invalid YAML in {config_path.name}: {exc}"
        raise ValueError(msg) from exc

    logger.debug("Loaded config from %s", config_path)
    return parse_config(data, known_rules=RULE_IDS)
