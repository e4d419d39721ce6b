"""Built-in rules and their construction from project configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fsdlint.rules.api_contracts import ApiContractsRule
from fsdlint.rules.component_shape import ComponentShapeRule
from fsdlint.rules.design_tokens import LiteralStyleValuesRule
from fsdlint.rules.layer_boundaries import LayerBoundariesRule
from fsdlint.rules.pure_function_tests import PureFunctionTestsRule
from fsdlint.rules.service_imports import ServiceImportsRule
from fsdlint.rules.slice_baseline import SliceBaselineRule

if TYPE_CHECKING:
    from fsdlint.analysis.engine import Rule
    from fsdlint.config import ProjectConfig

# Registration order is the dispatch order within a node.
RULE_CLASSES: tuple[type, ...] = (
    LiteralStyleValuesRule,
    LayerBoundariesRule,
    ComponentShapeRule,
    PureFunctionTestsRule,
    ServiceImportsRule,
    ApiContractsRule,
    SliceBaselineRule,
)

RULE_IDS: frozenset[str] = frozenset(cls.meta.id for cls in RULE_CLASSES)


def build_rules(config: ProjectConfig) -> tuple[list[Rule], dict[str, str]]:
    """Instantiate enabled rules and collect their severity overrides.

    Raises
    ------
    ValueError
        When a rule rejects its configured options.
    """
    rules: list[Rule] = []
    severities: dict[str, str] = {}
    for cls in RULE_CLASSES:
        rule_id = cls.meta.id
        settings = config.rule_settings(rule_id)
        if not settings.enabled:
            continue
        try:
            rule = cls(**settings.options)
        except TypeError as exc:
            msg = f"rules.{rule_id}: invalid options {sorted(settings.options)}"
            raise ValueError(msg) from exc
        rules.append(rule)
        if settings.severity is not None:
            severities[rule_id] = settings.severity
    return rules, severities


__all__ = [
    "RULE_CLASSES",
    "RULE_IDS",
    "ApiContractsRule",
    "ComponentShapeRule",
    "LayerBoundariesRule",
    "LiteralStyleValuesRule",
    "PureFunctionTestsRule",
    "ServiceImportsRule",
    "SliceBaselineRule",
    "build_rules",
]
