"""Require request/response type contracts in feature API modules."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from fsdlint.analysis.engine import RuleMeta

if TYPE_CHECKING:
    from tree_sitter import Node as TSNode

    from fsdlint.analysis.engine import FileContext, Finding

RULE_ID = "enforce-api-contracts"

_API_MODULE_RE = re.compile(r"(^|/)features/[^/]+/api\.(ts|js)$")

CONTRACT_PATTERNS: dict[str, re.Pattern[str]] = {
    "interface": re.compile(r"\binterface\s+\w+"),
    "type_alias": re.compile(r"\btype\s+\w+(\s*<[^>]*>)?\s*="),
    "schema_import": re.compile(
        r"^\s*import\b[^\n]*['\"][^'\"]*(zod|yup|joi|valibot|[sS]chema)[^'\"]*['\"]",
        re.MULTILINE,
    ),
    "type_import": re.compile(r"\bimport\s+type\b[^\n]*\bfrom\b|\bimport\s*{[^}]*\btype\s+\w+"),
}


def is_api_module(rel_path: str) -> bool:
    return _API_MODULE_RE.search(rel_path) is not None


def contract_evidence(text: str) -> list[str]:
    """Return the names of the contract patterns present in *text*."""
    return [name for name, pattern in CONTRACT_PATTERNS.items() if pattern.search(text)]


class ApiContractsRule:
    meta = RuleMeta(
        id=RULE_ID,
        description="Require explicit TypeScript interfaces or schemas in API files",
        severity="error",
        messages={
            "missingContracts": (
                "API file must contain TypeScript interfaces, type definitions, "
                "or schema imports for request/response contracts"
            ),
        },
    )
    node_types = frozenset({"program"})

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        if not is_api_module(ctx.rel_path) or contract_evidence(ctx.unit.text):
            return []
        return [
            ctx.finding(
                None,
                "missingContracts",
                suggestion="import type { Request, Response } from './types'",
            )
        ]

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        return []
