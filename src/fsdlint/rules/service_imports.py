"""Require UI components to reach services and clients through injected hooks."""

from __future__ import annotations

import posixpath
import re
from typing import TYPE_CHECKING

from fsdlint.analysis.engine import RuleMeta
from fsdlint.analysis.layers import classify_path, resolve_import_path
from fsdlint.analysis.source import import_bindings, import_source, is_type_only_import
from fsdlint.rules.common import hook_names, is_component_file, is_test_file

if TYPE_CHECKING:
    from tree_sitter import Node as TSNode

    from fsdlint.analysis.engine import FileContext, Finding

RULE_ID = "no-direct-service-imports"

_WORD_SPLIT_RE = re.compile(r"[-_.\s]+")
_SERVICE_SUFFIX_RE = re.compile(r"service$", re.IGNORECASE)


def _camel_case(segment: str) -> str:
    words = [w for w in _WORD_SPLIT_RE.split(segment) if w]
    if not words:
        return ""
    return words[0] + "".join(w[:1].upper() + w[1:] for w in words[1:])


def accessor_name(name: str) -> str:
    """Derive the hook name for a flagged binding: ``userService`` -> ``useUserService``."""
    base = _SERVICE_SUFFIX_RE.sub("Service", _camel_case(name))
    return "use" + base[:1].upper() + base[1:]


def _flagged_name(bindings: list[str], segment: str, keyword: str) -> str | None:
    """Return the name to report when a binding or the path segment mentions *keyword*.

    Hook bindings (``useUserService``) are already the injected accessor and
    are never reported.
    """
    hooks = set(hook_names(bindings))
    concrete = [name for name in bindings if name not in hooks]
    for name in concrete:
        if keyword in name.lower():
            return name
    if keyword in segment.lower():
        if concrete:
            return concrete[0]
        if not bindings:
            return _camel_case(segment)
    return None


class ServiceImportsRule:
    meta = RuleMeta(
        id=RULE_ID,
        description="Prevent direct service imports in React components, suggest DI pattern",
        severity="error",
        messages={
            "directServiceImport": (
                'Avoid direct service import "{service}". '
                "Use DI hook like {accessor}() instead."
            ),
            "directClientImport": 'Avoid direct client import "{client}". Use DI pattern instead.',
            "directFeatureHookImport": (
                "Avoid importing hooks directly from feature layers. "
                "Use dependency injection or create abstracted hooks in shared layer."
            ),
        },
    )
    node_types = frozenset({"import_statement"})

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        rel_path = ctx.rel_path
        if not is_component_file(rel_path) or is_test_file(rel_path):
            return []
        source = import_source(node)
        if source is None or "react" in source or is_type_only_import(node):
            return []

        bindings = import_bindings(node)
        findings: list[Finding] = []

        importer = ctx.coordinate
        if importer is not None and importer.layer == "widgets":
            target_path = resolve_import_path(source, rel_path, ctx.run.aliases)
            target = (
                classify_path(target_path, ctx.run.source_root) if target_path is not None else None
            )
            hooks = hook_names(bindings)
            if target is not None and target.layer == "features" and hooks:
                findings.append(
                    ctx.finding(
                        node,
                        "directFeatureHookImport",
                        suggestion=f"Re-export {', '.join(hooks)} through a shared hook",
                        hooks=", ".join(hooks),
                    )
                )

        segment = posixpath.splitext(posixpath.basename(source.rstrip("/")))[0]

        service = _flagged_name(bindings, segment, "service")
        if service is not None:
            accessor = accessor_name(service)
            findings.append(
                ctx.finding(
                    node,
                    "directServiceImport",
                    suggestion=f"const {service} = {accessor}()",
                    service=service,
                    accessor=accessor,
                )
            )

        client = _flagged_name(bindings, segment, "client")
        if client is not None:
            accessor = accessor_name(client)
            findings.append(
                ctx.finding(
                    node,
                    "directClientImport",
                    suggestion=f"const {client} = {accessor}()",
                    client=client,
                    accessor=accessor,
                )
            )

        return findings

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        return []
