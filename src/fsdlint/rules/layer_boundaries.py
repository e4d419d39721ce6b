"""Enforce import direction between layers and isolation between slices."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fsdlint.analysis.engine import RuleMeta
from fsdlint.analysis.layers import SHARED_LAYER, classify_path, resolve_import_path
from fsdlint.analysis.source import import_bindings, import_source
from fsdlint.rules.common import hook_names, in_ui_dir, mentions_api

if TYPE_CHECKING:
    from tree_sitter import Node as TSNode

    from fsdlint.analysis.engine import FileContext, Finding

RULE_ID = "enforce-fsd-layer-boundaries"


class LayerBoundariesRule:
    """Checks every import that resolves into the layered tree.

    Checks run in a fixed order and are not exclusive: one import may
    produce several findings.
    """

    meta = RuleMeta(
        id=RULE_ID,
        description="Enforce proper import boundaries between FSD layers",
        severity="error",
        messages={
            "invalidLayerImport": (
                'Layer "{fromLayer}" cannot import from "{toLayer}". '
                "Allowed imports: {allowedLayers}"
            ),
            "crossSliceImport": (
                'Slice "{fromSlice}" cannot import from slice "{toSlice}" '
                'on the same layer "{layer}"'
            ),
            "directApiImportInUI": (
                "UI component should not directly import from API layer. Use hooks instead."
            ),
            "uiImportInApi": "API layer should not import UI components",
            "widgetImportingFromFeature": (
                "Widget layer cannot import hooks/services from feature layer. "
                "Create abstracted hooks in shared layer instead."
            ),
        },
    )
    node_types = frozenset({"import_statement"})

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        importer = ctx.coordinate
        source = import_source(node)
        if importer is None or source is None:
            return []

        run = ctx.run
        target_path = resolve_import_path(source, ctx.rel_path, run.aliases)
        if target_path is None:
            return []
        target = classify_path(target_path, run.source_root)
        if target is None:
            return []

        findings: list[Finding] = []

        # Allowed by the hierarchy, so it has to be caught before the direction check.
        if importer.layer == "widgets" and target.layer == "features":
            hooks = hook_names(import_bindings(node))
            if hooks:
                findings.append(
                    ctx.finding(
                        node,
                        "widgetImportingFromFeature",
                        suggestion=f"Wrap {', '.join(hooks)} in a hook under shared/lib",
                        fromLayer=importer.layer,
                        toLayer=target.layer,
                        hooks=", ".join(hooks),
                    )
                )

        if importer.layer != target.layer and not run.hierarchy.allows(
            importer.layer, target.layer
        ):
            allowed = run.hierarchy.allowed_targets(importer.layer)
            findings.append(
                ctx.finding(
                    node,
                    "invalidLayerImport",
                    suggestion=(
                        f"Move the imported code into one of: {', '.join(allowed)}"
                        if allowed
                        else ""
                    ),
                    fromLayer=importer.layer,
                    toLayer=target.layer,
                    allowedLayers=", ".join(allowed) or "none",
                )
            )

        if (
            importer.layer == target.layer
            and importer.layer != SHARED_LAYER
            and importer.slice is not None
            and target.slice is not None
            and importer.slice != target.slice
        ):
            findings.append(
                ctx.finding(
                    node,
                    "crossSliceImport",
                    suggestion=f"Compose {importer.slice} and {target.slice} in a higher layer",
                    fromSlice=importer.slice,
                    toSlice=target.slice,
                    layer=importer.layer,
                )
            )

        if in_ui_dir(ctx.rel_path) and mentions_api(target_path):
            findings.append(
                ctx.finding(node, "directApiImportInUI", suggestion="Import a hook from hooks.ts")
            )

        if mentions_api(ctx.rel_path) and in_ui_dir(target_path):
            findings.append(ctx.finding(node, "uiImportInApi"))

        return findings

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        return []
