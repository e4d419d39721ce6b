"""Ban literal design values (colors, spacing, font sizes, radii, z-index) in styles.

Only string literals are inspected; anything computed (variables, template
strings, ``var(--x)``, ``calc(...)``) passes.  The check is purely
syntactic and prefers missing a violation to reporting a false one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fsdlint.analysis.engine import RuleMeta
from fsdlint.analysis.source import node_text, string_value

if TYPE_CHECKING:
    from tree_sitter import Node as TSNode

    from fsdlint.analysis.engine import FileContext, Finding

RULE_ID = "no-literal-style-values"

_COLOR_RE = re.compile(r"(#[0-9a-fA-F]{3,8}|rgb\(.*?\)|rgba\(.*?\)|hsl\(.*?\)|hsla\(.*?\))")
_SPACING_RE = re.compile(r"^(\d+(\.\d+)?(px|rem|em)|[1-9]\d*%)$")
_FONT_SIZE_RE = re.compile(r"^\d+(\.\d+)?(px|rem|em)$")
_RADIUS_RE = re.compile(r"^\d+(\.\d+)?(px|rem|em)$")
_Z_INDEX_RE = re.compile(r"^\d+$")

_EXEMPT_VALUES: frozenset[str] = frozenset({"transparent", "0", "auto", "100%", "100vh", "100vw"})
_EXEMPT_PREFIXES: tuple[str, ...] = ("var(--", "calc(")


@dataclass(frozen=True)
class TokenFamily:
    """One category of design value: its pattern, property vocabulary, and token path."""

    message_id: str
    pattern: re.Pattern[str]
    keywords: tuple[str, ...]  # substrings of the property name
    token: str  # replacement suggestion

    def matches(self, prop: str, value: str) -> bool:
        return any(k in prop for k in self.keywords) and self.pattern.search(value) is not None


FAMILIES: tuple[TokenFamily, ...] = (
    TokenFamily("literalColor", _COLOR_RE, ("color", "Color"), "theme.colors.*"),
    TokenFamily(
        "literalSpacing",
        _SPACING_RE,
        ("margin", "padding", "gap", "Margin", "Padding"),
        "theme.spacing[*]",
    ),
    TokenFamily(
        "literalTypography",
        _FONT_SIZE_RE,
        ("fontSize", "font-size"),
        "theme.typography.fontSize.*",
    ),
    TokenFamily(
        "literalBorderRadius",
        _RADIUS_RE,
        ("borderRadius", "border-radius"),
        "theme.borderRadius.*",
    ),
    TokenFamily("literalZIndex", _Z_INDEX_RE, ("zIndex", "z-index"), "theme.zIndex[*]"),
)


def is_exempt(value: str) -> bool:
    return value in _EXEMPT_VALUES or value.startswith(_EXEMPT_PREFIXES)


def _property_name(key: TSNode | None) -> str | None:
    if key is None:
        return None
    if key.type in ("property_identifier", "identifier"):
        return node_text(key)
    if key.type == "string":
        return string_value(key)
    return None


class LiteralStyleValuesRule:
    meta = RuleMeta(
        id=RULE_ID,
        description=(
            "Enforce design tokens instead of literal color, spacing, and other design values"
        ),
        severity="error",
        messages={
            "literalColor": 'Replace literal color "{value}" with theme.colors.* token',
            "literalSpacing": 'Replace literal spacing "{value}" with theme.spacing[*] token',
            "literalTypography": (
                'Replace literal font-size "{value}" with theme.typography.fontSize.* token'
            ),
            "literalBorderRadius": (
                'Replace literal border-radius "{value}" with theme.borderRadius.* token'
            ),
            "literalZIndex": 'Replace literal z-index "{value}" with theme.zIndex[*] token',
        },
    )
    node_types = frozenset({"jsx_attribute", "object"})

    def on_node(self, node: TSNode, ctx: FileContext) -> list[Finding]:
        if node.type == "jsx_attribute":
            style = _style_object(node)
            return self._check_object(style, ctx) if style is not None else []
        if _is_styling_call_argument(node):
            return self._check_object(node, ctx)
        return []

    def on_file_exit(self, ctx: FileContext) -> list[Finding]:
        return []

    def _check_object(self, obj: TSNode, ctx: FileContext) -> list[Finding]:
        findings: list[Finding] = []
        for pair in obj.named_children:
            if pair.type != "pair":
                continue
            prop = _property_name(pair.child_by_field_name("key"))
            value_node = pair.child_by_field_name("value")
            if prop is None or value_node is None or value_node.type != "string":
                continue
            value = string_value(value_node)
            if not value or is_exempt(value):
                continue
            for family in FAMILIES:
                if family.matches(prop, value):
                    findings.append(
                        ctx.finding(
                            pair,
                            family.message_id,
                            suggestion=f"{prop}: {family.token}",
                            value=value,
                        )
                    )
        return findings


def _style_object(attr: TSNode) -> TSNode | None:
    """Return the object literal of a ``style={{...}}`` attribute, if any."""
    children = attr.named_children
    if not children or node_text(children[0]) != "style":
        return None
    expression = next((c for c in children[1:] if c.type == "jsx_expression"), None)
    if expression is None:
        return None
    inner = expression.named_children
    if inner and inner[0].type == "object":
        return inner[0]
    return None


def _is_styling_call_argument(obj: TSNode) -> bool:
    """Return True for object literals passed directly to a call, e.g. ``css({...})``."""
    parent = obj.parent
    if parent is None or parent.type != "arguments":
        return False
    call = parent.parent
    return call is not None and call.type == "call_expression"
