# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Serializers for applied style variables.

Formats a variable map (and optionally the ColorResult it came from) as a
CSS rule, JSON or Markdown. Values are emitted exactly as applied.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Mapping, Optional

from tunetint.schema import ROLES, ColorResult


class OutputFormat(Enum):
    """Output format options."""

    CSS = "css"
    JSON = "json"
    MARKDOWN = "markdown"


def to_style_block(
    variables: Mapping[str, str],
    *,
    format: OutputFormat = OutputFormat.CSS,
    result: Optional[ColorResult] = None,
    selector: str = ":root",
) -> str:
    """Serialize applied variables.

    Args:
        variables: Variable name → value, in application order.
        format: CSS, JSON or MARKDOWN.
        result: The result the variables came from (adds provenance).
        selector: CSS selector for the rule.

    Returns:
        Formatted string.

    Example (CSS)::

        /* tunetint generation 3 content "track-1" */
        :root {
          --sn-color-primary-hex: #C83A3A;
          --sn-color-primary-rgb: 200,58,58;
        }
    """
    if format == OutputFormat.CSS:
        return _to_css(variables, result, selector)
    elif format == OutputFormat.JSON:
        return _to_json(variables, result)
    else:
        return _to_markdown(variables, result, selector)


def _to_css(
    variables: Mapping[str, str],
    result: Optional[ColorResult],
    selector: str,
) -> str:
    lines = []
    if result is not None:
        lines.append(
            f'/* tunetint generation {result.generation_id} '
            f'content "{result.content_id}" */'
        )
    lines.append(f"{selector} {{")
    for name, value in variables.items():
        lines.append(f"  {name}: {value};")
    lines.append("}")
    return "\n".join(lines)


def _to_json(variables: Mapping[str, str], result: Optional[ColorResult]) -> str:
    data: dict = {"css_variables": dict(variables)}
    if result is not None:
        data["result"] = result.to_dict()
    return json.dumps(data, indent=2)


def _to_markdown(
    variables: Mapping[str, str],
    result: Optional[ColorResult],
    selector: str,
) -> str:
    lines = []
    if result is not None:
        meta = result.metadata
        lines.append(f"### Generation {meta.generation_id} ({meta.content_id})")
        lines.append("")
        lines.append("| Role | Hex |")
        lines.append("|------|-----|")
        for role in ROLES:
            lines.append(f"| {role} | `{result.role_hex(role)}` |")
        lines.append("")
        music = "applied" if meta.music_influence_applied else "not applied"
        lines.append(f"Music influence {music}; fallback palette: {'yes' if meta.fallback else 'no'}.")
        lines.append("")
    lines.append("```css")
    lines.append(_to_css(variables, None, selector))
    lines.append("```")
    return "\n".join(lines)
