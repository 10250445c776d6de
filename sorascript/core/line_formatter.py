"""Per-line display formatting for generated scripts"""

import re
from html import escape
from typing import List, Literal, Optional, Tuple, TypedDict

from ..prompts.script import SECTION_HEADERS

FULLWIDTH_COLON = "："

_TIMESTAMP_LINE = re.compile(r'^\*\*\d{2}:\d{2}')
_SEPARATOR_RULE = re.compile(r'^-{3,}$')

LineKind = Literal["badge", "pair", "spacer", "text"]


class FormattedLine(TypedDict, total=False):
    kind: LineKind
    text: str   # badge / text
    key: str    # pair
    value: str  # pair


def split_key_value(line: str) -> Tuple[str, str]:
    """
    Split a "**Key：** Value" line on the first full-width colon

    Emphasis markers are removed from the key only; colons inside the value
    are preserved.
    """
    parts = line.split(FULLWIDTH_COLON)
    key = parts[0].replace('**', '').replace('*', '').strip()
    value = FULLWIDTH_COLON.join(parts[1:]).strip()
    return key, value


def format_line(line: str) -> Optional[FormattedLine]:
    """
    Classify one script line into a display shape

    Checks run in order and the first match wins: section header or separator
    (skipped, returns None), bold timestamp (badge), bold key with full-width
    colon (pair), blank (spacer), anything else (text).
    """
    trimmed = line.strip()

    if trimmed in SECTION_HEADERS or _SEPARATOR_RULE.match(trimmed):
        return None

    if _TIMESTAMP_LINE.match(trimmed):
        return {"kind": "badge", "text": trimmed.replace('**', '')}

    if FULLWIDTH_COLON in line and '**' in line:
        key, value = split_key_value(line)
        return {"kind": "pair", "key": key, "value": value}

    if not trimmed:
        return {"kind": "spacer"}

    return {"kind": "text", "text": line}


def format_section(content: str) -> List[FormattedLine]:
    """Format every line of a section body, dropping skipped lines"""
    formatted = []
    for line in content.strip().split('\n'):
        shape = format_line(line)
        if shape is not None:
            formatted.append(shape)
    return formatted


def render_html(lines: List[FormattedLine]) -> str:
    """Render formatted lines as escaped HTML fragments for the page"""
    html_parts = []
    for shape in lines:
        kind = shape["kind"]
        if kind == "badge":
            html_parts.append(f'<div class="line-badge">{escape(shape["text"])}</div>')
        elif kind == "pair":
            html_parts.append(
                '<div class="line-pair">'
                f'<span class="line-key">{escape(shape["key"])}{FULLWIDTH_COLON}</span>'
                f'<span class="line-value">{escape(shape["value"])}</span>'
                '</div>'
            )
        elif kind == "spacer":
            html_parts.append('<div class="line-spacer"></div>')
        else:
            html_parts.append(f'<div class="line-text">{escape(shape["text"])}</div>')
    return "\n".join(html_parts)
