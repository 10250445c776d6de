"""Split a generated script into its display sections"""

import re
from typing import TypedDict

from ..prompts.script import OVERALL_HEADER, SHOTS_HEADER, MUSIC_HEADER

_SEPARATOR_LINE = re.compile(r'^---$', re.MULTILINE)


class ParsedSections(TypedDict):
    overall: str
    shots: str
    music: str
    other: str  # Fallback for unstructured text


def _extract_section(text: str, header: str, start: int, end: int) -> str:
    """Body between start and end with the header and lone separator lines removed"""
    body = text[start:end].strip()
    body = body.replace(header, '', 1).strip()
    body = _SEPARATOR_LINE.sub('', body)
    return body.strip()


def parse_script(full_script: str) -> ParsedSections:
    """
    Split a generated script into overall / shots / music sections

    Headers are located by plain substring search. If neither the overall nor
    the shots header is present, the whole text is returned in `other`.
    A section runs from its header to the next located header that starts
    after it, or to the end of the text; sections whose header is missing stay
    empty. Header text quoted inside a body ends that section early.

    Args:
        full_script: Raw model output

    Returns:
        ParsedSections dict
    """
    sections: ParsedSections = {
        "overall": "",
        "shots": "",
        "music": "",
        "other": ""
    }

    positions = [
        ("overall", OVERALL_HEADER, full_script.find(OVERALL_HEADER)),
        ("shots", SHOTS_HEADER, full_script.find(SHOTS_HEADER)),
        ("music", MUSIC_HEADER, full_script.find(MUSIC_HEADER)),
    ]

    # Without either main header the text is treated as unstructured
    if positions[0][2] == -1 and positions[1][2] == -1:
        sections["other"] = full_script
        return sections

    for index, (name, header, start) in enumerate(positions):
        if start == -1:
            continue

        end = len(full_script)
        for _, _, next_start in positions[index + 1:]:
            if next_start > start:
                end = next_start
                break

        sections[name] = _extract_section(full_script, header, start, end)

    return sections


def has_structured_sections(sections: ParsedSections) -> bool:
    """True when the structured card view applies (overall or shots found)"""
    return bool(sections["overall"] or sections["shots"])
