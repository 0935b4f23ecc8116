"""
Docstring Parsing

Splits Google-style docstrings into a summary, remarks and parameter
descriptions.
"""

from __future__ import annotations

import inspect
import re
import textwrap
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

SUMMARY_SECTION = "summary"
REMARKS_SECTION = "remarks"

PARAMETER_SECTIONS = frozenset(
    {"args", "arguments", "parameters", "params", "keyword args", "keyword arguments"}
)

SECTION_HEADERS = PARAMETER_SECTIONS | frozenset(
    {
        "attributes",
        "example",
        "examples",
        "note",
        "notes",
        "other parameters",
        "raises",
        "references",
        "remarks",
        "return",
        "returns",
        "see also",
        "todo",
        "warning",
        "warnings",
        "yield",
        "yields",
    }
)

_PARAMETER_PATTERN = re.compile(r"^\*{0,2}(?P<name>[A-Za-z_]\w*)\s*(?:\([^)]*\))?\s*:\s*(?P<text>.*)$")


@dataclass(frozen=True)
class Docstring:
    """Parsed docstring."""

    summary: str | None = None
    remarks: str | None = None
    parameters: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def get_section(self, section: str) -> str | None:
        """Get the text of the summary or remarks section."""
        if section == SUMMARY_SECTION:
            return self.summary
        if section == REMARKS_SECTION:
            return self.remarks
        return None


def parse_docstring(docstring: str | None) -> Docstring | None:
    """
    Parse a Google-style docstring.

    The first paragraph is the summary. Any further paragraphs before the first
    section header, plus the body of a ``Remarks:`` section, are the remarks.
    Entries of an ``Args:`` section are the parameter descriptions.

    Args:
        docstring: Raw docstring

    Returns:
        Parsed docstring, or None for a missing or blank docstring
    """
    if not docstring or not docstring.strip():
        return None

    lines = inspect.cleandoc(docstring).splitlines()

    preamble: list[str] = []
    sections: dict[str, list[str]] = {}
    current: list[str] = preamble

    for line in lines:
        header = _section_header(line)
        if header is not None:
            current = sections.setdefault(header, [])
        else:
            current.append(line)

    paragraphs = _paragraphs(preamble)
    summary = " ".join(line.strip() for line in paragraphs[0]) if paragraphs else None

    remarks_parts = ["\n".join(paragraph) for paragraph in paragraphs[1:]]
    if REMARKS_SECTION in sections:
        remarks_parts.append(textwrap.dedent("\n".join(sections[REMARKS_SECTION])).strip())
    remarks = "\n\n".join(part for part in remarks_parts if part) or None

    parameters: dict[str, str] = {}
    for name in PARAMETER_SECTIONS:
        if name in sections:
            parameters.update(_parse_parameters(sections[name]))

    return Docstring(
        summary=summary or None,
        remarks=remarks,
        parameters=MappingProxyType(parameters),
    )


def _section_header(line: str) -> str | None:
    if line[:1].isspace() or not line.rstrip().endswith(":"):
        return None
    name = line.strip()[:-1].strip().lower()
    return name if name in SECTION_HEADERS else None


def _paragraphs(lines: list[str]) -> list[list[str]]:
    paragraphs: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line.rstrip())
        elif current:
            paragraphs.append(current)
            current = []
    if current:
        paragraphs.append(current)
    return paragraphs


def _parse_parameters(lines: list[str]) -> dict[str, str]:
    body = textwrap.dedent("\n".join(lines)).splitlines()
    parameters: dict[str, list[str]] = {}
    name: str | None = None

    for line in body:
        if not line.strip():
            continue

        match = None if line[:1].isspace() else _PARAMETER_PATTERN.match(line)
        if match is not None:
            name = match.group("name")
            parameters[name] = [match.group("text").strip()]
        elif name is not None:
            parameters[name].append(line.strip())

    return {key: " ".join(part for part in parts if part) for key, parts in parameters.items()}
