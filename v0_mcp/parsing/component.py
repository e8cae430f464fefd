"""Component-mode parsing: code plus the metadata sections that follow it."""

from enum import Enum

from v0_mcp.models.response import ParsedComponent
from v0_mcp.parsing.code import extract_code, extract_component_name, extract_imports
from v0_mcp.parsing.lines import Line, list_item, match_header, tokenize


class _Section(Enum):
    NONE = "none"
    USAGE = "usage"
    INTEGRATION = "integration"
    CUSTOMIZATION = "customization"
    CHANGES = "changes"
    VISUAL = "visual"
    BREAKING = "breaking"
    MIGRATION = "migration"


# First match wins; labels are compared upper-cased.
_SECTION_LABELS: tuple[tuple[str, _Section], ...] = (
    ("USAGE EXAMPLE", _Section.USAGE),
    ("INTEGRATION GUIDELINES", _Section.INTEGRATION),
    ("INTEGRATION STEPS", _Section.INTEGRATION),
    ("CUSTOMIZATION NOTES", _Section.CUSTOMIZATION),
    ("CHANGES MADE", _Section.CHANGES),
    ("VISUAL ENHANCEMENTS", _Section.VISUAL),
    ("BREAKING CHANGES", _Section.BREAKING),
    ("MIGRATION GUIDE", _Section.MIGRATION),
)

_KNOWN_SECTIONS = tuple(marker for marker, _ in _SECTION_LABELS) + ("IMPORTS NEEDED",)

_LIST_SECTIONS = {
    _Section.INTEGRATION: "integration_steps",
    _Section.CUSTOMIZATION: "customization_notes",
    _Section.CHANGES: "changes_made",
    _Section.VISUAL: "visual_enhancements",
    _Section.BREAKING: "breaking_changes",
    _Section.MIGRATION: "migration_guide",
}


def _section_for(label: str) -> _Section:
    for marker, section in _SECTION_LABELS:
        if marker in label:
            return section
    return _Section.NONE


def _usage_from(lines: list[Line], inline: str) -> str:
    """Usage is the section's first fenced block, or its plain text when there is none."""
    code: list[str] = []
    in_block = False
    for line in lines:
        if line.fence:
            if in_block:
                return "\n".join(code).strip()
            in_block = True
            continue
        if in_block:
            code.append(line.text)
    if in_block:
        return "\n".join(code).strip()
    text = [inline] if inline else []
    text.extend(line.text for line in lines)
    return "\n".join(text).strip()


def parse_component(raw: str) -> ParsedComponent:
    """Parse a component-generation answer. Never raises."""
    code = extract_code(raw)
    fields: dict[str, list[str]] = {name: [] for name in _LIST_SECTIONS.values()}
    usage_lines: list[Line] = []
    usage_inline = ""
    usage_seen = False

    section = _Section.NONE
    for line in tokenize(raw):
        header = match_header(line, known=_KNOWN_SECTIONS)
        if header is not None:
            section = _section_for(header.label)
            if section is _Section.USAGE and not usage_seen:
                usage_seen = True
                usage_inline = header.rest
            elif section is _Section.USAGE:
                section = _Section.NONE
            continue

        if section is _Section.USAGE:
            usage_lines.append(line)
        elif section in _LIST_SECTIONS and not line.fence and not line.in_code:
            item = list_item(line.text)
            if item:
                fields[_LIST_SECTIONS[section]].append(item)

    return ParsedComponent(
        code=code,
        name=extract_component_name(code),
        imports=extract_imports(code),
        usage=_usage_from(usage_lines, usage_inline) if usage_seen else "",
        **fields,
    )
