"""Analysis-mode parsing.

The model answers ``analyze_requirements`` with loosely structured prose. This
module scans it line by line with a small state machine:

    NO_SECTION --header--> IN_HIERARCHY | IN_BUILD_ORDER | IN_RELATIONSHIPS | IN_INTEGRATION

Any other header returns to NO_SECTION. Each section state accumulates into a
builder that is flushed when the next block starts, when the section changes,
or at end of input. Incomplete blocks are dropped; nothing here raises.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from v0_mcp.models.response import (
    ComponentMapping,
    ComponentNeeded,
    ParsedAnalysis,
    ShadcnIntegration,
    VisualRelationship,
)
from v0_mcp.parsing.lines import clean, list_item, match_field, match_header, split_inline_list, tokenize

_COMPONENT_TYPES = ("ui_component", "page_component", "layout_component")
_PRIORITIES = ("high", "medium", "low")

_KNOWN_SECTIONS = ("COMPONENT HIERARCHY", "COMPONENTS NEEDED", "BUILD ORDER", "VISUAL RELATIONSHIPS", "INTEGRATION")

_NAME_FIELD_RE = re.compile(r"^\s*(?:[-*+•]|\d+[.)])?\s*\**Name\**\s*:", re.IGNORECASE)
_COMPONENT_FIELD_RE = re.compile(r"\bComponent\**\s*:\**\s*(.+)$")
_MAPPING_HEADER_RE = re.compile(r"^\s*(?:[-*+•]|\d+[.)])\s+\**`?([A-Z][A-Za-z0-9]*)`?\**\s*(?::|\s[-–—]|$)\s*(.*)$")
_CONTAINED_RE = re.compile(r"contained within\**:?\**\s*(.+)", re.IGNORECASE)
_RELATED_RE = re.compile(r"(?:visually related to|relates to)\**:?\**\s*(.+)", re.IGNORECASE)
_SHARED_RE = re.compile(r"shared patterns?\**:?\**\s*(.+)", re.IGNORECASE)
_USES_RE = re.compile(r"(?:shadcn components|uses)\**\s*:\**\s*(.+)", re.IGNORECASE)
_COMBINES_RE = re.compile(r"(?:combinations|combines)\**\s*:\**\s*(.+)", re.IGNORECASE)
# Bullet labels that introduce mapping fields or pattern notes, never a component.
_NOT_COMPONENTS = {"uses", "combines", "combinations", "consistency", "consistent", "pattern", "patterns"}
_DASH_RE = re.compile(r"\s+[-–—]\s+")


def _split_dash(text: str) -> tuple[str, str]:
    """``"ProductCard - Uses: Card"`` -> ``("ProductCard", "Uses: Card")``."""
    parts = _DASH_RE.split(text, maxsplit=1)
    return parts[0], parts[1] if len(parts) > 1 else ""


class State(Enum):
    NO_SECTION = "no_section"
    IN_HIERARCHY = "in_hierarchy"
    IN_BUILD_ORDER = "in_build_order"
    IN_RELATIONSHIPS = "in_relationships"
    IN_INTEGRATION = "in_integration"


def section_state(label: str) -> State:
    if "COMPONENT HIERARCHY" in label or "COMPONENTS NEEDED" in label:
        return State.IN_HIERARCHY
    if "BUILD ORDER" in label:
        return State.IN_BUILD_ORDER
    if "VISUAL RELATIONSHIPS" in label:
        return State.IN_RELATIONSHIPS
    if "SHADCN" in label and "INTEGRATION" in label:
        return State.IN_INTEGRATION
    return State.NO_SECTION


@dataclass
class _ComponentBlock:
    name: str | None = None
    type: str | None = None
    visual_purpose: str | None = None
    shadcn_dependencies: list[str] = field(default_factory=list)
    priority: str | None = None

    def feed(self, text: str) -> None:
        parsed = match_field(text)
        if parsed is None:
            return
        label, value = parsed
        if label == "name":
            self.name = clean(value)
        elif label == "type":
            kind = clean(value).lower()
            if kind in _COMPONENT_TYPES:
                self.type = kind
        elif label == "visual purpose":
            self.visual_purpose = value.strip()
        elif label == "shadcn dependencies":
            self.shadcn_dependencies = split_inline_list(value)
        elif label == "priority":
            priority = clean(value).lower()
            if priority in _PRIORITIES:
                self.priority = priority

    def build(self) -> ComponentNeeded | None:
        if not (self.name and self.type and self.visual_purpose):
            return None
        return ComponentNeeded(
            name=self.name,
            type=self.type,
            visual_purpose=self.visual_purpose,
            shadcn_dependencies=self.shadcn_dependencies,
            priority=self.priority or "medium",
        )


@dataclass
class _RelationshipBlock:
    component: str | None = None
    contained_within: str | None = None
    visually_related_to: list[str] = field(default_factory=list)
    shared_patterns: list[str] | None = None

    def build(self) -> VisualRelationship | None:
        if not (self.component and self.visually_related_to):
            return None
        return VisualRelationship(
            component=self.component,
            contained_within=self.contained_within,
            visually_related_to=self.visually_related_to,
            shared_patterns=self.shared_patterns,
        )


@dataclass
class _MappingBlock:
    component: str
    shadcn_components: list[str] = field(default_factory=list)
    combinations: list[str] = field(default_factory=list)

    def feed(self, text: str) -> bool:
        uses = _USES_RE.search(text)
        if uses:
            self.shadcn_components = split_inline_list(uses.group(1))
            return True
        combines = _COMBINES_RE.search(text)
        if combines:
            self.combinations = split_inline_list(combines.group(1))
            return True
        return False

    def build(self) -> ComponentMapping | None:
        if not self.shadcn_components:
            return None
        return ComponentMapping(
            component=self.component,
            shadcn_components=self.shadcn_components,
            combinations=self.combinations,
        )


class _AnalysisScanner:
    def __init__(self) -> None:
        self.state = State.NO_SECTION
        self.components: list[ComponentNeeded] = []
        self.build_order: list[str] = []
        self.relationships: list[VisualRelationship] = []
        self.mappings: list[ComponentMapping] = []
        self.consistency_patterns: list[str] = []
        self._component: _ComponentBlock | None = None
        self._relationship: _RelationshipBlock | None = None
        self._mapping: _MappingBlock | None = None

    # transitions

    def enter(self, state: State) -> None:
        self.flush()
        self.state = state

    def flush(self) -> None:
        if self._component is not None:
            built = self._component.build()
            if built is not None:
                self.components.append(built)
            self._component = None
        if self._relationship is not None:
            built = self._relationship.build()
            if built is not None:
                self.relationships.append(built)
            self._relationship = None
        if self._mapping is not None:
            built = self._mapping.build()
            if built is not None:
                self.mappings.append(built)
            self._mapping = None

    # per-state line handlers

    def hierarchy_line(self, text: str) -> None:
        if _NAME_FIELD_RE.match(text):
            self.flush()
            self._component = _ComponentBlock()
        if self._component is not None:
            self._component.feed(text)

    def build_order_line(self, text: str) -> None:
        item = list_item(text)
        if item:
            self.build_order.append(item)

    def relationship_line(self, text: str) -> None:
        component = _COMPONENT_FIELD_RE.search(text)
        if component:
            self.flush()
            self._relationship = _RelationshipBlock(component=clean(component.group(1)))
            return
        contained = _CONTAINED_RE.search(text)
        related = _RELATED_RE.search(text)
        shared = _SHARED_RE.search(text)
        if contained or related or shared:
            if self._relationship is None:
                return
            if contained:
                self._relationship.contained_within = clean(contained.group(1))
            elif related:
                self._relationship.visually_related_to = split_inline_list(related.group(1))
            else:
                self._relationship.shared_patterns = split_inline_list(shared.group(1))
            return
        bullet = list_item(text)
        if bullet is not None and ":" not in bullet:
            self.flush()
            self._relationship = _RelationshipBlock(component=clean(bullet))

    def integration_line(self, text: str) -> None:
        component = _COMPONENT_FIELD_RE.search(text)
        if component:
            self.flush()
            name, rest = _split_dash(component.group(1))
            self._mapping = _MappingBlock(component=clean(name))
            if rest:
                self._mapping.feed(rest)
            return
        header = _MAPPING_HEADER_RE.match(text)
        if header and header.group(1).lower() not in _NOT_COMPONENTS:
            self.flush()
            self._mapping = _MappingBlock(component=header.group(1))
            if header.group(2):
                self._mapping.feed(header.group(2))
            return
        if self._mapping is not None and self._mapping.feed(text):
            return
        bullet = list_item(text)
        lowered = text.lower()
        if bullet and ("consistency" in lowered or "pattern" in lowered):
            self.consistency_patterns.append(bullet)

    def line(self, text: str) -> None:
        if not text.strip():
            return
        if self.state is State.IN_HIERARCHY:
            self.hierarchy_line(text)
        elif self.state is State.IN_BUILD_ORDER:
            self.build_order_line(text)
        elif self.state is State.IN_RELATIONSHIPS:
            self.relationship_line(text)
        elif self.state is State.IN_INTEGRATION:
            self.integration_line(text)

    def result(self) -> ParsedAnalysis:
        self.flush()
        return ParsedAnalysis(
            components_needed=self.components,
            build_order=self.build_order,
            visual_relationships=self.relationships,
            shadcn_integration=ShadcnIntegration(
                component_mappings=self.mappings,
                consistency_patterns=self.consistency_patterns,
            ),
        )


def parse_analysis(raw: str) -> ParsedAnalysis:
    """Parse an ``analyze_requirements`` answer into structured sections. Never raises."""
    scanner = _AnalysisScanner()
    for line in tokenize(raw):
        if line.fence or line.in_code:
            continue
        header = match_header(line, known=_KNOWN_SECTIONS)
        if header is not None:
            scanner.enter(section_state(header.label))
            continue
        scanner.line(line.text)
    return scanner.result()
