"""Line-level building blocks shared by the response parsers."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

_FENCE_RE = re.compile(r"^\s*```")
_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*+•]|\d+[.)])\s+(.+?)\s*$")
_HEADER_RE = re.compile(
    r"^\s*(?P<prefix>#{1,6}\s*|\d+[.)]\s*|[-*]\s+)?"
    r"\**(?P<label>[A-Za-z][A-Za-z0-9 /&()_-]*?)\**\s*:\**\s*(?P<rest>.*?)\s*$"
)
_FIELD_RE = re.compile(r"^\s*(?:[-*+•]\s*|\d+[.)]\s*)?\**(?P<label>[A-Za-z][A-Za-z ]*?)\**\s*:\**\s*(?P<value>.*?)\s*$")


@dataclass(frozen=True)
class Line:
    text: str
    fence: bool = False  # an opening or closing ``` marker
    in_code: bool = False  # inside a fenced block

    @property
    def stripped(self) -> str:
        return self.text.strip()


@dataclass(frozen=True)
class Header:
    label: str
    rest: str = ""


def tokenize(text: str) -> list[Line]:
    """Split text into lines, marking fence markers and fenced content."""
    lines: list[Line] = []
    inside = False
    for raw in text.splitlines():
        if _FENCE_RE.match(raw):
            lines.append(Line(raw, fence=True, in_code=inside))
            inside = not inside
        else:
            lines.append(Line(raw, in_code=inside))
    return lines


def match_header(line: Line, known: Iterable[str] = ()) -> Header | None:
    """Return the section header on this line, if it looks like one.

    A header is an all-caps label ending in a colon. Numbered (``2.``) or
    markdown (``##``) labels in mixed case also count when they name one of the
    ``known`` sections. A list item with text after its colon (``1. API: data
    layer``) is only a header when it names a ``known`` section. Lines inside
    fenced blocks never match.
    """
    if line.fence or line.in_code:
        return None
    m = _HEADER_RE.match(line.text)
    if not m:
        return None
    label = m.group("label").strip()
    upper = label.upper()
    rest = m.group("rest")
    prefix = (m.group("prefix") or "").strip()
    names_known = any(keyword in upper for keyword in known)
    if prefix and not prefix.startswith("#") and rest and not names_known:
        return None
    if label.isupper():
        return Header(upper, rest)

    if prefix and prefix not in ("-", "*") and not rest and names_known:
        return Header(upper, rest)
    return None


def list_item(text: str) -> str | None:
    """Return the text of a bulleted or numbered list item, without its marker."""
    m = _LIST_ITEM_RE.match(text)
    return m.group(1) if m else None


def match_field(text: str) -> tuple[str, str] | None:
    """Split a ``Label: value`` line (optionally bulleted) into lower-cased label and value."""
    m = _FIELD_RE.match(text)
    if not m:
        return None
    return m.group("label").strip().lower(), m.group("value")


def clean(text: str) -> str:
    return text.strip().strip("*`\"'").strip()


def split_inline_list(text: str) -> list[str]:
    return [item for item in (clean(part) for part in text.split(",")) if item]
