import re

from v0_mcp.parsing.lines import tokenize

DEFAULT_COMPONENT_NAME = "GeneratedComponent"

_SCRIPT_TAGS = {"tsx", "jsx", "ts", "js", "typescript", "javascript"}
_TAG_RE = re.compile(r"\w*")
_NAME_RE = re.compile(
    r"\b(?:export\s+)?(?:default\s+)?(?:async\s+)?(?:function\*?|const|let|class)\s+([A-Za-z_$][\w$]*)"
)
_DEFAULT_EXPORT_RE = re.compile(r"\bexport\s+default\s+([A-Za-z_$][\w$]*)")
_IMPORT_RE = re.compile(r"""\bimport\s+(?:type\s+)?[^;'"]*?\s*\bfrom\s+['"]([^'"]+)['"]""")


def fenced_blocks(text: str) -> list[tuple[str, str]]:
    """Closed fenced blocks as ``(tag, body)`` pairs, tag lower-cased ("" when untagged)."""
    blocks: list[tuple[str, str]] = []
    tag = ""
    body: list[str] = []
    for line in tokenize(text):
        if line.fence and not line.in_code:
            tag = _TAG_RE.match(line.stripped[3:].strip()).group(0).lower()
            body = []
        elif line.fence:
            blocks.append((tag, "\n".join(body)))
        elif line.in_code:
            body.append(line.text)
    return blocks


def extract_code(text: str) -> str:
    """Return the component code inside a model answer.

    Prefers a script-tagged fenced block, then an untagged one, then the
    whole trimmed text.
    """
    blocks = fenced_blocks(text)
    for wanted in (lambda tag: tag in _SCRIPT_TAGS, lambda tag: tag == ""):
        for tag, body in blocks:
            if wanted(tag):
                return body.strip()
    return text.strip()


def extract_component_name(code: str) -> str:
    match = _NAME_RE.search(code) or _DEFAULT_EXPORT_RE.search(code)
    return match.group(1) if match else DEFAULT_COMPONENT_NAME


def extract_imports(code: str) -> list[str]:
    """Module paths of ``import ... from "..."`` statements, in order of first appearance."""
    seen: list[str] = []
    for module in _IMPORT_RE.findall(code):
        if module not in seen:
            seen.append(module)
    return seen
