import re

from v0_mcp.client.errors import MalformedResponseError
from v0_mcp.models.response import ComponentMetadata, ComponentResponse
from v0_mcp.parsing.code import extract_code, extract_component_name, extract_imports

# Intent: reject answers that are obviously prose. Arrow functions and classes count as code too.
_CODE_MARKERS_RE = re.compile(r"\b(?:export|function|const|let|class)\b|=>")


def looks_like_component(code: str) -> bool:
    return bool(_CODE_MARKERS_RE.search(code))


def extract_explanation(content: str) -> str | None:
    """Every non-blank line that is not a fence marker, import, or export, joined back into prose."""
    lines = [
        line
        for line in content.splitlines()
        if line.strip() and not line.strip().startswith(("```", "import", "export"))
    ]
    return "\n".join(lines) if lines else None


def build_component_response(content: str) -> ComponentResponse:
    """Turn a model answer into a ComponentResponse, rejecting answers that contain no code."""
    code = extract_code(content)
    if not code:
        raise MalformedResponseError(
            "V0 API response did not contain valid component code. "
            "Please try rephrasing your request with more specific requirements."
        )
    if not looks_like_component(code):
        raise MalformedResponseError(
            "Generated output is not a valid component: it contains no recognisable React code. "
            "Please try a more specific component description."
        )

    return ComponentResponse(
        code=code,
        metadata=ComponentMetadata(
            name=extract_component_name(code),
            dependencies=extract_imports(code),
        ),
        explanation=extract_explanation(content),
        content=content,
    )
