import json
from pathlib import Path

from loguru import logger
from pydantic import BaseModel

from v0_mcp.config import settings


class TemplateVariant(BaseModel):
    name: str
    description: str
    modifications: list[str]


class UITemplate(BaseModel):
    name: str
    category: str
    description: str
    visual_pattern: str
    shadcn_components: list[str]
    responsive_features: list[str]
    accessibility_features: list[str]
    variants: list[TemplateVariant] = []

    def get_variant(self, name: str) -> TemplateVariant | None:
        return next((v for v in self.variants if v.name == name), None)


def load_templates(directory: str | Path) -> dict[str, UITemplate]:
    """Load the template catalog from a directory of JSON files.

    Each file holds a JSON list of templates (one file per category).
    Returns dict keyed by template name, in file then list order.
    """
    dir_path = Path(directory)
    if not dir_path.is_dir():
        raise FileNotFoundError(f"Templates directory not found: {dir_path.resolve()}")

    templates: dict[str, UITemplate] = {}
    for json_file in sorted(dir_path.glob("*.json")):
        data = json.loads(json_file.read_text(encoding="utf-8"))
        for item in data:
            template = UITemplate.model_validate(item)
            templates[template.name] = template
        logger.debug("Loaded templates from {file}", file=json_file.name)

    if not templates:
        raise ValueError(f"No template JSON files found in: {dir_path.resolve()}")

    return templates


# Load the catalog at import time from the configured directory
TEMPLATES = load_templates(settings.templates_dir)
logger.debug("Loaded {count} templates total", count=len(TEMPLATES))


def get_template(name: str) -> UITemplate | None:
    return TEMPLATES.get(name)


def get_templates_by_category(category: str) -> list[UITemplate]:
    return [t for t in TEMPLATES.values() if t.category == category]


def get_all_templates() -> list[UITemplate]:
    return list(TEMPLATES.values())


def search_templates(query: str) -> list[UITemplate]:
    """Case-insensitive match against template name, description, and visual pattern."""
    q = query.lower()
    return [
        t
        for t in TEMPLATES.values()
        if q in t.name.lower() or q in t.description.lower() or q in t.visual_pattern.lower()
    ]
