from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

ImageKind = Literal["wireframe", "design", "screenshot", "reference"]
ComponentType = Literal["ui_component", "page_component", "layout_component"]
Framework = Literal["react", "nextjs"]
TemplateCategory = Literal["forms", "cards", "navigation", "layouts", "data-display", "modals", "all"]

IMAGE_KINDS: tuple[str, ...] = ("wireframe", "design", "screenshot", "reference")

DEFAULT_SHADCN_COMPONENTS = [
    "button", "card", "input", "dialog", "dropdown-menu", "sheet", "table",
    "avatar", "badge", "separator", "tabs", "accordion", "alert", "progress",
]

# Argument types shared by the tool signatures; FastMCP validates them before a handler runs.
ComponentName = Annotated[
    str,
    Field(
        min_length=1,
        max_length=50,
        pattern=r"^[A-Z][a-zA-Z0-9]*$",
        description="Name of the component to generate (PascalCase)",
    ),
]
ComponentDescription = Annotated[
    str,
    Field(min_length=10, max_length=1000, description="What the component should do"),
]
ExistingComponents = Annotated[
    list[str],
    Field(max_length=50, description="Available shadcn/ui components"),
]
IntegrationContext = Annotated[
    str | None,
    Field(max_length=500, description="How this component will be used"),
]


class ImageInput(BaseModel):
    """A base64 encoded image sent alongside a multimodal prompt.

    The payload is never decoded; the length check only rejects data too small
    to plausibly be an image.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    data: str = Field(min_length=101, pattern=r"^[A-Za-z0-9+/]+=*$")
    kind: ImageKind = Field(alias="type")
    description: str | None = Field(default=None, max_length=500)


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    temperature: float | None = None
    stream: bool | None = None
    images: list[ImageInput] = Field(default_factory=list, max_length=5)
    template: str | None = None
    image_analysis_prompt: str | None = None
    max_tokens: int | None = None
