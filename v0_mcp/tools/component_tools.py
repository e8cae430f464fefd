"""Tool handlers exposed by the MCP server.

Each public coroutine on ``ComponentTools`` is one tool. Handlers build a
prompt, call the v0 client, parse the answer and return a JSON envelope.
Failures surface as ``ToolError`` carrying the operation name; the message is
all the calling agent gets to decide its next step.
"""

import re
from collections.abc import Callable
from contextlib import aclosing
from typing import Annotated

from loguru import logger
from mcp.server.fastmcp import Context
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from v0_mcp.client.content import build_component_response
from v0_mcp.client.errors import V0Error
from v0_mcp.client.v0_client import V0Client
from v0_mcp.config import settings
from v0_mcp.logging import log_tool_call
from v0_mcp.models.request import (
    DEFAULT_SHADCN_COMPONENTS,
    ComponentDescription,
    ComponentName,
    ComponentType,
    ExistingComponents,
    Framework,
    GenerationRequest,
    ImageInput,
    IntegrationContext,
    TemplateCategory,
)
from v0_mcp.models.response import (
    AnalysisEnvelope,
    AnalysisIntegration,
    AnalysisMapping,
    ComponentDependencies,
    ComponentEnvelope,
    ComponentIntegration,
    ComponentNotes,
    GeneratedComponent,
    ImprovedComponent,
    ImprovementEnvelope,
    IntegrationStep,
    ParsedComponent,
    TemplatesEnvelope,
    TemplateSummary,
    TemplateVariantSummary,
    UIBreakdown,
)
from v0_mcp.parsing.analysis import parse_analysis
from v0_mcp.parsing.component import parse_component
from v0_mcp.services.prompts import (
    ANALYZE_REQUIREMENTS_PROMPT,
    GENERATE_COMPONENT_PROMPT,
    IMAGE_COMPONENT_PROMPT,
    IMPROVE_COMPONENT_PROMPT,
    TEMPLATE_COMPONENT_PROMPT,
    TEMPLATE_CUSTOMIZATIONS_SUFFIX,
    TEMPLATE_VARIANT_SUFFIX,
    fill_prompt_template,
)
from v0_mcp.templates.definitions import get_all_templates, get_template, get_templates_by_category, search_templates

GENERATION_TEMPERATURE = 0.7
PROBE_TEMPERATURE = 0.1

ACCESSIBILITY_FEATURES = ["ARIA labels", "Keyboard navigation", "Screen reader support"]
RESPONSIVE_BREAKPOINTS = ["sm (640px)", "md (768px)", "lg (1024px)", "xl (1280px)"]
DEFAULT_CHANGES = ["Code improvements applied"]

_PROPS_INTERFACE_RE = re.compile(r"interface\s+\w+Props\s*\{\s*([^}]+?)\s*\}")
_NAMED_EXPORT_RE = re.compile(r"export\s+(?:const|function|class)\s+(\w+)")
_UI_COMPONENT_PREFIX = "@/components/ui/"

ClientFactory = Callable[[str], V0Client]


# ── Envelope helpers ───────────────────────────────────────────────────────


def component_exports(code: str) -> list[str]:
    exports = ["default"] if "export default" in code else []
    exports.extend(_NAMED_EXPORT_RE.findall(code))
    return exports


def props_interface(code: str) -> dict[str, str]:
    match = _PROPS_INTERFACE_RE.search(code)
    return {"props": match.group(1).strip()} if match else {}


def npm_packages(imports: list[str]) -> list[str]:
    return [imp for imp in imports if not imp.startswith(("@/", "./"))]


def internal_components(imports: list[str]) -> list[str]:
    return [imp for imp in imports if imp.startswith(_UI_COMPONENT_PREFIX)]


def _integration_steps(steps: list[str]) -> list[IntegrationStep]:
    return [IntegrationStep(description=step) for step in steps]


def component_envelope(
    name: str,
    parsed: ParsedComponent,
    *,
    responsive: bool,
    accessibility: bool,
) -> ComponentEnvelope:
    """Shape a parsed generation answer into the ``component`` response."""
    return ComponentEnvelope(
        component=GeneratedComponent(
            name=name,
            code=parsed.code,
            exports=component_exports(parsed.code),
            props_interface=props_interface(parsed.code),
        ),
        integration=ComponentIntegration(
            usage_example=parsed.usage or f"<{name} />",
            integration_steps=_integration_steps(parsed.integration_steps),
        ),
        dependencies=ComponentDependencies(
            npm_packages=npm_packages(parsed.imports),
            internal_components=internal_components(parsed.imports),
        ),
        notes=ComponentNotes(
            customization_hints=parsed.customization_notes,
            accessibility_features=ACCESSIBILITY_FEATURES if accessibility else [],
            responsive_breakpoints=RESPONSIVE_BREAKPOINTS if responsive else [],
        ),
    )


def _responsive_guidance(responsive: bool) -> str:
    return "fully responsive with mobile-first approach" if responsive else "desktop-optimized"


def _accessibility_guidance(accessibility: bool) -> str:
    if accessibility:
        return "comprehensive ARIA labels, keyboard navigation, and screen reader support"
    return "basic accessibility features"


def _failure(operation: str, exc: Exception) -> ToolError:
    # log_tool_call records the failure; this only shapes the message.
    return ToolError(f"{operation} failed: {exc}")


class ComponentTools:
    """The v0 tool set, bound to one long-lived client."""

    def __init__(self, client: V0Client, client_factory: ClientFactory | None = None):
        self.client = client
        self._client_factory = client_factory or (lambda api_key: V0Client.from_settings(settings, api_key=api_key))

    # ── Connectivity ───────────────────────────────────────────────────────

    async def test_connection(self) -> str:
        """Test connection to v0.dev API with detailed diagnostics."""
        with log_tool_call("test_connection"):
            if await self.client.test_connection():
                return "Connection test result: Successfully connected to v0.dev API"

            # The probe only says yes or no; a real generation call surfaces the cause.
            try:
                await self.client.generate(GenerationRequest(prompt="test connection", temperature=PROBE_TEMPERATURE))
            except V0Error as exc:
                return f"Connection test result: Failed to connect to v0.dev API. Error: {exc}"
            return "Connection test result: API responded but test_connection failed unexpectedly"

    async def configure_v0(
        self,
        api_key: Annotated[str | None, Field(description="Optional API key to test (will not be stored)")] = None,
        test_connection: Annotated[bool, Field(description="Whether to test the connection")] = True,
    ) -> str:
        """Configure v0.dev integration settings and validate API connectivity."""
        with log_tool_call("configure_v0"):
            if test_connection:
                if api_key:
                    async with self._client_factory(api_key) as candidate:
                        connected = await candidate.test_connection()
                else:
                    connected = await self.client.test_connection()
                if not connected:
                    raise _failure("Configuration", V0Error("Failed to connect to v0.dev API"))

            status = " API connection verified." if test_connection else " API connection not tested."
            return f"v0.dev integration configured successfully.{status}"

    # ── Analysis ───────────────────────────────────────────────────────────

    async def analyze_requirements(
        self,
        description: Annotated[str, Field(min_length=1, description="UI requirements to break down into components")],
        framework: Annotated[Framework, Field(description="Target framework for components")] = "react",
        existing_components: Annotated[
            list[str], Field(description="Available shadcn/ui components to leverage")
        ] = DEFAULT_SHADCN_COMPONENTS,
    ) -> str:
        """Break down UI requirements into a React component structure using shadcn/ui.

        Focuses on visual hierarchy and component relationships; file paths and
        architecture are left to the caller.
        """
        with log_tool_call("analyze_requirements"):
            prompt = fill_prompt_template(
                ANALYZE_REQUIREMENTS_PROMPT,
                description=description,
                framework=framework,
                existing_components=existing_components or DEFAULT_SHADCN_COMPONENTS,
            )
            try:
                answer = await self.client.complete_with_retry(
                    GenerationRequest(prompt=prompt, temperature=GENERATION_TEMPERATURE)
                )
            except V0Error as exc:
                raise _failure("UI requirements analysis", exc) from exc

            parsed = parse_analysis(answer)
            envelope = AnalysisEnvelope(
                ui_breakdown=UIBreakdown(
                    components_needed=parsed.components_needed,
                    build_order=parsed.build_order,
                    visual_relationships=parsed.visual_relationships,
                ),
                shadcn_integration=AnalysisIntegration(
                    component_mappings=[
                        AnalysisMapping(
                            component=m.component,
                            shadcn_components=m.shadcn_components,
                            recommended_combinations=m.combinations,
                        )
                        for m in parsed.shadcn_integration.component_mappings
                    ],
                    consistency_patterns=parsed.shadcn_integration.consistency_patterns,
                ),
            )
            logger.debug(
                "Analysis parsed: {components} components, {mappings} mappings",
                components=len(parsed.components_needed),
                mappings=len(parsed.shadcn_integration.component_mappings),
            )
            return envelope.model_dump_json(indent=2)

    # ── Generation ─────────────────────────────────────────────────────────

    async def generate_component(
        self,
        name: ComponentName,
        description: ComponentDescription,
        type: Annotated[ComponentType, Field(description="Type of component")] = "ui_component",
        framework: Annotated[Framework, Field(description="Target framework")] = "react",
        responsive: Annotated[bool, Field(description="Whether to make the component responsive")] = True,
        accessibility: Annotated[bool, Field(description="Whether to include accessibility features")] = True,
        existing_components: ExistingComponents = [],
        integration_context: IntegrationContext = None,
        stream: Annotated[bool, Field(description="Stream the generation and report progress")] = False,
        ctx: Context = None,
    ) -> str:
        """Generate a React/Next.js component with TypeScript and shadcn/ui."""
        with log_tool_call("generate_component"):
            prompt = fill_prompt_template(
                GENERATE_COMPONENT_PROMPT,
                component_name=name,
                component_type=type,
                description=description,
                framework=framework,
                responsive=responsive,
                accessibility=accessibility,
                existing_components=existing_components,
                integration_context=integration_context or "Standalone component",
                responsive_guidance=_responsive_guidance(responsive),
                accessibility_guidance=_accessibility_guidance(accessibility),
            )
            request = GenerationRequest(prompt=prompt, temperature=GENERATION_TEMPERATURE)
            try:
                if stream:
                    content = await self._stream_content(request, ctx)
                else:
                    content = (await self.client.generate_with_retry(request)).content
            except V0Error as exc:
                raise _failure("Component generation", exc) from exc

            envelope = component_envelope(
                name, parse_component(content), responsive=responsive, accessibility=accessibility
            )
            return envelope.model_dump_json(indent=2)

    async def _stream_content(self, request: GenerationRequest, ctx: Context | None) -> str:
        chunks: list[str] = []
        async with aclosing(self.client.stream_generate(request)) as events:
            async for event in events:
                chunks.append(event.chunk)
                if ctx is not None:
                    await ctx.report_progress(event.progress, 100)
        content = "".join(chunks)
        # Same acceptance rule as the non-streaming path.
        return build_component_response(content).content

    async def improve_component(
        self,
        name: Annotated[str, Field(min_length=1, description="Name of the component")],
        current_code: Annotated[str, Field(min_length=1, description="Existing component code")],
        improvements: Annotated[list[str], Field(min_length=1, description="List of improvements to make")],
        framework: Annotated[Framework, Field(description="Target framework")] = "react",
    ) -> str:
        """Improve an existing React/Next.js component."""
        with log_tool_call("improve_component"):
            prompt = fill_prompt_template(
                IMPROVE_COMPONENT_PROMPT,
                current_code=current_code,
                improvements_requested=improvements,
                framework=framework,
            )
            try:
                response = await self.client.generate_with_retry(
                    GenerationRequest(prompt=prompt, temperature=GENERATION_TEMPERATURE)
                )
            except V0Error as exc:
                raise _failure("Component improvement", exc) from exc

            parsed = parse_component(response.content)
            envelope = ImprovementEnvelope(
                component=ImprovedComponent(
                    name=name,
                    improved_code=parsed.code,
                    changes_made=parsed.changes_made or DEFAULT_CHANGES,
                    visual_enhancements=parsed.visual_enhancements,
                ),
                breaking_changes=parsed.breaking_changes,
                migration_guide=parsed.migration_guide,
            )
            return envelope.model_dump_json(indent=2)

    async def generate_from_image(
        self,
        name: Annotated[str, Field(min_length=1, description="Name of the component to generate")],
        description: Annotated[str, Field(min_length=1, description="What the component should do")],
        images: Annotated[
            list[ImageInput],
            Field(min_length=1, max_length=5, description="Images to analyze (wireframes, designs, etc.)"),
        ],
        type: Annotated[ComponentType, Field(description="Type of component")] = "ui_component",
        framework: Annotated[Framework, Field(description="Target framework")] = "react",
        responsive: Annotated[bool, Field(description="Whether to make the component responsive")] = True,
        accessibility: Annotated[bool, Field(description="Whether to include accessibility features")] = True,
        existing_components: Annotated[list[str], Field(description="Available shadcn/ui components")] = [],
        image_analysis_prompt: Annotated[
            str | None, Field(description="Specific instructions for analyzing the images")
        ] = None,
    ) -> str:
        """Generate a React/Next.js component from wireframes, designs, or screenshots."""
        with log_tool_call("generate_from_image"):
            prompt = fill_prompt_template(
                IMAGE_COMPONENT_PROMPT,
                component_name=name,
                image_kinds=[image.kind for image in images],
                description=description,
                existing_components=existing_components,
                framework=framework,
                responsive_guidance="fully responsive" if responsive else "desktop-optimized",
                accessibility_guidance="Include comprehensive accessibility features" if accessibility else "",
            )
            request = GenerationRequest(
                prompt=prompt,
                temperature=GENERATION_TEMPERATURE,
                images=images,
                image_analysis_prompt=image_analysis_prompt,
            )
            try:
                response = await self.client.generate_multimodal_with_retry(request)
            except V0Error as exc:
                raise _failure("Multimodal component generation", exc) from exc

            envelope = component_envelope(
                name, parse_component(response.content), responsive=responsive, accessibility=accessibility
            )
            return envelope.model_dump_json(indent=2)

    # ── Templates ──────────────────────────────────────────────────────────

    async def generate_from_template(
        self,
        template: Annotated[str, Field(min_length=1, description="Name of the UI pattern template to use")],
        name: Annotated[str, Field(min_length=1, description="Name of the component to generate")],
        variant: Annotated[str | None, Field(description="Template variant to use")] = None,
        customizations: Annotated[list[str], Field(description="Visual customizations to apply")] = [],
        framework: Annotated[Framework, Field(description="Target framework")] = "react",
        existing_components: Annotated[list[str], Field(description="Available shadcn/ui components")] = [],
    ) -> str:
        """Generate a component from a UI pattern template (forms, cards, navigation, etc.)."""
        with log_tool_call("generate_from_template"):
            ui_template = get_template(template)
            if ui_template is None:
                raise _failure("Template-based component generation", V0Error(f"Template '{template}' not found"))

            prompt = fill_prompt_template(
                TEMPLATE_COMPONENT_PROMPT,
                component_name=name,
                template_name=ui_template.name,
                template_description=ui_template.description,
                visual_pattern=ui_template.visual_pattern,
                shadcn_components=ui_template.shadcn_components,
                responsive_features=ui_template.responsive_features,
                accessibility_features=ui_template.accessibility_features,
                existing_components=existing_components,
                framework=framework,
            )
            chosen = ui_template.get_variant(variant) if variant else None
            if variant and chosen is None:
                logger.warning(
                    "Variant {variant} not found on template {template}; using the base pattern",
                    variant=variant,
                    template=ui_template.name,
                )
            if chosen is not None:
                prompt += fill_prompt_template(
                    TEMPLATE_VARIANT_SUFFIX,
                    variant_name=chosen.name,
                    variant_description=chosen.description,
                    variant_modifications=chosen.modifications,
                )
            if customizations:
                prompt += fill_prompt_template(TEMPLATE_CUSTOMIZATIONS_SUFFIX, customizations=customizations)

            request = GenerationRequest(prompt=prompt, temperature=GENERATION_TEMPERATURE, template=template)
            try:
                response = await self.client.generate_with_retry(request)
            except V0Error as exc:
                raise _failure("Template-based component generation", exc) from exc

            parsed = parse_component(response.content)
            envelope = ComponentEnvelope(
                component=GeneratedComponent(
                    name=name,
                    code=parsed.code,
                    exports=component_exports(parsed.code),
                    props_interface=props_interface(parsed.code),
                ),
                integration=ComponentIntegration(
                    usage_example=parsed.usage or f"<{name} />",
                    integration_steps=[
                        IntegrationStep(description=f"Use the {ui_template.name} pattern for consistent UI design")
                    ],
                ),
                dependencies=ComponentDependencies(
                    internal_components=[
                        f"{_UI_COMPONENT_PREFIX}{comp.lower()}" for comp in ui_template.shadcn_components
                    ],
                ),
                notes=ComponentNotes(
                    customization_hints=[
                        f"Based on {ui_template.name} template",
                        *ui_template.responsive_features,
                        *customizations,
                    ],
                    accessibility_features=ui_template.accessibility_features,
                    responsive_breakpoints=RESPONSIVE_BREAKPOINTS,
                ),
            )
            return envelope.model_dump_json(indent=2)

    async def list_templates(
        self,
        category: Annotated[TemplateCategory, Field(description="Template category to filter by")] = "all",
        framework: Annotated[Framework, Field(description="Target framework")] = "react",
        query: Annotated[
            str | None, Field(description="Only templates whose name, description or visual pattern contain this text")
        ] = None,
    ) -> str:
        """List available UI pattern templates by category."""
        with log_tool_call("list_templates"):
            templates = get_all_templates() if category == "all" else get_templates_by_category(category)
            if query:
                matching = {t.name for t in search_templates(query)}
                templates = [t for t in templates if t.name in matching]
            envelope = TemplatesEnvelope(
                category=category,
                framework=framework,
                templates=[
                    TemplateSummary(
                        name=t.name,
                        category=t.category,
                        description=t.description,
                        visual_pattern=t.visual_pattern,
                        shadcn_components=t.shadcn_components,
                        variants=[TemplateVariantSummary(name=v.name, description=v.description) for v in t.variants],
                    )
                    for t in templates
                ],
            )
            return envelope.model_dump_json(indent=2)
