import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from v0_mcp.client.errors import AuthError, MalformedResponseError, RateLimitError, ServerError
from v0_mcp.client.v0_client import V0Client
from v0_mcp.models.request import DEFAULT_SHADCN_COMPONENTS, ImageInput
from v0_mcp.models.response import StreamingResponse
from v0_mcp.tools.component_tools import (
    ACCESSIBILITY_FEATURES,
    RESPONSIVE_BREAKPOINTS,
    ComponentTools,
    component_exports,
    npm_packages,
    props_interface,
)
from tests.conftest import (
    ANALYSIS_ANSWER,
    COMPONENT_ANSWER,
    IMPROVEMENT_ANSWER,
    SAMPLE_PNG,
    component_response,
)


@pytest.fixture
def tools(mock_client):
    return ComponentTools(mock_client)


def _sent_prompt(mock_method) -> str:
    return mock_method.await_args.args[0].prompt


# ── envelope helpers ──────────────────────────────────────────────────────


def test_component_exports_default_and_named():
    code = "export const Item = 1\nexport function helper() {}\nexport default function List() {}"
    assert component_exports(code) == ["default", "Item", "helper"]


def test_props_interface_body():
    assert props_interface("interface CardProps {\n  title: string\n}") == {"props": "title: string"}
    assert props_interface("type CardProps = {}") == {}


def test_npm_packages_excludes_local_imports():
    imports = ["react", "@/components/ui/card", "./helpers", "@radix-ui/react-icons"]
    assert npm_packages(imports) == ["react", "@radix-ui/react-icons"]


# ── test_connection / configure_v0 ────────────────────────────────────────


@pytest.mark.asyncio
async def test_test_connection_success(tools, mock_client):
    mock_client.test_connection.return_value = True

    result = await tools.test_connection()

    assert result == "Connection test result: Successfully connected to v0.dev API"
    mock_client.generate.assert_not_called()


@pytest.mark.asyncio
async def test_test_connection_surfaces_detailed_error(tools, mock_client):
    mock_client.test_connection.return_value = False
    mock_client.generate.side_effect = AuthError("V0 API authentication failed. Please verify your V0_API_KEY.")

    result = await tools.test_connection()

    assert result.startswith("Connection test result: Failed to connect to v0.dev API. Error: ")
    assert "authentication failed" in result
    assert mock_client.generate.await_args.args[0].temperature == 0.1


@pytest.mark.asyncio
async def test_test_connection_probe_failed_but_generation_works(tools, mock_client):
    mock_client.test_connection.return_value = False
    mock_client.generate.return_value = component_response()

    result = await tools.test_connection()
    assert "failed unexpectedly" in result


@pytest.mark.asyncio
async def test_configure_v0_verifies_default_client(tools, mock_client):
    mock_client.test_connection.return_value = True
    result = await tools.configure_v0()
    assert result == "v0.dev integration configured successfully. API connection verified."


@pytest.mark.asyncio
async def test_configure_v0_without_test(tools, mock_client):
    result = await tools.configure_v0(test_connection=False)

    assert result.endswith("API connection not tested.")
    mock_client.test_connection.assert_not_called()


@pytest.mark.asyncio
async def test_configure_v0_failure(tools, mock_client):
    mock_client.test_connection.return_value = False
    with pytest.raises(ToolError, match="Configuration failed: Failed to connect to v0.dev API"):
        await tools.configure_v0()


@pytest.mark.asyncio
async def test_configure_v0_uses_throwaway_client_for_override_key(mock_client):
    candidate = MagicMock(spec=V0Client)
    candidate.__aenter__.return_value = candidate
    candidate.test_connection.return_value = True
    factory = MagicMock(return_value=candidate)
    tools = ComponentTools(mock_client, client_factory=factory)

    result = await tools.configure_v0(api_key="other-key")

    assert "verified" in result
    factory.assert_called_once_with("other-key")
    candidate.__aexit__.assert_awaited_once()
    mock_client.test_connection.assert_not_called()


# ── analyze_requirements ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_analyze_requirements_envelope(tools, mock_client):
    mock_client.complete_with_retry.return_value = ANALYSIS_ANSWER

    data = json.loads(await tools.analyze_requirements(description="A product page with reviews"))

    assert data["response_type"] == "ui_analysis"
    breakdown = data["ui_breakdown"]
    assert [c["name"] for c in breakdown["components_needed"]] == ["ProductGallery", "ReviewsSection"]
    assert breakdown["build_order"] == ["ProductGallery", "ReviewsSection"]
    assert breakdown["visual_relationships"][0]["visually_related_to"] == ["ProductGallery", "PriceTag"]
    mapping = data["shadcn_integration"]["component_mappings"][0]
    assert mapping == {
        "component": "ProductGallery",
        "shadcn_components": ["card", "button"],
        "recommended_combinations": ["card + button"],
    }


@pytest.mark.asyncio
async def test_analyze_requirements_prompt(tools, mock_client):
    mock_client.complete_with_retry.return_value = "nothing structured"

    await tools.analyze_requirements(description="A dashboard", framework="nextjs", existing_components=[])

    prompt = _sent_prompt(mock_client.complete_with_retry)
    assert "USER REQUEST: A dashboard" in prompt
    assert "FRAMEWORK: nextjs" in prompt
    assert ", ".join(DEFAULT_SHADCN_COMPONENTS) in prompt


@pytest.mark.asyncio
async def test_analyze_requirements_prose_yields_empty_breakdown(tools, mock_client):
    mock_client.complete_with_retry.return_value = "I could not find any structure here."

    data = json.loads(await tools.analyze_requirements(description="Something vague"))
    assert data["ui_breakdown"]["components_needed"] == []
    assert data["shadcn_integration"]["component_mappings"] == []


@pytest.mark.asyncio
async def test_analyze_requirements_failure_is_prefixed(tools, mock_client):
    mock_client.complete_with_retry.side_effect = RateLimitError("V0 API rate limit exceeded.")
    with pytest.raises(ToolError, match="^UI requirements analysis failed: V0 API rate limit exceeded."):
        await tools.analyze_requirements(description="A dashboard")


# ── generate_component ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_generate_component_envelope(tools, mock_client):
    mock_client.generate_with_retry.return_value = component_response()

    data = json.loads(
        await tools.generate_component(name="UserCard", description="A card that shows a user profile")
    )

    assert data["response_type"] == "component"
    component = data["component"]
    assert component["name"] == "UserCard"
    assert component["code"].startswith("import { Card, CardContent }")
    assert component["exports"] == ["default"]
    assert component["props_interface"] == {"props": "name: string\n  email: string"}
    assert data["integration"]["usage_example"] == '<UserCard name="Ada" email="ada@example.com" />'
    assert data["integration"]["integration_steps"][0] == {
        "file": "",
        "action": "modify",
        "description": "Place the card inside a responsive grid",
    }
    assert data["dependencies"]["npm_packages"] == ["framer-motion"]
    assert data["dependencies"]["internal_components"] == ["@/components/ui/card", "@/components/ui/button"]
    assert data["notes"]["accessibility_features"] == ACCESSIBILITY_FEATURES
    assert data["notes"]["responsive_breakpoints"] == RESPONSIVE_BREAKPOINTS


@pytest.mark.asyncio
async def test_generate_component_flags_off(tools, mock_client):
    mock_client.generate_with_retry.return_value = component_response("```tsx\nexport default function A() {}\n```")

    data = json.loads(
        await tools.generate_component(
            name="A", description="A minimal component", responsive=False, accessibility=False
        )
    )

    assert data["notes"]["accessibility_features"] == []
    assert data["notes"]["responsive_breakpoints"] == []
    assert data["integration"]["usage_example"] == "<A />"
    prompt = _sent_prompt(mock_client.generate_with_retry)
    assert "Make it desktop-optimized" in prompt
    assert "Include basic accessibility features" in prompt


@pytest.mark.asyncio
async def test_generate_component_prompt(tools, mock_client):
    mock_client.generate_with_retry.return_value = component_response()

    await tools.generate_component(
        name="UserCard",
        description="A card that shows a user profile",
        type="page_component",
        existing_components=["card", "button"],
    )

    request = mock_client.generate_with_retry.await_args.args[0]
    assert request.temperature == 0.7
    assert "- Name: UserCard" in request.prompt
    assert "- Type: page_component" in request.prompt
    assert "card, button" in request.prompt
    assert "Standalone component" in request.prompt
    assert "export default function UserCard" in request.prompt
    assert "mobile-first approach" in request.prompt


@pytest.mark.asyncio
async def test_generate_component_failure_is_prefixed(tools, mock_client):
    mock_client.generate_with_retry.side_effect = MalformedResponseError("Generated output is not a valid component.")
    with pytest.raises(ToolError, match="^Component generation failed: Generated output is not a valid component"):
        await tools.generate_component(name="UserCard", description="A card that shows a user profile")


async def _events(text: str, pieces: int = 4):
    size = len(text) // pieces + 1
    progress = 0
    for start in range(0, len(text), size):
        progress += 5
        yield StreamingResponse(chunk=text[start : start + size], progress=progress, complete=False)
    yield StreamingResponse(chunk="", progress=100, complete=True)


@pytest.mark.asyncio
async def test_generate_component_streaming_reports_progress(tools, mock_client):
    mock_client.stream_generate = MagicMock(return_value=_events(COMPONENT_ANSWER))
    ctx = MagicMock()
    ctx.report_progress = AsyncMock()

    data = json.loads(
        await tools.generate_component(
            name="UserCard", description="A card that shows a user profile", stream=True, ctx=ctx
        )
    )

    assert data["component"]["exports"] == ["default"]
    assert data["integration"]["usage_example"].startswith("<UserCard")
    mock_client.generate_with_retry.assert_not_called()
    assert ctx.report_progress.await_args_list[-1].args == (100, 100)


@pytest.mark.asyncio
async def test_generate_component_streaming_rejects_prose(tools, mock_client):
    mock_client.stream_generate = MagicMock(return_value=_events("Sorry, no code today."))
    with pytest.raises(ToolError, match="not a valid component"):
        await tools.generate_component(name="UserCard", description="A card that shows a user profile", stream=True)


@pytest.mark.asyncio
async def test_generate_component_streaming_closes_stream_when_progress_fails(tools, mock_client):
    closed = []

    async def _tracked():
        try:
            async for event in _events(COMPONENT_ANSWER):
                yield event
        finally:
            closed.append(True)

    mock_client.stream_generate = MagicMock(return_value=_tracked())
    ctx = MagicMock()
    ctx.report_progress = AsyncMock(side_effect=RuntimeError("client went away"))

    with pytest.raises(RuntimeError, match="client went away"):
        await tools.generate_component(
            name="UserCard", description="A card that shows a user profile", stream=True, ctx=ctx
        )
    assert closed == [True]


# ── improve_component ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_improve_component_envelope(tools, mock_client):
    mock_client.generate_with_retry.return_value = component_response(IMPROVEMENT_ANSWER)

    data = json.loads(
        await tools.improve_component(
            name="SaveButton",
            current_code="export default function SaveButton() { return <button /> }",
            improvements=["Add transitions", "Use shadcn Button"],
        )
    )

    assert data["response_type"] == "improvement"
    assert data["component"]["name"] == "SaveButton"
    assert "transition-all" in data["component"]["improved_code"]
    assert data["component"]["changes_made"] == ["Added smooth transitions", "Tightened spacing"]
    assert data["component"]["visual_enhancements"] == ["Hover state with subtle shadow"]
    assert data["breaking_changes"] == ["Removed the legacy size prop"]
    assert data["migration_guide"] == ['Replace size="lg" with className="h-12"']
    prompt = _sent_prompt(mock_client.generate_with_retry)
    assert "Add transitions, Use shadcn Button" in prompt
    assert "export default function SaveButton() { return <button /> }" in prompt


@pytest.mark.asyncio
async def test_improve_component_default_changes(tools, mock_client):
    mock_client.generate_with_retry.return_value = component_response("```tsx\nexport default function A() {}\n```")

    data = json.loads(await tools.improve_component(name="A", current_code="x", improvements=["anything"]))
    assert data["component"]["changes_made"] == ["Code improvements applied"]
    assert data["breaking_changes"] == []


@pytest.mark.asyncio
async def test_improve_component_failure_is_prefixed(tools, mock_client):
    mock_client.generate_with_retry.side_effect = ServerError("V0 API server error.")
    with pytest.raises(ToolError, match="^Component improvement failed"):
        await tools.improve_component(name="A", current_code="x", improvements=["anything"])


# ── generate_from_image ───────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_generate_from_image(tools, mock_client):
    mock_client.generate_multimodal_with_retry.return_value = component_response()
    images = [ImageInput(data=SAMPLE_PNG, type="wireframe"), ImageInput(data=SAMPLE_PNG, type="design")]

    data = json.loads(
        await tools.generate_from_image(
            name="UserCard",
            description="Match this mock",
            images=images,
            image_analysis_prompt="Focus on spacing",
        )
    )

    request = mock_client.generate_multimodal_with_retry.await_args.args[0]
    assert request.images == images
    assert request.image_analysis_prompt == "Focus on spacing"
    assert "based on the provided wireframe, design." in request.prompt
    assert "Make it fully responsive" in request.prompt
    assert data["response_type"] == "component"
    assert data["dependencies"]["npm_packages"] == ["framer-motion"]


@pytest.mark.asyncio
async def test_generate_from_image_failure_is_prefixed(tools, mock_client):
    mock_client.generate_multimodal_with_retry.side_effect = AuthError("V0 API authentication failed.")
    with pytest.raises(ToolError, match="^Multimodal component generation failed"):
        await tools.generate_from_image(
            name="A", description="Match", images=[ImageInput(data=SAMPLE_PNG, type="screenshot")]
        )


# ── templates ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_generate_from_template(tools, mock_client):
    mock_client.generate_with_retry.return_value = component_response()

    data = json.loads(
        await tools.generate_from_template(
            template="login-form",
            name="SignIn",
            variant="with-social",
            customizations=["dark mode", "rounded inputs"],
        )
    )

    request = mock_client.generate_with_retry.await_args.args[0]
    assert request.template == "login-form"
    assert "using the login-form template pattern" in request.prompt
    assert "Variant: with-social - Includes social login buttons" in request.prompt
    assert "Customizations: dark mode, rounded inputs" in request.prompt

    assert data["component"]["name"] == "SignIn"
    assert data["integration"]["integration_steps"] == [
        {"file": "", "action": "modify", "description": "Use the login-form pattern for consistent UI design"}
    ]
    assert "@/components/ui/cardheader" in data["dependencies"]["internal_components"]
    assert data["dependencies"]["npm_packages"] == []
    hints = data["notes"]["customization_hints"]
    assert hints[0] == "Based on login-form template"
    assert hints[-2:] == ["dark mode", "rounded inputs"]
    assert data["notes"]["responsive_breakpoints"] == RESPONSIVE_BREAKPOINTS


@pytest.mark.asyncio
async def test_generate_from_template_without_variant(tools, mock_client):
    mock_client.generate_with_retry.return_value = component_response()

    await tools.generate_from_template(template="login-form", name="SignIn")

    prompt = _sent_prompt(mock_client.generate_with_retry)
    assert "Variant:" not in prompt
    assert "Customizations:" not in prompt


@pytest.mark.asyncio
async def test_generate_from_template_unknown_template(tools, mock_client):
    with pytest.raises(ToolError, match="Template-based component generation failed: Template 'nope' not found"):
        await tools.generate_from_template(template="nope", name="X")
    mock_client.generate_with_retry.assert_not_called()


@pytest.mark.asyncio
async def test_list_templates_all(tools):
    data = json.loads(await tools.list_templates())

    assert data["response_type"] == "templates"
    assert data["category"] == "all"
    assert data["framework"] == "react"
    assert len(data["templates"]) >= 20
    first = data["templates"][0]
    assert set(first) == {"name", "category", "description", "visual_pattern", "shadcn_components", "variants"}
    assert all(set(v) == {"name", "description"} for t in data["templates"] for v in t["variants"])


@pytest.mark.asyncio
async def test_list_templates_by_category(tools):
    data = json.loads(await tools.list_templates(category="modals", framework="nextjs"))

    assert data["framework"] == "nextjs"
    assert data["templates"]
    assert {t["category"] for t in data["templates"]} == {"modals"}


@pytest.mark.asyncio
async def test_list_templates_filters_by_query(tools):
    data = json.loads(await tools.list_templates(query="LOGIN"))

    names = {t["name"] for t in data["templates"]}
    assert "login-form" in names
    assert all(
        "login" in f'{t["name"]} {t["description"]} {t["visual_pattern"]}'.lower() for t in data["templates"]
    )


@pytest.mark.asyncio
async def test_list_templates_query_respects_category(tools):
    data = json.loads(await tools.list_templates(category="modals", query="login"))
    assert data["templates"] == []
