from loguru import logger
from mcp.server.fastmcp import FastMCP

from v0_mcp.client.v0_client import V0Client
from v0_mcp.config import Settings
from v0_mcp.tools.component_tools import ComponentTools

SERVER_NAME = "v0-mcp"

TOOL_DESCRIPTIONS = {
    "test_connection": "Test connection to v0.dev API with detailed diagnostics",
    "configure_v0": "Configure v0.dev integration settings and validate API connectivity",
    "analyze_requirements": (
        "Break down UI requirements into React component structure using shadcn/ui. "
        "Focuses purely on visual hierarchy and component relationships - does not handle file paths "
        "or architecture."
    ),
    "generate_component": "Generate a React/Next.js component with TypeScript and shadcn/ui",
    "improve_component": "Improve an existing React/Next.js component",
    "generate_from_image": "Generate React/Next.js component from wireframes, designs, or screenshots",
    "generate_from_template": "Generate component from UI pattern template (forms, cards, navigation, etc.)",
    "list_templates": "List available UI pattern templates by category",
}


class V0McpServer:
    """MCP server exposing v0.dev component generation over stdio.

    Owns the v0 client for the lifetime of the process and closes it when the
    transport shuts down.
    """

    def __init__(self, settings: Settings, client: V0Client | None = None):
        self.client = client or V0Client.from_settings(settings)
        self.tools = ComponentTools(self.client)
        self.mcp = FastMCP(SERVER_NAME)
        self._register_tools()

    def _register_tools(self) -> None:
        for name, description in TOOL_DESCRIPTIONS.items():
            self.mcp.add_tool(getattr(self.tools, name), name=name, description=description)
        logger.info("Registered {count} tools", count=len(TOOL_DESCRIPTIONS))

    async def serve(self) -> None:
        """Run the stdio transport until the host disconnects."""
        logger.info("v0 MCP server starting on stdio")
        try:
            await self.mcp.run_stdio_async()
        finally:
            await self.client.aclose()
            logger.info("v0 MCP server stopped")
