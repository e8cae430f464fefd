import asyncio
import sys

from loguru import logger

from v0_mcp.config import ConfigError, settings, validate_config
from v0_mcp.logging import setup_logging
from v0_mcp.server import V0McpServer


def main() -> None:
    """Entry point for the ``v0-mcp`` console script."""
    setup_logging(settings.log_level)

    try:
        validate_config(settings)
    except ConfigError as exc:
        logger.error("Failed to start v0 MCP server: {error}", error=exc)
        sys.exit(1)

    server = V0McpServer(settings)
    try:
        asyncio.run(server.serve())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception:
        logger.exception("v0 MCP server terminated unexpectedly")
        sys.exit(1)


if __name__ == "__main__":
    main()
