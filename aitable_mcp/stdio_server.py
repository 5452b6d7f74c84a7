"""
AITable MCP Server - stdio transport (for local use with desktop MCP clients)

Usage:
1. Set AITABLE_API_TOKEN and SPACE_ID
2. Run `aitable-mcp` or `python -m aitable_mcp`
"""

import logging
import sys

from .config import Settings
from .exceptions import ConfigurationError
from .server import create_server, setup_logging

logger = logging.getLogger("aitable-mcp")


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings.log_level)
    logger.info(f"Starting AITable MCP server on stdio (space '{settings.space_id}', token {settings.masked_token()})")

    try:
        create_server(settings).run(transport="stdio")
    except Exception as e:
        logger.critical(f"Server error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
