"""Construction of the AITable MCP server."""

import logging
import sys
from typing import Optional

import httpx
from mcp.server.fastmcp import FastMCP

from .client import AITableClient
from .config import Settings
from .resources import register_resources
from .tools import AITableTools

logger = logging.getLogger("aitable-mcp")

SERVER_NAME = "aitable-mcp"

INSTRUCTIONS = """
Tools for the AITable space configured on this server.

- Records: get_records, create_records, update_records, delete_records (max 10 per write)
- Schema: get_fields, create_field, delete_field, get_views, create_datasheet
- Space: get_node_list, search_nodes, get_node_detail
- Sharing: create_embed_link, get_embed_links, delete_embed_link
- Files: upload_attachment, then pass the returned token and name to create_records/update_records

Formula syntax and field colors are available as aitable:// resources.
"""


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr; stdout is reserved for the stdio transport."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    logger.setLevel(level)


def create_server(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastMCP:
    """Build a new server with every tool and resource registered.

    The server keeps no state besides ``settings``; the HTTP transport builds
    one per request.
    """
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS, log_level=settings.log_level)

    client = AITableClient(
        settings.api_token,
        base_url=settings.base_url,
        v2_base_url=settings.v2_base_url,
        timeout=settings.timeout,
        transport=transport,
    )
    AITableTools(client, settings.space_id).register(mcp)
    register_resources(mcp)
    return mcp
