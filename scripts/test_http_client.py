#!/usr/bin/env python3
"""
Smoke test for the AITable MCP HTTP transport.

Connects to <origin>/mcp, prints the server capabilities and lists the
available tools and resources.

Usage:
    python scripts/test_http_client.py [origin]     # default: http://localhost:3000
"""

import asyncio
import json
import sys

from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client


async def main(origin: str) -> None:
    url = f"{origin.rstrip('/')}/mcp"
    print(f"Testing MCP server at: {url}")
    print("Transport: Streamable HTTP\n")

    async with streamablehttp_client(url) as (read_stream, write_stream, _):
        async with ClientSession(read_stream, write_stream) as session:
            print("Connecting to server...")
            init = await session.initialize()
            print("✓ Connected successfully!\n")

            print("Server capabilities:")
            print(json.dumps(init.capabilities.model_dump(exclude_none=True), indent=2))
            print()

            print("Listing available tools...")
            tools = await session.list_tools()
            print(f"✓ Found {len(tools.tools)} tools:\n")
            for index, tool in enumerate(tools.tools, start=1):
                description = (tool.description or "").strip().splitlines()
                print(f"{index}. {tool.name}")
                print(f"   {description[0] if description else '(no description)'}")
            print()

            print("Listing available resources...")
            resources = await session.list_resources()
            print(f"✓ Found {len(resources.resources)} resources:\n")
            for index, resource in enumerate(resources.resources, start=1):
                print(f"{index}. {resource.name}")
                print(f"   {resource.description or '(no description)'}")

    print("\n✓ Test completed successfully!")


if __name__ == "__main__":
    origin = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:3000"
    try:
        asyncio.run(main(origin))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
