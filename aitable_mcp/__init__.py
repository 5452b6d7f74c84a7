"""AITable MCP Server

Exposes the AITable Fusion API as Model Context Protocol tools and resources.
"""

__version__ = "1.0.0"
