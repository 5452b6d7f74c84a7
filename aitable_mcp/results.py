"""Mapping of tool outcomes to MCP tool results."""

import functools
import json
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from mcp.types import CallToolResult, TextContent

from .exceptions import AITableError, ToolInputError

logger = logging.getLogger("aitable-mcp.tools")

ToolOutput = Tuple[str, Any]


def format_payload(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def success_result(summary: str, payload: Any = None) -> CallToolResult:
    text = summary if payload is None else f"{summary}\n\n{format_payload(payload)}"
    return CallToolResult(content=[TextContent(type="text", text=text)])


def error_result(message: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=message)], isError=True)


def tool_handler(action: str) -> Callable[[Callable[..., Awaitable[ToolOutput]]], Callable[..., Awaitable[CallToolResult]]]:
    """Turn a handler returning ``(summary, payload)`` into an MCP tool.

    Any exception raised by the handler becomes an error-flagged result
    reading ``Error <action>: <message>``; nothing escapes the tool.
    """

    def decorator(func: Callable[..., Awaitable[ToolOutput]]) -> Callable[..., Awaitable[CallToolResult]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> CallToolResult:
            logger.info(f"Tool call: {func.__name__}")
            try:
                summary, payload = await func(*args, **kwargs)
            except (ToolInputError, AITableError) as e:
                logger.error(f"Error {action}: {e}")
                return error_result(f"Error {action}: {e}")
            except Exception as e:
                logger.error(f"Unexpected error {action}: {e}", exc_info=True)
                return error_result(f"Error {action}: {e}")
            logger.info(f"Tool {func.__name__} succeeded")
            return success_result(summary, payload)

        return wrapper

    return decorator
