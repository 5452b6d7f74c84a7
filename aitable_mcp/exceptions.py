"""Exceptions raised inside the AITable MCP server."""

from typing import Optional


class ConfigurationError(Exception):
    """Required runtime configuration is missing or invalid."""


class ToolInputError(ValueError):
    """Tool arguments failed validation before any request was sent."""


class AITableError(Exception):
    """A call to the AITable API failed.

    Raised for network failures, non-2xx responses and envelopes that do not
    report success. ``status_code`` is the HTTP status when a response was
    received, ``code`` the envelope code when one was decoded.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
