"""
Runtime configuration for the AITable MCP server.

Environment Variables:
- AITABLE_API_TOKEN: The API token used as bearer token (required)
- SPACE_ID: The ID of the AITable space to operate on (required)
- AITABLE_BASE_URL: Fusion API v1 base URL (default: https://aitable.ai/fusion/v1)
- AITABLE_V2_BASE_URL: Fusion API v2 base URL, used by node search
- AITABLE_TIMEOUT: HTTP timeout in seconds (default: 30)
- HOST / PORT: Bind address of the HTTP transport (default: 127.0.0.1:3000)
- LOG_LEVEL: Logging level (default: INFO)
"""

import os
import logging
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

logger = logging.getLogger("aitable-mcp.config")

DEFAULT_BASE_URL = "https://aitable.ai/fusion/v1"
DEFAULT_V2_BASE_URL = "https://aitable.ai/fusion/v2"

REQUIRED_VARS = ("AITABLE_API_TOKEN", "SPACE_ID")


class Settings(BaseModel):
    """Configuration shared by every transport."""

    api_token: str = Field(..., min_length=1, description="AITable API token")
    space_id: str = Field(..., min_length=1, description="AITable space ID")
    base_url: str = Field(default=DEFAULT_BASE_URL)
    v2_base_url: str = Field(default=DEFAULT_V2_BASE_URL)
    timeout: float = Field(default=30.0, gt=0)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Raises ConfigurationError when a required variable is missing or a
        value cannot be parsed.
        """
        env = os.environ if environ is None else environ

        missing = [var for var in REQUIRED_VARS if not env.get(var, "").strip()]
        if missing:
            error_msg = f"Missing required environment variables: {', '.join(missing)}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        values = {
            "api_token": env["AITABLE_API_TOKEN"].strip(),
            "space_id": env["SPACE_ID"].strip(),
        }
        optional = {
            "base_url": "AITABLE_BASE_URL",
            "v2_base_url": "AITABLE_V2_BASE_URL",
            "timeout": "AITABLE_TIMEOUT",
            "host": "HOST",
            "port": "PORT",
            "log_level": "LOG_LEVEL",
        }
        for field_name, var in optional.items():
            if env.get(var):
                values[field_name] = env[var].strip()
        if "log_level" in values:
            values["log_level"] = values["log_level"].upper()

        try:
            settings = cls(**values)
        except ValidationError as e:
            error_msg = f"Invalid configuration: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

        settings.base_url = settings.base_url.rstrip("/")
        settings.v2_base_url = settings.v2_base_url.rstrip("/")
        return settings

    def masked_token(self) -> str:
        """Mask the API token for logging purposes"""
        if len(self.api_token) > 10:
            return f"{self.api_token[:5]}...{self.api_token[-5:]}"
        return "[SET]"
