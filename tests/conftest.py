"""Pytest configuration and fixtures for the AITable MCP tests."""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from aitable_mcp.client import AITableClient
from aitable_mcp.config import Settings
from aitable_mcp.tools import AITableTools

BASE_URL = "https://aitable.test/fusion/v1"
V2_BASE_URL = "https://aitable.test/fusion/v2"
SPACE_ID = "spcTEST"
API_TOKEN = "usk-test-token-1234567890"


class FakeBackend:
    """Stands in for the AITable API and records every request it receives."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responses: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    def respond(
        self,
        data: Any = None,
        success: bool = True,
        code: int = 200,
        message: str = "SUCCESS",
        status_code: int = 200,
    ) -> None:
        envelope = {"success": success, "code": code, "message": message}
        if data is not None:
            envelope["data"] = data
        self._responses.append({"status_code": status_code, "json": envelope})

    def respond_raw(self, status_code: int, content: bytes = b"") -> None:
        self._responses.append({"status_code": status_code, "content": content})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self._responses:
            spec = self._responses.pop(0)
        else:
            spec = {"status_code": 200, "json": {"success": True, "code": 200, "message": "SUCCESS"}}
        status_code = spec.pop("status_code")
        return httpx.Response(status_code, **spec)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(backend: FakeBackend) -> AITableClient:
    return AITableClient(API_TOKEN, base_url=BASE_URL, v2_base_url=V2_BASE_URL, transport=backend.transport)


@pytest.fixture
def tools(client: AITableClient) -> AITableTools:
    return AITableTools(client, SPACE_ID)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_token=API_TOKEN, space_id=SPACE_ID, base_url=BASE_URL, v2_base_url=V2_BASE_URL)


def result_text(result) -> str:
    """Text of the single content block of a tool result."""
    assert len(result.content) == 1
    return result.content[0].text
