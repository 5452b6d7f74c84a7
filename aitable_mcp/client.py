"""HTTP client for the AITable Fusion API."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import httpx
from pydantic import BaseModel, ValidationError

from .exceptions import AITableError

logger = logging.getLogger("aitable-mcp.client")

QueryParams = List[Tuple[str, str]]


class ApiEnvelope(BaseModel):
    """Wrapper returned by every AITable API call."""

    success: bool
    code: int
    message: Optional[str] = ""
    data: Any = None


def build_query(**values: Any) -> QueryParams:
    """Turn keyword arguments into query pairs, skipping empty values.

    List values become repeated keys (``fields=a&fields=b``) so that the
    order of the list is preserved.
    """
    params: QueryParams = []
    for key, value in values.items():
        if value is None or value == "" or value == []:
            continue
        if isinstance(value, (list, tuple)):
            params.extend((key, str(item)) for item in value)
        else:
            params.append((key, str(value)))
    return params


def sort_params(sort: Optional[Iterable[Any]]) -> QueryParams:
    """Encode sort specifications as ``sort[i][field]`` / ``sort[i][order]`` pairs."""
    params: QueryParams = []
    for index, spec in enumerate(sort or []):
        if isinstance(spec, BaseModel):
            spec = spec.model_dump()
        if spec.get("field"):
            params.append((f"sort[{index}][field]", spec["field"]))
        if spec.get("order"):
            params.append((f"sort[{index}][order]", spec["order"]))
    return params


class AITableClient:
    """Issues authenticated requests and unwraps the response envelope.

    A new ``httpx.AsyncClient`` is opened for every call; nothing is kept
    between requests.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str,
        v2_base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token
        self.base_urls = {"v1": base_url.rstrip("/"), "v2": v2_base_url.rstrip("/")}
        self.timeout = timeout
        self.transport = transport

    def _client(self, api_version: str) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.api_token}"}
        return httpx.AsyncClient(
            base_url=self.base_urls[api_version],
            headers=headers,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Sequence[Tuple[str, str]]] = None,
        json: Any = None,
        files: Optional[Dict[str, Any]] = None,
        api_version: str = "v1",
        accepted_codes: Tuple[int, ...] = (200,),
    ) -> Any:
        """Send a request and return the ``data`` member of the envelope.

        Raises AITableError when the request cannot be sent, the response
        status is not 2xx, or the envelope does not report success with one
        of ``accepted_codes``.
        """
        headers = {}
        if files is None:
            headers["Content-Type"] = "application/json"

        logger.info(f"{method} {path}")
        if params:
            logger.debug(f"Query parameters: {params}")

        try:
            async with self._client(api_version) as client:
                response = await client.request(
                    method,
                    path,
                    params=list(params) if params else None,
                    json=json,
                    files=files,
                    headers=headers,
                )
        except httpx.HTTPError as e:
            error_msg = f"Request to {method} {path} failed: {e}"
            logger.error(error_msg)
            raise AITableError(error_msg) from e

        logger.debug(f"Response status: {response.status_code}")
        if not response.is_success:
            error_msg = f"HTTP {response.status_code}: {response.text or response.reason_phrase}"
            logger.error(error_msg)
            raise AITableError(error_msg, status_code=response.status_code)

        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            error_msg = f"HTTP {response.status_code}: response is not a valid AITable envelope"
            logger.error(error_msg)
            logger.debug(f"Response body: {response.text}")
            raise AITableError(error_msg, status_code=response.status_code) from e

        if not envelope.success or envelope.code not in accepted_codes:
            error_msg = f"AITable API Error ({envelope.code}): {envelope.message}"
            logger.error(error_msg)
            raise AITableError(error_msg, status_code=response.status_code, code=envelope.code)

        return envelope.data

    async def upload(self, path: str, file_name: str, content: bytes) -> Any:
        """Upload ``content`` as a multipart ``file`` part."""
        return await self.request(
            "POST",
            path,
            files={"file": (file_name, content)},
            accepted_codes=(200, 201),
        )
