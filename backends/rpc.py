"""HTTP transport for the typed search protocol."""

import asyncio
import logging
from typing import Any, Dict

import requests
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class RpcClient:
    """Posts typed requests to a search front end's ``/api/rpc`` endpoint."""

    def __init__(self, base_url: str, timeout: float = 30) -> None:
        """Initialize RPC client.

        Args:
            base_url: Front end base URL
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def call(self, request: BaseModel) -> Dict[str, Any]:
        """Send one request and return the decoded response.

        Raises:
            requests.exceptions.RequestException: On transport or HTTP errors
            ValueError: If the response does not answer this request
        """
        payload = request.model_dump()
        response = requests.post(f"{self.base_url}/api/rpc", json=payload, timeout=self.timeout)
        response.raise_for_status()
        body = response.json()
        if body.get("request_id") != payload["request_id"]:
            raise ValueError(
                f"Response {body.get('request_id')!r} does not answer request {payload['request_id']!r}"
            )
        return body

    async def call_async(self, request: BaseModel) -> Dict[str, Any]:
        """Send one request from a worker thread."""
        return await asyncio.to_thread(self.call, request)
