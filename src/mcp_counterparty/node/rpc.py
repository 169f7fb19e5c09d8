"""Bitcoin Core access through JSON-RPC over HTTP."""

import logging
from typing import Any

import httpx

from mcp_counterparty.config import Config
from mcp_counterparty.node.interface import NodeError, NodeInterface


logger = logging.getLogger(__name__)


class BitcoinRPC(NodeInterface):
    """Bitcoin Core interface via JSON-RPC."""

    def __init__(self, config: Config):
        super().__init__(config)
        self.url = f"http://{config.rpc_host}:{config.get_rpc_port()}"
        self._client = httpx.AsyncClient(
            auth=(config.rpc_user, config.rpc_password),
            timeout=self.timeout,
        )
        self._request_id = 0

    async def _call(self, method: str, *args: Any) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": list(args),
        }
        logger.debug("RPC %s #%d", method, self._request_id)

        try:
            response = await self._client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise NodeError(f"Could not reach {self.url}: {e}") from e

        if response.status_code == 401:
            raise NodeError("RPC authentication failed")

        # Older nodes report RPC errors with HTTP 500 and a JSON body
        try:
            data = response.json()
        except ValueError as e:
            raise NodeError(f"Invalid RPC response (HTTP {response.status_code})") from e

        error = data.get("error")
        if error:
            raise NodeError(f"RPC error {error.get('code')}: {error.get('message')}")
        return data.get("result")

    async def close(self) -> None:
        await self._client.aclose()
