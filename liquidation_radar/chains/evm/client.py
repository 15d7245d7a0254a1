"""EVM JSON-RPC client with fallback support."""
from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any

import aiohttp
import certifi
from eth_utils import decode_hex, to_hex

from ...config import ChainConfig
from ...errors import GatewayError

logger = logging.getLogger(__name__)


class EvmClient:
    """Ethereum RPC client with automatic endpoint fallback.

    Transport failures move on to the next endpoint. A JSON-RPC ``error``
    member (revert, rate limit) is raised straight away.
    """

    def __init__(self, config: ChainConfig) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.current_rpc_index = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        if not self.endpoints:
            raise GatewayError("No RPC endpoints configured")

        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json(content_type=None)
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, OSError) as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

            if not isinstance(result, dict):
                raise GatewayError(f"Malformed RPC response from {rpc_url}: {result!r}")
            if "error" in result:
                raise GatewayError(f"RPC Error: {result['error']}")

            if rpc_index != self.current_rpc_index:
                logger.info("Switched to RPC endpoint: %s", rpc_url)
                self.current_rpc_index = rpc_index

            return result.get("result")

        raise GatewayError(f"All RPC endpoints failed. Last error: {last_error}")

    async def eth_call(self, to: str, data: bytes) -> bytes:
        """Execute a read-only contract call against the latest block."""
        result = await self.rpc_call(
            "eth_call", [{"to": to, "data": to_hex(data)}, "latest"]
        )
        if not isinstance(result, str):
            raise GatewayError(f"Malformed eth_call result: {result!r}")
        try:
            return decode_hex(result)
        except ValueError as e:
            raise GatewayError(f"Malformed eth_call result: {result!r}") from e

    async def block_number(self) -> int:
        """Get the latest block number."""
        result = await self.rpc_call("eth_blockNumber", [])
        try:
            return int(result, 16)
        except (TypeError, ValueError) as e:
            raise GatewayError(f"Malformed block number: {result!r}") from e
