"""Integration tests for the EVM client: RPC fallback and error handling."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from liquidation_radar.chains.evm.client import EvmClient
from liquidation_radar.config import ChainConfig
from liquidation_radar.errors import GatewayError


@pytest.fixture()
def client() -> EvmClient:
    return EvmClient(
        ChainConfig(
            rpc_endpoints=(
                "https://rpc1.example.com",
                "https://rpc2.example.com",
                "https://rpc3.example.com",
            ),
            rpc_timeout=5,
        )
    )


def _mock_response(response_data: dict) -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.json = AsyncMock(return_value=response_data)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


def _mock_session(response_data: dict | None = None, error: Exception | None = None):
    """Create a mock aiohttp session that returns given data or raises error."""
    mock_session = AsyncMock()
    if error:
        mock_session.post = MagicMock(side_effect=error)
    else:
        mock_session.post = MagicMock(return_value=_mock_response(response_data or {}))
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


def _patched(mock_session):
    return (
        patch("liquidation_radar.chains.evm.client.aiohttp.ClientSession", return_value=mock_session),
        patch("liquidation_radar.chains.evm.client.aiohttp.TCPConnector"),
    )


class TestRpcCall:
    @pytest.mark.asyncio
    async def test_successful_call(self, client: EvmClient) -> None:
        mock_session = _mock_session({"jsonrpc": "2.0", "id": 1, "result": "0x10"})
        session_patch, connector_patch = _patched(mock_session)

        with session_patch, connector_patch:
            result = await client.rpc_call("eth_blockNumber", [])

        assert result == "0x10"
        payload = mock_session.post.call_args.kwargs["json"]
        assert payload["method"] == "eth_blockNumber"
        assert payload["jsonrpc"] == "2.0"

    @pytest.mark.asyncio
    async def test_rpc_error_raises_without_failover(self, client: EvmClient) -> None:
        mock_session = _mock_session(
            {"jsonrpc": "2.0", "error": {"code": 3, "message": "execution reverted"}}
        )
        session_patch, connector_patch = _patched(mock_session)

        with session_patch, connector_patch:
            with pytest.raises(GatewayError, match="execution reverted"):
                await client.rpc_call("eth_call", [])

        assert mock_session.post.call_count == 1

    @pytest.mark.asyncio
    async def test_fallback_on_connection_error(self, client: EvmClient) -> None:
        """When first endpoint fails, should try the next one."""
        call_count = 0
        success_response = _mock_response({"jsonrpc": "2.0", "result": "0x1"})

        def side_effect(*args, **kwargs):
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise ConnectionError("first endpoint down")
            return success_response

        mock_session = AsyncMock()
        mock_session.post = MagicMock(side_effect=side_effect)
        mock_session.__aenter__ = AsyncMock(return_value=mock_session)
        mock_session.__aexit__ = AsyncMock(return_value=None)
        session_patch, connector_patch = _patched(mock_session)

        with session_patch, connector_patch:
            result = await client.rpc_call("eth_blockNumber", [])

        assert result == "0x1"
        assert client.current_rpc_index == 1

    @pytest.mark.asyncio
    async def test_all_endpoints_fail(self, client: EvmClient) -> None:
        mock_session = _mock_session(error=ConnectionError("down"))
        session_patch, connector_patch = _patched(mock_session)

        with session_patch, connector_patch:
            with pytest.raises(GatewayError, match="All RPC endpoints failed"):
                await client.rpc_call("eth_blockNumber", [])

        assert mock_session.post.call_count == 3

    @pytest.mark.asyncio
    async def test_no_endpoints(self) -> None:
        client = EvmClient(ChainConfig(rpc_endpoints=()))
        with pytest.raises(GatewayError, match="No RPC endpoints"):
            await client.rpc_call("eth_blockNumber", [])


class TestEthCall:
    @pytest.mark.asyncio
    async def test_returns_bytes(self, client: EvmClient) -> None:
        mock_session = _mock_session({"jsonrpc": "2.0", "result": "0x" + "00" * 31 + "12"})
        session_patch, connector_patch = _patched(mock_session)

        with session_patch, connector_patch:
            data = await client.eth_call("0x" + "ab" * 20, b"\x31\x3c\xe5\x67")

        assert data == b"\x00" * 31 + b"\x12"
        params = mock_session.post.call_args.kwargs["json"]["params"]
        assert params[0] == {"to": "0x" + "ab" * 20, "data": "0x313ce567"}
        assert params[1] == "latest"

    @pytest.mark.asyncio
    async def test_non_string_result(self, client: EvmClient) -> None:
        mock_session = _mock_session({"jsonrpc": "2.0", "result": None})
        session_patch, connector_patch = _patched(mock_session)

        with session_patch, connector_patch:
            with pytest.raises(GatewayError, match="Malformed eth_call"):
                await client.eth_call("0x" + "ab" * 20, b"")


class TestBlockNumber:
    @pytest.mark.asyncio
    async def test_parses_hex(self, client: EvmClient) -> None:
        mock_session = _mock_session({"jsonrpc": "2.0", "result": "0x121eac0"})
        session_patch, connector_patch = _patched(mock_session)

        with session_patch, connector_patch:
            assert await client.block_number() == 19_000_000

    @pytest.mark.asyncio
    async def test_malformed(self, client: EvmClient) -> None:
        mock_session = _mock_session({"jsonrpc": "2.0", "result": "latest"})
        session_patch, connector_patch = _patched(mock_session)

        with session_patch, connector_patch:
            with pytest.raises(GatewayError, match="Malformed block number"):
                await client.block_number()
