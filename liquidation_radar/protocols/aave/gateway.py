"""Aave V3 ledger gateway: typed read calls against pool, data provider and oracle."""
from __future__ import annotations

import logging
from typing import Any, Sequence

from eth_utils import to_checksum_address

from ...config import ProtocolConfig
from ...errors import GatewayError
from ...interfaces.chain import ChainClient
from ...models import (
    ReserveConfiguration,
    ReserveMarketData,
    ReserveTokenAddresses,
    UserAccountData,
    UserReserveData,
)
from . import abi

logger = logging.getLogger(__name__)


class AaveGateway:
    """Read-only access to the Aave V3 contracts and arbitrary ERC-20 tokens."""

    def __init__(self, chain_client: ChainClient, config: ProtocolConfig) -> None:
        self._client = chain_client
        self._pool = config.contracts.pool
        self._data_provider = config.contracts.data_provider
        self._oracle = config.contracts.oracle

    @property
    def pool_address(self) -> str:
        return self._pool

    async def _call(
        self, contract: str, signature: str, args: Sequence[Any] = ()
    ) -> tuple[Any, ...]:
        try:
            data = abi.encode_call(signature, args)
        except ValueError as e:
            raise GatewayError(str(e)) from e
        logger.debug("eth_call %s on %s", signature, contract)
        raw = await self._client.eth_call(contract, data)
        return abi.decode_output(signature, raw)

    # ------------------------------------------------------------------
    # Pool
    # ------------------------------------------------------------------

    async def get_user_account_data(self, user: str) -> UserAccountData:
        values = await self._call(self._pool, abi.GET_USER_ACCOUNT_DATA, [user])
        return UserAccountData(*values)

    async def get_reserves_list(self) -> list[str]:
        (assets,) = await self._call(self._pool, abi.GET_RESERVES_LIST)
        return [to_checksum_address(a) for a in assets]

    # ------------------------------------------------------------------
    # Pool data provider
    # ------------------------------------------------------------------

    async def get_all_reserves_tokens(self) -> list[tuple[str, str]]:
        """Return ``(symbol, asset_address)`` for every listed reserve."""
        (tokens,) = await self._call(self._data_provider, abi.GET_ALL_RESERVES_TOKENS)
        return [(symbol, to_checksum_address(address)) for symbol, address in tokens]

    async def get_reserve_configuration_data(self, asset: str) -> ReserveConfiguration:
        values = await self._call(
            self._data_provider, abi.GET_RESERVE_CONFIGURATION_DATA, [asset]
        )
        return ReserveConfiguration(*values)

    async def get_user_reserve_data(self, asset: str, user: str) -> UserReserveData:
        values = await self._call(
            self._data_provider, abi.GET_USER_RESERVE_DATA, [asset, user]
        )
        return UserReserveData(*values)

    async def get_reserve_tokens_addresses(self, asset: str) -> ReserveTokenAddresses:
        values = await self._call(
            self._data_provider, abi.GET_RESERVE_TOKENS_ADDRESSES, [asset]
        )
        return ReserveTokenAddresses(*(to_checksum_address(v) for v in values))

    async def get_reserve_data(self, asset: str) -> ReserveMarketData:
        values = await self._call(self._data_provider, abi.GET_RESERVE_DATA, [asset])
        return ReserveMarketData(*values)

    # ------------------------------------------------------------------
    # Oracle (8-decimal base currency)
    # ------------------------------------------------------------------

    async def get_asset_price(self, asset: str) -> int:
        (price,) = await self._call(self._oracle, abi.GET_ASSET_PRICE, [asset])
        return price

    async def get_assets_prices(self, assets: Sequence[str]) -> list[int]:
        (prices,) = await self._call(self._oracle, abi.GET_ASSETS_PRICES, [list(assets)])
        if len(prices) != len(assets):
            raise GatewayError(
                f"Oracle returned {len(prices)} prices for {len(assets)} assets"
            )
        return list(prices)

    # ------------------------------------------------------------------
    # ERC-20
    # ------------------------------------------------------------------

    async def decimals(self, token: str) -> int:
        (value,) = await self._call(token, abi.DECIMALS)
        return value

    async def symbol(self, token: str) -> str:
        (value,) = await self._call(token, abi.SYMBOL)
        return value

    async def balance_of(self, token: str, account: str) -> int:
        (value,) = await self._call(token, abi.BALANCE_OF, [account])
        return value

    async def total_supply(self, token: str) -> int:
        (value,) = await self._call(token, abi.TOTAL_SUPPLY)
        return value

    # ------------------------------------------------------------------
    # Chain
    # ------------------------------------------------------------------

    async def get_block_number(self) -> int:
        return await self._client.block_number()
