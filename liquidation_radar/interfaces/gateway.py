"""Ledger gateway protocol — typed view calls used by the analytics services."""
from typing import Protocol, Sequence

from ..models import (
    ReserveConfiguration,
    ReserveMarketData,
    ReserveTokenAddresses,
    UserAccountData,
    UserReserveData,
)


class LedgerGateway(Protocol):
    """Abstract interface for the lending pool, data provider and oracle reads."""

    async def get_user_account_data(self, user: str) -> UserAccountData: ...

    async def get_all_reserves_tokens(self) -> list[tuple[str, str]]: ...

    async def get_reserve_configuration_data(self, asset: str) -> ReserveConfiguration: ...

    async def get_user_reserve_data(self, asset: str, user: str) -> UserReserveData: ...

    async def get_reserve_tokens_addresses(self, asset: str) -> ReserveTokenAddresses: ...

    async def get_reserve_data(self, asset: str) -> ReserveMarketData: ...

    async def get_asset_price(self, asset: str) -> int: ...

    async def get_assets_prices(self, assets: Sequence[str]) -> list[int]: ...

    async def decimals(self, token: str) -> int: ...

    async def total_supply(self, token: str) -> int: ...

    async def get_block_number(self) -> int: ...
