"""Account inspector — aggregate account health and per-asset positions."""
from __future__ import annotations

import asyncio
import logging

from ..addresses import is_valid_address
from ..errors import InvalidAddressError
from ..interfaces.gateway import LedgerGateway
from ..models import AccountSnapshot, Positions
from ..protocols.aave import parser
from .reserve_registry import ReserveRegistry

logger = logging.getLogger(__name__)


def ensure_valid_address(address: str) -> None:
    """Raise InvalidAddressError before any network call is made."""
    if not is_valid_address(address):
        raise InvalidAddressError(address)


class AccountInspector:
    """Read one account's health and its collateral/debt breakdown."""

    def __init__(self, gateway: LedgerGateway, registry: ReserveRegistry) -> None:
        self._gateway = gateway
        self._registry = registry

    async def get_account_snapshot(self, address: str) -> AccountSnapshot:
        ensure_valid_address(address)

        data = await self._gateway.get_user_account_data(address)
        hf = data.health_factor

        snapshot = AccountSnapshot(
            address=address,
            total_collateral_base=data.total_collateral_base,
            total_debt_base=data.total_debt_base,
            available_borrows_base=data.available_borrows_base,
            current_liquidation_threshold=data.current_liquidation_threshold,
            ltv=data.ltv,
            health_factor=hf,
            health_factor_formatted=parser.format_units(hf, parser.HEALTH_FACTOR_DECIMALS),
            is_liquidatable=parser.is_liquidatable(hf),
            is_at_risk=parser.is_at_risk(hf),
        )
        logger.debug(
            "Account %s HF=%s liquidatable=%s at_risk=%s",
            address,
            snapshot.health_factor_formatted,
            snapshot.is_liquidatable,
            snapshot.is_at_risk,
        )
        return snapshot

    async def get_positions(self, address: str) -> Positions:
        """Query every reserve for the user concurrently and split by balance/debt."""
        ensure_valid_address(address)

        reserves = await self._registry.list_reserves()
        user_reserves = await asyncio.gather(
            *(self._gateway.get_user_reserve_data(r.asset, address) for r in reserves)
        )

        positions = parser.split_positions(reserves, user_reserves)
        logger.debug(
            "Account %s has %d collateral and %d debt positions",
            address,
            len(positions.collateral),
            len(positions.debt),
        )
        return positions
