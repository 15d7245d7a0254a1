"""Engine facade wiring the gateway and analytics services from config."""
from __future__ import annotations

import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ..addresses import is_valid_address
from ..chains.evm import EvmClient
from ..config import AppConfig
from ..interfaces.gateway import LedgerGateway
from ..models import (
    AccountSnapshot,
    BatchResult,
    LiquidationOpportunity,
    Positions,
    ReserveDescriptor,
    ReserveStats,
)
from ..protocols.aave import AaveGateway, parser
from .account_inspector import AccountInspector, ensure_valid_address
from .batch_scheduler import BatchScheduler
from .opportunity_analyzer import OpportunityAnalyzer
from .reserve_registry import ReserveRegistry

logger = logging.getLogger(__name__)


class LiquidationEngine:
    """Read-only liquidation analytics over one Aave V3 deployment."""

    def __init__(
        self, config: AppConfig, gateway: LedgerGateway | None = None
    ) -> None:
        self._config = config
        if gateway is None:
            gateway = AaveGateway(EvmClient(config.chain), config.protocol)
        self._gateway = gateway

        self.registry = ReserveRegistry(gateway, ttl=config.protocol.reserve_cache_ttl)
        self.inspector = AccountInspector(gateway, self.registry)
        self.analyzer = OpportunityAnalyzer(gateway, self.inspector)
        self.scheduler = BatchScheduler(
            self.analyzer, concurrency=config.analysis.batch_concurrency
        )

    @property
    def config(self) -> AppConfig:
        return self._config

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    async def list_reserves(self) -> tuple[ReserveDescriptor, ...]:
        return await self.registry.list_reserves()

    async def get_account_snapshot(self, address: str) -> AccountSnapshot:
        return await self.inspector.get_account_snapshot(address)

    async def get_positions(self, address: str) -> Positions:
        return await self.inspector.get_positions(address)

    async def analyze(self, address: str) -> LiquidationOpportunity | None:
        return await self.analyzer.analyze(address)

    async def analyze_batch(self, addresses: Sequence[str]) -> list[BatchResult]:
        return await self.scheduler.analyze_batch(addresses)

    @staticmethod
    def is_valid_address(address: object) -> bool:
        return is_valid_address(address)

    # ------------------------------------------------------------------
    # Prices and chain state
    # ------------------------------------------------------------------

    async def get_asset_price(self, asset: str) -> str:
        ensure_valid_address(asset)
        price = await self._gateway.get_asset_price(asset)
        return parser.format_units(price, parser.BASE_CURRENCY_DECIMALS)

    async def get_asset_prices(self, assets: Sequence[str]) -> dict[str, str]:
        for asset in assets:
            ensure_valid_address(asset)
        if not assets:
            return {}
        prices = await self._gateway.get_assets_prices(list(assets))
        return {
            asset: parser.format_units(price, parser.BASE_CURRENCY_DECIMALS)
            for asset, price in zip(assets, prices)
        }

    async def get_block_number(self) -> int:
        return await self._gateway.get_block_number()

    async def get_reserve_stats(self, asset: str) -> ReserveStats | None:
        """Supply, borrow, utilization and rates for one listed reserve.

        Returns None when ``asset`` is not a listed reserve.
        """
        ensure_valid_address(asset)
        reserve = await self.registry.find(asset)
        if reserve is None:
            return None

        token_addresses, market = await asyncio.gather(
            self._gateway.get_reserve_tokens_addresses(reserve.asset),
            self._gateway.get_reserve_data(reserve.asset),
        )
        total_supply = await self._gateway.total_supply(token_addresses.a_token_address)
        total_borrow = market.total_stable_debt + market.total_variable_debt

        utilization = "0"
        if total_supply > 0:
            ratio = Decimal(total_borrow) / Decimal(total_supply)
            utilization = str(ratio.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP))

        return ReserveStats(
            symbol=reserve.symbol,
            total_supply=parser.format_units(total_supply, reserve.decimals),
            total_borrow=parser.format_units(total_borrow, reserve.decimals),
            utilization_rate=utilization,
            supply_apy=parser.format_ray(market.liquidity_rate),
            borrow_apy=parser.format_ray(market.variable_borrow_rate),
        )
