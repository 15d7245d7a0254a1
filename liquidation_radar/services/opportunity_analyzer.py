"""Liquidation opportunity analysis for a single account."""
from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Sequence

from ..errors import GatewayError
from ..interfaces.gateway import LedgerGateway
from ..models import LiquidationOpportunity, PositionEntry
from ..protocols.aave import parser
from .account_inspector import AccountInspector

logger = logging.getLogger(__name__)


class OpportunityAnalyzer:
    """Combine account health, positions and oracle prices into an opportunity."""

    def __init__(self, gateway: LedgerGateway, inspector: AccountInspector) -> None:
        self._gateway = gateway
        self._inspector = inspector

    async def analyze(self, address: str) -> LiquidationOpportunity | None:
        """Return an opportunity for liquidatable or at-risk accounts, None when healthy."""
        snapshot = await self._inspector.get_account_snapshot(address)
        if not snapshot.is_liquidatable and not snapshot.is_at_risk:
            return None

        positions = await self._inspector.get_positions(address)
        tier = parser.risk_tier(snapshot.health_factor)

        potential_profit = "0"
        if snapshot.is_liquidatable:
            total_debt_usd = parser.to_decimal(
                snapshot.total_debt_base, parser.BASE_CURRENCY_DECIMALS
            )
            prices = await self._collateral_prices(positions.collateral)
            potential_profit = parser.estimate_liquidation_profit(
                positions.collateral, prices, total_debt_usd
            )

        logger.info(
            "Account %s HF=%s tier=%s potential profit $%s",
            address,
            snapshot.health_factor_formatted,
            tier.value,
            potential_profit,
        )

        return LiquidationOpportunity(
            address=address,
            health_factor=snapshot.health_factor_formatted,
            total_collateral_usd=parser.format_units(
                snapshot.total_collateral_base, parser.BASE_CURRENCY_DECIMALS
            ),
            total_debt_usd=parser.format_units(
                snapshot.total_debt_base, parser.BASE_CURRENCY_DECIMALS
            ),
            available_borrows_usd=parser.format_units(
                snapshot.available_borrows_base, parser.BASE_CURRENCY_DECIMALS
            ),
            liquidation_threshold=parser.format_bps_percent(
                snapshot.current_liquidation_threshold
            ),
            collateral_assets=positions.collateral,
            debt_assets=positions.debt,
            potential_profit=potential_profit,
            risk_tier=tier,
            gas_warning=parser.GAS_WARNING,
        )

    async def _collateral_prices(
        self, collateral: Sequence[PositionEntry]
    ) -> dict[str, Decimal]:
        """Oracle prices keyed by asset; unpriced assets are left out.

        Tries the batched oracle call first. If it fails, prices are fetched
        one by one and an asset whose lookup fails is skipped.
        """
        if not collateral:
            return {}

        assets = [c.asset for c in collateral]
        try:
            raw_prices = await self._gateway.get_assets_prices(assets)
        except GatewayError as e:
            logger.warning("Batched price lookup failed, querying per asset: %s", e)
            results = await asyncio.gather(
                *(self._gateway.get_asset_price(a) for a in assets),
                return_exceptions=True,
            )
            raw_prices = []
            for asset, result in zip(assets, results):
                if isinstance(result, GatewayError):
                    logger.warning("Skipping collateral %s: price lookup failed: %s", asset, result)
                    raw_prices.append(0)
                elif isinstance(result, BaseException):
                    raise result
                else:
                    raw_prices.append(result)

        prices: dict[str, Decimal] = {}
        for asset, raw in zip(assets, raw_prices):
            if raw > 0:
                prices[asset] = parser.to_decimal(raw, parser.BASE_CURRENCY_DECIMALS)
            else:
                logger.debug("No oracle price for collateral %s", asset)
        return prices
