"""Named analytics tools dispatched against the engine, returning JSON-ready payloads."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Awaitable, Callable

from .models import (
    BatchResult,
    LiquidationOpportunity,
    PositionEntry,
    ReserveDescriptor,
    RiskTier,
)
from .protocols.aave import parser
from .services import LiquidationEngine

logger = logging.getLogger(__name__)

INVALID_PARAMS = "invalid_params"
METHOD_NOT_FOUND = "method_not_found"
INTERNAL_ERROR = "internal_error"

_ADDRESS_PARAM = {"address": "Ethereum address (0x-prefixed, 40 hex digits)"}

TOOLS: list[dict[str, Any]] = [
    {
        "name": "get_user_health",
        "description": "Health factor and account data for an address, with liquidation status.",
        "params": _ADDRESS_PARAM,
    },
    {
        "name": "analyze_liquidation",
        "description": "Liquidation opportunity for an address: positions, risk tier and potential profit.",
        "params": _ADDRESS_PARAM,
    },
    {
        "name": "get_user_positions",
        "description": "Collateral and debt breakdown of an address across all reserves.",
        "params": _ADDRESS_PARAM,
    },
    {
        "name": "get_aave_reserves",
        "description": "All reserves with their risk configuration.",
        "params": {},
    },
    {
        "name": "get_asset_price",
        "description": "Oracle price of an asset in USD.",
        "params": {"assetAddress": "Token contract address"},
    },
    {
        "name": "get_reserve_stats",
        "description": "Total supply, total borrow, utilization and APYs of a reserve.",
        "params": {"assetAddress": "Token contract address"},
    },
    {
        "name": "get_protocol_status",
        "description": "Protocol status including the current block number.",
        "params": {},
    },
    {
        "name": "batch_check_addresses",
        "description": "Check many addresses for liquidation opportunities (max 20).",
        "params": {"addresses": "List of Ethereum addresses"},
    },
    {
        "name": "validate_address",
        "description": "Check whether a string is a valid Ethereum address.",
        "params": {"address": "Address string to validate"},
    },
]


class ToolError(Exception):
    """A tool call failed; ``code`` is one of the module-level error codes."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


# ---------------------------------------------------------------------------
# Payload formatting
# ---------------------------------------------------------------------------


def _usd(base_value: int) -> str:
    return parser.format_usd(parser.to_decimal(base_value, parser.BASE_CURRENCY_DECIMALS))


def _bonus_percent(liquidation_bonus: int) -> str:
    return parser.format_usd(Decimal(liquidation_bonus) / 100 - 100)


def _position_payload(entry: PositionEntry) -> dict[str, Any]:
    return {
        "asset": entry.asset,
        "symbol": entry.symbol,
        "balance": entry.balance_formatted,
        "debt": entry.debt_formatted,
        "decimals": entry.decimals,
        "usageAsCollateralEnabled": entry.usage_as_collateral_enabled,
        "liquidationBonus": f"{_bonus_percent(entry.liquidation_bonus)}%",
    }


def _reserve_payload(reserve: ReserveDescriptor) -> dict[str, Any]:
    return {
        "symbol": reserve.symbol,
        "address": reserve.asset,
        "decimals": reserve.decimals,
        "ltv": f"{parser.format_bps_percent(reserve.ltv)}%",
        "liquidationThreshold": f"{parser.format_bps_percent(reserve.liquidation_threshold)}%",
        "liquidationBonus": f"{_bonus_percent(reserve.liquidation_bonus)}%",
        "canBeCollateral": reserve.usage_as_collateral_enabled,
        "canBeBorrowed": reserve.borrowing_enabled,
        "isActive": reserve.is_active,
    }


def _opportunity_payload(opp: LiquidationOpportunity) -> dict[str, Any]:
    return {
        "userAddress": opp.address,
        "healthFactor": opp.health_factor,
        "totalCollateralUSD": opp.total_collateral_usd,
        "totalDebtUSD": opp.total_debt_usd,
        "availableBorrowsUSD": opp.available_borrows_usd,
        "liquidationThreshold": f"{opp.liquidation_threshold}%",
        "collateralAssets": [_position_payload(c) for c in opp.collateral_assets],
        "debtAssets": [_position_payload(d) for d in opp.debt_assets],
        "potentialProfit": opp.potential_profit,
        "riskLevel": opp.risk_tier.value,
        "gasWarning": opp.gas_warning,
    }


def _batch_status(result: BatchResult) -> str:
    if result.error is not None:
        return "ERROR"
    if result.opportunity is None:
        return "HEALTHY"
    if result.opportunity.risk_tier is RiskTier.HIGH:
        return "LIQUIDATABLE"
    return "AT_RISK"


def summarize_batch(results: list[BatchResult]) -> dict[str, Any]:
    """Totals plus one row per address, in input order."""
    counts = {"ERROR": 0, "LIQUIDATABLE": 0, "AT_RISK": 0, "HEALTHY": 0}
    rows: list[dict[str, Any]] = []

    for r in results:
        status = _batch_status(r)
        counts[status] += 1
        opp = r.opportunity
        row: dict[str, Any] = {
            "address": r.address,
            "status": status,
            "healthFactor": opp.health_factor if opp else "N/A",
            "totalDebtUSD": opp.total_debt_usd if opp else "0",
            "riskLevel": opp.risk_tier.value if opp else "NONE",
        }
        if r.error is not None:
            row["error"] = r.error
        rows.append(row)

    return {
        "totalChecked": len(results),
        "successful": len(results) - counts["ERROR"],
        "failed": counts["ERROR"],
        "liquidatable": counts["LIQUIDATABLE"],
        "atRisk": counts["AT_RISK"],
        "healthy": counts["HEALTHY"],
        "results": rows,
    }


# ---------------------------------------------------------------------------
# Argument checks
# ---------------------------------------------------------------------------


def _require_string(args: dict[str, Any], name: str) -> str:
    value = args.get(name)
    if not value or not isinstance(value, str):
        raise ToolError(INVALID_PARAMS, f"{name} parameter is required and must be a string")
    return value


def _require_address(engine: LiquidationEngine, args: dict[str, Any], name: str) -> str:
    value = _require_string(args, name)
    if not engine.is_valid_address(value):
        raise ToolError(INVALID_PARAMS, "Invalid Ethereum address format")
    return value


# ---------------------------------------------------------------------------
# Tool handlers
# ---------------------------------------------------------------------------


async def _get_user_health(engine: LiquidationEngine, args: dict[str, Any]) -> dict[str, Any]:
    address = _require_address(engine, args, "address")
    snap = await engine.get_account_snapshot(address)

    if snap.is_liquidatable:
        status = "LIQUIDATABLE"
    elif snap.is_at_risk:
        status = "AT_RISK"
    else:
        status = "HEALTHY"

    return {
        "address": snap.address,
        "healthFactor": snap.health_factor_formatted,
        "totalCollateralUSD": _usd(snap.total_collateral_base),
        "totalDebtUSD": _usd(snap.total_debt_base),
        "availableBorrowsUSD": _usd(snap.available_borrows_base),
        "liquidationThreshold": parser.format_bps_percent(snap.current_liquidation_threshold),
        "ltv": parser.format_bps_percent(snap.ltv),
        "isLiquidatable": snap.is_liquidatable,
        "isAtRisk": snap.is_at_risk,
        "status": status,
    }


async def _analyze_liquidation(engine: LiquidationEngine, args: dict[str, Any]) -> dict[str, Any]:
    address = _require_address(engine, args, "address")
    opportunity = await engine.analyze(address)
    if opportunity is None:
        return {
            "message": "No liquidation opportunity found. Position is healthy.",
            "address": address,
        }
    return _opportunity_payload(opportunity)


async def _get_user_positions(engine: LiquidationEngine, args: dict[str, Any]) -> dict[str, Any]:
    address = _require_address(engine, args, "address")
    positions = await engine.get_positions(address)
    return {
        "address": address,
        "collateralPositions": [_position_payload(c) for c in positions.collateral],
        "debtPositions": [_position_payload(d) for d in positions.debt],
    }


async def _get_aave_reserves(engine: LiquidationEngine, args: dict[str, Any]) -> dict[str, Any]:
    reserves = await engine.list_reserves()
    return {
        "totalReserves": len(reserves),
        "reserves": [_reserve_payload(r) for r in reserves],
    }


async def _get_asset_price(engine: LiquidationEngine, args: dict[str, Any]) -> dict[str, Any]:
    asset = _require_address(engine, args, "assetAddress")
    price = await engine.get_asset_price(asset)
    return {"assetAddress": asset, "priceUSD": price}


async def _get_reserve_stats(engine: LiquidationEngine, args: dict[str, Any]) -> dict[str, Any]:
    asset = _require_address(engine, args, "assetAddress")
    stats = await engine.get_reserve_stats(asset)
    if stats is None:
        return {"assetAddress": asset, "message": "Asset is not an Aave reserve."}
    return {
        "assetAddress": asset,
        "symbol": stats.symbol,
        "totalSupply": stats.total_supply,
        "totalBorrow": stats.total_borrow,
        "utilizationRate": stats.utilization_rate,
        "supplyAPY": stats.supply_apy,
        "borrowAPY": stats.borrow_apy,
    }


async def _get_protocol_status(engine: LiquidationEngine, args: dict[str, Any]) -> dict[str, Any]:
    block_number = await engine.get_block_number()
    protocol = engine.config.protocol
    return {
        "protocol": protocol.name,
        "network": protocol.network,
        "blockNumber": block_number,
        "poolAddress": protocol.contracts.pool,
        "status": "operational",
    }


async def _batch_check_addresses(engine: LiquidationEngine, args: dict[str, Any]) -> dict[str, Any]:
    addresses = args.get("addresses")
    if not isinstance(addresses, list) or not addresses:
        raise ToolError(
            INVALID_PARAMS, "addresses parameter is required and must be a non-empty array"
        )

    max_size = engine.config.analysis.max_batch_size
    if len(addresses) > max_size:
        raise ToolError(INVALID_PARAMS, f"Maximum {max_size} addresses allowed per batch request")

    invalid = [str(a) for a in addresses if not engine.is_valid_address(a)]
    if invalid:
        raise ToolError(INVALID_PARAMS, f"Invalid Ethereum addresses: {', '.join(invalid)}")

    results = await engine.analyze_batch(addresses)
    return summarize_batch(results)


async def _validate_address(engine: LiquidationEngine, args: dict[str, Any]) -> dict[str, Any]:
    address = _require_string(args, "address")
    is_valid = engine.is_valid_address(address)
    return {
        "address": address,
        "isValid": is_valid,
        "message": "Valid Ethereum address format" if is_valid else "Invalid Ethereum address format",
    }


_HANDLERS: dict[
    str, Callable[[LiquidationEngine, dict[str, Any]], Awaitable[dict[str, Any]]]
] = {
    "get_user_health": _get_user_health,
    "analyze_liquidation": _analyze_liquidation,
    "get_user_positions": _get_user_positions,
    "get_aave_reserves": _get_aave_reserves,
    "get_asset_price": _get_asset_price,
    "get_reserve_stats": _get_reserve_stats,
    "get_protocol_status": _get_protocol_status,
    "batch_check_addresses": _batch_check_addresses,
    "validate_address": _validate_address,
}


async def call_tool(
    engine: LiquidationEngine, name: str, arguments: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Dispatch a tool by name.

    Raises:
        ToolError: invalid parameters, unknown tool, or a failed engine call.
    """
    handler = _HANDLERS.get(name)
    if handler is None:
        raise ToolError(METHOD_NOT_FOUND, f"Unknown tool: {name}")

    try:
        return await handler(engine, arguments or {})
    except ToolError:
        raise
    except Exception as e:
        logger.error("Tool %s failed: %s", name, e)
        raise ToolError(INTERNAL_ERROR, f"Tool execution failed: {e}") from e
