"""Pure risk and profit functions for Aave V3 account data — no I/O."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Sequence

from ...models import (
    PositionEntry,
    Positions,
    ReserveConfiguration,
    ReserveDescriptor,
    RiskTier,
    UserReserveData,
)

HEALTH_FACTOR_DECIMALS = 18
BASE_CURRENCY_DECIMALS = 8
BPS_DECIMALS = 4
RAY_DECIMALS = 27

# Health factor thresholds at 18-decimal fixed point
LIQUIDATION_THRESHOLD = 10**18
MEDIUM_RISK_THRESHOLD = 102 * 10**16
WARNING_THRESHOLD = 105 * 10**16

CLOSE_FACTOR = Decimal("0.5")
BPS_ONE = 10_000

GAS_WARNING = (
    "Profit calculation does not include Gas costs. Actual profit will be lower."
)

_CENTS = Decimal("0.01")
_FOUR_PLACES = Decimal("0.0001")


def format_units(value: int, decimals: int) -> str:
    """Render a fixed-point integer as a decimal string.

    Examples:
        format_units(950000000000000000, 18) → "0.95"
        format_units(100000000000, 8) → "1000.0"
    """
    whole, frac = divmod(abs(value), 10**decimals)
    frac_digits = str(frac).rjust(decimals, "0").rstrip("0") if decimals else ""
    text = f"{whole}.{frac_digits or '0'}"
    return f"-{text}" if value < 0 else text


def to_decimal(value: int, decimals: int) -> Decimal:
    return Decimal(value).scaleb(-decimals)


def format_usd(value: Decimal) -> str:
    return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def format_bps_percent(value: int) -> str:
    """Basis points as a two-place percentage: 8250 → "82.50"."""
    return format_usd(Decimal(value) / 100)


def format_ray(value: int) -> str:
    """Ray (1e27) rate as a four-place fraction: 0.05e27 → "0.0500"."""
    return str(to_decimal(value, RAY_DECIMALS).quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Risk classification
# ---------------------------------------------------------------------------


def is_liquidatable(health_factor: int) -> bool:
    """0 < hf < 1.0. A zero health factor means no debt, never liquidatable."""
    return 0 < health_factor < LIQUIDATION_THRESHOLD


def is_at_risk(health_factor: int) -> bool:
    return 0 < health_factor < WARNING_THRESHOLD


def risk_tier(health_factor: int) -> RiskTier:
    """Tier an at-risk health factor: HIGH < 1.0 ≤ MEDIUM < 1.02 ≤ LOW < 1.05."""
    if health_factor < LIQUIDATION_THRESHOLD:
        return RiskTier.HIGH
    if health_factor < MEDIUM_RISK_THRESHOLD:
        return RiskTier.MEDIUM
    if health_factor < WARNING_THRESHOLD:
        return RiskTier.LOW
    raise ValueError(
        f"Health factor {format_units(health_factor, HEALTH_FACTOR_DECIMALS)} is not at risk"
    )


# ---------------------------------------------------------------------------
# Reserve and position building
# ---------------------------------------------------------------------------


def build_reserve_descriptor(
    symbol: str, asset: str, decimals: int, config: ReserveConfiguration
) -> ReserveDescriptor:
    return ReserveDescriptor(
        symbol=symbol,
        asset=asset,
        decimals=int(decimals),
        ltv=config.ltv,
        liquidation_threshold=config.liquidation_threshold,
        liquidation_bonus=config.liquidation_bonus,
        usage_as_collateral_enabled=config.usage_as_collateral_enabled,
        borrowing_enabled=config.borrowing_enabled,
        is_active=config.is_active,
    )


def build_position_entry(
    reserve: ReserveDescriptor, user_reserve: UserReserveData
) -> PositionEntry:
    total_debt = user_reserve.current_stable_debt + user_reserve.current_variable_debt
    return PositionEntry(
        asset=reserve.asset,
        symbol=reserve.symbol,
        current_a_token_balance=user_reserve.current_a_token_balance,
        current_stable_debt=user_reserve.current_stable_debt,
        current_variable_debt=user_reserve.current_variable_debt,
        total_debt=total_debt,
        decimals=reserve.decimals,
        usage_as_collateral_enabled=user_reserve.usage_as_collateral_enabled,
        balance_formatted=format_units(user_reserve.current_a_token_balance, reserve.decimals),
        debt_formatted=format_units(total_debt, reserve.decimals),
        liquidation_bonus=reserve.liquidation_bonus,
    )


def split_positions(
    reserves: Sequence[ReserveDescriptor],
    user_reserves: Sequence[UserReserveData],
) -> Positions:
    """Pair reserves with user data by index and sort into collateral/debt lists.

    Supplied balance > 0 puts an entry in the collateral list and total debt
    > 0 puts it in the debt list; the two checks are independent.
    """
    collateral: list[PositionEntry] = []
    debt: list[PositionEntry] = []

    for reserve, user_reserve in zip(reserves, user_reserves):
        entry = build_position_entry(reserve, user_reserve)
        if entry.current_a_token_balance > 0:
            collateral.append(entry)
        if entry.total_debt > 0:
            debt.append(entry)

    return Positions(collateral=tuple(collateral), debt=tuple(debt))


# ---------------------------------------------------------------------------
# Profit estimation
# ---------------------------------------------------------------------------


def bonus_fraction(liquidation_bonus: int) -> Decimal:
    """10500 bps → 0.05. Bonuses at or below 10000 bps yield zero."""
    return Decimal(max(0, liquidation_bonus - BPS_ONE)) / BPS_ONE


def estimate_collateral_profit(
    entry: PositionEntry, price: Decimal, total_debt_usd: Decimal
) -> Decimal | None:
    """Profit from liquidating through one collateral asset.

    liquidatable = min(debt * close factor, collateral / (1 + bonus), debt)
    profit = liquidatable * bonus

    Returns None when the asset has no usable price or no bonus.
    """
    if price <= 0:
        return None
    bonus = bonus_fraction(entry.liquidation_bonus)
    if bonus <= 0:
        return None

    collateral_usd = to_decimal(entry.current_a_token_balance, entry.decimals) * price
    max_debt_by_close_factor = total_debt_usd * CLOSE_FACTOR
    max_debt_by_collateral = collateral_usd / (1 + bonus)

    liquidatable_debt = min(max_debt_by_close_factor, max_debt_by_collateral, total_debt_usd)
    return liquidatable_debt * bonus


def estimate_liquidation_profit(
    collateral: Sequence[PositionEntry],
    prices: Mapping[str, Decimal],
    total_debt_usd: Decimal,
) -> str:
    """Best single-asset profit across the collateral list, as a USD string.

    Assets missing from ``prices`` are skipped. With no eligible asset the
    profit is "0".
    """
    best: Decimal | None = None
    for entry in collateral:
        price = prices.get(entry.asset)
        if price is None:
            continue
        profit = estimate_collateral_profit(entry, price, total_debt_usd)
        if profit is not None and (best is None or profit > best):
            best = profit

    if best is None:
        return "0"
    return format_usd(best)
