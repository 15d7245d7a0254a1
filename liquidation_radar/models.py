"""Data models — all frozen (immutable).

Raw on-chain amounts stay as integers at their native scale: 8 decimals for
base-currency (USD) values, 18 for the health factor, 4 for basis-point
ratios, 27 for ray rates and token-specific decimals for balances.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Gateway result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserAccountData:
    total_collateral_base: int
    total_debt_base: int
    available_borrows_base: int
    current_liquidation_threshold: int
    ltv: int
    health_factor: int


@dataclass(frozen=True)
class ReserveConfiguration:
    decimals: int
    ltv: int
    liquidation_threshold: int
    liquidation_bonus: int
    reserve_factor: int
    usage_as_collateral_enabled: bool
    borrowing_enabled: bool
    stable_borrow_rate_enabled: bool
    is_active: bool
    is_frozen: bool


@dataclass(frozen=True)
class UserReserveData:
    current_a_token_balance: int
    current_stable_debt: int
    current_variable_debt: int
    principal_stable_debt: int
    scaled_variable_debt: int
    stable_borrow_rate: int
    liquidity_rate: int
    stable_rate_last_updated: int
    usage_as_collateral_enabled: bool


@dataclass(frozen=True)
class ReserveTokenAddresses:
    a_token_address: str
    stable_debt_token_address: str
    variable_debt_token_address: str


@dataclass(frozen=True)
class ReserveMarketData:
    unbacked: int
    accrued_to_treasury_scaled: int
    total_a_token: int
    total_stable_debt: int
    total_variable_debt: int
    liquidity_rate: int
    variable_borrow_rate: int
    stable_borrow_rate: int
    average_stable_borrow_rate: int
    liquidity_index: int
    variable_borrow_index: int
    last_update_timestamp: int


# ---------------------------------------------------------------------------
# Engine value types
# ---------------------------------------------------------------------------


class RiskTier(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class ReserveDescriptor:
    """Static risk parameters of one listed asset."""

    symbol: str
    asset: str
    decimals: int
    ltv: int
    liquidation_threshold: int
    liquidation_bonus: int
    usage_as_collateral_enabled: bool
    borrowing_enabled: bool
    is_active: bool


@dataclass(frozen=True)
class AccountSnapshot:
    address: str
    total_collateral_base: int
    total_debt_base: int
    available_borrows_base: int
    current_liquidation_threshold: int
    ltv: int
    health_factor: int
    health_factor_formatted: str
    is_liquidatable: bool
    is_at_risk: bool


@dataclass(frozen=True)
class PositionEntry:
    """One user's balance and debt in a single reserve."""

    asset: str
    symbol: str
    current_a_token_balance: int
    current_stable_debt: int
    current_variable_debt: int
    total_debt: int
    decimals: int
    usage_as_collateral_enabled: bool
    balance_formatted: str
    debt_formatted: str
    liquidation_bonus: int


@dataclass(frozen=True)
class Positions:
    collateral: tuple[PositionEntry, ...] = ()
    debt: tuple[PositionEntry, ...] = ()


@dataclass(frozen=True)
class LiquidationOpportunity:
    address: str
    health_factor: str
    total_collateral_usd: str
    total_debt_usd: str
    available_borrows_usd: str
    liquidation_threshold: str
    collateral_assets: tuple[PositionEntry, ...]
    debt_assets: tuple[PositionEntry, ...]
    potential_profit: str
    risk_tier: RiskTier
    gas_warning: str


@dataclass(frozen=True)
class BatchResult:
    address: str
    opportunity: LiquidationOpportunity | None = None
    error: str | None = None


@dataclass(frozen=True)
class ReserveStats:
    symbol: str
    total_supply: str
    total_borrow: str
    utilization_rate: str
    supply_apy: str
    borrow_apy: str
