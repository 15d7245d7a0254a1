"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from liquidation_radar.config import (
    AnalysisConfig,
    AppConfig,
    ChainConfig,
    ContractsConfig,
    ProtocolConfig,
)
from liquidation_radar.models import (
    PositionEntry,
    ReserveConfiguration,
    UserAccountData,
    UserReserveData,
)

WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"

USER = "0x" + "11" * 20
OTHER_USER = "0x" + "22" * 20

HF_ONE = 10**18
USD = 10**8  # oracle base-currency unit


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_account_data(
    health_factor: int,
    collateral_usd: int = 1000,
    debt_usd: int = 800,
    available_usd: int = 0,
    liquidation_threshold: int = 8250,
    ltv: int = 8000,
) -> UserAccountData:
    return UserAccountData(
        total_collateral_base=collateral_usd * USD,
        total_debt_base=debt_usd * USD,
        available_borrows_base=available_usd * USD,
        current_liquidation_threshold=liquidation_threshold,
        ltv=ltv,
        health_factor=health_factor,
    )


def make_reserve_config(
    liquidation_bonus: int = 10500, decimals: int = 18
) -> ReserveConfiguration:
    return ReserveConfiguration(
        decimals=decimals,
        ltv=8000,
        liquidation_threshold=8250,
        liquidation_bonus=liquidation_bonus,
        reserve_factor=1500,
        usage_as_collateral_enabled=True,
        borrowing_enabled=True,
        stable_borrow_rate_enabled=False,
        is_active=True,
        is_frozen=False,
    )


def make_user_reserve(
    balance: int = 0, stable_debt: int = 0, variable_debt: int = 0
) -> UserReserveData:
    return UserReserveData(
        current_a_token_balance=balance,
        current_stable_debt=stable_debt,
        current_variable_debt=variable_debt,
        principal_stable_debt=stable_debt,
        scaled_variable_debt=variable_debt,
        stable_borrow_rate=0,
        liquidity_rate=0,
        stable_rate_last_updated=0,
        usage_as_collateral_enabled=balance > 0,
    )


def make_entry(
    asset: str = WETH,
    symbol: str = "WETH",
    balance: int = 5 * 10**17,
    debt: int = 0,
    decimals: int = 18,
    liquidation_bonus: int = 10500,
) -> PositionEntry:
    return PositionEntry(
        asset=asset,
        symbol=symbol,
        current_a_token_balance=balance,
        current_stable_debt=0,
        current_variable_debt=debt,
        total_debt=debt,
        decimals=decimals,
        usage_as_collateral_enabled=balance > 0,
        balance_formatted="",
        debt_formatted="",
        liquidation_bonus=liquidation_bonus,
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_protocol_config() -> ProtocolConfig:
    return ProtocolConfig(contracts=ContractsConfig(), reserve_cache_ttl=60.0)


@pytest.fixture()
def sample_app_config(
    sample_chain_config: ChainConfig, sample_protocol_config: ProtocolConfig
) -> AppConfig:
    return AppConfig(
        chain=sample_chain_config,
        protocol=sample_protocol_config,
        analysis=AnalysisConfig(batch_concurrency=5, max_batch_size=20),
    )


SAMPLE_YAML = textwrap.dedent("""\
    chain:
      rpc_endpoints: ["https://rpc.example.com"]
      rpc_timeout: 10
    protocol:
      name: Aave V3
      network: Ethereum Mainnet
      contracts:
        pool: "0x87870Bca3F3fD6335C3F4ce8392D69350B4fA4E2"
        data_provider: "0x7B4EB56E7CD4b454BA8ff71E4518426369a138a3"
        oracle: "0x54586bE62E3c3580375aE3723C145253060Ca0C2"
      reserve_cache_ttl: 30
    analysis:
      batch_concurrency: 3
      max_batch_size: 10
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Gateway double
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_gateway() -> AsyncMock:
    """Gateway with two reserves: WETH (5% bonus) and USDC (4.5% bonus).

    The user supplies 0.5 WETH ($1000 at $2000) and borrows 800 USDC.
    """
    gateway = AsyncMock()

    gateway.get_all_reserves_tokens.return_value = [("WETH", WETH), ("USDC", USDC)]

    configs = {
        WETH: make_reserve_config(liquidation_bonus=10500, decimals=18),
        USDC: make_reserve_config(liquidation_bonus=10450, decimals=6),
    }
    gateway.get_reserve_configuration_data.side_effect = lambda asset: configs[asset]
    gateway.decimals.side_effect = lambda asset: configs[asset].decimals

    user_reserves = {
        WETH: make_user_reserve(balance=5 * 10**17),
        USDC: make_user_reserve(variable_debt=800 * 10**6),
    }
    gateway.get_user_reserve_data.side_effect = (
        lambda asset, user: user_reserves[asset]
    )

    gateway.get_user_account_data.return_value = make_account_data(
        health_factor=95 * 10**16
    )

    prices = {WETH: 2000 * USD, USDC: 1 * USD}
    gateway.get_assets_prices.side_effect = lambda assets: [prices[a] for a in assets]
    gateway.get_asset_price.side_effect = lambda asset: prices[asset]
    gateway.get_block_number.return_value = 19_000_000

    return gateway
