"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .addresses import is_valid_address

logger = logging.getLogger(__name__)

# Aave V3 on Ethereum mainnet
DEFAULT_POOL = "0x87870Bca3F3fD6335C3F4ce8392D69350B4fA4E2"
DEFAULT_DATA_PROVIDER = "0x7B4EB56E7CD4b454BA8ff71E4518426369a138a3"
DEFAULT_ORACLE = "0x54586bE62E3c3580375aE3723C145253060Ca0C2"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30


@dataclass(frozen=True)
class ContractsConfig:
    pool: str = DEFAULT_POOL
    data_provider: str = DEFAULT_DATA_PROVIDER
    oracle: str = DEFAULT_ORACLE


@dataclass(frozen=True)
class ProtocolConfig:
    name: str = "Aave V3"
    network: str = "Ethereum Mainnet"
    contracts: ContractsConfig = field(default_factory=ContractsConfig)
    reserve_cache_ttl: float = 60.0


@dataclass(frozen=True)
class AnalysisConfig:
    batch_concurrency: int = 5
    max_batch_size: int = 20


@dataclass(frozen=True)
class AppConfig:
    chain: ChainConfig = field(default_factory=ChainConfig)
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_chain(raw: dict[str, Any]) -> ChainConfig:
    # Blank entries come from unset ${VAR} references.
    endpoints = [e.strip() for e in raw.get("rpc_endpoints", []) if e and e.strip()]
    return ChainConfig(
        rpc_endpoints=tuple(endpoints),
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
    )


def _build_protocol(raw: dict[str, Any]) -> ProtocolConfig:
    contracts = raw.get("contracts", {})
    return ProtocolConfig(
        name=raw.get("name", "Aave V3"),
        network=raw.get("network", "Ethereum Mainnet"),
        contracts=ContractsConfig(
            pool=contracts.get("pool", DEFAULT_POOL),
            data_provider=contracts.get("data_provider", DEFAULT_DATA_PROVIDER),
            oracle=contracts.get("oracle", DEFAULT_ORACLE),
        ),
        reserve_cache_ttl=float(raw.get("reserve_cache_ttl", 60.0)),
    )


def _build_analysis(raw: dict[str, Any]) -> AnalysisConfig:
    return AnalysisConfig(
        batch_concurrency=int(raw.get("batch_concurrency", 5)),
        max_batch_size=int(raw.get("max_batch_size", 20)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        chain=_build_chain(raw.get("chain", {})),
        protocol=_build_protocol(raw.get("protocol", {})),
        analysis=_build_analysis(raw.get("analysis", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.chain.rpc_endpoints:
        raise ValueError("At least one RPC endpoint must be configured")

    contracts = cfg.protocol.contracts
    for name in ("pool", "data_provider", "oracle"):
        address = getattr(contracts, name)
        if not is_valid_address(address):
            raise ValueError(f"Contract '{name}' has invalid address '{address}'")

    if cfg.protocol.reserve_cache_ttl <= 0:
        raise ValueError("reserve_cache_ttl must be positive")
    if cfg.analysis.batch_concurrency < 1:
        raise ValueError("batch_concurrency must be at least 1")
    if cfg.analysis.max_batch_size < 1:
        raise ValueError("max_batch_size must be at least 1")
