"""Unit tests for data models."""
from __future__ import annotations

import pytest

from liquidation_radar.models import BatchResult, Positions, ReserveDescriptor, RiskTier
from tests.conftest import WETH, make_entry


class TestReserveDescriptor:
    def test_frozen(self) -> None:
        r = ReserveDescriptor(
            symbol="WETH",
            asset=WETH,
            decimals=18,
            ltv=8000,
            liquidation_threshold=8250,
            liquidation_bonus=10500,
            usage_as_collateral_enabled=True,
            borrowing_enabled=True,
            is_active=True,
        )
        with pytest.raises(AttributeError):
            r.liquidation_bonus = 11000  # type: ignore[misc]


class TestPositionEntry:
    def test_equality(self) -> None:
        assert make_entry() == make_entry()

    def test_frozen(self) -> None:
        entry = make_entry()
        with pytest.raises(AttributeError):
            entry.current_a_token_balance = 0  # type: ignore[misc]


class TestDefaults:
    def test_positions_default_empty(self) -> None:
        p = Positions()
        assert p.collateral == ()
        assert p.debt == ()

    def test_batch_result_defaults(self) -> None:
        r = BatchResult(address=WETH)
        assert r.opportunity is None
        assert r.error is None

    def test_risk_tier_values(self) -> None:
        assert [t.value for t in RiskTier] == ["HIGH", "MEDIUM", "LOW"]
