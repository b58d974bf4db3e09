"""Tests for configuration loading."""

from decimal import Decimal

import pytest

from defi_sim.amm import InvalidInput
from defi_sim.config import DEFAULT_AMM_CONFIG, load_amm_config


class TestLoadAmmConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DEFI_SIM_FEE_RATE", raising=False)
        config = load_amm_config()

        assert config is DEFAULT_AMM_CONFIG
        assert config.fee_rate == Decimal("0.003")
        assert config.high_price_impact == Decimal("0.05")
        assert config.default_slippage_percent == Decimal("0.5")

    def test_fee_rate_from_env(self, monkeypatch):
        monkeypatch.setenv("DEFI_SIM_FEE_RATE", "0.0025")
        assert load_amm_config().fee_rate == Decimal("0.0025")

    @pytest.mark.parametrize("raw", ["1", "-0.1", "abc"])
    def test_invalid_fee_rate_from_env(self, monkeypatch, raw):
        monkeypatch.setenv("DEFI_SIM_FEE_RATE", raw)
        with pytest.raises(InvalidInput):
            load_amm_config()
