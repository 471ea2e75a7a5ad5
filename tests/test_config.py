"""Tests for configuration loading."""

import os

import pytest

from holder_analyzer.core.config import (
    NETWORKS,
    AnalyzerConfig,
    load_thresholds,
    resolve_network,
)
from holder_analyzer.core.exceptions import ConfigurationError
from holder_analyzer.core.models import GiniCutoffs, TierThresholds
from holder_analyzer.core.types import Network

ENV_VARS = (
    "ETHERSCAN_API_KEY",
    "NETWORK",
    "TOP_N",
    "MIN_BALANCE",
    "EXPLORER_RATE_LIMIT_CALLS",
    "EXPLORER_RATE_LIMIT_PERIOD",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestNetworks:
    """Tests for the network table."""

    def test_every_network_has_an_endpoint(self):
        assert set(NETWORKS) == set(Network)
        assert all(cfg.api_url.startswith("https://") for cfg in NETWORKS.values())

    def test_resolve(self):
        assert resolve_network("mainnet").api_url == "https://api.etherscan.io/api"
        assert resolve_network("BSC").api_url == "https://api.bscscan.com/api"
        assert resolve_network(Network.BASE).explorer_url == "https://basescan.org"

    def test_unknown(self):
        with pytest.raises(ConfigurationError, match="Unknown network"):
            resolve_network("goerli")

    def test_token_holders_url(self):
        url = resolve_network("arbitrum").token_holders_url("0xabc")
        assert url == "https://arbiscan.io/token/0xabc#balances"


class TestAnalyzerConfig:
    """Tests for environment-driven settings."""

    def test_defaults(self, clean_env):
        config = AnalyzerConfig.from_env()
        assert config.explorer_api_key is None
        assert config.network == "mainnet"
        assert config.top_n == 20
        assert config.min_balance == 0
        assert (config.rate_limit_calls, config.rate_limit_period) == (5, 1)
        assert not config.has_explorer_key()

    def test_from_env(self, clean_env):
        clean_env.setenv("ETHERSCAN_API_KEY", "abc123")
        clean_env.setenv("NETWORK", "polygon")
        clean_env.setenv("TOP_N", "50")
        clean_env.setenv("EXPLORER_RATE_LIMIT_CALLS", "2")

        config = AnalyzerConfig.from_env()
        assert config.has_explorer_key()
        assert config.top_n == 50
        assert config.rate_limit_calls == 2
        assert config.network_config.network == Network.POLYGON

    def test_bad_integer(self, clean_env):
        clean_env.setenv("TOP_N", "lots")
        with pytest.raises(ConfigurationError, match="TOP_N"):
            AnalyzerConfig.from_env()

    def test_load_env_file(self, clean_env, tmp_path):
        # load_dotenv writes to os.environ directly
        clean_env.setattr(os, "environ", dict(os.environ))
        env_file = tmp_path / ".env"
        env_file.write_text("ETHERSCAN_API_KEY=from-file\nTOP_N=7\n", encoding="utf-8")

        config = AnalyzerConfig.load(env_file)

        assert config.explorer_api_key == "from-file"
        assert config.top_n == 7


class TestLoadThresholds:
    """Tests for the YAML threshold file."""

    def test_none_gives_defaults(self):
        assert load_thresholds(None) == (TierThresholds(), GiniCutoffs())

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_thresholds(tmp_path / "absent.yaml") == (TierThresholds(), GiniCutoffs())

    def test_full_file(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text(
            "tiers:\n  whale: 2.0\n  large: 0.5\n  medium: 0.05\n"
            "gini:\n  moderate: 0.4\n  high: 0.6\n",
            encoding="utf-8",
        )
        thresholds, cutoffs = load_thresholds(path)
        assert (thresholds.whale, thresholds.large, thresholds.medium) == (2.0, 0.5, 0.05)
        assert (cutoffs.moderate, cutoffs.high) == (0.4, 0.6)

    def test_partial_file(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text("tiers:\n  whale: 5\n", encoding="utf-8")
        thresholds, cutoffs = load_thresholds(path)
        assert thresholds.whale == 5.0
        assert thresholds.large == 0.1
        assert cutoffs == GiniCutoffs()

    def test_invalid_order(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text("tiers:\n  whale: 0.05\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_thresholds(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text("tiers: [whale: 1\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_thresholds(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_thresholds(path)
