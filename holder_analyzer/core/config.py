"""Configuration management for API keys, networks and thresholds.

Loads settings from environment variables or a .env file, and analysis
thresholds from an optional YAML file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .models import GiniCutoffs, TierThresholds
from .types import Network

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkConfig:
    """Explorer endpoints for one network."""

    network: Network
    api_url: str
    explorer_url: str

    def token_holders_url(self, token_address: str) -> str:
        """Explorer page listing a token's holders."""
        return f"{self.explorer_url}/token/{token_address}#balances"


NETWORKS: dict[Network, NetworkConfig] = {
    Network.MAINNET: NetworkConfig(Network.MAINNET, "https://api.etherscan.io/api", "https://etherscan.io"),
    Network.POLYGON: NetworkConfig(Network.POLYGON, "https://api.polygonscan.com/api", "https://polygonscan.com"),
    Network.BSC: NetworkConfig(Network.BSC, "https://api.bscscan.com/api", "https://bscscan.com"),
    Network.ARBITRUM: NetworkConfig(Network.ARBITRUM, "https://api.arbiscan.io/api", "https://arbiscan.io"),
    Network.OPTIMISM: NetworkConfig(
        Network.OPTIMISM, "https://api-optimistic.etherscan.io/api", "https://optimistic.etherscan.io"
    ),
    Network.BASE: NetworkConfig(Network.BASE, "https://api.basescan.org/api", "https://basescan.org"),
}


def resolve_network(name: str | Network) -> NetworkConfig:
    """Look up a network's endpoints by name ("mainnet", "polygon", ...)."""
    try:
        network = Network(name.lower() if isinstance(name, str) else name)
    except ValueError:
        valid = ", ".join(n.value for n in Network)
        raise ConfigurationError("network", f"Unknown network '{name}'. Valid networks: {valid}")
    return NETWORKS[network]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(name, f"expected an integer, got {raw!r}")


@dataclass
class AnalyzerConfig:
    """Runtime configuration for the holder analyzer."""

    # Etherscan-family API key
    explorer_api_key: Optional[str] = None

    network: str = Network.MAINNET.value
    top_n: int = 20
    min_balance: int = 0  # In token units

    # Free-tier explorers allow 5 calls per second
    rate_limit_calls: int = 5
    rate_limit_period: int = 1

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """Load configuration from environment variables."""
        return cls(
            explorer_api_key=os.getenv("ETHERSCAN_API_KEY") or None,
            network=os.getenv("NETWORK", Network.MAINNET.value),
            top_n=_int_env("TOP_N", 20),
            min_balance=_int_env("MIN_BALANCE", 0),
            rate_limit_calls=_int_env("EXPLORER_RATE_LIMIT_CALLS", 5),
            rate_limit_period=_int_env("EXPLORER_RATE_LIMIT_PERIOD", 1),
        )

    @classmethod
    def load(cls, env_file: Optional[Path] = None) -> "AnalyzerConfig":
        """
        Load configuration from .env file and environment variables.

        Args:
            env_file: Optional path to .env file. If not provided,
                      looks for .env in the project root.

        Returns:
            AnalyzerConfig instance with loaded values
        """
        if env_file:
            load_dotenv(env_file)
        else:
            project_root = Path(__file__).parent.parent.parent
            env_path = project_root / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        return cls.from_env()

    def has_explorer_key(self) -> bool:
        """Check if an explorer API key is configured."""
        return bool(self.explorer_api_key)

    @property
    def network_config(self) -> NetworkConfig:
        return resolve_network(self.network)


# Global config instance (lazy loaded)
_config: Optional[AnalyzerConfig] = None


def get_config() -> AnalyzerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AnalyzerConfig.load()
    return _config


def reload_config(env_file: Optional[Path] = None) -> AnalyzerConfig:
    """Reload configuration from environment."""
    global _config
    _config = AnalyzerConfig.load(env_file)
    return _config


def load_thresholds(config_path: Path | str | None) -> tuple[TierThresholds, GiniCutoffs]:
    """
    Load tier thresholds and Gini cut-offs from a YAML file.

    Expected layout::

        tiers:
          whale: 1.0      # percent of supply
          large: 0.1
          medium: 0.01
        gini:
          moderate: 0.3
          high: 0.5

    Missing sections fall back to defaults. A missing file logs a warning and
    uses defaults; invalid values raise ConfigurationError.
    """
    if config_path is None:
        return TierThresholds(), GiniCutoffs()

    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            config: dict[str, Any] = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Config file not found: {path}, using defaults")
        return TierThresholds(), GiniCutoffs()
    except yaml.YAMLError as e:
        raise ConfigurationError(str(path), f"Invalid YAML: {e}")

    if not isinstance(config, dict):
        raise ConfigurationError(str(path), "top-level YAML value must be a mapping")

    try:
        thresholds = TierThresholds(**(config.get("tiers") or {}))
        cutoffs = GiniCutoffs(**(config.get("gini") or {}))
    except PydanticValidationError as e:
        raise ConfigurationError(str(path), str(e))

    logger.info(f"Loaded thresholds from {path}")
    return thresholds, cutoffs
