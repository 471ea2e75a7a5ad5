"""Type definitions and enums for the holder analyzer."""

from enum import Enum
from typing import Literal


class Network(str, Enum):
    """EVM networks with an Etherscan-family explorer."""

    MAINNET = "mainnet"
    POLYGON = "polygon"
    BSC = "bsc"
    ARBITRUM = "arbitrum"
    OPTIMISM = "optimism"
    BASE = "base"


class HolderTier(str, Enum):
    """Distribution tiers, ordered from largest to smallest share."""

    WHALE = "whale"
    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"

    @property
    def display_name(self) -> str:
        """Human-readable display name."""
        names = {
            self.WHALE: "Whales",
            self.LARGE: "Large",
            self.MEDIUM: "Medium",
            self.SMALL: "Small",
        }
        return names.get(self, self.value)


class HolderLabel(str, Enum):
    """Per-holder classification shown next to ranked holders."""

    MEGA_WHALE = "mega_whale"   # > 10% of supply
    WHALE = "whale"             # > whale threshold
    LARGE = "large"             # > large threshold
    REGULAR = "regular"

    @property
    def display_name(self) -> str:
        """Human-readable display name."""
        names = {
            self.MEGA_WHALE: "Mega Whale",
            self.WHALE: "Whale",
            self.LARGE: "Large",
            self.REGULAR: "Regular",
        }
        return names.get(self, self.value)


class GiniRating(str, Enum):
    """Qualitative reading of a Gini coefficient."""

    WELL_DISTRIBUTED = "well_distributed"
    MODERATE = "moderately_concentrated"
    HIGH = "highly_concentrated"

    @property
    def display_name(self) -> str:
        names = {
            self.WELL_DISTRIBUTED: "Well-distributed",
            self.MODERATE: "Moderately concentrated",
            self.HIGH: "Highly concentrated",
        }
        return names.get(self, self.value)


class RiskLevel(str, Enum):
    """Centralization risk level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DataSource(str, Enum):
    """Data source identifiers."""

    EXPLORER = "explorer"
    FILE = "file"
    SYNTHETIC = "synthetic"
    UNKNOWN = "unknown"


# Type aliases for common patterns
Percentage = float   # 0-100 scale
Share = float        # 0-1 scale, may exceed 1 on stale data
BaseUnits = int      # Token amount in smallest units

OutputFormatType = Literal["pretty", "json", "csv"]
