"""Pydantic data models for the holder analyzer.

All data structures are immutable (frozen) after creation. Balances and
supplies are plain Python ints so that 18-decimal tokens with large supplies
never lose precision; shares are derived on demand.
"""

import math
import re
from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal
from fractions import Fraction
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .exceptions import InvalidAddressFormat, InvalidInput
from .types import (
    DataSource,
    GiniRating,
    HolderLabel,
    HolderTier,
    Network,
    Percentage,
    RiskLevel,
    Share,
)

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
_DECIMAL_INT_PATTERN = re.compile(r"^\+?\d+$")


def normalize_address(address: Any, field: str = "address") -> str:
    """Validate a 0x-prefixed 20-byte hex address and return it lowercased."""
    if not isinstance(address, str):
        raise InvalidAddressFormat(str(address), field=field)
    candidate = address.strip()
    if not ADDRESS_PATTERN.match(candidate):
        raise InvalidAddressFormat(address, field=field)
    return candidate.lower()


def parse_amount(value: Any, field: str = "balance") -> int:
    """
    Parse a token amount in base units without losing precision.

    Accepts ints, decimal strings, 0x-prefixed hex strings (RPC style) and
    integral floats/Decimals. Anything else, or a negative amount, is
    rejected with InvalidInput.
    """
    if isinstance(value, bool):
        raise InvalidInput(field, value, "expected an integer amount, got a boolean")

    if isinstance(value, int):
        amount = value
    elif isinstance(value, str):
        text = value.strip().replace("_", "")
        try:
            if text.lower().startswith("0x"):
                amount = int(text, 16)
            elif _DECIMAL_INT_PATTERN.match(text):
                amount = int(text)
            else:
                raise ValueError(text)
        except ValueError:
            raise InvalidInput(field, value, "not a non-negative integer amount")
    elif isinstance(value, (float, Decimal)):
        if not math.isfinite(value) or value != int(value):
            raise InvalidInput(field, value, "amount must be a whole number of base units")
        amount = int(value)
    else:
        raise InvalidInput(field, value, f"unsupported amount type {type(value).__name__}")

    if amount < 0:
        raise InvalidInput(field, value, "amount must be non-negative")
    return amount


class Holder(BaseModel):
    """One address's balance of a token, in base units."""

    address: str
    balance: int

    model_config = {"frozen": True}

    @field_validator("address", mode="before")
    @classmethod
    def validate_address(cls, v: Any) -> str:
        return normalize_address(v, field="holder address")

    @field_validator("balance", mode="before")
    @classmethod
    def validate_balance(cls, v: Any) -> int:
        return parse_amount(v, field="balance")


def merge_holders(holders: Iterable[Holder]) -> tuple[Holder, ...]:
    """Sum balances of repeated addresses; result is ordered by address."""
    totals: dict[str, int] = {}
    for holder in holders:
        totals[holder.address] = totals.get(holder.address, 0) + holder.balance
    return tuple(
        Holder(address=address, balance=balance)
        for address, balance in sorted(totals.items())
    )


class TokenSnapshot(BaseModel):
    """Point-in-time view of a token's holders, complete or partial."""

    address: str
    network: Network = Network.MAINNET
    symbol: str = "TOKEN"
    decimals: int = 18
    total_supply: int
    holders: tuple[Holder, ...] = ()
    source: DataSource = DataSource.UNKNOWN

    model_config = {"frozen": True}

    @field_validator("address", mode="before")
    @classmethod
    def validate_address(cls, v: Any) -> str:
        return normalize_address(v, field="token address")

    @field_validator("total_supply", mode="before")
    @classmethod
    def validate_total_supply(cls, v: Any) -> int:
        return parse_amount(v, field="total_supply")

    @field_validator("decimals", mode="before")
    @classmethod
    def validate_decimals(cls, v: Any) -> int:
        decimals = parse_amount(v, field="decimals")
        if decimals > 255:
            raise InvalidInput("decimals", v, "decimals must be between 0 and 255")
        return decimals

    @field_validator("holders")
    @classmethod
    def merge_duplicate_holders(cls, v: tuple[Holder, ...]) -> tuple[Holder, ...]:
        return merge_holders(v)

    @classmethod
    def build(
        cls,
        address: str,
        total_supply: Any,
        holders: Iterable[Holder | tuple[str, Any]],
        **kwargs: Any,
    ) -> "TokenSnapshot":
        """Build a snapshot from Holder objects or (address, balance) pairs."""
        parsed = [
            h if isinstance(h, Holder) else Holder(address=h[0], balance=h[1])
            for h in holders
        ]
        return cls(address=address, total_supply=total_supply, holders=tuple(parsed), **kwargs)

    @property
    def known_balance(self) -> int:
        """Sum of all known holder balances."""
        return sum(h.balance for h in self.holders)

    @property
    def holder_count(self) -> int:
        return len(self.holders)

    def filter_min_balance(self, min_balance: int) -> "TokenSnapshot":
        """Return a new snapshot without holders below min_balance base units."""
        if min_balance <= 0:
            return self
        kept = tuple(h for h in self.holders if h.balance >= min_balance)
        return self.model_copy(update={"holders": kept})


class TierThresholds(BaseModel):
    """Tier boundaries as percentages of total supply."""

    whale: Percentage = 1.0
    large: Percentage = 0.1
    medium: Percentage = 0.01
    mega_whale: Percentage = 10.0

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def default_mega_whale(cls, data: Any) -> Any:
        # An unset mega-whale cut-off never sits below the whale threshold
        if (
            isinstance(data, dict)
            and data.get("mega_whale") is None
            and isinstance(data.get("whale"), (int, float))
        ):
            data = {**data, "mega_whale": max(10.0, data["whale"])}
        return data

    @model_validator(mode="after")
    def check_order(self) -> "TierThresholds":
        if min(self.whale, self.large, self.medium, self.mega_whale) <= 0:
            raise ValueError("tier thresholds must be positive")
        if not (self.whale > self.large > self.medium):
            raise ValueError(
                f"tier thresholds must be strictly descending, got "
                f"whale={self.whale}, large={self.large}, medium={self.medium}"
            )
        if self.mega_whale < self.whale:
            raise ValueError(
                f"mega_whale ({self.mega_whale}) must not be below whale ({self.whale})"
            )
        return self

    def with_whale(self, whale: Percentage) -> "TierThresholds":
        """
        Copy with a different whale threshold (re-validated).

        The mega-whale cut-off is raised to the new whale threshold when it
        would otherwise fall below it.
        """
        mega_whale = self.mega_whale
        if isinstance(whale, (int, float)) and whale > mega_whale:
            mega_whale = whale
        return TierThresholds(**{**self.model_dump(), "whale": whale, "mega_whale": mega_whale})

    @staticmethod
    def _as_share(pct: Percentage) -> Fraction:
        # str() keeps 0.1 as exactly one tenth instead of its binary expansion
        return Fraction(str(pct)) / 100

    def tier_for(self, share: Fraction) -> HolderTier:
        """First tier (in descending order) whose threshold the share strictly exceeds."""
        if share > self._as_share(self.whale):
            return HolderTier.WHALE
        if share > self._as_share(self.large):
            return HolderTier.LARGE
        if share > self._as_share(self.medium):
            return HolderTier.MEDIUM
        return HolderTier.SMALL

    def label_for(self, share: Fraction) -> HolderLabel:
        if share > self._as_share(self.mega_whale):
            return HolderLabel.MEGA_WHALE
        if share > self._as_share(self.whale):
            return HolderLabel.WHALE
        if share > self._as_share(self.large):
            return HolderLabel.LARGE
        return HolderLabel.REGULAR

    def tier_label(self, tier: HolderTier) -> str:
        """Display label including the share range, e.g. 'Large (0.1-1%)'."""
        ranges = {
            HolderTier.WHALE: f">{self.whale:g}%",
            HolderTier.LARGE: f"{self.large:g}-{self.whale:g}%",
            HolderTier.MEDIUM: f"{self.medium:g}-{self.large:g}%",
            HolderTier.SMALL: f"<{self.medium:g}%",
        }
        return f"{tier.display_name} ({ranges[tier]})"


class GiniCutoffs(BaseModel):
    """Gini values separating the qualitative ratings."""

    moderate: float = 0.3
    high: float = 0.5

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_order(self) -> "GiniCutoffs":
        if not (0 < self.moderate < self.high <= 1):
            raise ValueError(
                f"gini cut-offs must satisfy 0 < moderate < high <= 1, "
                f"got moderate={self.moderate}, high={self.high}"
            )
        return self

    def rate(self, gini: float) -> GiniRating:
        if gini < self.moderate:
            return GiniRating.WELL_DISTRIBUTED
        if gini < self.high:
            return GiniRating.MODERATE
        return GiniRating.HIGH


class TierSummary(BaseModel):
    """Aggregate of the holders falling into one tier."""

    tier: HolderTier
    label: str
    holder_count: int = 0
    total_balance: int = 0
    share_of_supply: Share = 0.0

    model_config = {"frozen": True}


class ConcentrationAssessment(BaseModel):
    """Centralization risk with the findings that drove it."""

    level: RiskLevel
    findings: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class DataQualityWarning(BaseModel):
    """Non-fatal flag raised when the snapshot looks stale or partial."""

    field: str
    issue: str
    severity: str = "warning"  # "info", "warning"
    suggestion: str | None = None

    model_config = {"frozen": True}


class AuditEntry(BaseModel):
    """Audit trail entry for a data fetch."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: DataSource
    action: str  # "fetch", "load"
    endpoint: str | None = None
    success: bool = True
    error_message: str | None = None
    duration_ms: int | None = None
    notes: str | None = None

    model_config = {"frozen": True}


class DistributionReport(BaseModel):
    """Complete, read-only result of one distribution analysis."""

    snapshot: TokenSnapshot
    ranked_holders: tuple[Holder, ...] = ()
    top_n: int
    top_n_share: Share
    gini_coefficient: float = Field(ge=0.0, le=1.0)
    gini_rating: GiniRating
    tiers: tuple[TierSummary, ...]
    thresholds: TierThresholds = Field(default_factory=TierThresholds)
    concentration: ConcentrationAssessment
    holder_coverage: Share = 0.0
    warnings: tuple[DataQualityWarning, ...] = ()
    audit_trail: tuple[AuditEntry, ...] = ()

    analysis_timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    tool_version: str = "0.1.0"

    model_config = {"frozen": True}

    @property
    def top_holders(self) -> tuple[Holder, ...]:
        """The first top_n ranked holders."""
        return self.ranked_holders[: self.top_n]

    def share_of(self, holder: Holder) -> Share:
        """Holder balance as a fraction of total supply (0 when supply is 0)."""
        if self.snapshot.total_supply == 0:
            return 0.0
        return float(Fraction(holder.balance, self.snapshot.total_supply))

    def holder_label(self, holder: Holder) -> HolderLabel:
        if self.snapshot.total_supply == 0:
            return HolderLabel.REGULAR
        return self.thresholds.label_for(Fraction(holder.balance, self.snapshot.total_supply))

    def with_audit_trail(self, entries: Iterable[AuditEntry]) -> "DistributionReport":
        """Create a new report carrying the given audit entries (immutable pattern)."""
        return self.model_copy(update={"audit_trail": tuple(entries)})
