"""Tests for data models, address handling and unit conversion."""

from decimal import Decimal
from fractions import Fraction

import pytest
from pydantic import ValidationError

from holder_analyzer.core.exceptions import InvalidAddressFormat, InvalidInput
from holder_analyzer.core.models import (
    GiniCutoffs,
    Holder,
    TierThresholds,
    TokenSnapshot,
    normalize_address,
    parse_amount,
)
from holder_analyzer.core.types import GiniRating, HolderLabel, HolderTier
from holder_analyzer.core.units import to_base_units, to_token_units

from conftest import TOKEN, A, B, C


class TestAddresses:
    """Tests for address validation and normalization."""

    def test_checksummed_address_is_lowercased(self):
        assert normalize_address("0xdAC17F958D2ee523a2206206994597C13D831ec7") == TOKEN

    def test_surrounding_whitespace_is_ignored(self):
        assert normalize_address(f"  {TOKEN}\n") == TOKEN

    @pytest.mark.parametrize(
        "bad",
        [
            "0x123",
            "dac17f958d2ee523a2206206994597c13d831ec7",
            "0xdac17f958d2ee523a2206206994597c13d831ec7ff",
            "0xgac17f958d2ee523a2206206994597c13d831ec7",
            "",
        ],
    )
    def test_rejects_malformed(self, bad):
        with pytest.raises(InvalidAddressFormat):
            normalize_address(bad)

    def test_rejects_non_string(self):
        with pytest.raises(InvalidAddressFormat):
            normalize_address(12345)

    def test_error_names_field(self):
        with pytest.raises(InvalidAddressFormat) as exc_info:
            Holder(address="0x123", balance=1)
        assert exc_info.value.field == "holder address"
        assert exc_info.value.address == "0x123"

    def test_snapshot_rejects_bad_token_address(self):
        with pytest.raises(InvalidAddressFormat):
            TokenSnapshot.build(address="not-an-address", total_supply=1, holders=[])


class TestAmounts:
    """Tests for base-unit amount parsing."""

    def test_plain_and_string_ints(self):
        assert parse_amount(42) == 42
        assert parse_amount("1000000000000000000000000") == 10**24
        assert parse_amount("1_000") == 1000

    def test_hex_string(self):
        assert parse_amount("0xde0b6b3a7640000") == 10**18

    def test_integral_float_and_decimal(self):
        assert parse_amount(5.0) == 5
        assert parse_amount(Decimal("12")) == 12

    @pytest.mark.parametrize("bad", [-1, "-5", "1.5", 2.5, "abc", True, None, [1]])
    def test_rejects_invalid(self, bad):
        with pytest.raises(InvalidInput):
            parse_amount(bad)

    def test_negative_holder_balance(self):
        with pytest.raises(InvalidInput) as exc_info:
            Holder(address=A, balance=-10)
        assert exc_info.value.field == "balance"


class TestTokenSnapshot:
    """Tests for TokenSnapshot construction."""

    def test_duplicate_addresses_are_merged(self):
        snapshot = TokenSnapshot.build(
            address=TOKEN,
            total_supply=1000,
            holders=[(A, 100), (B, 50), (A.upper().replace("0X", "0x"), 25)],
        )
        assert snapshot.holder_count == 2
        balances = {h.address: h.balance for h in snapshot.holders}
        assert balances == {A: 125, B: 50}
        assert snapshot.known_balance == 175

    def test_accepts_holder_objects(self):
        snapshot = TokenSnapshot.build(
            address=TOKEN, total_supply=10, holders=[Holder(address=A, balance=3)]
        )
        assert snapshot.holders == (Holder(address=A, balance=3),)

    def test_defaults(self):
        snapshot = TokenSnapshot.build(address=TOKEN, total_supply=0, holders=[])
        assert snapshot.decimals == 18
        assert snapshot.symbol == "TOKEN"
        assert snapshot.holders == ()

    def test_decimals_range(self):
        TokenSnapshot.build(address=TOKEN, total_supply=1, holders=[], decimals=255)
        with pytest.raises(InvalidInput):
            TokenSnapshot.build(address=TOKEN, total_supply=1, holders=[], decimals=256)

    def test_negative_supply(self):
        with pytest.raises(InvalidInput):
            TokenSnapshot.build(address=TOKEN, total_supply=-1, holders=[])

    def test_filter_min_balance(self, sample_snapshot):
        filtered = sample_snapshot.filter_min_balance(95_000)
        assert {h.address for h in filtered.holders} == {A, B, C}
        assert filtered.total_supply == sample_snapshot.total_supply
        assert sample_snapshot.holder_count == 5

    def test_filter_zero_is_noop(self, sample_snapshot):
        assert sample_snapshot.filter_min_balance(0) is sample_snapshot

    def test_frozen(self, sample_snapshot):
        with pytest.raises(ValidationError):
            sample_snapshot.total_supply = 5


class TestTierThresholds:
    """Tests for tier thresholds and holder labels."""

    def test_defaults(self):
        thresholds = TierThresholds()
        assert (thresholds.whale, thresholds.large, thresholds.medium) == (1.0, 0.1, 0.01)
        assert thresholds.mega_whale == 10.0

    def test_must_be_descending(self):
        with pytest.raises(ValidationError):
            TierThresholds(whale=0.1, large=0.1)
        with pytest.raises(ValidationError):
            TierThresholds(whale=0.05)

    def test_must_be_positive(self):
        with pytest.raises(ValidationError):
            TierThresholds(medium=0)

    def test_with_whale(self):
        thresholds = TierThresholds().with_whale(2.5)
        assert thresholds.whale == 2.5
        assert thresholds.large == 0.1
        with pytest.raises(ValidationError):
            TierThresholds().with_whale(-1)

    def test_with_whale_above_mega_whale(self):
        """Raising the whale threshold drags the mega-whale cut-off along."""
        thresholds = TierThresholds().with_whale(15)
        assert thresholds.whale == 15
        assert thresholds.mega_whale == 15
        assert thresholds.label_for(Fraction(12, 100)) == HolderLabel.LARGE
        assert thresholds.tier_for(Fraction(12, 100)) == HolderTier.LARGE

    def test_mega_whale_not_below_whale(self):
        with pytest.raises(ValidationError):
            TierThresholds(whale=15, mega_whale=10)

    def test_mega_whale_defaults_to_whale(self):
        assert TierThresholds(whale=20, large=5, medium=1).mega_whale == 20
        assert TierThresholds(whale=2).mega_whale == 10

    def test_tier_for(self):
        thresholds = TierThresholds()
        assert thresholds.tier_for(Fraction(2, 100)) == HolderTier.WHALE
        assert thresholds.tier_for(Fraction(1, 100)) == HolderTier.LARGE
        assert thresholds.tier_for(Fraction(1, 1000)) == HolderTier.MEDIUM
        assert thresholds.tier_for(Fraction(1, 10_000)) == HolderTier.SMALL
        assert thresholds.tier_for(Fraction(0)) == HolderTier.SMALL

    def test_label_for(self):
        thresholds = TierThresholds()
        assert thresholds.label_for(Fraction(11, 100)) == HolderLabel.MEGA_WHALE
        assert thresholds.label_for(Fraction(10, 100)) == HolderLabel.WHALE
        assert thresholds.label_for(Fraction(5, 1000)) == HolderLabel.LARGE
        assert thresholds.label_for(Fraction(1, 1000)) == HolderLabel.REGULAR

    def test_tier_labels(self):
        thresholds = TierThresholds()
        assert thresholds.tier_label(HolderTier.WHALE) == "Whales (>1%)"
        assert thresholds.tier_label(HolderTier.LARGE) == "Large (0.1-1%)"
        assert thresholds.tier_label(HolderTier.MEDIUM) == "Medium (0.01-0.1%)"
        assert thresholds.tier_label(HolderTier.SMALL) == "Small (<0.01%)"


class TestGiniCutoffs:
    """Tests for Gini ratings."""

    def test_rate(self):
        cutoffs = GiniCutoffs()
        assert cutoffs.rate(0.0) == GiniRating.WELL_DISTRIBUTED
        assert cutoffs.rate(0.29) == GiniRating.WELL_DISTRIBUTED
        assert cutoffs.rate(0.3) == GiniRating.MODERATE
        assert cutoffs.rate(0.5) == GiniRating.HIGH
        assert cutoffs.rate(0.95) == GiniRating.HIGH

    def test_invalid_order(self):
        with pytest.raises(ValidationError):
            GiniCutoffs(moderate=0.6, high=0.5)

    def test_display_names(self):
        assert GiniRating.MODERATE.display_name == "Moderately concentrated"
        assert HolderLabel.MEGA_WHALE.display_name == "Mega Whale"


class TestUnits:
    """Tests for token/base unit conversion."""

    def test_to_token_units(self):
        assert to_token_units(1_500_000, 6) == Decimal("1.5")
        assert to_token_units(10**24, 18) == Decimal("1000000")
        assert to_token_units(123, 0) == Decimal("123")

    def test_to_token_units_keeps_precision(self):
        assert str(to_token_units(10**30 + 1, 18)) == "1000000000000.000000000000000001"

    def test_to_base_units(self):
        assert to_base_units("1.5", 6) == 1_500_000
        assert to_base_units(1000, 18) == 1000 * 10**18
        assert to_base_units("0", 18) == 0

    def test_to_base_units_rounds_up(self):
        assert to_base_units("0.0000001", 6) == 1

    @pytest.mark.parametrize("bad", ["-1", "abc", "inf"])
    def test_to_base_units_rejects(self, bad):
        with pytest.raises(InvalidInput):
            to_base_units(bad, 18)
