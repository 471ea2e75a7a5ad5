"""Holder distribution analysis: ranking, concentration, Gini and tiers.

All calculations are exact until the final ratio:
- share = balance / total_supply
- top-N share = sum(first N ranked balances) / total_supply
- Gini = (2 * sum((i+1) * x_i)) / (n * sum(x)) - (n+1)/n, x sorted ascending

Everything here is a pure function of its inputs; nothing touches the
network or the filesystem.
"""

import logging
from collections.abc import Sequence
from fractions import Fraction

from .. import __version__
from ..core.exceptions import InvalidInput
from ..core.models import (
    ConcentrationAssessment,
    DataQualityWarning,
    DistributionReport,
    GiniCutoffs,
    Holder,
    TierSummary,
    TierThresholds,
    TokenSnapshot,
)
from ..core.types import HolderLabel, HolderTier, RiskLevel

logger = logging.getLogger(__name__)

TIER_ORDER = (HolderTier.WHALE, HolderTier.LARGE, HolderTier.MEDIUM, HolderTier.SMALL)


def rank(snapshot: TokenSnapshot) -> list[Holder]:
    """
    Order holders by balance descending, ties by ascending address.

    Addresses are already normalized to lowercase hex, so string order is
    the byte order of the address.
    """
    return sorted(snapshot.holders, key=lambda h: (-h.balance, h.address))


def _share(amount: int, total_supply: int, field: str) -> Fraction:
    if total_supply == 0:
        raise InvalidInput(field, total_supply, "total supply is zero, share is undefined")
    return Fraction(amount, total_supply)


def top_share(ranked_holders: Sequence[Holder], total_supply: int, n: int) -> float:
    """
    Cumulative share of supply held by the first n ranked holders.

    Formula: sum(balance of first min(n, len) holders) / total_supply

    The result is not clamped: a value above 1.0 means the holder data
    claims more than the declared supply (stale or partial snapshot).

    Raises:
        InvalidInput: n is negative, or supply is 0 while holders exist
    """
    if n < 0:
        raise InvalidInput("n", n, "top-N count must be non-negative")
    if not ranked_holders:
        return 0.0
    held = sum(h.balance for h in ranked_holders[:n])
    return float(_share(held, total_supply, "total_supply"))


def gini(balances: Sequence[int]) -> float:
    """
    Gini coefficient of a set of non-negative balances.

    Formula: G = (2 * sum((i+1) * x_i)) / (n * sum(x)) - (n+1)/n
    with x sorted ascending and i zero-based. Evaluated as the single integer
    ratio (2 * sum((i+1) * x_i) - (n+1) * sum(x)) / (n * sum(x)), so equal
    balances cancel to exactly 0 and huge balances never overflow.

    Returns 0.0 for no balances, a single balance, or an all-zero set.

    Raises:
        InvalidInput: a balance is negative or not an integer
    """
    values = []
    for value in balances:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInput("balance", value, "balances must be integers")
        if value < 0:
            raise InvalidInput("balance", value, "balances must be non-negative")
        values.append(value)

    n = len(values)
    if n < 2:
        return 0.0

    values.sort()
    total = sum(values)
    if total == 0:
        return 0.0

    weighted = sum((i + 1) * x for i, x in enumerate(values))
    numerator = 2 * weighted - (n + 1) * total
    return float(Fraction(numerator, n * total))


def classify_tiers(
    ranked_holders: Sequence[Holder],
    total_supply: int,
    thresholds: TierThresholds | None = None,
) -> list[TierSummary]:
    """
    Partition holders into Whale / Large / Medium / Small by share of supply.

    Each holder lands in the first tier, in descending threshold order, whose
    threshold its share strictly exceeds. All four tiers are always returned
    in that order, so counts and balances add up to the input totals.

    Raises:
        InvalidInput: supply is 0 while holders exist
    """
    thresholds = thresholds or TierThresholds()
    counts = {tier: 0 for tier in TIER_ORDER}
    balances = {tier: 0 for tier in TIER_ORDER}

    for holder in ranked_holders:
        tier = thresholds.tier_for(_share(holder.balance, total_supply, "total_supply"))
        counts[tier] += 1
        balances[tier] += holder.balance

    return [
        TierSummary(
            tier=tier,
            label=thresholds.tier_label(tier),
            holder_count=counts[tier],
            total_balance=balances[tier],
            share_of_supply=float(Fraction(balances[tier], total_supply)) if total_supply else 0.0,
        )
        for tier in TIER_ORDER
    ]


def assess_concentration(
    ranked_holders: Sequence[Holder],
    total_supply: int,
    gini_coefficient: float,
    thresholds: TierThresholds,
    cutoffs: GiniCutoffs,
) -> ConcentrationAssessment:
    """
    Rate centralization risk from the top holders and the Gini coefficient.

    HIGH: top holder above the mega-whale threshold, or top 10 above 50%.
    MEDIUM: top 10 above 25%, or Gini at or above the "high" cut-off.
    """
    if not ranked_holders or total_supply == 0:
        return ConcentrationAssessment(level=RiskLevel.LOW, findings=["No holder data to assess"])

    top1 = Fraction(ranked_holders[0].balance, total_supply)
    top10 = Fraction(sum(h.balance for h in ranked_holders[:10]), total_supply)
    whales = sum(
        1
        for h in ranked_holders
        if thresholds.label_for(Fraction(h.balance, total_supply))
        in (HolderLabel.WHALE, HolderLabel.MEGA_WHALE)
    )

    findings = [f"Top 10 holders control {float(top10):.1%} of supply"]
    if top1 > Fraction(str(thresholds.mega_whale)) / 100:
        findings.append(f"Top 1 holder controls >{thresholds.mega_whale:g}% of supply")
    if whales:
        findings.append(
            f"{whales} wallet{'s' if whales != 1 else ''} hold >{thresholds.whale:g}% each "
            "(likely exchanges, teams or vesting contracts)"
        )

    if top1 > Fraction(str(thresholds.mega_whale)) / 100 or top10 > Fraction(1, 2):
        level = RiskLevel.HIGH
        findings.append("Recommend: verify ownership of large wallets")
    elif top10 > Fraction(1, 4) or gini_coefficient >= cutoffs.high:
        level = RiskLevel.MEDIUM
    else:
        level = RiskLevel.LOW

    return ConcentrationAssessment(level=level, findings=findings)


class DistributionAnalyzer:
    """Turns a TokenSnapshot into a DistributionReport."""

    def __init__(
        self,
        thresholds: TierThresholds | None = None,
        gini_cutoffs: GiniCutoffs | None = None,
    ):
        """
        Initialize analyzer.

        Args:
            thresholds: Tier boundaries (defaults 1% / 0.1% / 0.01%)
            gini_cutoffs: Gini rating cut-offs (defaults 0.3 / 0.5)
        """
        self.thresholds = thresholds or TierThresholds()
        self.gini_cutoffs = gini_cutoffs or GiniCutoffs()

    def analyze(
        self,
        snapshot: TokenSnapshot,
        top_n: int = 20,
        thresholds: TierThresholds | None = None,
    ) -> DistributionReport:
        """
        Analyze a snapshot.

        Args:
            snapshot: Fully materialized holder snapshot
            top_n: Number of top holders for the cumulative share
            thresholds: Per-run override of the analyzer's tier thresholds

        Returns:
            DistributionReport with ranking, Gini, tiers and warnings

        Raises:
            InvalidInput: supply is 0 while holders exist, or top_n < 0
        """
        thresholds = thresholds or self.thresholds
        supply = snapshot.total_supply

        ranked = rank(snapshot)
        top_n_share = top_share(ranked, supply, top_n)
        gini_coefficient = gini([h.balance for h in ranked])
        tiers = classify_tiers(ranked, supply, thresholds)
        concentration = assess_concentration(
            ranked, supply, gini_coefficient, thresholds, self.gini_cutoffs
        )

        known = snapshot.known_balance
        coverage = float(Fraction(known, supply)) if supply else 0.0

        warnings = self._check_quality(snapshot, top_n, top_n_share, known)
        for warning in warnings:
            logger.warning(f"{warning.field}: {warning.issue}")

        logger.debug(
            f"Analyzed {len(ranked)} holders of {snapshot.address}: "
            f"top{top_n}={top_n_share:.4f} gini={gini_coefficient:.4f}"
        )

        return DistributionReport(
            snapshot=snapshot,
            ranked_holders=tuple(ranked),
            top_n=top_n,
            top_n_share=top_n_share,
            gini_coefficient=gini_coefficient,
            gini_rating=self.gini_cutoffs.rate(gini_coefficient),
            tiers=tuple(tiers),
            thresholds=thresholds,
            concentration=concentration,
            holder_coverage=coverage,
            warnings=tuple(warnings),
            tool_version=__version__,
        )

    def _check_quality(
        self,
        snapshot: TokenSnapshot,
        top_n: int,
        top_n_share: float,
        known_balance: int,
    ) -> list[DataQualityWarning]:
        """Flag snapshots that look stale or partial."""
        warnings: list[DataQualityWarning] = []

        if not snapshot.holders:
            warnings.append(
                DataQualityWarning(
                    field="holders",
                    issue="No holders in snapshot; all metrics are zero",
                    severity="info",
                )
            )
            return warnings

        if top_n_share > 1:
            warnings.append(
                DataQualityWarning(
                    field="top_n_share",
                    issue=f"Top {top_n} holders hold {top_n_share:.2%} of declared supply",
                    suggestion="Holder data is stale or partial; refresh the snapshot",
                )
            )
        if known_balance > snapshot.total_supply:
            warnings.append(
                DataQualityWarning(
                    field="holders",
                    issue=(
                        f"Known holder balances ({known_balance}) exceed "
                        f"total supply ({snapshot.total_supply})"
                    ),
                    suggestion="Check that supply and balances come from the same block",
                )
            )
        return warnings
