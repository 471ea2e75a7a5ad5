"""Main orchestrator for the holder analysis pipeline.

Picks a data source, materializes the snapshot, applies the minimum-balance
filter and runs the distribution analyzer, returning a DistributionReport
that carries the source's audit trail.
"""

import logging
from pathlib import Path
from typing import Any

from .analysis.distribution import DistributionAnalyzer
from .core.config import AnalyzerConfig, get_config, load_thresholds
from .core.models import DistributionReport, GiniCutoffs, TierThresholds, normalize_address
from .core.types import Percentage
from .core.units import to_base_units
from .providers.base import BaseHolderSource
from .providers.explorer import ExplorerHolderSource
from .providers.file_source import FileHolderSource
from .providers.rate_limit import RateLimitPolicy

logger = logging.getLogger(__name__)


class HolderAnalysisOrchestrator:
    """Orchestrates fetching a holder snapshot and analyzing it."""

    def __init__(
        self,
        config: AnalyzerConfig | None = None,
        source: BaseHolderSource | None = None,
        thresholds: TierThresholds | None = None,
        gini_cutoffs: GiniCutoffs | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Runtime configuration (defaults to environment)
            source: Holder source; defaults to the configured explorer
            thresholds: Tier thresholds
            gini_cutoffs: Gini rating cut-offs
        """
        self.config = config or get_config()
        self.source = source or ExplorerHolderSource(
            api_key=self.config.explorer_api_key,
            network=self.config.network,
            rate_limiter=RateLimitPolicy(
                calls=self.config.rate_limit_calls,
                period=self.config.rate_limit_period,
                name="explorer",
            ),
        )
        self.analyzer = DistributionAnalyzer(thresholds=thresholds, gini_cutoffs=gini_cutoffs)

    @classmethod
    def from_options(
        cls,
        config: AnalyzerConfig,
        holders_file: Path | None = None,
        total_supply: int | None = None,
        decimals: int | None = None,
        max_holders: int = 1000,
        thresholds_path: Path | None = None,
        network: str | None = None,
    ) -> "HolderAnalysisOrchestrator":
        """
        Build an orchestrator from CLI-style options.

        An explicit network overrides the one recorded in a holder file;
        the explorer always uses config.network.
        """
        thresholds, cutoffs = load_thresholds(thresholds_path)

        source: BaseHolderSource
        if holders_file is not None:
            source = FileHolderSource(
                holders_file,
                total_supply=total_supply,
                decimals=decimals,
                network=network,
            )
        else:
            source = ExplorerHolderSource(
                api_key=config.explorer_api_key,
                network=config.network,
                decimals=decimals,
                max_holders=max_holders,
                rate_limiter=RateLimitPolicy(
                    calls=config.rate_limit_calls,
                    period=config.rate_limit_period,
                    name="explorer",
                ),
            )

        return cls(config=config, source=source, thresholds=thresholds, gini_cutoffs=cutoffs)

    def analyze(
        self,
        token_address: str,
        top_n: int | None = None,
        min_balance: Any = None,
        whale_threshold: Percentage | None = None,
    ) -> DistributionReport:
        """
        Perform a complete holder distribution analysis.

        Args:
            token_address: Token contract address (0x + 40 hex)
            top_n: Number of top holders for concentration (config default)
            min_balance: Minimum balance in token units (config default)
            whale_threshold: Whale threshold in percent of supply

        Returns:
            DistributionReport including the source audit trail
        """
        address = normalize_address(token_address, field="token address")
        top_n = self.config.top_n if top_n is None else top_n
        min_balance = self.config.min_balance if min_balance is None else min_balance

        thresholds = self.analyzer.thresholds
        if whale_threshold is not None:
            thresholds = thresholds.with_whale(whale_threshold)

        logger.info(f"Fetching holder snapshot for {address} ({self.source.SOURCE.value})")
        snapshot = self.source.fetch_snapshot(address)

        min_base_units = to_base_units(min_balance, snapshot.decimals, field="min_balance")
        if min_base_units > 0:
            filtered = snapshot.filter_min_balance(min_base_units)
            logger.info(
                f"Min balance {min_balance} {snapshot.symbol}: kept "
                f"{filtered.holder_count}/{snapshot.holder_count} holders"
            )
            snapshot = filtered

        report = self.analyzer.analyze(snapshot, top_n=top_n, thresholds=thresholds)

        audit = self.source.get_audit_trail()
        self.source.clear_audit_trail()
        return report.with_audit_trail(audit)
