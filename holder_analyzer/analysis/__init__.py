"""Distribution analysis module."""

from .distribution import (
    DistributionAnalyzer,
    assess_concentration,
    classify_tiers,
    gini,
    rank,
    top_share,
)

__all__ = [
    "DistributionAnalyzer",
    "assess_concentration",
    "classify_tiers",
    "gini",
    "rank",
    "top_share",
]
