"""Core module - data models, types, configuration and exceptions."""

from .models import (
    AuditEntry,
    ConcentrationAssessment,
    DataQualityWarning,
    DistributionReport,
    GiniCutoffs,
    Holder,
    TierSummary,
    TierThresholds,
    TokenSnapshot,
    normalize_address,
    parse_amount,
)
from .types import (
    DataSource,
    GiniRating,
    HolderLabel,
    HolderTier,
    Network,
    RiskLevel,
)
from .exceptions import (
    HolderAnalyzerError,
    InvalidAddressFormat,
    InvalidInput,
    DataSourceError,
    RateLimitError,
    ConfigurationError,
)

__all__ = [
    # Models
    "AuditEntry",
    "ConcentrationAssessment",
    "DataQualityWarning",
    "DistributionReport",
    "GiniCutoffs",
    "Holder",
    "TierSummary",
    "TierThresholds",
    "TokenSnapshot",
    "normalize_address",
    "parse_amount",
    # Types
    "DataSource",
    "GiniRating",
    "HolderLabel",
    "HolderTier",
    "Network",
    "RiskLevel",
    # Exceptions
    "HolderAnalyzerError",
    "InvalidAddressFormat",
    "InvalidInput",
    "DataSourceError",
    "RateLimitError",
    "ConfigurationError",
]
