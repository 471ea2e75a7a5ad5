"""Holder data sources.

This module contains sources for:
- Etherscan-family explorer APIs
- Local holder exports (JSON, YAML, CSV)
"""

from .base import BaseHolderSource
from .explorer import ExplorerHolderSource
from .file_source import FileHolderSource
from .rate_limit import NoRateLimit, RateLimitPolicy

__all__ = [
    "BaseHolderSource",
    "ExplorerHolderSource",
    "FileHolderSource",
    "NoRateLimit",
    "RateLimitPolicy",
]
