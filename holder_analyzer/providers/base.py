"""Base classes for holder data sources."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from ..core.models import AuditEntry, TokenSnapshot
from ..core.types import DataSource
from .rate_limit import NoRateLimit, RateLimitPolicy

logger = logging.getLogger(__name__)


class BaseHolderSource(ABC):
    """
    Abstract base class for everything that can produce a TokenSnapshot.

    A source owns all I/O concerns (auth, retries, rate limits) and must
    return a fully materialized, de-duplicated snapshot.
    """

    # Subclasses must define their data source
    SOURCE: DataSource = DataSource.UNKNOWN

    def __init__(self, rate_limiter: RateLimitPolicy | None = None):
        """
        Initialize source.

        Args:
            rate_limiter: Policy consulted before every outbound call.
                Defaults to no limiting.
        """
        self.rate_limiter = rate_limiter or NoRateLimit()
        self._audit_entries: list[AuditEntry] = []

    def _record_audit(
        self,
        action: str,
        endpoint: str | None = None,
        success: bool = True,
        error_message: str | None = None,
        duration_ms: int | None = None,
        notes: str | None = None,
    ) -> AuditEntry:
        """Record an audit entry for this source action."""
        entry = AuditEntry(
            timestamp=datetime.now(timezone.utc),
            source=self.SOURCE,
            action=action,
            endpoint=endpoint,
            success=success,
            error_message=error_message,
            duration_ms=duration_ms,
            notes=notes,
        )
        self._audit_entries.append(entry)
        return entry

    def get_audit_trail(self) -> list[AuditEntry]:
        """Return all audit entries recorded by this source."""
        return self._audit_entries.copy()

    def clear_audit_trail(self) -> None:
        """Clear the audit trail."""
        self._audit_entries.clear()

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the source is available and configured."""

    @abstractmethod
    def fetch_snapshot(self, token_address: str) -> TokenSnapshot:
        """Return the current holder snapshot for a token contract."""
