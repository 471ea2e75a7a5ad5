"""Audit trail formatter for transparency and reproducibility.

Shows which data source produced the snapshot, every call made against it,
and the data-quality warnings raised during analysis.
"""

import logging
from typing import Any

from ..core.models import DistributionReport

logger = logging.getLogger(__name__)


class AuditTrailFormatter:
    """Formats audit trail information for transparency."""

    def format_summary(self, report: DistributionReport) -> str:
        """
        Format a summary of the audit trail.

        Args:
            report: DistributionReport with audit data

        Returns:
            Formatted string summary
        """
        s = report.snapshot
        lines = []
        lines.append("=" * 70)
        lines.append("AUDIT TRAIL SUMMARY")
        lines.append("=" * 70)
        lines.append("")

        lines.append(f"Analysis Timestamp: {report.analysis_timestamp.isoformat()}")
        lines.append(f"Tool Version: {report.tool_version}")
        lines.append(f"Token: {s.symbol} ({s.address}) on {s.network.value}")
        lines.append(f"Snapshot Source: {s.source.value}")
        lines.append("")

        lines.append("DATA SOURCES CONSULTED")
        lines.append("-" * 40)
        sources_summary = self._summarize_sources(report)
        if not sources_summary:
            lines.append("  No data-source calls recorded")
        for source, info in sources_summary.items():
            status = "OK" if info["success_count"] > 0 else "FAILED"
            lines.append(f"  {source}: {status}")
            lines.append(f"    - Calls: {info['total_count']} ({info['success_count']} successful)")
            for endpoint in info["endpoints"][:3]:
                lines.append(f"    - Endpoint: {endpoint}")
        lines.append("")

        lines.append("SNAPSHOT COVERAGE")
        lines.append("-" * 40)
        lines.append(f"  Holders analyzed: {s.holder_count}")
        lines.append(f"  Known balance: {s.known_balance} of {s.total_supply} base units")
        lines.append(f"  Coverage: {report.holder_coverage:.2%}")
        lines.append("")

        if report.warnings:
            lines.append("DATA QUALITY WARNINGS")
            lines.append("-" * 40)
            for w in report.warnings:
                lines.append(f"  [{w.severity.upper()}] {w.field}")
                lines.append(f"    Issue: {w.issue}")
                if w.suggestion:
                    lines.append(f"    Suggestion: {w.suggestion}")
            lines.append("")

        lines.append("DETAILED CALLS")
        lines.append("-" * 40)
        for entry in report.audit_trail:
            status = "OK" if entry.success else "FAILED"
            duration = f"{entry.duration_ms}ms" if entry.duration_ms is not None else "N/A"
            lines.append(f"  [{entry.timestamp.strftime('%H:%M:%S')}] {entry.source.value} {entry.action}")
            lines.append(f"    Endpoint: {entry.endpoint or 'N/A'}")
            lines.append(f"    Status: {status}, Duration: {duration}")
            if entry.error_message:
                lines.append(f"    Error: {entry.error_message}")
            if entry.notes:
                lines.append(f"    Notes: {entry.notes}")
        lines.append("")

        lines.append("=" * 70)
        lines.append("END OF AUDIT TRAIL")
        lines.append("=" * 70)

        return "\n".join(lines)

    def _summarize_sources(self, report: DistributionReport) -> dict[str, Any]:
        """Summarize source usage from audit trail."""
        summary: dict[str, dict[str, Any]] = {}

        for entry in report.audit_trail:
            source_name = entry.source.value
            if source_name not in summary:
                summary[source_name] = {
                    "total_count": 0,
                    "success_count": 0,
                    "endpoints": [],
                }

            summary[source_name]["total_count"] += 1
            if entry.success:
                summary[source_name]["success_count"] += 1
            if entry.endpoint and entry.endpoint not in summary[source_name]["endpoints"]:
                summary[source_name]["endpoints"].append(entry.endpoint)

        return summary

    def format_to_file(self, report: DistributionReport, filepath: str) -> None:
        """Write audit trail to file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.format_summary(report))
