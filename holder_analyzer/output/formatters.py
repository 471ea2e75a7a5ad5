"""Output formatters for distribution reports.

Provides multiple output formats:
- JSON: Machine-readable, balances as decimal strings
- CSV: Spreadsheet-compatible, top-holder focus
- Table: Human-readable CLI output ("pretty")
"""

import csv
import io
import json
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..core.config import resolve_network
from ..core.models import DistributionReport, Holder
from ..core.types import HolderLabel, RiskLevel
from ..core.units import to_token_units

logger = logging.getLogger(__name__)

LABEL_STYLES = {
    HolderLabel.MEGA_WHALE: "red",
    HolderLabel.WHALE: "magenta",
    HolderLabel.LARGE: "yellow",
    HolderLabel.REGULAR: "green",
}

RISK_STYLES = {
    RiskLevel.HIGH: "red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}


def format_number(value: Decimal | float | int) -> str:
    """
    Compact human-readable number: 1234 -> 1.23K, 2.5e9 -> 2.50B.

    Anything below a thousand keeps two decimals.
    """
    number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    magnitude = abs(number)
    for limit, suffix in ((Decimal(10) ** 12, "T"), (Decimal(10) ** 9, "B"), (Decimal(10) ** 6, "M"), (Decimal(10) ** 3, "K")):
        if magnitude >= limit:
            return f"{number / limit:.2f}{suffix}"
    return f"{number:.2f}"


def format_token_amount(amount: int, decimals: int) -> str:
    """Base units -> plain decimal string in token units, trailing zeros trimmed."""
    text = format(to_token_units(amount, decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_pct(share: float, places: int = 2) -> str:
    """Share (0-1) as a percentage string."""
    return f"{share * 100:.{places}f}%"


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format(self, report: DistributionReport) -> str:
        """Format the report as a string."""

    @abstractmethod
    def format_to_file(self, report: DistributionReport, filepath: str) -> None:
        """Write formatted report to a file."""


class JSONFormatter(OutputFormatter):
    """Formats reports as JSON."""

    def __init__(self, indent: int = 2, include_audit: bool = False):
        """
        Initialize JSON formatter.

        Args:
            indent: JSON indentation level
            include_audit: Include the data-source audit trail
        """
        self.indent = indent
        self.include_audit = include_audit

    def to_dict(self, report: DistributionReport) -> dict[str, Any]:
        """Build the JSON document as a plain dict."""
        snapshot = report.snapshot
        decimals = snapshot.decimals

        top_holders = [
            {
                "rank": rank,
                "address": holder.address,
                "balance": str(holder.balance),
                "balance_tokens": format_token_amount(holder.balance, decimals),
                "share": report.share_of(holder),
                "type": report.holder_label(holder).value,
            }
            for rank, holder in enumerate(report.top_holders, 1)
        ]

        tiers = [
            {
                "tier": t.tier.value,
                "label": t.label,
                "holder_count": t.holder_count,
                "total_balance": str(t.total_balance),
                "share_of_supply": t.share_of_supply,
            }
            for t in report.tiers
        ]

        data: dict[str, Any] = {
            "token": {
                "address": snapshot.address,
                "symbol": snapshot.symbol,
                "decimals": decimals,
                "total_supply": str(snapshot.total_supply),
            },
            "network": snapshot.network.value,
            "analysis": {
                "holder_count": snapshot.holder_count,
                "holder_coverage": report.holder_coverage,
                "top_n": report.top_n,
                "top_n_share": report.top_n_share,
                "top_holders": top_holders,
                "tiers": tiers,
                "decentralization": {
                    "gini_coefficient": report.gini_coefficient,
                    "gini_rating": report.gini_rating.value,
                    "risk_level": report.concentration.level.value,
                    "findings": list(report.concentration.findings),
                },
            },
            "warnings": [w.model_dump() for w in report.warnings],
            "analysis_timestamp": report.analysis_timestamp.isoformat(),
            "tool_version": report.tool_version,
        }

        if self.include_audit:
            data["audit_trail"] = [e.model_dump(mode="json") for e in report.audit_trail]

        return data

    def format(self, report: DistributionReport) -> str:
        """Format report as JSON string."""
        return json.dumps(self.to_dict(report), indent=self.indent)

    def format_to_file(self, report: DistributionReport, filepath: str) -> None:
        """Write JSON to file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.format(report))


class CSVFormatter(OutputFormatter):
    """Formats the ranked holders (plus tier and metric sections) as CSV."""

    HOLDER_HEADER = ["rank", "address", "balance", "percentage", "type"]

    def __init__(self, delimiter: str = ",", include_sections: bool = True):
        """
        Initialize CSV formatter.

        Args:
            delimiter: CSV delimiter
            include_sections: Append tier and metric sections after the holders
        """
        self.delimiter = delimiter
        self.include_sections = include_sections

    def format(self, report: DistributionReport) -> str:
        """Format report as CSV string."""
        output = io.StringIO()
        writer = csv.writer(output, delimiter=self.delimiter, lineterminator="\n")
        decimals = report.snapshot.decimals

        writer.writerow(self.HOLDER_HEADER)
        for rank, holder in enumerate(report.top_holders, 1):
            writer.writerow([
                rank,
                holder.address,
                format_token_amount(holder.balance, decimals),
                f"{report.share_of(holder) * 100:.4f}",
                report.holder_label(holder).value,
            ])

        if not self.include_sections:
            return output.getvalue()

        writer.writerow([])
        writer.writerow(["# Distribution by Tier"])
        writer.writerow(["tier", "label", "holders", "total_balance", "percentage"])
        for t in report.tiers:
            writer.writerow([
                t.tier.value,
                t.label,
                t.holder_count,
                format_token_amount(t.total_balance, decimals),
                f"{t.share_of_supply * 100:.4f}",
            ])

        writer.writerow([])
        writer.writerow(["# Metrics"])
        writer.writerow(["metric", "value"])
        writer.writerow(["token", report.snapshot.address])
        writer.writerow(["total_supply", format_token_amount(report.snapshot.total_supply, decimals)])
        writer.writerow(["holders", report.snapshot.holder_count])
        writer.writerow([f"top_{report.top_n}_percentage", f"{report.top_n_share * 100:.4f}"])
        writer.writerow(["gini_coefficient", f"{report.gini_coefficient:.4f}"])
        writer.writerow(["risk_level", report.concentration.level.value])

        if report.warnings:
            writer.writerow([])
            writer.writerow(["# Data Quality Warnings"])
            writer.writerow(["field", "issue", "severity"])
            for w in report.warnings:
                writer.writerow([w.field, w.issue, w.severity])

        return output.getvalue()

    def format_to_file(self, report: DistributionReport, filepath: str) -> None:
        """Write CSV to file."""
        with open(filepath, "w", encoding="utf-8", newline="") as f:
            f.write(self.format(report))


class TableFormatter(OutputFormatter):
    """Formats reports as human-readable tables for CLI output."""

    def __init__(
        self,
        use_rich: bool = True,
        width: int = 110,
        show_gini: bool = True,
        show_tiers: bool = True,
    ):
        """
        Initialize table formatter.

        Args:
            use_rich: Use rich for colored output
            width: Maximum table width
            show_gini: Include the decentralization metrics section
            show_tiers: Include the distribution-by-tier section
        """
        self.use_rich = use_rich
        self.width = width
        self.show_gini = show_gini
        self.show_tiers = show_tiers

    def format(self, report: DistributionReport) -> str:
        """Format report as readable tables."""
        if self.use_rich:
            return self._format_rich(report)
        return self._format_plain(report)

    def _supply_line(self, report: DistributionReport) -> str:
        s = report.snapshot
        return f"{format_number(to_token_units(s.total_supply, s.decimals))} {s.symbol}"

    def _holder_row(self, report: DistributionReport, rank: int, holder: Holder) -> tuple[str, str, str, str, HolderLabel]:
        s = report.snapshot
        return (
            str(rank),
            holder.address,
            format_number(to_token_units(holder.balance, s.decimals)),
            format_pct(report.share_of(holder)),
            report.holder_label(holder),
        )

    def _format_plain(self, report: DistributionReport) -> str:
        """Plain text formatting without colors."""
        s = report.snapshot
        lines = []
        sep = "=" * 79

        lines.append(sep)
        lines.append("  TOKEN HOLDER ANALYSIS")
        lines.append(sep)
        lines.append(f"  Token:    {s.symbol}")
        lines.append(f"  Address:  {s.address}")
        lines.append(f"  Network:  {s.network.value}")
        lines.append(f"  Supply:   {self._supply_line(report)}")
        lines.append(f"  Holders:  {s.holder_count} known ({format_pct(report.holder_coverage)} of supply)")
        lines.append("")

        lines.append(f"TOP {report.top_n} TOKEN HOLDERS")
        lines.append("-" * 79)
        lines.append(f"{'Rank':<5} {'Address':<43} {'Balance':>10} {'% Supply':>9}  Type")
        for rank, holder in enumerate(report.top_holders, 1):
            r, addr, bal, pct, label = self._holder_row(report, rank, holder)
            lines.append(f"{r:<5} {addr:<43} {bal:>10} {pct:>9}  {label.display_name}")
        if not report.top_holders:
            lines.append("  No holder data available")
        lines.append("-" * 79)
        lines.append(f"Top {report.top_n} holders own: {format_pct(report.top_n_share)} of supply")
        lines.append("")

        if self.show_tiers:
            lines.append("HOLDER DISTRIBUTION BY TIER")
            lines.append("-" * 79)
            lines.append(f"{'Tier':<24} {'Holders':>8} {'Total Held':>16} {'% of Supply':>12}")
            for t in report.tiers:
                held = format_number(to_token_units(t.total_balance, s.decimals))
                lines.append(
                    f"{t.label:<24} {t.holder_count:>8} {held + ' ' + s.symbol:>16} {format_pct(t.share_of_supply):>12}"
                )
            lines.append("")

        if self.show_gini:
            lines.append("DECENTRALIZATION METRICS")
            lines.append("-" * 79)
            lines.append(f"  Gini Coefficient: {report.gini_coefficient:.4f} ({report.gini_rating.display_name})")
            lines.append("  Gini coefficient: 0 = perfect equality, 1 = perfect inequality")
            lines.append("")

        lines.append("RISK ASSESSMENT")
        lines.append("-" * 79)
        lines.append(f"  Centralization Risk: {report.concentration.level.value.upper()}")
        for finding in report.concentration.findings:
            lines.append(f"    - {finding}")
        lines.append("")

        if report.warnings:
            lines.append("DATA QUALITY WARNINGS")
            lines.append("-" * 40)
            for w in report.warnings:
                lines.append(f"  [{w.severity.upper()}] {w.field}: {w.issue}")
            lines.append("")

        lines.append(sep)
        lines.append(f"  Explorer: {resolve_network(s.network).token_holders_url(s.address)}")
        lines.append(f"  Analysis timestamp: {report.analysis_timestamp.strftime('%Y-%m-%d %H:%M UTC')}")
        lines.append(sep)

        return "\n".join(lines)

    def _format_rich(self, report: DistributionReport) -> str:
        """Rich library formatting with colors."""
        s = report.snapshot
        output = io.StringIO()
        console = Console(file=output, force_terminal=True, width=self.width)

        console.print(Panel(
            f"[bold cyan]{escape(s.symbol)}[/] on {s.network.value}\n"
            f"[dim]{s.address}[/]\n"
            f"Supply: {escape(self._supply_line(report))}   "
            f"Holders: {s.holder_count} ({format_pct(report.holder_coverage)} of supply known)",
            title="Token Holder Analysis",
            expand=False,
        ))

        holder_table = Table(title=f"Top {report.top_n} Token Holders")
        holder_table.add_column("Rank", justify="right", style="dim")
        holder_table.add_column("Address", style="cyan")
        holder_table.add_column("Balance", justify="right")
        holder_table.add_column("% Supply", justify="right", style="green")
        holder_table.add_column("Type")
        for rank, holder in enumerate(report.top_holders, 1):
            r, addr, bal, pct, label = self._holder_row(report, rank, holder)
            holder_table.add_row(r, addr, bal, pct, f"[{LABEL_STYLES[label]}]{label.display_name}[/]")
        holder_table.add_row("", "", "", "", "", end_section=True)
        holder_table.add_row("", f"[bold]Top {report.top_n} holders own[/]", "", f"[bold magenta]{format_pct(report.top_n_share)}[/]", "")
        console.print(holder_table)

        if self.show_tiers:
            tier_table = Table(title="Holder Distribution by Tier")
            tier_table.add_column("Tier", style="cyan")
            tier_table.add_column("Holders", justify="right")
            tier_table.add_column("Total Held", justify="right")
            tier_table.add_column("% of Supply", justify="right", style="green")
            for t in report.tiers:
                held = format_number(to_token_units(t.total_balance, s.decimals))
                tier_table.add_row(escape(t.label), str(t.holder_count), escape(f"{held} {s.symbol}"), format_pct(t.share_of_supply))
            console.print(tier_table)

        if self.show_gini:
            console.print("\n[bold cyan]Decentralization Metrics[/]")
            console.print(f"  Gini Coefficient: [bold]{report.gini_coefficient:.4f}[/] ({report.gini_rating.display_name})")
            console.print("  [dim]Gini coefficient: 0 = perfect equality, 1 = perfect inequality[/]")

        risk = report.concentration.level
        console.print(f"\n[bold cyan]Risk Assessment[/]\n  Centralization Risk: [{RISK_STYLES[risk]}]{risk.value.upper()}[/]")
        for finding in report.concentration.findings:
            console.print(f"    - {escape(finding)}")

        if report.warnings:
            console.print("\n[bold yellow]Data Quality Warnings:[/]")
            for w in report.warnings:
                icon = "!" if w.severity == "warning" else "i"
                console.print(f"  {escape(f'[{icon}]')} {escape(w.field)}: {escape(w.issue)}")

        console.print(f"\n[cyan]Explorer:[/] {resolve_network(s.network).token_holders_url(s.address)}")
        return output.getvalue()

    def format_to_file(self, report: DistributionReport, filepath: str) -> None:
        """Write formatted output to file."""
        # For file output, use plain format (no ANSI codes)
        content = self._format_plain(report)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(content)
