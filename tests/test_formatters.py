"""Tests for report formatters."""

import csv
import io
import json
from decimal import Decimal

import pytest

from holder_analyzer.analysis.distribution import DistributionAnalyzer
from holder_analyzer.core.models import AuditEntry, TokenSnapshot
from holder_analyzer.core.types import DataSource
from holder_analyzer.output.audit_trail import AuditTrailFormatter
from holder_analyzer.output.formatters import (
    CSVFormatter,
    JSONFormatter,
    TableFormatter,
    format_number,
    format_token_amount,
)

from conftest import TOKEN, A


@pytest.fixture
def report(sample_snapshot):
    return DistributionAnalyzer().analyze(sample_snapshot, top_n=5)


@pytest.fixture
def stale_report(synthetic_source):
    return DistributionAnalyzer().analyze(synthetic_source.fetch_snapshot(TOKEN), top_n=10)


class TestNumberFormatting:
    """Tests for number helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (12, "12.00"),
            (1234, "1.23K"),
            (2_500_000, "2.50M"),
            (Decimal("2500000000"), "2.50B"),
            (7.5e12, "7.50T"),
        ],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_format_token_amount(self):
        assert format_token_amount(1_500_000, 6) == "1.5"
        assert format_token_amount(10**24, 18) == "1000000"
        assert format_token_amount(0, 18) == "0"
        assert format_token_amount(1, 18) == "0.000000000000000001"


class TestJSONFormatter:
    """Tests for JSON output."""

    def test_document(self, report):
        data = json.loads(JSONFormatter().format(report))

        assert data["token"]["address"] == TOKEN
        assert data["token"]["total_supply"] == "1000000"
        assert data["network"] == "mainnet"

        analysis = data["analysis"]
        assert analysis["top_n"] == 5
        assert analysis["top_n_share"] == 0.637
        assert analysis["holder_count"] == 5
        assert [t["tier"] for t in analysis["tiers"]] == ["whale", "large", "medium", "small"]

        first = analysis["top_holders"][0]
        assert first == {
            "rank": 1,
            "address": A,
            "balance": "250000",
            "balance_tokens": "250000",
            "share": 0.25,
            "type": "mega_whale",
        }
        assert analysis["decentralization"]["risk_level"] == "high"
        assert "audit_trail" not in data

    def test_large_balances_are_strings(self, stale_report):
        data = json.loads(JSONFormatter().format(stale_report))
        balance = data["analysis"]["top_holders"][0]["balance"]
        assert isinstance(balance, str)
        assert int(balance) == 275 * 10**21

    def test_warnings_serialized(self, stale_report):
        data = json.loads(JSONFormatter().format(stale_report))
        assert {w["field"] for w in data["warnings"]} == {"top_n_share", "holders"}

    def test_include_audit(self, report):
        entry = AuditEntry(source=DataSource.FILE, action="load", endpoint="holders.json")
        data = JSONFormatter(include_audit=True).to_dict(report.with_audit_trail([entry]))
        assert data["audit_trail"][0]["source"] == "file"
        assert data["audit_trail"][0]["endpoint"] == "holders.json"

    def test_format_to_file(self, report, tmp_path):
        path = tmp_path / "report.json"
        JSONFormatter().format_to_file(report, str(path))
        assert json.loads(path.read_text(encoding="utf-8"))["analysis"]["top_n_share"] == 0.637


class TestCSVFormatter:
    """Tests for CSV output."""

    def test_holder_rows(self, report):
        text = CSVFormatter(include_sections=False).format(report)
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0] == ["rank", "address", "balance", "percentage", "type"]
        assert rows[1] == ["1", A, "250000", "25.0000", "mega_whale"]
        assert len(rows) == 6

    def test_sections(self, report):
        text = CSVFormatter().format(report)
        assert "# Distribution by Tier" in text
        assert "# Metrics" in text
        assert "top_5_percentage,63.7000" in text
        assert "# Data Quality Warnings" not in text

    def test_warning_section(self, stale_report):
        assert "# Data Quality Warnings" in CSVFormatter().format(stale_report)


class TestTableFormatter:
    """Tests for the human-readable table."""

    def test_plain(self, report):
        text = TableFormatter(use_rich=False).format(report)
        assert "Top 5 holders own: 63.70% of supply" in text
        assert "HOLDER DISTRIBUTION BY TIER" in text
        assert "Whales (>1%)" in text
        assert "DECENTRALIZATION METRICS" in text
        assert "Centralization Risk: HIGH" in text
        assert f"https://etherscan.io/token/{TOKEN}#balances" in text
        assert "Mega Whale" in text

    def test_sections_can_be_hidden(self, report):
        text = TableFormatter(use_rich=False, show_gini=False, show_tiers=False).format(report)
        assert "DECENTRALIZATION METRICS" not in text
        assert "HOLDER DISTRIBUTION BY TIER" not in text
        assert "RISK ASSESSMENT" in text

    def test_plain_warnings(self, stale_report):
        text = TableFormatter(use_rich=False).format(stale_report)
        assert "DATA QUALITY WARNINGS" in text
        assert "[WARNING] top_n_share" in text

    def test_rich(self, stale_report):
        text = TableFormatter(use_rich=True).format(stale_report)
        assert "Token Holder Analysis" in text
        assert "Data Quality Warnings" in text

    @pytest.mark.parametrize("symbol", ["[/]WEIRD", "[red]X", "[bold"])
    def test_rich_keeps_bracketed_symbol_literal(self, symbol):
        """Symbols come from external data and must not be read as markup."""
        snapshot = TokenSnapshot.build(
            address=TOKEN,
            total_supply=1000,
            holders=[(A, 600)],
            symbol=symbol,
            decimals=0,
        )
        report = DistributionAnalyzer().analyze(snapshot)

        text = TableFormatter(use_rich=True).format(report)

        assert symbol in text

    def test_format_to_file_is_plain(self, report, tmp_path):
        path = tmp_path / "report.txt"
        TableFormatter(use_rich=True).format_to_file(report, str(path))
        content = path.read_text(encoding="utf-8")
        assert "\x1b[" not in content
        assert "TOKEN HOLDER ANALYSIS" in content


class TestAuditTrailFormatter:
    """Tests for the audit trail summary."""

    def test_summary(self, report):
        entries = [
            AuditEntry(source=DataSource.FILE, action="load", endpoint="holders.json", notes="5 holder rows"),
        ]
        text = AuditTrailFormatter().format_summary(report.with_audit_trail(entries))
        assert "AUDIT TRAIL SUMMARY" in text
        assert "  file: OK" in text
        assert "Notes: 5 holder rows" in text
        assert "Coverage: 63.70%" in text

    def test_no_calls(self, report):
        text = AuditTrailFormatter().format_summary(report)
        assert "No data-source calls recorded" in text
