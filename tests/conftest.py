"""Pytest configuration and fixtures for holder analyzer tests."""

import json
from pathlib import Path
from typing import Any

import pytest

from holder_analyzer.core.models import Holder, TokenSnapshot
from holder_analyzer.core.types import DataSource
from holder_analyzer.providers.base import BaseHolderSource

TOKEN = "0xdac17f958d2ee523a2206206994597c13d831ec7"


def addr(n: int) -> str:
    """Deterministic test address: 0x000...n."""
    return "0x" + f"{n:040x}"


A, B, C, D, E = (addr(i) for i in range(1, 6))


class SyntheticHolderSource(BaseHolderSource):
    """
    Demo distribution: ten whales at 27.5%, 25%, ... 5% of supply.

    Those shares add up to 162.5% of supply, which makes it a handy stale
    snapshot for data-quality checks. Test-only.
    """

    SOURCE = DataSource.SYNTHETIC

    def __init__(self, total_supply: int = 10**24, decimals: int = 18):
        super().__init__()
        self.total_supply = total_supply
        self.decimals = decimals

    def is_available(self) -> bool:
        return True

    def fetch_snapshot(self, token_address: str) -> TokenSnapshot:
        holders = []
        for i in range(1, 11):
            # (30 - i * 2.5)% of supply, kept in integer arithmetic
            balance = self.total_supply * (300 - i * 25) // 1000
            holders.append(Holder(address=addr(0xA000 + i), balance=balance))
        self._record_audit(action="generate", notes="synthetic demo distribution")
        return TokenSnapshot.build(
            address=token_address,
            total_supply=self.total_supply,
            holders=holders,
            symbol="DEMO",
            decimals=self.decimals,
            source=self.SOURCE,
        )


@pytest.fixture
def synthetic_source() -> SyntheticHolderSource:
    return SyntheticHolderSource()


@pytest.fixture
def sample_snapshot() -> TokenSnapshot:
    """Supply 1,000,000 with five known holders owning 63.7% of it."""
    return TokenSnapshot.build(
        address=TOKEN,
        total_supply=1_000_000,
        holders=[(A, 250_000), (B, 180_000), (C, 95_000), (D, 67_000), (E, 45_000)],
        symbol="TKN",
        decimals=0,
    )


@pytest.fixture
def sample_export() -> dict[str, Any]:
    """JSON/YAML holder export matching sample_snapshot."""
    return {
        "token": {
            "address": TOKEN,
            "symbol": "TKN",
            "decimals": 0,
            "total_supply": "1000000",
            "network": "mainnet",
        },
        "holders": [
            {"address": A, "balance": "250000"},
            {"address": B, "balance": "180000"},
            {"address": C, "balance": "95000"},
            {"address": D, "balance": "67000"},
            {"address": E, "balance": "45000"},
        ],
    }


@pytest.fixture
def holders_json(tmp_path: Path, sample_export: dict[str, Any]) -> Path:
    path = tmp_path / "holders.json"
    path.write_text(json.dumps(sample_export), encoding="utf-8")
    return path


@pytest.fixture
def holders_csv(tmp_path: Path) -> Path:
    path = tmp_path / "holders.csv"
    path.write_text(
        "address,balance\n"
        f"{A},250000\n"
        f"{B},180000\n"
        f"{C},95000\n"
        f"{D},67000\n"
        f"{E},45000\n",
        encoding="utf-8",
    )
    return path
