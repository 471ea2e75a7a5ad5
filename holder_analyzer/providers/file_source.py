"""File-based holder source for offline and reproducible analysis.

Reads a holder export in JSON, YAML or CSV form.

JSON / YAML layout::

    token:
      address: "0x..."
      symbol: USDT
      decimals: 6
      total_supply: "1000000000000"   # base units; strings keep precision
      network: mainnet
    holders:
      - address: "0x..."
        balance: "250000000000"

CSV files have an `address,balance` header and carry holders only, so the
token's total supply must be given to the source explicitly.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from ..core.config import resolve_network
from ..core.exceptions import DataSourceError
from ..core.models import Holder, TokenSnapshot, normalize_address
from ..core.types import DataSource, Network
from .base import BaseHolderSource

logger = logging.getLogger(__name__)


class FileHolderSource(BaseHolderSource):
    """Loads a holder snapshot from a local export file."""

    SOURCE = DataSource.FILE

    def __init__(
        self,
        filepath: Path | str,
        total_supply: int | None = None,
        decimals: int | None = None,
        symbol: str | None = None,
        network: str | Network | None = None,
    ):
        """
        Initialize file source.

        Args:
            filepath: Path to a .json, .yaml/.yml or .csv export
            total_supply: Supply in base units (required for CSV, overrides files)
            decimals: Overrides the file's decimals
            symbol: Overrides the file's symbol
            network: Overrides the file's network
        """
        super().__init__()
        self.filepath = Path(filepath)
        self.total_supply = total_supply
        self.decimals = decimals
        self.symbol = symbol
        self.network = network

    def is_available(self) -> bool:
        """Check if the export file exists."""
        return self.filepath.exists() and self.filepath.is_file()

    def _load_document(self) -> dict[str, Any]:
        """Load a YAML or JSON document."""
        with open(self.filepath, "r", encoding="utf-8") as f:
            if self.filepath.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)
        if not isinstance(data, dict):
            raise DataSourceError(source="file", message="Top-level value must be a mapping", endpoint=str(self.filepath))
        return data

    def _load_csv(self) -> dict[str, Any]:
        """Load holders from an address,balance CSV."""
        with open(self.filepath, "r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            fields = {name.strip().lower() for name in (reader.fieldnames or [])}
            if not {"address", "balance"} <= fields:
                raise DataSourceError(
                    source="file",
                    message="CSV must have 'address' and 'balance' columns",
                    endpoint=str(self.filepath),
                )
            holders = [
                {(k or "").strip().lower(): (v or "").strip() for k, v in row.items()}
                for row in reader
            ]
        return {"holders": holders}

    def fetch_snapshot(self, token_address: str) -> TokenSnapshot:
        """Build a snapshot from the file, checking it matches token_address."""
        address = normalize_address(token_address, field="token address")

        if not self.is_available():
            self._record_audit(action="load", endpoint=str(self.filepath), success=False, error_message="File not found")
            raise DataSourceError(source="file", message=f"File not found: {self.filepath}", endpoint=str(self.filepath))

        try:
            if self.filepath.suffix.lower() == ".csv":
                data = self._load_csv()
            else:
                data = self._load_document()
        except (OSError, ValueError, yaml.YAMLError, csv.Error) as e:
            self._record_audit(action="load", endpoint=str(self.filepath), success=False, error_message=str(e))
            raise DataSourceError(source="file", message=f"Failed to read {self.filepath}: {e}", endpoint=str(self.filepath))

        token = data.get("token") or {}
        if not isinstance(token, dict):
            raise DataSourceError(source="file", message="'token' must be a mapping", endpoint=str(self.filepath))

        file_address = token.get("address")
        if file_address and normalize_address(file_address, field="token address") != address:
            raise DataSourceError(
                source="file",
                message=f"File describes token {file_address}, not {token_address}",
                endpoint=str(self.filepath),
            )

        total_supply = self.total_supply if self.total_supply is not None else token.get("total_supply")
        if total_supply is None:
            raise DataSourceError(
                source="file",
                message="Total supply missing; add token.total_supply or pass it explicitly",
                endpoint=str(self.filepath),
            )

        rows = data.get("holders") or []
        if not isinstance(rows, list):
            raise DataSourceError(source="file", message="'holders' must be a list", endpoint=str(self.filepath))

        holders = []
        for row in rows:
            if not isinstance(row, dict) or "address" not in row or "balance" not in row:
                raise DataSourceError(
                    source="file", message=f"Malformed holder row: {row!r}", endpoint=str(self.filepath)
                )
            holders.append(Holder(address=row["address"], balance=row["balance"]))

        extras: dict[str, Any] = {
            "symbol": self.symbol or token.get("symbol") or "TOKEN",
            "network": resolve_network(self.network or token.get("network") or Network.MAINNET).network,
            "source": self.SOURCE,
        }
        decimals = self.decimals if self.decimals is not None else token.get("decimals")
        if decimals is not None:
            extras["decimals"] = decimals

        self._record_audit(
            action="load",
            endpoint=str(self.filepath),
            success=True,
            notes=f"{len(holders)} holder rows",
        )
        logger.info(f"Loaded {len(holders)} holder rows from {self.filepath}")

        return TokenSnapshot.build(address=address, total_supply=total_supply, holders=holders, **extras)
