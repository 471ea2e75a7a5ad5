"""Etherscan-family explorer holder source.

Fetches token metadata, total supply and the holder list from an
Etherscan-compatible REST API (etherscan.io, polygonscan, bscscan, arbiscan,
optimistic etherscan, basescan). The network's base URL is resolved once at
construction time.

Note that `tokenholderlist` and `tokeninfo` are paid-tier endpoints on most
explorers. When `tokeninfo` is unavailable, decimals default to 18 unless
given explicitly.
"""

import logging
import time
from typing import Any

import httpx

from ..core.config import NetworkConfig, resolve_network
from ..core.exceptions import ConfigurationError, DataSourceError, InvalidInput, RateLimitError
from ..core.models import Holder, TokenSnapshot, normalize_address, parse_amount
from ..core.types import DataSource, Network
from .base import BaseHolderSource
from .rate_limit import RateLimitPolicy

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 18
MAX_PAGE_SIZE = 10_000


class ExplorerHolderSource(BaseHolderSource):
    """Reads holder snapshots from an Etherscan-family API."""

    SOURCE = DataSource.EXPLORER

    def __init__(
        self,
        api_key: str | None,
        network: str | Network = Network.MAINNET,
        decimals: int | None = None,
        max_holders: int = 1000,
        page_size: int = 1000,
        timeout: float = 30.0,
        rate_limiter: RateLimitPolicy | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize explorer source.

        Args:
            api_key: Explorer API key (required for every call)
            network: Network name, resolved against the network table
            decimals: Known token decimals; skips the tokeninfo lookup
            max_holders: Stop paginating after this many holders
            page_size: Holders requested per page (explorer max 10,000)
            timeout: HTTP timeout in seconds
            rate_limiter: Call policy; defaults to 5 calls per second
            transport: Optional httpx transport (used by tests)
        """
        super().__init__(
            rate_limiter=rate_limiter or RateLimitPolicy(calls=5, period=1.0, name="explorer")
        )
        self.api_key = api_key
        self.network_config: NetworkConfig = resolve_network(network)
        self.decimals = decimals
        self.max_holders = max_holders
        self.page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        self.timeout = timeout
        self.transport = transport

    @property
    def base_url(self) -> str:
        return self.network_config.api_url

    def is_available(self) -> bool:
        """The explorer is usable once an API key is configured."""
        return bool(self.api_key)

    def _make_request(self, params: dict[str, Any]) -> Any:
        """Make a rate-limited request and return the API's `result` field."""
        if not self.api_key:
            raise ConfigurationError(
                "ETHERSCAN_API_KEY",
                "An explorer API key is required (set ETHERSCAN_API_KEY or pass --key)",
            )

        endpoint = f"{params.get('module')}/{params.get('action')}"
        self.rate_limiter.acquire()
        start_time = time.time()

        query = {**params, "apikey": self.api_key}
        logger.debug(f"[explorer] GET {self.base_url} {endpoint}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(self.base_url, params=query)

            duration_ms = int((time.time() - start_time) * 1000)

            if response.status_code == 429:
                self._record_audit(
                    action="fetch",
                    endpoint=endpoint,
                    success=False,
                    error_message="Rate limit exceeded",
                    duration_ms=duration_ms,
                )
                raise RateLimitError(source="explorer", retry_after_seconds=1, endpoint=endpoint)

            response.raise_for_status()
            payload = response.json()

        except httpx.HTTPStatusError as e:
            self._record_audit(
                action="fetch",
                endpoint=endpoint,
                success=False,
                error_message=f"HTTP {e.response.status_code}",
            )
            raise DataSourceError(
                source="explorer",
                message=f"HTTP {e.response.status_code}",
                endpoint=endpoint,
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            self._record_audit(action="fetch", endpoint=endpoint, success=False, error_message=str(e))
            raise DataSourceError(source="explorer", message=str(e), endpoint=endpoint)
        except ValueError:
            self._record_audit(
                action="fetch", endpoint=endpoint, success=False, error_message="Invalid JSON"
            )
            raise DataSourceError(source="explorer", message="Invalid JSON response", endpoint=endpoint)

        result = self._unwrap(payload, endpoint)
        self._record_audit(action="fetch", endpoint=endpoint, success=True, duration_ms=duration_ms)
        return result

    def _unwrap(self, payload: Any, endpoint: str) -> Any:
        """Check the explorer status envelope and return `result`."""
        if not isinstance(payload, dict) or "result" not in payload:
            raise DataSourceError(source="explorer", message="Unexpected response shape", endpoint=endpoint)

        status = str(payload.get("status", "1"))
        result = payload["result"]
        if status == "1":
            return result

        message = str(payload.get("message", ""))
        detail = result if isinstance(result, str) else message
        # "No token holder found" style answers are an empty result, not a failure
        if isinstance(result, list) and not result and message.lower().startswith("no "):
            return []
        if "rate limit" in detail.lower():
            self._record_audit(action="fetch", endpoint=endpoint, success=False, error_message=detail)
            raise RateLimitError(source="explorer", retry_after_seconds=1, endpoint=endpoint)

        self._record_audit(action="fetch", endpoint=endpoint, success=False, error_message=detail)
        raise DataSourceError(source="explorer", message=detail or "Request failed", endpoint=endpoint)

    def get_token_info(self, token_address: str) -> tuple[str, int]:
        """
        Fetch symbol and decimals for a token.

        Returns:
            (symbol, decimals). Falls back to ("TOKEN", 18) when the
            explorer does not expose tokeninfo for this key.
        """
        try:
            result = self._make_request(
                {"module": "token", "action": "tokeninfo", "contractaddress": token_address}
            )
        except RateLimitError:
            raise
        except DataSourceError as e:
            logger.warning(f"tokeninfo unavailable ({e.message}), assuming {DEFAULT_DECIMALS} decimals")
            return "TOKEN", DEFAULT_DECIMALS

        info = result[0] if isinstance(result, list) and result else {}
        symbol = info.get("symbol") or "TOKEN"
        try:
            decimals = parse_amount(info.get("divisor", DEFAULT_DECIMALS), field="decimals")
        except InvalidInput:
            logger.warning(f"Unparseable decimals {info.get('divisor')!r}, assuming {DEFAULT_DECIMALS}")
            decimals = DEFAULT_DECIMALS
        return symbol, decimals

    def get_total_supply(self, token_address: str) -> int:
        """Fetch total supply in base units."""
        result = self._make_request(
            {"module": "stats", "action": "tokensupply", "contractaddress": token_address}
        )
        try:
            return parse_amount(result, field="total_supply")
        except InvalidInput as e:
            raise DataSourceError(source="explorer", message=e.message, endpoint="stats/tokensupply")

    def get_holders(self, token_address: str) -> list[Holder]:
        """Page through tokenholderlist until max_holders or the last page."""
        offset = min(self.page_size, self.max_holders)
        holders: list[Holder] = []
        page = 1

        while len(holders) < self.max_holders:
            rows = self._make_request(
                {
                    "module": "token",
                    "action": "tokenholderlist",
                    "contractaddress": token_address,
                    "page": page,
                    "offset": offset,
                }
            )
            if not isinstance(rows, list):
                raise DataSourceError(
                    source="explorer", message="Holder list is not a list", endpoint="token/tokenholderlist"
                )

            for row in rows:
                try:
                    holders.append(
                        Holder(address=row["TokenHolderAddress"], balance=row["TokenHolderQuantity"])
                    )
                except (KeyError, TypeError):
                    raise DataSourceError(
                        source="explorer",
                        message=f"Malformed holder row: {row!r}",
                        endpoint="token/tokenholderlist",
                    )

            logger.debug(f"[explorer] page {page}: {len(rows)} holders")
            if len(rows) < offset:
                break
            page += 1

        return holders[: self.max_holders]

    def fetch_snapshot(self, token_address: str) -> TokenSnapshot:
        """Fetch metadata, supply and holders, and build a snapshot."""
        address = normalize_address(token_address, field="token address")

        if self.decimals is None:
            symbol, decimals = self.get_token_info(address)
        else:
            symbol, decimals = "TOKEN", self.decimals

        total_supply = self.get_total_supply(address)
        holders = self.get_holders(address)

        logger.info(
            f"Fetched {len(holders)} holders of {address} on {self.network_config.network.value}"
        )

        return TokenSnapshot.build(
            address=address,
            total_supply=total_supply,
            holders=holders,
            network=self.network_config.network,
            symbol=symbol,
            decimals=decimals,
            source=self.SOURCE,
        )
