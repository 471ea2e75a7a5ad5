"""Custom exceptions for the holder analyzer."""


class HolderAnalyzerError(Exception):
    """Base exception for all holder analyzer errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidAddressFormat(HolderAnalyzerError):
    """Raised when a token or holder address is not a 0x-prefixed 20-byte hex string."""

    def __init__(self, address: str, field: str = "address"):
        message = f"Invalid address for {field}: {address!r} (expected 0x followed by 40 hex characters)"
        super().__init__(message, {"field": field, "address": address})
        self.address = address
        self.field = field


class InvalidInput(HolderAnalyzerError):
    """Raised when snapshot data cannot be analyzed (negative balance, zero supply...)."""

    def __init__(self, field: str, value: object, reason: str):
        message = f"Invalid input for {field}={value}: {reason}"
        super().__init__(message, {"field": field, "value": str(value), "reason": reason})
        self.field = field
        self.value = value
        self.reason = reason


class DataSourceError(HolderAnalyzerError):
    """Raised when a data source fails or returns invalid data."""

    def __init__(
        self,
        source: str,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
    ):
        full_message = f"[{source}] {message}"
        super().__init__(
            full_message,
            {
                "source": source,
                "endpoint": endpoint,
                "status_code": status_code,
            },
        )
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code


class RateLimitError(DataSourceError):
    """Raised when API rate limit is hit."""

    def __init__(
        self,
        source: str,
        retry_after_seconds: int | None = None,
        endpoint: str | None = None,
    ):
        message = "Rate limit exceeded"
        if retry_after_seconds:
            message += f", retry after {retry_after_seconds}s"
        super().__init__(source, message, endpoint=endpoint, status_code=429)
        self.retry_after_seconds = retry_after_seconds


class ConfigurationError(HolderAnalyzerError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, config_key: str, message: str):
        full_message = f"Configuration error [{config_key}]: {message}"
        super().__init__(full_message, {"config_key": config_key})
        self.config_key = config_key
