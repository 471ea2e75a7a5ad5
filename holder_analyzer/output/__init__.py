"""Output formatting module."""

from .formatters import (
    OutputFormatter,
    JSONFormatter,
    CSVFormatter,
    TableFormatter,
    format_number,
    format_token_amount,
)
from .audit_trail import AuditTrailFormatter

__all__ = [
    "OutputFormatter",
    "JSONFormatter",
    "CSVFormatter",
    "TableFormatter",
    "AuditTrailFormatter",
    "format_number",
    "format_token_amount",
]
