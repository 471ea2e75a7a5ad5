"""CLI entry point for the Token Holder Distribution Analyzer.

Usage:
    holder-analyzer analyze 0xdAC17F958D2ee523a2206206994597C13D831ec7
    holder-analyzer analyze 0xA0b8...eB48 --top 50 --gini
    holder-analyzer analyze 0x6B17...1d0F --whale-threshold 1 -e whales.json
    holder-analyzer analyze 0xC02a...6Cc2 --holders-file holders.csv --total-supply 1000000
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .core.config import NETWORKS, AnalyzerConfig
from .core.exceptions import HolderAnalyzerError
from .core.models import ADDRESS_PATTERN, parse_amount
from .orchestrator import HolderAnalysisOrchestrator
from .output.audit_trail import AuditTrailFormatter
from .output.formatters import CSVFormatter, JSONFormatter, OutputFormatter, TableFormatter

# Initialize app
app = typer.Typer(
    name="holder-analyzer",
    help="Analyze ERC-20 token holder distribution, identify whales, and assess decentralization",
    add_completion=False,
)

console = Console()
# Status and log lines go to stderr so JSON/CSV on stdout stays machine-readable
err_console = Console(stderr=True)

OUTPUT_FORMATS = ("pretty", "json", "csv")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )


def _formatter_for_export(path: Path) -> OutputFormatter:
    """Pick a formatter from the export file extension."""
    suffix = path.suffix.lower()
    if suffix == ".json":
        return JSONFormatter(include_audit=True)
    if suffix == ".csv":
        return CSVFormatter()
    return TableFormatter(use_rich=False)


@app.command()
def analyze(
    token_address: str = typer.Argument(..., help="Token contract address (0x + 40 hex characters)"),
    top: Optional[int] = typer.Option(None, "--top", "-n", min=0, help="Show top N holders (default: 20)"),
    min_balance: Optional[str] = typer.Option(
        None, "--min", "-m", help="Minimum balance to include (in token units)"
    ),
    decimals: Optional[int] = typer.Option(
        None, "--decimals", min=0, max=255, help="Token decimals (auto-detected if possible)"
    ),
    total_supply: Optional[str] = typer.Option(
        None, "--total-supply", help="Total supply in base units (required for CSV holder files)"
    ),
    whale_threshold: Optional[float] = typer.Option(
        None, "--whale-threshold", help="Whale threshold in percent of supply (default: 1)"
    ),
    network: Optional[str] = typer.Option(
        None, "--network", help="Network: mainnet, polygon, bsc, arbitrum, optimism, base"
    ),
    api_key: Optional[str] = typer.Option(None, "--key", "-k", help="Etherscan API key"),
    holders_file: Optional[Path] = typer.Option(
        None, "--holders-file", help="Analyze a local JSON/YAML/CSV holder export instead of the explorer"
    ),
    max_holders: int = typer.Option(1000, "--max-holders", min=1, help="Maximum holders to fetch"),
    output: str = typer.Option("pretty", "--output", "-o", help="Output format: pretty, json, csv"),
    json_mode: bool = typer.Option(False, "--json", help="Output as JSON (same as --output json)"),
    export: Optional[Path] = typer.Option(
        None, "--export", "-e", help="Export results to FILE (.json, .csv, or text)"
    ),
    gini: bool = typer.Option(False, "--gini", "-G", help="Show Gini coefficient (decentralization)"),
    distribution: bool = typer.Option(False, "--distribution", help="Show holder distribution by tier"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML file with tier/Gini thresholds"),
    audit: bool = typer.Option(False, "--audit", "-a", help="Include the data-source audit trail"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """
    Analyze a token's holder distribution.

    Examples:
        holder-analyzer analyze 0xdAC17F958D2ee523a2206206994597C13D831ec7
        holder-analyzer analyze --top 50 --gini 0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48
    """
    setup_logging(verbose)

    if not ADDRESS_PATTERN.match(token_address):
        err_console.print(f"[red]Error: Invalid Ethereum address: {escape(token_address)}[/]")
        raise typer.Exit(1)

    output_lower = "json" if json_mode else output.lower()
    if output_lower not in OUTPUT_FORMATS:
        err_console.print(f"[red]Invalid output format: {escape(output)}[/]")
        err_console.print(f"Valid formats: {', '.join(OUTPUT_FORMATS)}")
        raise typer.Exit(1)

    err_console.print(f"[bold]Analyzing {token_address}...[/]")

    try:
        settings = AnalyzerConfig.load()
        if network:
            settings.network = network
        if api_key:
            settings.explorer_api_key = api_key

        orchestrator = HolderAnalysisOrchestrator.from_options(
            settings,
            holders_file=holders_file,
            total_supply=parse_amount(total_supply, field="total_supply") if total_supply else None,
            decimals=decimals,
            max_holders=max_holders,
            thresholds_path=config,
            network=network,
        )

        report = orchestrator.analyze(
            token_address,
            top_n=top,
            min_balance=min_balance,
            whale_threshold=whale_threshold,
        )

    except (HolderAnalyzerError, PydanticValidationError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/]")
        if verbose:
            err_console.print_exception()
        raise typer.Exit(1)

    # Format output
    formatter: OutputFormatter
    if output_lower == "json":
        formatter = JSONFormatter(include_audit=audit)
    elif output_lower == "csv":
        formatter = CSVFormatter()
    else:
        formatter = TableFormatter(use_rich=console.is_terminal, show_gini=gini, show_tiers=distribution)

    print(formatter.format(report))

    # Show audit trail if requested
    audit_formatter = AuditTrailFormatter()
    if audit and output_lower == "pretty":
        print()
        print(audit_formatter.format_summary(report))

    # Export if requested
    if export:
        export.parent.mkdir(parents=True, exist_ok=True)
        _formatter_for_export(export).format_to_file(report, str(export))
        err_console.print(f"[green]Exported to {escape(str(export))}[/]")

        if audit:
            audit_path = export.with_name(f"{export.stem}_audit.txt")
            audit_formatter.format_to_file(report, str(audit_path))
            err_console.print(f"[green]Audit trail saved to {escape(str(audit_path))}[/]")


@app.command()
def networks() -> None:
    """List supported networks and their explorer APIs."""
    console.print("[bold]Supported Networks:[/]")
    for network, cfg in NETWORKS.items():
        console.print(f"  - {network.value:<10} {cfg.api_url}")


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    console.print(f"Token Holder Analyzer v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
