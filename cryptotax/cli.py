"""Typer CLI interface for cryptotax."""

from decimal import Decimal
from pathlib import Path

import typer

from cryptotax.config import get_settings
from cryptotax.exceptions import (
    InvalidMatchingMethodError,
    InvalidTaxYearError,
    TransactionImportError,
)
from cryptotax.logging_config import configure_logging
from cryptotax.models.diagnostics import DiagnosticSeverity
from cryptotax.models.transaction import Transaction

app = typer.Typer(
    name="cryptotax",
    help="Cost-basis, gain/loss and income reporting for crypto transactions.",
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine detail to stderr"),
) -> None:
    """Cost-basis, gain/loss and income reporting for crypto transactions."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _fmt(val: Decimal) -> str:
    """Format a decimal to 2 decimal places with commas."""
    return f"{Decimal(val):,.2f}"


def _load_transactions(file_path: Path) -> list[Transaction]:
    from cryptotax.ingestion import adapter_for

    adapter = adapter_for(file_path)
    try:
        result = adapter.parse(file_path)
    except TransactionImportError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    for message in result.errors:
        typer.echo(f"Warning: {message}", err=True)
    for message in adapter.validate(result):
        typer.echo(f"Warning: {message}", err=True)
    return result.transactions


def _calculate(
    file_path: Path,
    year: int,
    method: str | None,
    wallets: list[str] | None = None,
    rate: float | None = None,
):
    from cryptotax.engines.aggregator import TaxReportAggregator

    transactions = _load_transactions(file_path)
    try:
        return TaxReportAggregator().calculate(
            transactions,
            year,
            method,
            wallet_addresses=wallets or None,
            estimated_tax_rate=Decimal(str(rate)) if rate is not None else None,
        )
    except (InvalidMatchingMethodError, InvalidTaxYearError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)


@app.command()
def classify(
    file: Path = typer.Argument(..., help="JSON or CSV file of transactions"),
) -> None:
    """Show how every transaction in a file is categorized."""
    from rich.console import Console
    from rich.table import Table

    from cryptotax.engines.classifier import TransactionClassifier

    transactions = _load_transactions(file)
    classifier = TransactionClassifier()

    tbl = Table(title=f"Classification ({len(transactions)} transactions)", show_header=True)
    tbl.add_column("ID", style="cyan")
    tbl.add_column("Type")
    tbl.add_column("Category", style="green")
    tbl.add_column("Final type")
    tbl.add_column("Identified")
    unidentified = 0
    for tx in transactions:
        result = classifier.classify_transaction(tx)
        if not result.identified:
            unidentified += 1
        tbl.add_row(
            tx.id,
            tx.type,
            result.category.value,
            result.final_type,
            "yes" if result.identified else "[red]no[/red]",
        )

    console = Console()
    console.print(tbl)
    if unidentified:
        console.print(f"{unidentified} transaction(s) need manual labeling.")


@app.command()
def report(
    file: Path = typer.Argument(..., help="JSON or CSV file of transactions"),
    year: int = typer.Option(..., "--year", "-y", help="Tax year"),
    method: str = typer.Option(None, "--method", "-m", help="Lot matching method: FIFO, LIFO or HIFO"),
    wallet: list[str] = typer.Option(None, "--wallet", "-w", help="One of your own wallet addresses (repeatable)"),
    rate: float = typer.Option(None, "--rate", help="Estimated tax rate, e.g. 0.24"),
    as_json: bool = typer.Option(False, "--json", help="Print the full report as JSON"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the report to a file instead of stdout"),
) -> None:
    """Compute capital gains, income and estimated tax for a year."""
    from cryptotax.reports.tax_summary import TaxSummaryGenerator

    tax_report = _calculate(file, year, method, wallet, rate)
    if as_json:
        text = tax_report.model_dump_json(indent=2)
    else:
        text = TaxSummaryGenerator().render(tax_report)

    if output:
        try:
            output.write_text(text)
        except OSError as exc:
            typer.echo(f"Error: cannot write {output}: {exc.strerror or exc}", err=True)
            raise typer.Exit(1)
        typer.echo(f"Report written to {output}")
    else:
        typer.echo(text)


@app.command()
def form8949(
    file: Path = typer.Argument(..., help="JSON or CSV file of transactions"),
    year: int = typer.Option(..., "--year", "-y", help="Tax year"),
    method: str = typer.Option(None, "--method", "-m", help="Lot matching method: FIFO, LIFO or HIFO"),
) -> None:
    """Print Form 8949 rows grouped by holding period."""
    from cryptotax.reports.form8949 import Form8949Generator

    tax_report = _calculate(file, year, method)
    typer.echo(Form8949Generator().render(tax_report.form8949_data, year=year))


@app.command()
def diagnose(
    file: Path = typer.Argument(..., help="JSON or CSV file of transactions"),
    year: int = typer.Option(..., "--year", "-y", help="Tax year"),
    method: str = typer.Option(None, "--method", "-m", help="Lot matching method: FIFO, LIFO or HIFO"),
) -> None:
    """List data-quality problems that affect a year's report."""
    tax_report = _calculate(file, year, method)

    typer.echo("=== Data Quality Review ===")
    typer.echo("")
    if not tax_report.diagnostics:
        typer.echo("No problems found. Every disposal matched a recorded acquisition.")
        return

    severity_icons = {
        DiagnosticSeverity.ERROR: "[!!]",
        DiagnosticSeverity.WARNING: "[!]",
        DiagnosticSeverity.INFO: "[i]",
    }
    for diagnostic in tax_report.diagnostics:
        icon = severity_icons.get(diagnostic.severity, "[?]")
        typer.echo(f"  {icon} {diagnostic.transaction_id}: {diagnostic.summary}")
        if diagnostic.suggested_action:
            typer.echo(f"      -> {diagnostic.suggested_action}")

    warnings = [d for d in tax_report.diagnostics if d.severity != DiagnosticSeverity.INFO]
    if warnings:
        typer.echo("")
        typer.echo(f"  {len(warnings)} item(s) may affect tax accuracy.")
        zero_basis = sum(
            (e.zero_basis_amount for e in tax_report.taxable_events if e.zero_basis_amount),
            Decimal("0"),
        )
        if zero_basis:
            typer.echo(f"  Units disposed at zero basis: {zero_basis}")
    proceeds = tax_report.summary.total_proceeds
    typer.echo(f"  Total proceeds reviewed: ${_fmt(proceeds)}")
