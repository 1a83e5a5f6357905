"""CLI for ndc-calc: parse / quantity / recommend commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ndc_calc.core.config import AppSettings
from ndc_calc.core.logging_config import setup_logging
from ndc_calc.exceptions import (
    InvalidArgumentError,
    NdcCalcError,
    NoPackagesAvailableError,
    NotParseableError,
)
from ndc_calc.models import (
    CatalogRecord,
    DispensingRecommendation,
    ParsedSig,
    QuantityResult,
    WarningSeverity,
)
from ndc_calc.pipeline import recommend as run_recommend
from ndc_calc.quantity.calculator import calculate_quantity
from ndc_calc.sig.interpreter import parse_sig

app = typer.Typer(name="ndc-calc", help="Prescription quantity and package calculator")
console = Console()

_SEVERITY_STYLES = {
    WarningSeverity.INFO: "blue",
    WarningSeverity.WARNING: "yellow",
    WarningSeverity.ERROR: "red",
}


def _init(verbose: bool) -> AppSettings:
    settings = AppSettings()
    setup_logging(settings.observability, level_override="DEBUG" if verbose else None)
    return settings


def _fail(exc: NdcCalcError) -> None:
    """Print a message tailored to the error type and exit with status 1."""
    if isinstance(exc, NotParseableError):
        console.print(f"[red]Could not understand the instructions:[/red] {exc.text!r}")
        console.print(exc.hint)
    elif isinstance(exc, NoPackagesAvailableError):
        console.print(f"[red]No active packages available:[/red] {exc}")
        if exc.inactive_codes:
            console.print(f"Inactive packages: {', '.join(exc.inactive_codes)}")
    elif isinstance(exc, InvalidArgumentError):
        console.print(f"[red]Invalid {exc.field}:[/red] {exc}")
    else:
        console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(code=1)


def _load_catalog(catalog_path: Path) -> list[CatalogRecord]:
    """Load catalog records from a JSON array."""
    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{catalog_path} is not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise typer.BadParameter(f"Expected JSON array in {catalog_path}")
    try:
        return [CatalogRecord.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid catalog record in {catalog_path}: {exc}") from exc


def _print_parsed(parsed: ParsedSig) -> None:
    table = Table(title="Parsed SIG")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Dosage", f"{parsed.dosage_amount} {parsed.unit}")
    table.add_row("Frequency / day", str(parsed.frequency_per_day) if parsed.frequency_per_day else "as needed")
    table.add_row("Dosage form", parsed.dosage_form.value if parsed.dosage_form else "-")
    table.add_row("Confidence", f"{parsed.confidence:.2f}")
    table.add_row("Rule", parsed.rule_name or "-")
    if parsed.concentration:
        c = parsed.concentration
        table.add_row(
            "Concentration",
            f"{c.amount_per_dose} {c.dose_unit} / {c.volume_per_dose} {c.volume_unit}",
        )
    if parsed.inhaler_capacity:
        table.add_row("Inhaler capacity", str(parsed.inhaler_capacity))
    if parsed.insulin_strength:
        table.add_row("Insulin strength", f"U-{parsed.insulin_strength}")
    console.print(table)


def _print_quantity(result: QuantityResult) -> None:
    b = result.breakdown
    console.print(
        f"[bold]Total:[/bold] {result.total} {result.unit} "
        f"({b.dosage_amount} x {b.effective_frequency}/day x {b.days_supply} days)"
    )
    if result.prn_assumed:
        console.print("[yellow]As-needed instructions: calculated as once daily[/yellow]")
    if result.canister_count is not None:
        console.print(f"Canisters: {result.canister_count}")
    if result.insulin_volume_ml is not None:
        console.print(f"Insulin volume: {result.insulin_volume_ml} mL")


def _print_recommendation(rec: DispensingRecommendation) -> None:
    _print_quantity(rec.quantity)

    table = Table(title="Package Options")
    table.add_column("NDC", style="cyan")
    table.add_column("Package", justify="right")
    table.add_column("Count", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Overfill", justify="right")
    table.add_column("Unit")
    table.add_column("Descriptor", max_width=50)

    for i, sel in enumerate([rec.recommended, *rec.alternatives]):
        style = "bold green" if i == 0 else None
        table.add_row(
            sel.code,
            str(sel.package_size),
            str(sel.repeat_count),
            str(sel.total_quantity),
            str(sel.overfill),
            sel.unit,
            sel.descriptor,
            style=style,
        )
    console.print(table)

    for warning in rec.warnings:
        style = _SEVERITY_STYLES.get(warning.severity, "white")
        console.print(f"[{style}]{warning.severity.value.upper()}[/{style}] {warning.message}")
    if rec.skipped_descriptors:
        console.print(f"Skipped {rec.skipped_descriptors} package(s) with unreadable descriptors")


@app.command()
def parse(
    sig: str = typer.Argument(..., help="Prescription instructions"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Interpret SIG text into dosage, unit and frequency."""
    _init(verbose)
    try:
        parsed = parse_sig(sig)
    except NdcCalcError as exc:
        _fail(exc)
        return

    if as_json:
        typer.echo(parsed.model_dump_json(indent=2))
    else:
        _print_parsed(parsed)


@app.command()
def quantity(
    sig: str = typer.Argument(..., help="Prescription instructions"),
    days: int = typer.Option(..., "--days", "-d", help="Days' supply"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Calculate the total quantity for a days' supply."""
    settings = _init(verbose)
    try:
        result = calculate_quantity(parse_sig(sig), days, config=settings.quantity)
    except NdcCalcError as exc:
        _fail(exc)
        return

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    else:
        _print_quantity(result)


@app.command()
def recommend(
    sig: str = typer.Argument(..., help="Prescription instructions"),
    catalog_file: Path = typer.Argument(..., help="JSON file with catalog records"),
    days: int = typer.Option(..., "--days", "-d", help="Days' supply"),
    max_results: Optional[int] = typer.Option(None, "--max-results", "-k", help="Number of options to list"),
    prefer: Optional[str] = typer.Option(None, "--prefer", help="Package code to rank first when it fits"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of tables"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Recommend packages from a catalog for the SIG and days' supply."""
    settings = _init(verbose)
    if max_results is not None:
        settings.selection.max_results = max_results

    records = _load_catalog(catalog_file)
    try:
        rec = run_recommend(sig, days, records, settings=settings, preferred_code=prefer)
    except NdcCalcError as exc:
        _fail(exc)
        return

    if as_json:
        typer.echo(rec.model_dump_json(indent=2))
    else:
        _print_recommendation(rec)


if __name__ == "__main__":
    app()
