#!/usr/bin/env python3
"""
MRONJ Risk CLI

Command-line interface for assessing MRONJ risk and writing reports.
"""

import functools
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

console = Console()
err_console = Console(stderr=True)


def setup_paths():
    """Add the project root to sys.path for imports."""
    root = Path(__file__).parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


setup_paths()

from src import __version__
from src.config import get_settings
from src.exceptions import MronjError
from src.models import (
    AdministrationRoute,
    DentalProcedure,
    DrugName,
    Frequency,
    Indication,
    RiskLevel,
)

RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MODERATE: "yellow",
    RiskLevel.HIGH: "red",
}

PRIORITY_STYLES = {
    "high": "red",
    "medium": "yellow",
    "standard": "green",
}


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Send log records to stderr through rich."""
    if verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = get_settings().log_level_number

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def handles_errors(func):
    """Print MRONJ errors and exit with their exit code."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MronjError as e:
            err_console.print(f"[red]Error:[/red] {e}")
            sys.exit(e.exit_code)
    return wrapper


def parse_year_month(value: Optional[str], option: str) -> tuple[Optional[int], Optional[int]]:
    """Split a YYYY-MM option value."""
    if not value:
        return None, None
    try:
        year, month = value.split("-")
        return int(year), int(month)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM, got {value!r}", param_hint=option)


@click.group()
@click.version_option(version=__version__, prog_name="mronj")
@click.option("--verbose", "-v", is_flag=True, help="Show informational log messages")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors")
def cli(verbose: bool, quiet: bool):
    """
    MRONJ Risk - Medication-Related Osteonecrosis of the Jaw Risk Assessment

    Estimate MRONJ risk for dental procedures from a patient's medication
    history and personal risk factors, and produce a narrative report.
    """
    configure_logging(verbose, quiet)


@cli.command()
@click.argument("patient_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the assessment as JSON")
@handles_errors
def assess(patient_path: str, as_json: bool):
    """
    Assess MRONJ risk for a patient file (YAML or JSON).

    Example:

        mronj assess ./patient.yaml
    """
    from src.engines import GuidanceCatalog, assess_risk, is_about_to_start
    from src.exporters import build_report_data
    from src.store import PatientStore

    patient = PatientStore.load(Path(patient_path)).snapshot()

    if as_json:
        data = build_report_data(patient)
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    console.print(Panel(
        f"[bold]{patient.name or 'Unnamed patient'}[/bold]\n"
        f"Age: {patient.age_years if patient.age_years is not None else 'unknown'}\n"
        f"Medications: {len(patient.medications)}",
        title="Patient",
        border_style="blue",
    ))

    if is_about_to_start(patient):
        _print_checklist(GuidanceCatalog())
        return

    assessments = assess_risk(patient)

    if patient.medications:
        table = Table(title="Medication Risk Contributions")
        table.add_column("Drug", style="cyan")
        table.add_column("Risk", justify="right")
        for c in assessments[0].medication_contributions or []:
            table.add_row(c.drug_name, f"{c.risk_percentage:.2f}%")
        console.print(table)

    table = Table(title="Risk Assessment", show_lines=True)
    table.add_column("Procedure", style="bold")
    table.add_column("Risk")
    table.add_column("Recommendation")
    for a in assessments:
        style = RISK_STYLES[a.risk_level]
        table.add_row(a.procedure.label, f"[{style}]{a.risk_level.label}[/{style}]", a.recommendation)
    console.print(table)

    citations = assessments[0].citations or []
    if citations:
        tree = Tree("[bold]References[/bold]")
        for citation in citations:
            tree.add(citation)
        console.print(tree)


@cli.command()
@click.argument("patient_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", type=click.Choice(["markdown", "json"]), default="markdown",
              help="Report format")
@click.option("--output", "-o", type=click.Path(), help="Output file path")
@handles_errors
def report(patient_path: str, fmt: str, output: Optional[str]):
    """
    Write the MRONJ risk assessment report for a patient.

    Example:

        mronj report ./patient.yaml -o ./report.md
    """
    from src.exporters import export_json, export_markdown
    from src.store import PatientStore

    path = Path(patient_path)
    patient = PatientStore.load(path).snapshot()

    if output:
        out_path = Path(output)
    else:
        ext_map = {"markdown": ".md", "json": "_report.json"}
        out_path = get_settings().output_dir / f"{path.stem}{ext_map[fmt]}"

    if fmt == "markdown":
        export_markdown(patient, out_path)
    else:
        export_json(patient, out_path)

    console.print(f"[green]✓ Report written to {out_path}[/green]")


@cli.command("add-medication")
@click.argument("patient_path", type=click.Path(dir_okay=False))
@click.option("--drug", type=click.Choice([d.value for d in DrugName]), required=True,
              help="Drug name")
@click.option("--route", type=click.Choice([r.value for r in AdministrationRoute]),
              help="Administration route")
@click.option("--indication", type=click.Choice([i.value for i in Indication]), required=True,
              help="Reason for the medication")
@click.option("--start", required=True, help="Start month (YYYY-MM)")
@click.option("--frequency", type=click.Choice([f.value for f in Frequency]), required=True,
              help="How often the drug is taken")
@click.option("--stop", help="Stop month (YYYY-MM) if the drug was stopped")
@handles_errors
def add_medication(
    patient_path: str,
    drug: str,
    route: Optional[str],
    indication: str,
    start: str,
    frequency: str,
    stop: Optional[str],
):
    """
    Validate a medication and add it to a patient file.

    The file is created if it does not exist.

    Example:

        mronj add-medication ./patient.yaml --drug "Alendronate (Fosamax)"
            --route oral --indication osteoporosis --start 2021-03 --frequency daily
    """
    from src.store import PatientStore

    start_year, start_month = parse_year_month(start, "--start")
    stop_year, stop_month = parse_year_month(stop, "--stop")

    path = Path(patient_path)
    store = PatientStore.load(path) if path.exists() else PatientStore()

    record = store.add_medication({
        "drug_name": drug,
        "route": route,
        "indication": indication,
        "start_year": start_year,
        "start_month": start_month,
        "frequency": frequency,
        "is_stopped": stop is not None,
        "stop_year": stop_year,
        "stop_month": stop_month,
    })
    store.save(path)

    console.print(
        f"[green]✓ Added {record.drug_name.value}[/green] "
        f"(about {record.duration_months} months) to {path}"
    )


@cli.command()
@click.argument("procedure", type=click.Choice([p.value for p in DentalProcedure]))
@click.argument("level", type=click.Choice([r.value for r in RiskLevel]))
@handles_errors
def guidance(procedure: str, level: str):
    """
    Show detailed treatment guidance for a procedure and risk level.

    Example:

        mronj guidance extraction high
    """
    from src.engines import GuidanceCatalog

    g = GuidanceCatalog().get_treatment_guidance(DentalProcedure(procedure), RiskLevel(level))
    style = RISK_STYLES[g.risk_level]

    body = "\n".join(f"{i}. {step}" for i, step in enumerate(g.steps, 1))
    console.print(Panel(body, title=g.title, border_style=style))


@cli.command()
@handles_errors
def checklist():
    """
    Show the dental checklist for patients about to start antiresorptive therapy.
    """
    from src.engines import GuidanceCatalog

    _print_checklist(GuidanceCatalog())


def _print_checklist(catalog) -> None:
    intro, reminder = catalog.get_pre_treatment_text()
    if intro:
        console.print(intro)
        console.print()

    table = Table(title="Before Starting Antiresorptive Therapy", show_lines=True)
    table.add_column("Priority")
    table.add_column("Item", style="bold")
    table.add_column("Details")
    for item in catalog.get_pre_treatment_checklist():
        style = PRIORITY_STYLES[item.priority.value]
        table.add_row(f"[{style}]{item.priority.value}[/{style}]", item.title, item.description)
    console.print(table)

    if reminder:
        console.print(Panel(reminder, title="Important", border_style="yellow"))


@cli.command()
def drugs():
    """
    List the drugs recognised by the risk scorer.
    """
    table = Table(title="Known Drugs")
    table.add_column("Drug", style="cyan")
    table.add_column("Class")
    table.add_column("Sub-type")
    for drug in DrugName:
        table.add_row(drug.value, drug.drug_class.value, drug.sub_type.value)
    console.print(table)


@cli.command()
def info():
    """
    Show information about MRONJ Risk.
    """
    console.print(Panel(
        "[bold]MRONJ Risk[/bold]\n\n"
        "Risk assessment of medication-related osteonecrosis of the jaw for:\n"
        "• Non-invasive treatment and root canal treatment\n"
        "• Extraction, periodontal surgery and implants\n\n"
        "[dim]A rule-based decision aid. It does not diagnose or prescribe.[/dim]",
        title="About",
        border_style="blue",
    ))

    console.print("\n[bold]Quick Start:[/bold]")
    console.print("  mronj add-medication patient.yaml --drug \"Alendronate (Fosamax)\" \\")
    console.print("      --route oral --indication osteoporosis --start 2021-03 --frequency daily")
    console.print("  mronj assess patient.yaml")
    console.print("  mronj report patient.yaml -o report.md")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
