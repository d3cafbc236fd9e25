"""
CLI — command-line interface for Metabohyp.

Commands:
    metabohyp init          — Interactive setup (API key, model settings)
    metabohyp summary       — Summarize a differential metabolomics CSV
    metabohyp hypotheses    — Generate ranked hypotheses from a CSV
    metabohyp design        — Design a validation protocol for a hypothesis
    metabohyp literature    — Literature analysis of a CSV's top findings
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from metabohyp import __version__
from metabohyp.core.errors import MetaboError

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def main(verbose: bool) -> None:
    """Metabohyp — AI hypotheses from differential metabolomics data."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    sys.exit(1)


def _orchestrator(csv_file: str | None = None):
    from metabohyp.agents.orchestrator import Orchestrator
    from metabohyp.core import load_config

    orchestrator = Orchestrator(load_config())
    if csv_file:
        orchestrator.session.load_table(Path(csv_file).read_text())
    return orchestrator


def _write(out: str | None, payload: Any) -> None:
    if out:
        Path(out).write_text(json.dumps(payload, indent=2))
        console.print(f"[green]>[/green] Saved to {out}")


_export_option = click.option(
    "--export",
    "export_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also save a session snapshot (summary and all results) as JSON",
)


def _run(coro) -> Any:
    try:
        return asyncio.run(coro)
    except MetaboError as e:
        _fail(str(e))


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


@main.command()
def init() -> None:
    """Interactive setup — configure API key and model settings."""
    from metabohyp.core import (
        METABOHYP_CONFIG_FILE,
        APIConfig,
        LLMSettings,
        MetaboConfig,
        load_config,
        save_config,
    )

    current = load_config()
    console.print("\n[bold green]Metabohyp Setup[/bold green]\n")

    provider = Prompt.ask(
        "  AI provider", choices=["anthropic", "openai"], default=current.api.default_provider
    )
    api_key = Prompt.ask(f"  {provider.title()} API key", password=True, default="")
    model = Prompt.ask("  Model", default=current.llm.model)
    max_tokens = int(Prompt.ask("  Max tokens (1000-8000)", default=str(current.llm.max_tokens)))
    temperature = float(Prompt.ask("  Temperature (0-1)", default=str(current.llm.temperature)))

    try:
        config = MetaboConfig(
            api=APIConfig(
                default_provider=provider,
                anthropic_api_key=api_key if provider == "anthropic" else current.api.anthropic_api_key,
                openai_api_key=api_key if provider == "openai" else current.api.openai_api_key,
            ),
            llm=LLMSettings(model=model, max_tokens=max_tokens, temperature=temperature),
        )
    except ValueError as e:
        _fail(str(e))
    save_config(config)

    console.print(f"\n[green]>[/green] Config saved to {METABOHYP_CONFIG_FILE}")
    console.print("[green]>[/green] Ready! Try: [bold]metabohyp summary data.csv[/bold]\n")


# ---------------------------------------------------------------------------
# Data summary
# ---------------------------------------------------------------------------


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--context", "show_context", is_flag=True, help="Print the prompt context block")
@_export_option
def summary(csv_file: str, show_context: bool, export_path: str | None) -> None:
    """Summarize a differential metabolomics CSV."""
    from metabohyp.core.session import Session

    session = Session()
    try:
        result = session.load_table(Path(csv_file).read_text())
    except MetaboError as e:
        _fail(f"Failed to parse file: {e}")

    roles = session.roles
    console.print("\n[bold]Columns[/bold]")
    for role, column in roles.model_dump().items():
        console.print(f"  {role}: {column or '[dim]not detected[/dim]'}")

    if result is None:
        console.print("\n[yellow]No data rows.[/yellow]")
        _write(export_path, session.export())
        return

    console.print(f"\n[bold]Total:[/bold] {result.total_count}")
    console.print(f"[bold]Significant:[/bold] {result.significant_count}")
    console.print(f"  [green]Increased:[/green] {result.increased_count}")
    console.print(f"  [red]Decreased:[/red] {result.decreased_count}")

    for title, rows in (
        ("Top increased", result.top_increased),
        ("Top decreased", result.top_decreased),
    ):
        if not rows:
            continue
        table = Table(title=title)
        table.add_column("Metabolite")
        table.add_column("FC", justify="right")
        table.add_column("p", justify="right")
        for row in rows:
            table.add_row(
                str(row.get(roles.identifier or "", "")),
                str(row.get(roles.effect_size or "", "")),
                str(row.get(roles.significance or "", "")),
            )
        console.print(table)

    if show_context:
        console.print(session.context(), markup=False)
    _write(export_path, session.export())


# ---------------------------------------------------------------------------
# Workflows
# ---------------------------------------------------------------------------


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--type",
    "-t",
    "hypothesis_type",
    type=click.Choice(["mechanisms", "disease", "biomarkers", "therapeutics", "pathways", "custom"]),
    required=True,
)
@click.option("--query", "-q", default="", help="Task for --type custom")
@click.option("--out", "-o", type=click.Path(dir_okay=False), default=None)
@_export_option
def hypotheses(
    csv_file: str, hypothesis_type: str, query: str, out: str | None, export_path: str | None
) -> None:
    """Generate three ranked hypotheses from a CSV."""
    try:
        orchestrator = _orchestrator(csv_file)
    except MetaboError as e:
        _fail(f"Failed to parse file: {e}")

    console.print("[dim]Generating hypotheses...[/dim]")
    result = _run(orchestrator.generate_hypotheses(hypothesis_type, query))
    if result is None:
        _fail("Provide --query when using --type custom.")

    for h in result:
        console.print(
            f"\n[bold]{h.rank}. {h.title}[/bold] "
            f"[dim]({h.confidence_level.value}, posterior {h.bayesian.posterior:.0%})[/dim]"
        )
        console.print(f"  {h.statement}")
        if h.mechanism:
            console.print(f"  [italic]Mechanism:[/italic] {h.mechanism}")

    _write(out, [h.model_dump(by_alias=True) for h in result])
    _write(export_path, orchestrator.session.export())


@main.command()
@click.argument("hypotheses_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--rank", "-r", type=int, default=1, help="Hypothesis rank to design for")
@click.option("--out", "-o", type=click.Path(dir_okay=False), default=None)
def design(hypotheses_file: str, rank: int, out: str | None) -> None:
    """Design an experimental protocol for a saved hypothesis."""
    from metabohyp.core.models import hypotheses_from_payload

    try:
        saved = json.loads(Path(hypotheses_file).read_text())
    except json.JSONDecodeError as e:
        _fail(f"{hypotheses_file} is not valid JSON: {e}")

    candidates = hypotheses_from_payload(saved if isinstance(saved, list) else [saved])
    chosen = next((h for h in candidates if h.rank == rank), None)
    if chosen is None:
        _fail(f"No hypothesis with rank {rank} in {hypotheses_file}")

    console.print(f"[dim]Designing protocol for: {chosen.title}[/dim]")
    protocol = _run(_orchestrator().design_experiment(chosen))
    console.print_json(data=protocol)
    _write(out, protocol)


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--out", "-o", type=click.Path(dir_okay=False), default=None)
@_export_option
def literature(csv_file: str, out: str | None, export_path: str | None) -> None:
    """Literature analysis of a CSV's top findings."""
    try:
        orchestrator = _orchestrator(csv_file)
    except MetaboError as e:
        _fail(f"Failed to parse file: {e}")

    console.print("[dim]Analyzing literature...[/dim]")
    analysis = _run(orchestrator.analyze_literature())
    console.print_json(data=analysis)
    _write(out, analysis)
    _write(export_path, orchestrator.session.export())


if __name__ == "__main__":
    main()
