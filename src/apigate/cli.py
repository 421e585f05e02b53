"""CLI entry point for apigate -- public-API filtering for doclet dumps."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .models import ApiGateConfig, Doclet, RunReport

app = typer.Typer(
    name="apigate",
    help="Decide which doclets belong to the public API and flatten inherited events.",
    add_completion=False,
)

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _effective_config(
    config_path: Path | None,
    source_root: Path | None = None,
    drop_hidden: bool = False,
    verbose: bool = False,
) -> ApiGateConfig:
    """Load the config file, then apply CLI flags that were given."""
    from .config import load_config

    try:
        cfg = load_config(config_path)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    updates: dict[str, object] = {}
    if source_root is not None:
        updates["source_root"] = str(source_root)
    if drop_hidden:
        updates["drop_hidden"] = True
    if verbose:
        updates["log_level"] = "DEBUG"
    return cfg.model_copy(update=updates)


def _run(doclets_path: Path, ast_path: Path | None, cfg: ApiGateConfig) -> tuple[list[Doclet], RunReport]:
    """Load inputs and process them, exiting cleanly on bad input."""
    from .coordinator import process
    from .loader import load_asts, load_doclets

    try:
        doclets = load_doclets(doclets_path)
        asts = load_asts(ast_path) if ast_path is not None else None
    except (OSError, ValueError, ValidationError) as exc:
        # JSONDecodeError is a ValueError.
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    report = process(doclets, asts=asts, config=cfg)
    return doclets, report


def _summary_table(report: RunReport) -> Table:
    counts: dict[str, int] = {}
    for record in report.decisions:
        counts[record.decision.value] = counts.get(record.decision.value, 0) + 1

    table = Table(title="apigate")
    table.add_column("Decision")
    table.add_column("Doclets", justify="right")
    for decision, count in sorted(counts.items()):
        table.add_row(decision, str(count))
    table.add_section()
    table.add_row("[bold]kept[/bold]", str(report.kept))
    table.add_row("[bold]hidden[/bold]", str(report.hidden))
    return table


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("filter")
def filter_(
    doclets: Path = typer.Argument(..., help="JSON doclet dump (jsdoc -X output)."),
    ast: Optional[Path] = typer.Option(None, "--ast", help="JSON object mapping source paths to ESTree programs."),
    source_root: Optional[Path] = typer.Option(None, "--source-root", help="Root that module paths are relative to."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write doclets here instead of stdout."),
    drop_hidden: bool = typer.Option(False, "--drop-hidden", help="Leave hidden doclets out of the output."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="apigate.toml or pyproject.toml."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every decision."),
) -> None:
    """Filter DOCLETS down to the public API and write the result."""
    from .loader import dump_doclets

    cfg = _effective_config(config_path, source_root, drop_hidden, verbose)
    _setup_logging(cfg.log_level)

    items, report = _run(doclets, ast, cfg)

    if output is None:
        dump_doclets(items, sys.stdout, drop_hidden=cfg.drop_hidden)
    else:
        with output.open("w", encoding="utf-8") as fh:
            dump_doclets(items, fh, drop_hidden=cfg.drop_hidden)
        console.print(f"[green]Wrote[/green] {output}")

    for cycle in report.cycles:
        console.print(f"[yellow]Inheritance cycle:[/yellow] {' -> '.join(cycle.chain)}")
    console.print(_summary_table(report))


@app.command()
def explain(
    doclets: Path = typer.Argument(..., help="JSON doclet dump (jsdoc -X output)."),
    name: str = typer.Argument(..., help="Qualified name (longname) to explain."),
    ast: Optional[Path] = typer.Option(None, "--ast", help="JSON object mapping source paths to ESTree programs."),
    source_root: Optional[Path] = typer.Option(None, "--source-root", help="Root that module paths are relative to."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="apigate.toml or pyproject.toml."),
) -> None:
    """Show why every doclet named NAME was kept or hidden."""
    cfg = _effective_config(config_path, source_root)
    _setup_logging(cfg.log_level)

    items, report = _run(doclets, ast, cfg)
    records = report.decisions_for(name)
    if not records:
        console.print(f"[yellow]No doclet named[/yellow] [bold]{escape(name)}[/bold]")
        raise typer.Exit(code=1)

    matches = [d for d in items if d.qualified_name == name]
    table = Table(title=escape(name))
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Decision")
    table.add_column("Hidden")
    table.add_column("Default export")
    for i, (record, doclet) in enumerate(zip(records, matches), start=1):
        table.add_row(
            str(i),
            record.kind,
            record.decision.value,
            "yes" if record.hidden else "no",
            "yes" if doclet.is_default_export else "no",
        )
    console.print(table)
    if name in report.documented_closure:
        console.print("Kept as an ancestor of a documented class.")


@app.command()
def config(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="apigate.toml or pyproject.toml."),
    as_json: bool = typer.Option(False, "--json", help="Print as JSON."),
) -> None:
    """Print the effective configuration."""
    cfg = _effective_config(config_path)
    if as_json:
        typer.echo(json.dumps(cfg.model_dump(), indent=2))
        return
    console.print("[bold]apigate config:[/bold]")
    for field_name in ApiGateConfig.model_fields:
        console.print(f"  {field_name} = {getattr(cfg, field_name)!r}")


if __name__ == "__main__":
    app()
