"""CLI command: enumaudit models <solution> — request types with enum properties."""

from __future__ import annotations

import asyncio
import sys

import click
from rich.console import Console

from enumaudit.analysis.engine import ActionEnumAnalyzer
from enumaudit.errors import SymbolGraphError
from enumaudit.render import render_request_models
from enumaudit.symbols.loader import load_solution

console = Console(stderr=True)


@click.command()
@click.argument("solution", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--namespace-prefix",
    "-n",
    default=None,
    help="Only consider types whose namespace starts with this prefix.",
)
@click.pass_context
def models(ctx: click.Context, solution: str, namespace_prefix: str | None) -> None:
    """List *Request* types that expose settable enum properties."""
    try:
        graph = load_solution(solution)
    except SymbolGraphError as e:
        console.print(f"[red]Invalid solution file:[/red] {e}")
        sys.exit(1)

    analyzer = ActionEnumAnalyzer(
        graph,
        log=lambda m: console.print(f"[dim]{m}[/dim]", highlight=False),
        config=ctx.obj.get("config"),
    )
    results = asyncio.run(analyzer.find_request_models(namespace_prefix=namespace_prefix))

    if not results:
        console.print("[yellow]No project could be compiled.[/yellow]")
        sys.exit(2)

    for project_name in sorted(results):
        click.echo(f"# {project_name}")
        click.echo(render_request_models(results[project_name]), nl=False)
