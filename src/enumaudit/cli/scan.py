"""CLI command: enumaudit scan <solution> — find actions with enum request parameters."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console

from enumaudit.analysis.engine import ActionEnumAnalyzer
from enumaudit.config import AuditConfig
from enumaudit.errors import SymbolGraphError
from enumaudit.render import build_tree, render_json, render_text
from enumaudit.symbols.loader import load_solution

console = Console(stderr=True)


@click.command()
@click.argument("solution", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json", "tree"]),
    default="text",
    help="Report format.",
)
@click.option("--show-return-type", "-r", is_flag=True, help="Include action return types.")
@click.option(
    "--show-param-types",
    "-t",
    is_flag=True,
    help="Include action parameter lists.",
)
@click.option(
    "--depth",
    type=click.IntRange(min=0),
    default=None,
    help="Depth budget per parameter walk (default: 6).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the report to a file instead of stdout.",
)
@click.option(
    "--fail-on-findings",
    is_flag=True,
    help="Exit with status 1 if any action was found.",
)
@click.pass_context
def scan(
    ctx: click.Context,
    solution: str,
    output_format: str,
    show_return_type: bool,
    show_param_types: bool,
    depth: int | None,
    output: str | None,
    fail_on_findings: bool,
) -> None:
    """Find controller actions whose request parameters reach enum types."""
    config: AuditConfig = ctx.obj.get("config") or AuditConfig.load()
    if depth is not None:
        config.depth_limit = depth

    console.print(f"[bold]enumaudit[/bold] scanning [cyan]{solution}[/cyan]\n")

    def _progress(message: str) -> None:
        console.print(f"[dim]{message}[/dim]", highlight=False)

    try:
        graph = load_solution(solution, log=_progress)
    except SymbolGraphError as e:
        console.print(f"[red]Invalid solution file:[/red] {e}")
        sys.exit(1)

    analyzer = ActionEnumAnalyzer(graph, log=_progress, config=config)
    report = analyzer.run()

    if output_format == "json":
        rendered = render_json(report) + "\n"
    elif output_format == "tree":
        rendered = None
    else:
        rendered = render_text(
            report,
            show_return_type=show_return_type,
            show_param_types=show_param_types,
        )

    if rendered is None:
        Console(highlight=False).print(build_tree(report))
    elif output:
        Path(output).write_text(rendered, encoding="utf-8")
        console.print(f"[green]Report written to {output}[/green]")
    else:
        click.echo(rendered, nl=False)

    console.print(
        f"\n{report.action_count} action(s), {report.finding_count} enum finding(s) "
        f"in {len(report)} project(s)"
    )

    if fail_on_findings and not report.is_empty:
        sys.exit(1)
