"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from enumaudit import __version__
from enumaudit.config import AuditConfig, load_config


@click.group()
@click.version_option(version=__version__, prog_name="enumaudit")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """enumaudit — find enum types bound from web-API request parameters."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_config(config_path) if config_path else AuditConfig.load()
    except ValueError as e:
        raise click.ClickException(f"Invalid config: {e}") from e
    ctx.obj["config"] = config


def _register_commands() -> None:
    from enumaudit.cli.models import models  # noqa: F811
    from enumaudit.cli.scan import scan  # noqa: F811

    main.add_command(scan)
    main.add_command(models)


_register_commands()
