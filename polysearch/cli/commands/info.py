"""Informational CLI commands."""

import click
import yaml
from rich.table import Table


@click.command()
@click.pass_context
def algorithms(ctx: click.Context) -> None:
    """List matching algorithms and their ranking weights."""
    console = ctx.obj.console
    config = ctx.obj.config
    weights = config.ranking.algorithm_weights

    table = Table(title="Matching algorithms")
    table.add_column("Name", style="cyan")
    table.add_column("Enabled")
    table.add_column("Weight", justify="right")
    table.add_column("Default")

    for name, algorithm in ctx.obj.engine.algorithms.items():
        table.add_row(
            name,
            "[green]yes[/green]" if algorithm.is_enabled() else "[red]no[/red]",
            f"{weights.get(name, 1):g}",
            "*" if name == config.default_algorithm else "",
        )

    console.print(table)


@click.command(name="config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective configuration as YAML."""
    click.echo(yaml.safe_dump(ctx.obj.config.to_dict(), sort_keys=False), nl=False)
