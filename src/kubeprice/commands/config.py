"""
Config commands: show the pricing record and apply partial updates to it.
"""

from typing import List

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from kubeprice.cloud.errors import PricingConfigError
from kubeprice.commands.common import load_provider, parse_pairs, print_json

app = typer.Typer(help="Show and update the pricing configuration.")
console = Console()


def _print_record(data: dict) -> None:
    table = Table("Field", "Value")
    for key, value in data.items():
        table.add_row(key, value if value != "" else "[dim]-[/dim]")
    console.print(table)


@app.command("show")
def show_config(
    ctx: typer.Context,
    output: Annotated[str, typer.Option("--output", help="Output format ('console' or 'json').")] = "console",
):
    """Print the current pricing record, writing defaults first if none exists."""
    data = load_provider(ctx).get_config().to_dict()
    if output == "json":
        print_json(data)
    else:
        _print_record(data)


@app.command("update")
def update_config(
    ctx: typer.Context,
    values: Annotated[List[str], typer.Argument(help="Fields to set as NAME=VALUE, e.g. CPU=0.03 spotLabel=spot")],
    update_type: Annotated[str, typer.Option("--update-type", help="Backend-specific update type.")] = "",
    output: Annotated[str, typer.Option("--output", help="Output format ('console' or 'json').")] = "console",
):
    """Set one or more pricing fields and refresh the pricing table."""
    patch = parse_pairs(values, "field")
    provider = load_provider(ctx)
    try:
        record = provider.update_config(patch, update_type=update_type)
    except PricingConfigError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if output == "json":
        print_json(record.to_dict())
    else:
        typer.secho(f"Updated {len(patch)} field(s).", fg=typer.colors.GREEN)
        _print_record(record.to_dict())
