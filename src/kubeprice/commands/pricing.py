"""
Pricing commands: inspect the pricing table and resolve node, volume and
network prices from the reference provider.
"""

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from kubernetes.client import V1ObjectMeta, V1PersistentVolume, V1PersistentVolumeSpec
from typing_extensions import Annotated

from kubeprice.cloud.errors import PricingConfigError
from kubeprice.cloud.keys import LEGACY_REGION_LABEL
from kubeprice.cloud.models import Node
from kubeprice.commands.common import load_provider, parse_pairs, print_json

app = typer.Typer(help="Resolve hourly prices for nodes, volumes and network egress.")
console = Console()


@app.command("all")
def all_pricing(
    ctx: typer.Context,
    output: Annotated[str, typer.Option("--output", help="Output format ('console' or 'json').")] = "console",
):
    """Show every tier in the pricing table."""
    provider = load_provider(ctx)
    tiers = provider.all_node_pricing()

    if output == "json":
        print_json({tier: price.to_dict() for tier, price in tiers.items()})
        return

    table = Table("Tier", "CPU / hr", "RAM GB / hr", "GPU / hr")
    for tier in sorted(tiers):
        price = tiers[tier]
        table.add_row(tier, price.cpu or "-", price.ram or "-", price.gpu or "-")
    console.print(table)


def _print_node(labels: dict, node: Node) -> None:
    table = Table("Field", "Value")
    table.add_row("labels", ", ".join(f"{k}={v}" for k, v in labels.items()) or "-")
    table.add_row("CPU hourly cost", node.vcpu_cost or "-")
    table.add_row("RAM GB hourly cost", node.ram_cost or "-")
    table.add_row("GPU count", node.gpu or "0")
    table.add_row("GPU cost", node.gpu_cost or "-")
    console.print(table)


@app.command("node")
def node_pricing(
    ctx: typer.Context,
    label: Annotated[Optional[List[str]], typer.Option("--label", "-l", help="Node label as KEY=VALUE; repeatable.")] = None,
    output: Annotated[str, typer.Option("--output", help="Output format ('console' or 'json').")] = "console",
):
    """Price a node from its labels."""
    labels = parse_pairs(label or [], "--label")
    provider = load_provider(ctx)
    node = provider.node_pricing(provider.get_key(labels))

    if output == "json":
        print_json(node.to_dict())
    else:
        _print_node(labels, node)


@app.command("pv")
def pv_pricing(
    ctx: typer.Context,
    storage_class: Annotated[str, typer.Option("--storage-class", help="Storage class of the volume.")] = "",
    region: Annotated[str, typer.Option("--region", help="Region the volume lives in.")] = "",
    output: Annotated[str, typer.Option("--output", help="Output format ('console' or 'json').")] = "console",
):
    """Price a persistent volume."""
    provider = load_provider(ctx)
    labels = {LEGACY_REGION_LABEL: region} if region else {}
    pv = provider.pv_pricing(_pv_key(provider, storage_class, labels))

    if output == "json":
        print_json(pv.to_dict())
    else:
        console.print(f"Storage hourly cost per GB: [green]{pv.cost or 'N/A'}[/green]")


def _pv_key(provider, storage_class: str, labels: dict):
    volume = V1PersistentVolume(
        metadata=V1ObjectMeta(labels=labels),
        spec=V1PersistentVolumeSpec(storage_class_name=storage_class),
    )
    return provider.get_pv_key(volume)


@app.command("network")
def network_pricing(
    ctx: typer.Context,
    output: Annotated[str, typer.Option("--output", help="Output format ('console' or 'json').")] = "console",
):
    """Show network egress prices per GB."""
    provider = load_provider(ctx)
    try:
        network = provider.network_pricing()
    except PricingConfigError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if output == "json":
        print_json(network.to_dict())
        return

    table = Table("Egress", "Cost / GB")
    table.add_row("zone", f"{network.zone_network_egress_cost:g}")
    table.add_row("region", f"{network.region_network_egress_cost:g}")
    table.add_row("internet", f"{network.internet_network_egress_cost:g}")
    console.print(table)
