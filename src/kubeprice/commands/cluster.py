"""
Cluster commands: report cluster identity and register it in the metadata store.
"""

from typing import Optional

import typer
from rich.console import Console
from typing_extensions import Annotated

from kubeprice.cloud.errors import ClusterMetaError, ConfigurationError
from kubeprice.cloud.selector import load_core_api, new_provider
from kubeprice.commands.common import get_settings, load_provider, print_json
from kubeprice.utils.cluster_meta import ClusterMetaStore

app = typer.Typer(help="Cluster identity and metadata.")
console = Console()


@app.command("info")
def cluster_info(ctx: typer.Context):
    """Print the cluster info reported by the reference provider."""
    print_json(load_provider(ctx).cluster_info())


@app.command("register")
def register(
    ctx: typer.Context,
    cluster_id: Annotated[Optional[str], typer.Option("--id", help="Cluster id (defaults to CLUSTER_ID).")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Display name (defaults to the configured clusterName).")] = None,
):
    """Get or create the metadata record for this cluster."""
    settings = get_settings(ctx)
    cluster_id = cluster_id or settings.cluster_id
    if not cluster_id:
        typer.secho("Error: no cluster id given and CLUSTER_ID is not set", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    if name is None:
        name = load_provider(ctx).get_config().cluster_name

    store = ClusterMetaStore.from_settings(settings)
    try:
        stored_id, stored_name = store.get_or_create(cluster_id, name)
    except ClusterMetaError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    print_json({"cluster_id": stored_id, "cluster_name": stored_name})


@app.command("detect")
def detect(
    ctx: typer.Context,
    api_key: Annotated[str, typer.Option("--api-key", envvar="CLOUD_PROVIDER_API_KEY", help="API key for the GCP backend.")] = "",
    context: Annotated[Optional[str], typer.Option("--context", help="kubeconfig context to use.")] = None,
):
    """Inspect the live cluster and report which provider would be used."""
    settings = get_settings(ctx)
    try:
        provider = new_provider(load_core_api(context), api_key=api_key, settings=settings)
    except ConfigurationError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    console.print(f"Selected provider: [cyan]{type(provider).__name__}[/cyan]")
