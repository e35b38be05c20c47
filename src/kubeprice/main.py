#!/usr/bin/env python3
"""
kubeprice CLI entrypoint. Registers commands implemented in src/kubeprice/commands.
"""

import logging
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from typing_extensions import Annotated

from kubeprice.cloud.custom import CustomProvider
from kubeprice.cloud.errors import ConfigurationError
from kubeprice.cloud.selector import load_core_api, new_provider
from kubeprice.commands import cluster, config, pricing
from kubeprice.commands.common import get_settings
from kubeprice.server.main import create_app
from kubeprice.utils.settings import Settings

CLI_HELP = (
    "kubeprice - hourly prices for Kubernetes nodes, volumes and network egress.\n"
    "Quick Examples:\n"
    "  kubeprice pricing all                      # Show the pricing tiers\n"
    "  kubeprice pricing node -l lifecycle=spot   # Price a node from its labels\n"
    "  kubeprice config update CPU=0.03           # Patch the pricing record\n"
    "  kubeprice cluster register --id c1         # Record cluster metadata"
)


def enable_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def create_cli(help_text: str = CLI_HELP) -> typer.Typer:
    cli = typer.Typer(help=help_text, add_completion=False)

    @cli.callback()
    def root(
        ctx: typer.Context,
        settings_file: Annotated[Optional[str], typer.Option("--settings", help="YAML settings file.")] = None,
        log_level: Annotated[Optional[str], typer.Option("--log-level", help="Logging level, e.g. DEBUG.")] = None,
    ):
        try:
            settings = Settings.from_file(settings_file) if settings_file else Settings.from_env()
        except ConfigurationError as e:
            typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=2)
        enable_logging(log_level or settings.log_level)
        ctx.obj = settings

    cli.add_typer(pricing.app, name="pricing")
    cli.add_typer(config.app, name="config")
    cli.add_typer(cluster.app, name="cluster")
    return cli


def run_server(host: str = "127.0.0.1", port: int = 9003, settings: Optional[Settings] = None,
               detect: bool = False, api_key: str = "") -> None:
    settings = settings or Settings.from_env()
    if detect:
        provider = new_provider(load_core_api(), api_key=api_key, settings=settings)
    else:
        provider = CustomProvider(settings=settings)
    console = Console()
    console.print(f"[bold green]Starting kubeprice server ({type(provider).__name__})...[/bold green]")
    console.print(f"API will be available at [cyan]http://{host}:{port}[/cyan]")
    uvicorn.run(create_app(provider, settings), host=host, port=port)


# Create the app instance used by entry points
app = create_cli()


@app.command("server")
def server_cmd(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="The host to bind the server to."),
    port: int = typer.Option(9003, "--port", help="The port to run the server on."),
    detect: bool = typer.Option(False, "--detect", help="Pick the provider from the live cluster."),
    api_key: str = typer.Option("", "--api-key", envvar="CLOUD_PROVIDER_API_KEY", help="API key for the GCP backend."),
) -> None:
    run_server(host, port, settings=get_settings(ctx), detect=detect, api_key=api_key)


if __name__ == "__main__":
    app()
