"""
Helpers shared by the CLI commands.
"""

import json
from typing import Any, Dict, List

import typer

from kubeprice.cloud.custom import CustomProvider
from kubeprice.utils.settings import Settings


def get_settings(ctx: typer.Context) -> Settings:
    settings = ctx.obj
    if not isinstance(settings, Settings):
        settings = Settings.from_env()
        ctx.obj = settings
    return settings


def load_provider(ctx: typer.Context) -> CustomProvider:
    """A reference provider with its pricing table loaded."""
    provider = CustomProvider(settings=get_settings(ctx))
    provider.download_pricing_data()
    return provider


def parse_pairs(pairs: List[str], what: str = "value") -> Dict[str, str]:
    """Turn ["a=1", "b=2"] into {"a": "1", "b": "2"}."""
    out: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            typer.secho(f"Error: expected KEY=VALUE for {what}, got {pair!r}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=2)
        out[key] = value
    return out


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))
