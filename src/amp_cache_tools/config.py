"""Configuration"""
from __future__ import annotations

from typing import Optional

import rich
import typer
from typing_extensions import Annotated

from amp_cache_tools.models.keyring_config import ConfigKey, KeyringConfig

app = typer.Typer(no_args_is_help=True)
cp = rich.print


@app.command(name="set")
def set_config(
        key: ConfigKey,
        value: Annotated[Optional[str], typer.Argument()] = None
):
    """Store a configuration value in the keyring. Prompts when no value is given, empty clears it."""
    if value is None:
        value = typer.prompt(f"{key.value}", hide_input=True, default="", show_default=False)

    with KeyringConfig.load_from_keyring() as config:
        if not value:
            config.pop(key, None)
        else:
            config[key] = value

    cp(f"{'Saved' if value else 'Cleared'} key {repr(key.value)}")


@app.command()
def show():
    """Show the current configuration."""
    config = KeyringConfig.load_from_keyring()
    cp(config.to_keys_json())
