"""AMP cache tools."""
from __future__ import annotations

import asyncio
import time
from typing import Optional

import httpx
import rich
import typer
from rich.table import Table
from typing_extensions import Annotated

from amp_cache_tools.errors import InvalidURLError, KeyLoadError, PurgeError
from amp_cache_tools.models.cache_variant import CacheVariant
from amp_cache_tools.models.keyring_config import ConfigKey, KeyringConfig
from amp_cache_tools.models.purge import PurgeReport
from amp_cache_tools.models.settings import env
from amp_cache_tools.purger import probe_cache, purge_url
from amp_cache_tools.utils.amp_cache import build_probe_url, build_purge_url
from amp_cache_tools.utils.log import setup_logging
from amp_cache_tools.utils.signing import FileKeyProvider
from amp_cache_tools.utils.spinners import spinner
from amp_cache_tools.utils.uris import parse_target

app = typer.Typer(no_args_is_help=True)
cp = rich.print

TimeoutType = Annotated[
    Optional[float], typer.Option("--timeout", help="Seconds per request")
]


def get_key_provider() -> FileKeyProvider:
    """Key from settings, passphrase from the environment or the keyring."""
    password = env.private_key_password or KeyringConfig.get_secret(
        ConfigKey.PRIVATE_KEY_PASSWORD
    )
    return FileKeyProvider.from_env(password=password or "")


def print_report(report: PurgeReport):
    table = Table(title=f"{report.url} (amp_ts={report.timestamp})")
    table.add_column("Variant")
    table.add_column("Result")
    table.add_column("Status")
    table.add_column("Detail")

    for result in report.results:
        if not result.attempted:
            outcome = "[yellow]skipped"
        elif result.ok:
            outcome = "[green]purged"
        else:
            outcome = "[red]failed"
        status = str(result.status_code) if result.status_code is not None else "-"
        table.add_row(result.variant.name.lower(), outcome, status, result.reason)

    cp(table)


@app.command()
def purge(url: str, timeout: TimeoutType = None):
    """Purge a URL from every AMP cache variant."""
    setup_logging()

    typer.echo(f"Purging {url!r} from the AMP cache...")
    try:
        report = purge_url(url, key_provider=get_key_provider(), timeout=timeout)
    except InvalidURLError as e:
        cp(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)
    except KeyLoadError as e:
        cp(f"[red]Error:[/red] {e}")
        raise typer.Exit(3)
    except PurgeError as e:
        print_report(e.report)
        cp(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    print_report(report)


@app.command()
def probe(
    url: str,
    variant: Annotated[str, typer.Option("--variant", "-v")] = "v",
    timeout: TimeoutType = None,
):
    """Check whether a URL is held in the AMP cache."""
    setup_logging()

    try:
        target = parse_target(url)
        cache_variant = CacheVariant.parse(variant)
    except ValueError as e:
        cp(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    probe_url = build_probe_url(cache_variant, target.host, target.request_uri)

    async def _probe() -> bool:
        async with httpx.AsyncClient() as client:
            return await probe_cache(probe_url, client, timeout or env.request_timeout)

    with spinner(f"Probing {probe_url}"):
        exists = asyncio.run(_probe())
    cp(f"{'✅  Cached' if exists else '❌  Not cached'}: {probe_url}")
    if not exists:
        raise typer.Exit(1)


@app.command(name="url")
def signed_url(
    url: str,
    variant: Annotated[str, typer.Option("--variant", "-v")] = "c",
    timestamp: Annotated[
        Optional[int], typer.Option("--timestamp", help="amp_ts, defaults to now")
    ] = None,
):
    """Print the signed purge URL for one variant without sending it."""
    try:
        target = parse_target(url)
        cache_variant = CacheVariant.parse(variant)
    except ValueError as e:
        cp(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    try:
        key = get_key_provider().current_key()
    except KeyLoadError as e:
        cp(f"[red]Error:[/red] {e}")
        raise typer.Exit(3)

    if timestamp is None:
        timestamp = int(time.time())

    typer.echo(
        build_purge_url(cache_variant, target.host, target.request_uri, timestamp, key)
    )
