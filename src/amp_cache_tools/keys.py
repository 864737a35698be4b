"""Keys and signing."""
from typing import Annotated, Optional

import pyperclip
import typer
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from rich import print as cp
from typer import Option

from amp_cache_tools.amp import get_key_provider
from amp_cache_tools.errors import KeyLoadError
from amp_cache_tools.models.settings import env
from amp_cache_tools.utils import signing

app = typer.Typer(no_args_is_help=True)


def load_key_or_exit():
    try:
        return get_key_provider().current_key()
    except KeyLoadError as e:
        cp(f"❌  {e}")
        raise SystemExit(3)


@app.command()
def check():
    """Load the configured private key."""
    private_key = load_key_or_exit()
    cp(f"✅  {private_key.key_size}-bit RSA key loaded from {env.private_key_location!r}")


@app.command()
def public(copy: Annotated[bool, Option("--copy", help="Copy to clipboard")] = False):
    """Print the public key, to be served at /.well-known/amphtml/apikey.pub"""
    pub_key = signing.public_key_pem(load_key_or_exit())
    typer.echo(pub_key, nl=False)

    if copy:
        pyperclip.copy(pub_key)
        cp("✅  Public key copied to clipboard.")


@app.command()
def sign(path: str):
    """Sign a cache path (e.g. /update-cache/c/s/...) with the current private key."""
    private_key = load_key_or_exit()
    typer.echo(signing.sign_path(path, private_key))


@app.command()
def verify(
    path: str,
    signature: str,
    public_key_file: Annotated[Optional[str], Option("--key", help="Public key PEM file")] = None,
):
    """
    Verify an amp_url_signature for a cache path.
    Uses the public half of the current private key unless --key is given.
    """
    if public_key_file:
        with open(public_key_file, "rb") as f:
            public_key = serialization.load_pem_public_key(f.read())
        if not isinstance(public_key, RSAPublicKey):
            cp("❌  Public key is not an RSA key.")
            raise SystemExit(1)
    else:
        public_key = load_key_or_exit().public_key()

    if not signing.verify_signature(path, signature, public_key):
        cp("❌  Signature verification failed.")
        raise SystemExit(1)
    cp("✅  Signature verified.")
