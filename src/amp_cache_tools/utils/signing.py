"""RSA signing for AMP cache update requests.

Based on https://developers.google.com/amp/cache/update-cache#rsa-keys
"""
from __future__ import annotations

import base64
import logging
import threading
from pathlib import Path
from typing import Protocol

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from amp_cache_tools.errors import KeyLoadError, SigningError
from amp_cache_tools.models.settings import env

logger = logging.getLogger(__name__)


class KeyProvider(Protocol):
    def current_key(self) -> RSAPrivateKey:
        ...


def load_private_key(location: str | Path, password: str = "") -> RSAPrivateKey:
    """
    Load a PEM encoded RSA private key.
    The PEM block is decrypted with password when one is given.
    """
    if not location:
        raise KeyLoadError("Private key location is not set.")

    try:
        pem_bytes = Path(location).read_bytes()
    except OSError as e:
        raise KeyLoadError(f"Could not read private key {str(location)!r}: {e}") from e

    try:
        key = serialization.load_pem_private_key(
            pem_bytes, password.encode("utf-8") if password else None
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyLoadError(f"Could not load private key {str(location)!r}: {e}") from e

    if not isinstance(key, RSAPrivateKey):
        raise KeyLoadError(
            f"Private key {str(location)!r} is {type(key).__name__}, expected an RSA key"
        )

    logger.debug("Loaded %d-bit RSA key from %s", key.key_size, location)
    return key


class FileKeyProvider:
    def __init__(self, location: str | Path, password: str = "", cache: bool = False):
        """Provides the key stored at location, reloaded per call unless cache is set."""
        self.location = location
        self.password = password
        self.cache = cache
        self._key: RSAPrivateKey | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls, password: str | None = None) -> FileKeyProvider:
        return cls(
            env.private_key_location,
            password if password is not None else env.private_key_password,
            cache=env.cache_private_key,
        )

    def current_key(self) -> RSAPrivateKey:
        if not self.cache:
            return load_private_key(self.location, self.password)

        with self._lock:
            if self._key is None:
                self._key = load_private_key(self.location, self.password)
            return self._key


class StaticKeyProvider:
    def __init__(self, key: RSAPrivateKey):
        self.key = key

    def current_key(self) -> RSAPrivateKey:
        return self.key


def sign(message: bytes | str, key: RSAPrivateKey) -> bytes:
    """RSASSA-PKCS1-v1_5 signature of the SHA-256 digest of message."""
    if key is None:
        raise SigningError("No private key to sign with.")
    if not isinstance(key, RSAPrivateKey):
        raise SigningError(f"Expected an RSA private key, got {type(key).__name__}")

    if isinstance(message, str):
        message = message.encode("utf-8")

    try:
        return key.sign(message, padding.PKCS1v15(), hashes.SHA256())
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise SigningError(f"Could not sign message: {e}") from e


def encode_signature(signature: bytes) -> str:
    """Base64 with the url-safe alphabet and no padding."""
    encoded = base64.b64encode(signature).decode("ascii")
    return encoded.replace("/", "_").replace("+", "-").replace("=", "")


def decode_signature(encoded: str) -> bytes:
    padded = encoded + "=" * (-len(encoded) % 4)
    return base64.urlsafe_b64decode(padded)


def sign_path(path: str, key: RSAPrivateKey) -> str:
    """Signs a cache path (starting at the leading "/") for the amp_url_signature param."""
    return encode_signature(sign(path, key))


def verify_signature(path: str, encoded_signature: str, public_key: RSAPublicKey) -> bool:
    try:
        signature = decode_signature(encoded_signature)
    except ValueError:
        return False

    try:
        public_key.verify(signature, path.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature:
        return False
    return True


def public_key_pem(key: RSAPrivateKey | RSAPublicKey) -> str:
    """Public key PEM, as served from /.well-known/amphtml/apikey.pub"""
    if isinstance(key, RSAPrivateKey):
        key = key.public_key()
    return key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")
