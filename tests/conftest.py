from __future__ import annotations

from collections import Counter
from pathlib import Path

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from amp_cache_tools.models.keyring_config import KeyringConfig
from amp_cache_tools.utils import signing
from amp_cache_tools.utils.signing import StaticKeyProvider

PASSWORD = "correct horse"


@pytest.fixture(scope="session")
def private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def key_provider(private_key) -> StaticKeyProvider:
    return StaticKeyProvider(private_key)


@pytest.fixture
def key_file(tmp_path, private_key) -> Path:
    """PKCS#1 "RSA PRIVATE KEY" PEM, unencrypted."""
    path = tmp_path / "private-key.pem"
    path.write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return path


@pytest.fixture
def encrypted_key_file(tmp_path, private_key) -> Path:
    """PKCS#1 PEM with legacy Proc-Type/DEK-Info encryption."""
    path = tmp_path / "private-key-encrypted.pem"
    path.write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.BestAvailableEncryption(PASSWORD.encode()),
        )
    )
    return path


@pytest.fixture
def ec_key_file(tmp_path) -> Path:
    path = tmp_path / "ec-key.pem"
    path.write_bytes(
        ec.generate_private_key(ec.SECP256R1()).private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return path


@pytest.fixture(autouse=True)
def no_keyring(monkeypatch):
    """Keep tests away from the OS keyring."""
    monkeypatch.setattr(KeyringConfig, "get_secret", classmethod(lambda cls, key: None))


class FakeAmpCache:
    """
    Stand-in for *.cdn.ampproject.org, served through httpx.MockTransport.
    Requests are counted by the variant prefix of their path.
    """

    def __init__(
        self,
        probe_status: int = 200,
        probe_error: bool = False,
        purge: dict[str, tuple[int, str] | Exception] | None = None,
        public_key: rsa.RSAPublicKey | None = None,
    ):
        self.public_key = public_key
        self.probe_status = probe_status
        self.probe_error = probe_error
        self.purge = purge or {}
        self.calls: Counter[str] = Counter()
        self.urls: list[httpx.URL] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.urls.append(request.url)
        path = request.url.path

        if path.startswith("/update-cache/"):
            prefix = path.split("/")[2]
            self.calls[f"purge:{prefix}"] += 1
            outcome = self.purge.get(prefix, (200, "OK"))
            if isinstance(outcome, Exception):
                raise outcome
            if self.public_key is not None and not self.signature_valid(request.url):
                return httpx.Response(403, text="Invalid signature")
            status, body = outcome
            return httpx.Response(status, text=body)

        prefix = path.split("/")[1]
        self.calls[f"probe:{prefix}"] += 1
        if self.probe_error:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(self.probe_status, text="<html></html>")

    def signature_valid(self, url: httpx.URL) -> bool:
        """Checks amp_url_signature against the path as it arrived on the wire."""
        signed, _, signature = url.raw_path.decode("ascii").partition("&amp_url_signature=")
        return signing.verify_signature(signed, signature, self.public_key)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def fake_cache():
    return FakeAmpCache
