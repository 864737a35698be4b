"""Signed AMP cache urls."""
from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from amp_cache_tools.models.cache_variant import CacheVariant
from amp_cache_tools.models.purge import PurgeRequest
from amp_cache_tools.utils import signing
from amp_cache_tools.utils.uris import cdn_origin, probe_path, purge_path


def build_purge_request(
    variant: CacheVariant,
    host: str,
    request_uri: str,
    timestamp: int,
    key: RSAPrivateKey,
) -> PurgeRequest:
    """
    Builds the update-cache request for one variant.
    The signature covers the path and query only, not the origin.
    """
    path = purge_path(variant, host, request_uri, timestamp)
    return PurgeRequest(
        variant=variant,
        origin=cdn_origin(host),
        path=path,
        timestamp=timestamp,
        signature=signing.sign_path(path, key),
    )


def build_purge_url(
    variant: CacheVariant,
    host: str,
    request_uri: str,
    timestamp: int,
    key: RSAPrivateKey,
) -> str:
    return build_purge_request(variant, host, request_uri, timestamp, key).url


def build_probe_url(variant: CacheVariant, host: str, request_uri: str) -> str:
    """Unsigned url of the cached copy, used to check it exists."""
    return cdn_origin(host) + probe_path(variant, host, request_uri)
