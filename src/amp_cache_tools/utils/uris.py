"""Uri helpers"""
from urllib import parse

from amp_cache_tools.errors import InvalidURLError
from amp_cache_tools.models.cache_variant import CacheVariant
from amp_cache_tools.models.purge import TargetUrl

__all__ = ["AMP_CDN_DOMAIN", "parse_target", "cdn_origin", "purge_path", "probe_path"]

AMP_CDN_DOMAIN = "cdn.ampproject.org"

PATH_SAFE = "/%!$&'()*+,;=:@~"
QUERY_SAFE = PATH_SAFE + "?"


def parse_target(raw_url: str) -> TargetUrl:
    """Parse an absolute page url."""
    try:
        parts = parse.urlsplit(raw_url.strip())
        # validates the port
        _ = parts.port
    except (ValueError, AttributeError) as e:
        raise InvalidURLError(str(raw_url), str(e)) from e

    if not parts.scheme:
        raise InvalidURLError(raw_url, "missing scheme")

    # user info is not part of the cache path
    host = parts.netloc.rpartition("@")[2]
    if not host:
        raise InvalidURLError(raw_url, "missing host")

    # signed as sent: httpx percent-encodes the path and query, existing escapes are kept
    request_uri = parse.quote(parts.path, safe=PATH_SAFE) or "/"
    if parts.query:
        request_uri += "?" + parse.quote(parts.query, safe=QUERY_SAFE)

    return TargetUrl(raw=raw_url, scheme=parts.scheme, host=host, request_uri=request_uri)


def cdn_origin(host: str, domain: str = AMP_CDN_DOMAIN) -> str:
    """Cache origin for a publisher host, dots become dashes in the subdomain."""
    return f"https://{host.replace('.', '-')}.{domain}"


def purge_path(variant: CacheVariant, host: str, request_uri: str, timestamp: int) -> str:
    return (
        f"/update-cache/{variant.prefix}/s/{host}{request_uri}"
        f"?amp_action=flush&amp_ts={timestamp}"
    )


def probe_path(variant: CacheVariant, host: str, request_uri: str) -> str:
    path = f"/{variant.prefix}/s/{host}{request_uri}"
    if variant.probe_query:
        path += f"?{variant.probe_query}"
    return path
