"""Errors raised by the purge tools."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from amp_cache_tools.models.purge import PurgeReport


class AmpCacheError(Exception):
    """Base error for amp-cache-tools."""


class InvalidURLError(AmpCacheError, ValueError):
    def __init__(self, url: str, reason: str = ""):
        self.url = url
        message = f"Failed to parse url: {url!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class KeyLoadError(AmpCacheError):
    """Private key could not be read, decrypted or parsed."""


class SigningError(AmpCacheError):
    pass


class PurgeError(AmpCacheError):
    """One or more cache variants failed to purge."""

    def __init__(self, report: PurgeReport):
        self.report = report
        failed = ", ".join(r.variant.name.lower() for r in report.failed)
        super().__init__(f"Failed to purge {report.url} ({failed})")
