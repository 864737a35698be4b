from __future__ import annotations

from enum import Enum


class CacheVariant(Enum):
    """AMP cache variants, keyed by their cache path prefix."""

    CONTENT = "c"
    WEB_PACKAGE = "wp"
    VIEWER = "v"

    @property
    def prefix(self) -> str:
        return self.value

    @property
    def requires_probe(self) -> bool:
        """Only purge if the variant is currently cached."""
        return self is CacheVariant.VIEWER

    @property
    def probe_query(self) -> str | None:
        # viewer cache answers 404 for every request without this param
        if self is CacheVariant.VIEWER:
            return "amp_js_v=0.1"
        return None

    @classmethod
    def parse(cls, value: str) -> CacheVariant:
        """Parse a prefix ("c") or name ("content", "web-package") into a CacheVariant."""
        value = value.strip().lower()
        for variant in cls:
            if value in (variant.value, variant.name.lower(), variant.name.lower().replace("_", "-")):
                return variant
        raise ValueError(f"Unknown cache variant: {value!r}")
