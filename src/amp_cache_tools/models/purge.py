from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from amp_cache_tools.models.cache_variant import CacheVariant


class TargetUrl(BaseModel):
    """Absolute page url to purge, split into the parts the cache paths need."""

    model_config = ConfigDict(frozen=True)

    raw: str
    scheme: str
    host: str
    request_uri: str


class PurgeRequest(BaseModel):
    """A signed update-cache request for one variant."""

    model_config = ConfigDict(frozen=True)

    variant: CacheVariant
    origin: str
    path: str
    timestamp: int
    signature: str

    @property
    def url(self) -> str:
        return f"{self.origin}{self.path}&amp_url_signature={self.signature}"


class VariantResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant: CacheVariant
    url: str | None = None
    attempted: bool = True
    ok: bool = False
    status_code: int | None = None
    reason: str = ""

    @classmethod
    def skipped(cls, variant: CacheVariant, reason: str) -> VariantResult:
        return cls(variant=variant, attempted=False, ok=False, reason=reason)


class PurgeReport(BaseModel):
    """Outcome of purging every variant of one url."""

    url: str
    timestamp: int
    results: list[VariantResult] = Field(default_factory=list)

    @property
    def purged(self) -> list[VariantResult]:
        return [r for r in self.results if r.attempted and r.ok]

    @property
    def failed(self) -> list[VariantResult]:
        return [r for r in self.results if r.attempted and not r.ok]

    @property
    def skipped(self) -> list[VariantResult]:
        return [r for r in self.results if not r.attempted]

    @property
    def ok(self) -> bool:
        return not self.failed

    def get(self, variant: CacheVariant) -> VariantResult | None:
        return next((r for r in self.results if r.variant is variant), None)
