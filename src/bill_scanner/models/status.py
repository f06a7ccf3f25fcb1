"""Provider availability reports. Recomputed on every status check."""

from __future__ import annotations

from pydantic import Field

from .schema import ProviderKind, ProviderMode, CamelModel


class ProviderStatus(CamelModel):
    available: bool
    provider: ProviderKind
    model: str | None = None
    error: str | None = None


class ProvidersStatus(CamelModel):
    configured: ProviderMode
    providers: dict[ProviderKind, ProviderStatus] = Field(default_factory=dict)
    active_provider: ProviderKind | None = None
