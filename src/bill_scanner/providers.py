"""Provider selection and combined status reporting."""
from __future__ import annotations

import asyncio
from typing import Sequence

import structlog

from .llm.base import VLMProvider
from .models.schema import ProviderKind, ProviderMode
from .models.status import ProvidersStatus

logger = structlog.get_logger(__name__)

_FORCED_KIND = {
    ProviderMode.LOCAL: ProviderKind.LOCAL,
    ProviderMode.CLOUD: ProviderKind.CLOUD,
}


async def select_active_provider(
    mode: ProviderMode,
    providers: Sequence[VLMProvider],
) -> VLMProvider | None:
    """Pick the provider to scan with.

    *providers* is in preference order. A forced mode only ever returns the
    provider of that kind, and only when it is available; ``auto`` returns the
    first available provider. Availability is probed on every call.
    """
    forced = _FORCED_KIND.get(mode)
    if forced is not None:
        for provider in providers:
            if provider.kind == forced:
                if await provider.is_available():
                    logger.info("vlm_provider_selected", provider=provider.kind.value, mode=mode.value)
                    return provider
                break
        logger.warning("vlm_configured_provider_unavailable", mode=mode.value)
        return None

    for provider in providers:
        if await provider.is_available():
            logger.info("vlm_provider_selected", provider=provider.kind.value, mode=mode.value)
            return provider

    logger.warning("vlm_no_provider", mode=mode.value)
    return None


async def get_providers_status(
    mode: ProviderMode,
    providers: Sequence[VLMProvider],
) -> ProvidersStatus:
    """Probe every provider, selected or not, and report which one would be used."""
    statuses = await asyncio.gather(*(provider.check_status() for provider in providers))

    forced = _FORCED_KIND.get(mode)
    active: ProviderKind | None = None
    for status in statuses:
        if not status.available:
            continue
        if forced is None or status.provider == forced:
            active = status.provider
            break

    return ProvidersStatus(
        configured=mode,
        providers={status.provider: status for status in statuses},
        active_provider=active,
    )
