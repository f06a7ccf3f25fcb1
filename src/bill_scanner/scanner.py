"""Bill scanning with provider selection and local-to-cloud fallback."""
from __future__ import annotations

from typing import Sequence

import structlog

from .config import Settings
from .llm.base import VLMProvider
from .llm.gemini_client import GeminiProvider
from .llm.ollama_client import OllamaProvider
from .models.schema import BillScanResult
from .models.status import ProvidersStatus
from .prompts.registry import PromptRegistry
from .providers import get_providers_status, select_active_provider

logger = structlog.get_logger(__name__)

NO_PROVIDER_MESSAGE = (
    "No AI service available. Please configure a local Ollama model "
    "or set BILLSCAN_GEMINI_API_KEY."
)


class BillScanner:
    """Runs scans through the active provider and falls back along the chain.

    Providers are held in preference order (local first). When the active
    provider fails, each later provider that is available is tried in turn;
    earlier providers are never retried. If every attempt fails, the active
    provider's failure is returned with its warnings rewritten into guidance.
    """

    def __init__(self, settings: Settings, providers: Sequence[VLMProvider] | None = None):
        self.settings = settings
        if providers is None:
            providers = self._default_providers(settings)
        self._providers: list[VLMProvider] = list(providers)

    @staticmethod
    def _default_providers(settings: Settings) -> list[VLMProvider]:
        registry = PromptRegistry()
        return [OllamaProvider(settings, registry), GeminiProvider(settings, registry)]

    @property
    def providers(self) -> list[VLMProvider]:
        return list(self._providers)

    async def active_provider(self) -> VLMProvider | None:
        return await select_active_provider(self.settings.vlm_provider, self._providers)

    async def is_available(self) -> bool:
        return await self.active_provider() is not None

    async def status(self) -> ProvidersStatus:
        return await get_providers_status(self.settings.vlm_provider, self._providers)

    async def scan_with_fallback(self, content: str, mime_type: str) -> BillScanResult:
        """Scan *content* and always return a result; never raises."""
        provider: VLMProvider | None = None
        try:
            provider = await self.active_provider()
            if provider is None:
                return BillScanResult.failure([NO_PROVIDER_MESSAGE])

            logger.info("vlm_scan_start", provider=provider.kind.value, mime_type=mime_type)
            result = await provider.scan_bill(content, mime_type)
            if result.success:
                return result

            for alternate in self._after(provider):
                if not await alternate.is_available():
                    continue
                logger.info(
                    "vlm_fallback",
                    failed=provider.kind.value,
                    fallback=alternate.kind.value,
                    warnings=result.warnings,
                )
                retry = await alternate.scan_bill(content, mime_type)
                if retry.success:
                    return retry
                logger.warning("vlm_fallback_failed", provider=alternate.kind.value, warnings=retry.warnings)

            return self._explain(provider, result)
        except Exception as exc:
            logger.error(
                "vlm_scan_error",
                provider=provider.kind.value if provider else None,
                error=str(exc),
                exc_info=True,
            )
            return BillScanResult.failure(
                [f"Scan error: {exc}"],
                provider=provider.kind if provider else None,
            )

    async def aclose(self) -> None:
        for provider in self._providers:
            close = getattr(provider, "aclose", None)
            if close is not None:
                await close()

    def _after(self, provider: VLMProvider) -> list[VLMProvider]:
        index = self._providers.index(provider)
        return self._providers[index + 1:]

    @staticmethod
    def _explain(provider: VLMProvider, result: BillScanResult) -> BillScanResult:
        warnings = [provider.explain_error(w) for w in result.warnings] or ["Scan failed"]
        return result.model_copy(update={"warnings": warnings})
