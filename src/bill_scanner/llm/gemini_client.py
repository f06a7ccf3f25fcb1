"""Hosted vision model backend using the Google Gemini API."""
from __future__ import annotations

import time

import structlog
from google import genai
from google.genai import types

from ..config import Settings
from ..models.schema import BillScanResult, ExtractedBillData, InsightResponse, ProviderKind
from ..models.status import ProviderStatus
from ..prompts.registry import (
    EXTRACTION_IMAGE,
    EXTRACTION_TEXT,
    INSIGHTS,
    PromptRegistry,
    insight_variables,
)
from ..utils.encoding import from_base64
from .base import (
    DEFAULT_IMAGE_CONFIDENCE,
    DEFAULT_TEXT_CONFIDENCE,
    PDF_MIME_TYPE,
    TEXT_MIME_TYPE,
    finish_scan,
    unsupported_type,
)
from .heuristics import heuristic_insights
from .response_parser import build_insights, extract_json_from_response
from .retry import with_retry

logger = structlog.get_logger(__name__)

# Bills are benign documents; disable content blocking for every category
SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


class GeminiProvider:
    """Scans bills with a Gemini model.

    Available whenever an API key is configured. Every model call goes
    through :func:`with_retry` because the API enforces per-minute quotas.
    """

    kind = ProviderKind.CLOUD

    def __init__(
        self,
        settings: Settings,
        prompt_registry: PromptRegistry | None = None,
        client: genai.Client | None = None,
    ):
        self._api_key = settings.gemini_api_key.get_secret_value()
        self._model = settings.gemini_model
        self._max_retries = settings.retry_max_retries
        self._base_delay = settings.retry_base_delay
        self._prompts = prompt_registry or PromptRegistry()
        self._config = types.GenerateContentConfig(
            temperature=settings.gemini_temperature,
            safety_settings=SAFETY_SETTINGS,
        )
        if client is None and self._api_key:
            client = genai.Client(api_key=self._api_key)
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    async def check_status(self) -> ProviderStatus:
        available = bool(self._api_key)
        return ProviderStatus(
            available=available,
            provider=self.kind,
            model=self._model,
            error=None if available else "BILLSCAN_GEMINI_API_KEY not configured",
        )

    async def is_available(self) -> bool:
        return bool(self._api_key)

    async def scan_bill(self, content: str, mime_type: str) -> BillScanResult:
        if mime_type == TEXT_MIME_TYPE:
            source, default_confidence = "text", DEFAULT_TEXT_CONFIDENCE
        elif mime_type.startswith("image/") or mime_type == PDF_MIME_TYPE:
            source, default_confidence = "image", DEFAULT_IMAGE_CONFIDENCE
        else:
            return unsupported_type(mime_type, self.kind)

        logger.info("gemini_scan_start", model=self._model, mime_type=mime_type)
        try:
            if source == "text":
                contents: list = [self._prompts.render(EXTRACTION_TEXT, {"bill_text": content})]
            else:
                # Malformed base64 surfaces here as binascii.Error
                contents = [
                    self._prompts.render(EXTRACTION_IMAGE),
                    types.Part.from_bytes(data=from_base64(content), mime_type=mime_type),
                ]
            text = await self._generate(contents)
            return await finish_scan(
                text,
                provider=self.kind,
                source=source,
                default_confidence=default_confidence,
                raw_text=content if source == "text" else text,
                generate_insights=self.generate_insights,
            )
        except Exception as exc:
            logger.error("gemini_scan_failed", model=self._model, error=str(exc))
            return BillScanResult.failure([f"Gemini scan failed: {exc}"], provider=self.kind)

    async def generate_insights(self, data: ExtractedBillData) -> InsightResponse:
        try:
            text = await self._generate([self._prompts.render(INSIGHTS, insight_variables(data))])
            parsed = extract_json_from_response(text)
            if parsed is None:
                raise ValueError("Invalid insights response")
            return build_insights(parsed)
        except Exception as exc:
            logger.warning("gemini_insights_fallback", model=self._model, error=str(exc))
            return heuristic_insights(data)

    def explain_error(self, message: str) -> str:
        return message

    async def _generate(self, contents: list) -> str:
        """Call ``generate_content`` with rate-limit backoff and return the reply text."""
        if self._client is None:
            raise RuntimeError("Gemini client is not configured")
        client = self._client

        async def call() -> str:
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=self._config,
            )
            return response.text or ""

        start = time.monotonic()
        text = await with_retry(call, self._max_retries, self._base_delay)
        logger.debug("gemini_generate_done", model=self._model,
                     latency_ms=int((time.monotonic() - start) * 1000))
        return text
