"""Local vision model backend served by Ollama."""
from __future__ import annotations

import asyncio
import time

import httpx
import structlog

from ..config import Settings
from ..errors import BackendError, describe_local_error
from ..models.schema import BillScanResult, ExtractedBillData, InsightResponse, ProviderKind
from ..models.status import ProviderStatus
from ..prompts.registry import (
    EXTRACTION_IMAGE,
    EXTRACTION_TEXT,
    INSIGHTS,
    PromptRegistry,
    insight_variables,
)
from ..utils.encoding import from_base64, to_base64
from ..utils.pdf import is_pdf, render_pdf_to_images
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

logger = structlog.get_logger(__name__)


class OllamaProvider:
    """Scans bills with a self-hosted Ollama model.

    Uses ``GET /api/tags`` to check that the configured model is pulled and
    ``POST /api/generate`` (non-streaming) for extraction and insights. Every
    generate call is bounded by ``ollama_timeout`` seconds.
    """

    kind = ProviderKind.LOCAL

    def __init__(
        self,
        settings: Settings,
        prompt_registry: PromptRegistry | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._model = settings.ollama_model
        self._text_model = settings.insight_model
        self._timeout = settings.ollama_timeout
        self._probe_timeout = settings.ollama_probe_timeout
        self._options = {
            "num_predict": settings.ollama_num_predict,
            "temperature": settings.ollama_temperature,
        }
        self._pdf_dpi = settings.pdf_dpi
        self._pdf_max_pages = settings.pdf_max_pages
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._prompts = prompt_registry or PromptRegistry()
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._model

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    async def check_status(self) -> ProviderStatus:
        try:
            response = await self._client.get("/api/tags", timeout=self._probe_timeout)
            if response.status_code >= 400:
                return self._status(error=f"Ollama server returned {response.status_code}")

            models = [m.get("name", "") for m in (response.json().get("models") or [])]
        except Exception as exc:
            logger.info("ollama_probe_failed", base_url=self._base_url, error=str(exc))
            return self._status(error=_failure_text(exc, "Failed to connect to Ollama"))

        # Installed names carry a tag suffix, e.g. "llava:7b" or "moondream:latest"
        base_name = self._model.split(":")[0]
        if not any(name.startswith(base_name) or name == self._model for name in models):
            available = ", ".join(models) or "none"
            return self._status(error=f"Model '{self._model}' not found. Available: {available}")

        return ProviderStatus(available=True, provider=self.kind, model=self._model)

    async def is_available(self) -> bool:
        status = await self.check_status()
        return status.available

    def _status(self, error: str) -> ProviderStatus:
        return ProviderStatus(available=False, provider=self.kind, error=error)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    async def scan_bill(self, content: str, mime_type: str) -> BillScanResult:
        if mime_type == TEXT_MIME_TYPE:
            return await self._scan_text(content)
        if mime_type.startswith("image/") or mime_type == PDF_MIME_TYPE:
            return await self._scan_document(content, mime_type)
        return unsupported_type(mime_type, self.kind)

    async def _scan_document(self, content_b64: str, mime_type: str) -> BillScanResult:
        logger.info("ollama_scan_start", model=self._model, mime_type=mime_type,
                    prompt_version=self._prompts.get_version(EXTRACTION_IMAGE))
        try:
            images = self._page_images(content_b64, mime_type)
            text = await self._generate(
                self._model,
                self._prompts.render(EXTRACTION_IMAGE),
                images=images,
            )
            return await finish_scan(
                text,
                provider=self.kind,
                source="image",
                default_confidence=DEFAULT_IMAGE_CONFIDENCE,
                raw_text=text,
                generate_insights=self.generate_insights,
            )
        except (TimeoutError, httpx.TimeoutException):
            logger.error("ollama_scan_timeout", model=self._model, timeout=self._timeout)
            return BillScanResult.failure(
                [
                    f"Request timed out after {self._timeout:g} seconds. The image may be "
                    "too large or complex. Try a smaller or clearer image."
                ],
                provider=self.kind,
            )
        except Exception as exc:
            logger.error("ollama_scan_failed", model=self._model, error=str(exc))
            return BillScanResult.failure([_failure_text(exc, "Failed to scan bill with Ollama")], provider=self.kind)

    async def _scan_text(self, text_content: str) -> BillScanResult:
        logger.info("ollama_text_scan_start", model=self._model, chars=len(text_content))
        try:
            text = await self._generate(
                self._model,
                self._prompts.render(EXTRACTION_TEXT, {"bill_text": text_content}),
            )
            return await finish_scan(
                text,
                provider=self.kind,
                source="text",
                default_confidence=DEFAULT_TEXT_CONFIDENCE,
                raw_text=text_content,
                generate_insights=self.generate_insights,
            )
        except (TimeoutError, httpx.TimeoutException):
            logger.error("ollama_text_scan_timeout", model=self._model, timeout=self._timeout)
            return BillScanResult.failure(
                [f"Request timed out after {self._timeout:g} seconds."], provider=self.kind,
            )
        except Exception as exc:
            logger.error("ollama_text_scan_failed", model=self._model, error=str(exc))
            return BillScanResult.failure([_failure_text(exc, "Failed to scan text with Ollama")], provider=self.kind)

    def _page_images(self, content_b64: str, mime_type: str) -> list[str]:
        """Images for the ``images`` array; PDFs are rendered page by page."""
        if mime_type != PDF_MIME_TYPE:
            return [content_b64]
        raw = from_base64(content_b64)
        if not is_pdf(raw):
            return [content_b64]
        pages = render_pdf_to_images(raw, dpi=self._pdf_dpi, max_pages=self._pdf_max_pages)
        logger.info("ollama_pdf_rendered", pages=len(pages), dpi=self._pdf_dpi)
        return [to_base64(page) for page in pages]

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------

    async def generate_insights(self, data: ExtractedBillData) -> InsightResponse:
        try:
            text = await self._generate(
                self._text_model,
                self._prompts.render(INSIGHTS, insight_variables(data)),
            )
            parsed = extract_json_from_response(text)
            if parsed is None:
                raise ValueError("Invalid insights response")
            return build_insights(parsed)
        except Exception as exc:
            logger.warning("ollama_insights_fallback", model=self._text_model, error=str(exc))
            return heuristic_insights(data)

    def explain_error(self, message: str) -> str:
        return describe_local_error(message, self._model)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _generate(self, model: str, prompt: str, images: list[str] | None = None) -> str:
        """Run a non-streaming generate call and return the raw response text."""
        payload: dict = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": self._options,
        }
        if images:
            payload["images"] = images

        start = time.monotonic()
        try:
            async with asyncio.timeout(self._timeout):
                response = await self._client.post("/api/generate", json=payload, timeout=self._timeout)
        except httpx.ConnectError as exc:
            raise BackendError(f"Failed to connect to Ollama at {self._base_url}: {exc}") from exc

        if response.status_code >= 400:
            raise BackendError(
                f"Ollama API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        body = response.json()
        logger.debug(
            "ollama_generate_done",
            model=model,
            images=len(images or []),
            latency_ms=int((time.monotonic() - start) * 1000),
        )
        return body.get("response") or ""


def _failure_text(exc: Exception, default: str) -> str:
    return str(exc) or default
