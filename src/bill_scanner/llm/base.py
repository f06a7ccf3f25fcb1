"""Capability contract shared by all bill-scanning backends."""
from __future__ import annotations

from typing import Awaitable, Callable, Protocol, runtime_checkable

import structlog

from ..models.schema import BillScanResult, ExtractedBillData, InsightResponse, ProviderKind
from ..models.status import ProviderStatus
from .response_parser import build_extracted_data, extract_json_from_response, read_confidence, to_text_list

logger = structlog.get_logger(__name__)

TEXT_MIME_TYPE = "text/plain"
PDF_MIME_TYPE = "application/pdf"

DEFAULT_IMAGE_CONFIDENCE = 0.75
DEFAULT_TEXT_CONFIDENCE = 0.7


@runtime_checkable
class VLMProvider(Protocol):
    """A vision-language model backend able to scan bills.

    None of the coroutines raise: failures are reported through
    ``BillScanResult.success``, ``ProviderStatus.error`` or heuristic insights.
    """

    kind: ProviderKind

    async def check_status(self) -> ProviderStatus:
        """Probe the backend and describe its availability."""
        ...

    async def is_available(self) -> bool:
        ...

    async def scan_bill(self, content: str, mime_type: str) -> BillScanResult:
        """Scan plain text, or base64-encoded binary content of *mime_type*."""
        ...

    async def generate_insights(self, data: ExtractedBillData) -> InsightResponse:
        ...

    def explain_error(self, message: str) -> str:
        """Turn a raw failure warning into user-facing guidance."""
        ...


def unsupported_type(mime_type: str, provider: ProviderKind) -> BillScanResult:
    return BillScanResult.failure([f"Unsupported file type: {mime_type}"], provider=provider)


async def finish_scan(
    response_text: str,
    *,
    provider: ProviderKind,
    source: str,
    default_confidence: float,
    raw_text: str,
    generate_insights: Callable[[ExtractedBillData], Awaitable[InsightResponse]],
) -> BillScanResult:
    """Turn a model's extraction reply into a scan result.

    *source* names the input kind ("image" or "text") for the parse-failure
    warning. Insights are only requested for bills with both a total amount
    and a consumption figure.
    """
    parsed = extract_json_from_response(response_text)
    if parsed is None:
        logger.warning("scan_parse_failed", provider=provider.value, source=source,
                       response_preview=response_text[:200])
        return BillScanResult.failure(
            [f"Failed to parse bill data from {source}"], provider=provider,
        )

    extracted = build_extracted_data(parsed)
    insights = await generate_insights(extracted) if extracted.wants_insights else None

    return BillScanResult(
        success=True,
        extracted_data=extracted,
        insights=insights,
        confidence=read_confidence(parsed, default_confidence),
        warnings=to_text_list(parsed.get("warnings")),
        raw_text=raw_text,
        provider=provider,
    )
