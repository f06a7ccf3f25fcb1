"""Extract and normalise JSON from model responses."""
from __future__ import annotations

import json
import math
import re
from typing import Any

from ..models.schema import ExtractedBillData, InsightResponse, LineItem, RiskLevel

# Greedy: first "{" through the last "}" in the text
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

_STRING_FIELDS = (
    "consumer_number",
    "meter_number",
    "bill_date",
    "due_date",
    "billing_period",
    "discom",
    "tariff_category",
    "address",
)

_RISK_LEVELS = {level.value for level in RiskLevel}

_NUMBER_FIELDS = (
    "total_amount",
    "units_consumed",
    "previous_reading",
    "current_reading",
    "max_demand",
    "power_factor",
    "sanctioned_load",
    "contract_demand",
)


def extract_json_from_response(text: str) -> dict | None:
    """Return the JSON object embedded in *text*, or None if there is none.

    The candidate span runs from the first ``{`` to the last ``}``. A span that
    is present but not valid JSON raises ``json.JSONDecodeError``.
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return None
    parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("Model response JSON is not an object")
    return parsed


def to_number(value: Any) -> float:
    """Lenient numeric coercion; anything unparseable becomes 0."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip()) if value.strip() else 0.0
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_text(value: Any) -> str:
    """Falsy values become ``""``; anything else is stringified."""
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


def to_text_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [to_text(item) for item in value if to_text(item)]


def build_line_items(value: Any) -> list[LineItem]:
    """Coerce raw line items, keeping only positive amounts in original order."""
    if not isinstance(value, list):
        return []
    items: list[LineItem] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        amount = to_number(raw.get("amount"))
        if amount > 0:
            items.append(LineItem(description=to_text(raw.get("description")), amount=amount))
    return items


def build_extracted_data(parsed: dict) -> ExtractedBillData:
    """Build a fully populated ``ExtractedBillData`` from camelCase model JSON."""
    fields: dict[str, Any] = {}
    for name in _STRING_FIELDS:
        fields[name] = to_text(parsed.get(_camel(name)))
    for name in _NUMBER_FIELDS:
        fields[name] = to_number(parsed.get(_camel(name)))
    fields["line_items"] = build_line_items(parsed.get("lineItems"))
    return ExtractedBillData(**fields)


def read_confidence(parsed: dict, default: float) -> float:
    """Model-reported confidence clamped to [0, 1]; missing or zero uses *default*."""
    confidence = to_number(parsed.get("confidence")) or default
    return min(1.0, max(0.0, confidence))


def build_insights(parsed: dict) -> InsightResponse:
    """Build an ``InsightResponse`` from model JSON, completing missing fields."""
    risk = to_text(parsed.get("riskLevel")).lower()
    return InsightResponse(
        summary=to_text(parsed.get("summary")) or "Bill analysis completed.",
        insights=to_text_list(parsed.get("insights")),
        recommendations=to_text_list(parsed.get("recommendations")),
        potential_savings=to_number(parsed.get("potentialSavings")),
        risk_level=RiskLevel(risk) if risk in _RISK_LEVELS else RiskLevel.LOW,
    )


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
