"""Shared data shapes for bill scanning.

Python attributes are snake_case; the wire format (``model_dump(by_alias=True)``)
uses the camelCase names the upload and dashboard clients consume.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ProviderMode(StrEnum):
    """Configured provider selection mode."""

    AUTO = "auto"
    LOCAL = "local"
    CLOUD = "cloud"


class ProviderKind(StrEnum):
    """Identity of a concrete backend."""

    LOCAL = "local"
    CLOUD = "cloud"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class LineItem(CamelModel):
    description: str = ""
    amount: float = 0.0


class ExtractedBillData(CamelModel):
    """Normalised bill fields. Every field is always populated."""

    # Identifiers
    consumer_number: str = ""
    meter_number: str = ""

    # Free-form dates as printed on the bill
    bill_date: str = ""
    due_date: str = ""
    billing_period: str = ""

    # Readings
    total_amount: float = 0.0
    units_consumed: float = 0.0
    previous_reading: float = 0.0
    current_reading: float = 0.0
    max_demand: float = 0.0
    power_factor: float = 0.0
    sanctioned_load: float = 0.0
    contract_demand: float = 0.0

    # Categorical
    discom: str = ""
    tariff_category: str = ""
    address: str = ""

    line_items: list[LineItem] = Field(default_factory=list)

    @property
    def wants_insights(self) -> bool:
        """Insights are only generated for bills with both cost and consumption."""
        return self.total_amount > 0 and self.units_consumed > 0


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


class InsightResponse(CamelModel):
    summary: str
    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    potential_savings: float = 0.0
    risk_level: RiskLevel = RiskLevel.LOW


# ---------------------------------------------------------------------------
# Scan envelope
# ---------------------------------------------------------------------------


class BillScanResult(CamelModel):
    """Outcome of a single scan request. Immutable once built."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    success: bool
    extracted_data: ExtractedBillData | None = None
    insights: InsightResponse | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    warnings: list[str] = Field(default_factory=list)
    raw_text: str | None = None
    provider: ProviderKind | None = None

    @classmethod
    def failure(
        cls,
        warnings: list[str],
        provider: ProviderKind | None = None,
        raw_text: str | None = None,
    ) -> BillScanResult:
        """Build a failed result with zero confidence."""
        return cls(
            success=False,
            confidence=0.0,
            warnings=warnings,
            raw_text=raw_text,
            provider=provider,
        )
