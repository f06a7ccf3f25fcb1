"""Test bill scan schemas and their camelCase wire format."""
import pytest
from pydantic import ValidationError
from bill_scanner.models.schema import (
    BillScanResult, ExtractedBillData, InsightResponse, LineItem, ProviderKind, RiskLevel,
)
from tests.factories import make_extracted_data, make_success_result


class TestExtractedBillData:
    def test_defaults(self):
        data = ExtractedBillData()
        assert data.consumer_number == ""
        assert data.total_amount == 0.0
        assert data.line_items == []

    def test_dump_uses_camel_case(self):
        dumped = make_extracted_data().model_dump(by_alias=True)
        assert dumped["totalAmount"] == 4500.0
        assert dumped["powerFactor"] == 0.82
        assert dumped["lineItems"] == [{"description": "Energy Charges", "amount": 3200.0}]
        assert "total_amount" not in dumped

    def test_accepts_either_name(self):
        assert ExtractedBillData(totalAmount=10).total_amount == 10
        assert ExtractedBillData(total_amount=10).total_amount == 10

    @pytest.mark.parametrize("total, units, expected", [
        (4500, 320, True),
        (0, 320, False),
        (4500, 0, False),
    ])
    def test_wants_insights(self, total, units, expected):
        assert ExtractedBillData(total_amount=total, units_consumed=units).wants_insights is expected


class TestInsightResponse:
    def test_defaults(self):
        insights = InsightResponse(summary="ok")
        assert insights.risk_level == RiskLevel.LOW
        assert insights.potential_savings == 0.0

    def test_risk_level_serialises_as_string(self):
        dumped = InsightResponse(summary="ok", risk_level="high").model_dump(mode="json", by_alias=True)
        assert dumped["riskLevel"] == "high"
        assert dumped["potentialSavings"] == 0.0


class TestBillScanResult:
    def test_failure(self):
        result = BillScanResult.failure(["Unsupported file type: video/mp4"], ProviderKind.LOCAL)
        assert result.success is False
        assert result.confidence == 0.0
        assert result.extracted_data is None
        assert result.provider == ProviderKind.LOCAL

    def test_failure_without_provider(self):
        assert BillScanResult.failure(["none"]).provider is None

    def test_frozen(self):
        result = make_success_result()
        with pytest.raises(ValidationError):
            result.confidence = 0.1

    @pytest.mark.parametrize("confidence", [-0.1, 1.5])
    def test_confidence_bounds(self, confidence):
        with pytest.raises(ValidationError):
            BillScanResult(success=True, confidence=confidence)

    def test_wire_format(self):
        dumped = make_success_result(ProviderKind.LOCAL).model_dump(mode="json", by_alias=True)
        assert dumped["success"] is True
        assert dumped["provider"] == "local"
        assert dumped["extractedData"]["unitsConsumed"] == 320.0
        assert dumped["insights"]["riskLevel"] == "medium"
        assert dumped["rawText"] is None

    def test_line_item_defaults(self):
        assert LineItem() == LineItem(description="", amount=0.0)
