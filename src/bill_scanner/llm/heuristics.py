"""Deterministic bill insights used when a model-backed insight call fails."""
from __future__ import annotations

import math

from ..models.schema import ExtractedBillData, InsightResponse, RiskLevel

POOR_POWER_FACTOR = 0.9


def _fmt(value: float) -> str:
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def heuristic_insights(data: ExtractedBillData) -> InsightResponse:
    """Summarise a bill from its own numbers without calling a model."""
    cost_per_unit = data.total_amount / data.units_consumed if data.units_consumed > 0 else 0.0
    poor_pf = 0 < data.power_factor < POOR_POWER_FACTOR

    if data.power_factor > 0:
        pf_line = f"Power factor: {data.power_factor:.2f} " + (
            "(needs improvement)" if poor_pf else "(acceptable)"
        )
    else:
        pf_line = "Power factor data not available"

    demand_line = (
        f"Maximum demand: {_fmt(data.max_demand)} kVA"
        if data.max_demand > 0
        else "Demand data not available"
    )

    return InsightResponse(
        summary=(
            f"Your electricity bill for {data.billing_period or 'this period'} shows consumption of "
            f"{_fmt(data.units_consumed)} kWh with a total cost of ₹{_fmt(data.total_amount)}."
        ),
        insights=[
            f"Cost per unit: ₹{cost_per_unit:.2f}/kWh",
            pf_line,
            demand_line,
        ],
        recommendations=[
            "Consider installing capacitor banks to improve power factor"
            if poor_pf
            else "Maintain current power factor levels",
            "Review tariff structure for potential optimization",
            "Consider energy audit for efficiency improvements",
        ],
        potential_savings=math.floor(data.total_amount * (0.10 if poor_pf else 0.05)),
        risk_level=RiskLevel.MEDIUM if poor_pf else RiskLevel.LOW,
    )
