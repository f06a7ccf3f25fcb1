"""Prompt template registry with variable injection and versioning."""
from __future__ import annotations
from pathlib import Path
import hashlib
import json

from ..models.schema import ExtractedBillData

TEMPLATES_DIR = Path(__file__).parent / "templates"

EXTRACTION_IMAGE = "bill_extraction_image"
EXTRACTION_TEXT = "bill_extraction_text"
INSIGHTS = "bill_insights"


class PromptRegistry:
    """Manages prompt templates with variable injection and versioning."""

    def __init__(self):
        self._cache: dict[str, str] = {}
        self._hashes: dict[str, str] = {}

    def load_template(self, name: str) -> str:
        """Load a prompt template by name (e.g., 'bill_insights')."""
        if name not in self._cache:
            path = TEMPLATES_DIR / f"{name}.md"
            if not path.exists():
                raise FileNotFoundError(f"Prompt template not found: {path}")
            self._cache[name] = path.read_text(encoding="utf-8")
        return self._cache[name]

    def render(self, template_name: str, variables: dict | None = None) -> str:
        """Render a prompt template with ``{placeholder}`` substitution.

        Only placeholders named in *variables* are replaced, so literal JSON
        braces in a template survive rendering.
        """
        template = self.load_template(template_name)
        if variables:
            for key, value in variables.items():
                template = template.replace(f"{{{key}}}", str(value))
        return template

    def get_hash(self, template_name: str) -> str:
        """Get SHA-256 hash of a template (for reproducibility tracking)."""
        if template_name not in self._hashes:
            content = self.load_template(template_name)
            self._hashes[template_name] = hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]
        return self._hashes[template_name]

    def get_version(self, template_name: str) -> str:
        """Get version string for a template (hash-based)."""
        return f"v1.0-{self.get_hash(template_name)[:8]}"


def insight_variables(data: ExtractedBillData) -> dict[str, str]:
    """Template variables describing a bill for the insight prompt."""
    return {
        "discom": data.discom or "Unknown",
        "tariff_category": data.tariff_category or "Unknown",
        "billing_period": data.billing_period or "Unknown",
        "total_amount": f"{data.total_amount:,.2f}",
        "units_consumed": f"{data.units_consumed:g}",
        "max_demand": f"{data.max_demand:g}",
        "power_factor": f"{data.power_factor:g}",
        "sanctioned_load": f"{data.sanctioned_load:g}",
        "contract_demand": f"{data.contract_demand:g}",
        "line_items": json.dumps(
            [item.model_dump(by_alias=True) for item in data.line_items], ensure_ascii=False
        ),
    }
