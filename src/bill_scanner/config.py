"""Application configuration via environment variables with BILLSCAN_ prefix."""

from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.schema import ProviderMode

DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "moondream"

# Provider names used by earlier deployments
_MODE_ALIASES = {
    "ollama": ProviderMode.LOCAL,
    "gemini": ProviderMode.CLOUD,
}


class Settings(BaseSettings):
    """Bill scanner configuration.

    All settings are read from environment variables prefixed with ``BILLSCAN_``.
    Secrets (API keys) are wrapped in ``SecretStr`` so they are never
    accidentally logged or serialised.
    """

    model_config = SettingsConfigDict(env_prefix="BILLSCAN_")

    # ── Provider selection ───────────────────────────────────────────────
    vlm_provider: ProviderMode = ProviderMode.AUTO

    # ── Local backend (Ollama) ───────────────────────────────────────────
    ollama_base_url: str = DEFAULT_OLLAMA_BASE_URL
    ollama_model: str = DEFAULT_OLLAMA_MODEL
    # Leave empty to reuse ollama_model for insight generation
    ollama_text_model: str = ""
    ollama_timeout: float = 120.0
    ollama_probe_timeout: float = 5.0
    ollama_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    ollama_num_predict: int = 2048

    # ── Cloud backend (Gemini) ───────────────────────────────────────────
    gemini_api_key: SecretStr = SecretStr("")
    gemini_model: str = "gemini-2.0-flash-001"
    gemini_temperature: float = Field(default=0.1, ge=0.0, le=2.0)

    # ── Rate-limit backoff ───────────────────────────────────────────────
    retry_max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=2.0, ge=0.0)

    # ── PDF rendering for the local backend ──────────────────────────────
    pdf_dpi: int = 150
    pdf_max_pages: int = Field(default=3, ge=1)

    # ── API ──────────────────────────────────────────────────────────────
    max_upload_bytes: int = 15 * 1024 * 1024
    log_level: str = "INFO"
    # Include exception text in 500 responses
    debug: bool = False
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    @field_validator("vlm_provider", mode="before")
    @classmethod
    def _normalise_provider(cls, value: object) -> ProviderMode:
        if isinstance(value, ProviderMode):
            return value
        name = str(value or "").strip().lower()
        if name in _MODE_ALIASES:
            return _MODE_ALIASES[name]
        try:
            return ProviderMode(name)
        except ValueError:
            return ProviderMode.AUTO

    @property
    def insight_model(self) -> str:
        """Model used for text-only insight generation on the local backend."""
        return self.ollama_text_model or self.ollama_model
