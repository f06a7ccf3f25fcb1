"""Test settings loading and provider mode normalisation."""
import pytest
from bill_scanner.config import Settings
from bill_scanner.models.schema import ProviderMode


class TestProviderMode:
    @pytest.mark.parametrize("value, expected", [
        ("auto", ProviderMode.AUTO),
        ("local", ProviderMode.LOCAL),
        ("cloud", ProviderMode.CLOUD),
        ("ollama", ProviderMode.LOCAL),
        ("gemini", ProviderMode.CLOUD),
        ("  Gemini ", ProviderMode.CLOUD),
        ("openai", ProviderMode.AUTO),
        ("", ProviderMode.AUTO),
    ])
    def test_normalised(self, value, expected):
        assert Settings(vlm_provider=value).vlm_provider == expected

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("BILLSCAN_VLM_PROVIDER", "ollama")
        monkeypatch.setenv("BILLSCAN_OLLAMA_MODEL", "llava")
        settings = Settings()
        assert settings.vlm_provider == ProviderMode.LOCAL
        assert settings.ollama_model == "llava"


class TestDefaults:
    def test_defaults(self, monkeypatch):
        for name in ("BILLSCAN_VLM_PROVIDER", "BILLSCAN_GEMINI_API_KEY", "BILLSCAN_OLLAMA_MODEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.vlm_provider == ProviderMode.AUTO
        assert settings.ollama_timeout == 120.0
        assert settings.retry_max_retries == 3
        assert settings.retry_base_delay == 2.0
        assert settings.gemini_api_key.get_secret_value() == ""

    def test_api_key_hidden(self):
        settings = Settings(gemini_api_key="secret-key")
        assert "secret-key" not in repr(settings)
        assert settings.gemini_api_key.get_secret_value() == "secret-key"


class TestInsightModel:
    def test_defaults_to_vision_model(self):
        assert Settings(ollama_model="moondream", ollama_text_model="").insight_model == "moondream"

    def test_text_model_override(self):
        settings = Settings(ollama_model="moondream", ollama_text_model="llama3.2")
        assert settings.insight_model == "llama3.2"
