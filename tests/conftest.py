"""Shared test fixtures."""
import pytest
from bill_scanner.config import Settings
from bill_scanner.models.schema import ProviderKind
from bill_scanner.prompts.registry import PromptRegistry
from tests.factories import make_provider


@pytest.fixture
def mock_settings():
    """Create test settings with dummy values."""
    return Settings(
        ollama_base_url="http://ollama.test:11434",
        ollama_model="moondream",
        gemini_api_key="test-gemini-key",
        retry_base_delay=0.0,
    )


@pytest.fixture
def prompt_registry():
    return PromptRegistry()


@pytest.fixture
def local_provider():
    return make_provider(ProviderKind.LOCAL)


@pytest.fixture
def cloud_provider():
    return make_provider(ProviderKind.CLOUD)
