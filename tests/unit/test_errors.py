"""Test remediation messages for local backend failures."""
import pytest
from bill_scanner.errors import BackendError, describe_local_error


class TestDescribeLocalError:
    @pytest.mark.parametrize("message, expected", [
        ("model runner has unexpectedly stopped", "ran out of memory"),
        ("llama runner process has terminated: resource limitations", "ran out of memory"),
        ("Failed to connect to Ollama at http://localhost:11434", "ensure Ollama is running"),
        ("connect ECONNREFUSED 127.0.0.1:11434", "ensure Ollama is running"),
        ("All connection attempts failed", "ensure Ollama is running"),
        ("fetch failed", "ensure Ollama is running"),
        ("model 'llava' not found, try pulling it first", "ollama pull moondream"),
        ("Request timed out after 120 seconds.", "Try a smaller image or lighter model"),
        ("Ollama API error: 500 - boom", "Ollama server error"),
    ])
    def test_known_failures(self, message, expected):
        assert expected in describe_local_error(message, "moondream")

    def test_memory_checked_before_connection(self):
        message = "failed to connect: model runner has unexpectedly stopped"
        assert "ran out of memory" in describe_local_error(message, "moondream")

    def test_model_name_included(self):
        assert describe_local_error("not found", "llava:7b") == (
            'Model "llava:7b" not found. Please pull it first (run: ollama pull llava:7b).'
        )

    def test_unknown_error_passed_through(self):
        result = describe_local_error("something odd", "moondream")
        assert result.startswith("Ollama error: something odd.")


class TestBackendError:
    def test_status_code(self):
        exc = BackendError("Ollama API error: 500 - boom", status_code=500)
        assert str(exc) == "Ollama API error: 500 - boom"
        assert exc.status_code == 500

    def test_status_code_optional(self):
        assert BackendError("down").status_code is None
