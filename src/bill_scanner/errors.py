"""Backend failure types and remediation messages for local-backend errors."""
from __future__ import annotations


class BackendError(Exception):
    """A model backend replied with an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


_RESOURCE_MARKERS = ("resource limitations", "unexpectedly stopped", "out of memory")
_CONNECTION_MARKERS = (
    "failed to connect",
    "econnrefused",
    "connection refused",
    "all connection attempts failed",
    "fetch failed",
)
_TIMEOUT_MARKERS = ("timeout", "timed out")


def describe_local_error(message: str, model: str) -> str:
    """Rewrite a raw local-backend failure into actionable guidance.

    Checks run in a fixed order; the first match wins and anything unmatched
    is passed through behind an ``Ollama error:`` prefix.
    """
    text = message.lower()

    if any(marker in text for marker in _RESOURCE_MARKERS):
        return (
            "Ollama ran out of memory. Try a lighter model like \"moondream\" "
            "(run: ollama pull moondream) or close other applications to free up RAM."
        )

    if any(marker in text for marker in _CONNECTION_MARKERS):
        return "Cannot connect to Ollama. Please ensure Ollama is running (run: ollama serve)."

    if "not found" in text or ("model" in text and "pull" in text):
        return f'Model "{model}" not found. Please pull it first (run: ollama pull {model}).'

    if any(marker in text for marker in _TIMEOUT_MARKERS):
        return (
            "Request timed out. The model may be too slow or the image too large. "
            "Try a smaller image or lighter model."
        )

    if "api error: 500" in text:
        return "Ollama server error. Check the Ollama server logs and try restarting Ollama."

    return f"Ollama error: {message}. Make sure Ollama is running and has a vision model loaded."
