"""Pure transformation adapters for the inference server wire format."""

from .ollama import MODEL_UNAVAILABLE_MESSAGE, OllamaRequestAdapter

__all__ = [
    "OllamaRequestAdapter",
    "MODEL_UNAVAILABLE_MESSAGE",
]
