"""
Ollama Datagen - synthetic e-commerce data from a local LLM server.
"""

from .client import InferenceClient, OllamaClient
from .config import ModelInfo, load_model_info
from .errors import DataGenError, ParseError, TransportError, UnsupportedTypeError
from .formatters import (
    BracketInstructionFormatter,
    HeaderTaggedFormatter,
    ModelFamily,
    PromptFormatter,
)
from .parallel import map_parallel
from .parsing import parse_first_json_value
from .retry import run_with_retries
from .service import InteractionService
from .tools import ToolRegistry
from .types import (
    ChatResult,
    Message,
    PromptSettings,
    ResponseFormat,
    Role,
    Tool,
    ToolDescriptor,
    ToolParameter,
)

__version__ = "0.1.0"

__all__ = [
    "InferenceClient",
    "OllamaClient",
    "ModelInfo",
    "load_model_info",
    "DataGenError",
    "ParseError",
    "TransportError",
    "UnsupportedTypeError",
    "BracketInstructionFormatter",
    "HeaderTaggedFormatter",
    "ModelFamily",
    "PromptFormatter",
    "map_parallel",
    "parse_first_json_value",
    "run_with_retries",
    "InteractionService",
    "ToolRegistry",
    "ChatResult",
    "Message",
    "PromptSettings",
    "ResponseFormat",
    "Role",
    "Tool",
    "ToolDescriptor",
    "ToolParameter",
]
