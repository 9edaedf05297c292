from .chat import (
    ChatResult,
    Conversation,
    Message,
    PromptSettings,
    RawPromptFormatter,
    ResponseFormat,
    Role,
)
from .tool import (
    FunctionDescriptor,
    FunctionParameters,
    ParameterDescriptor,
    Tool,
    ToolDescriptor,
    ToolParameter,
)

__all__ = [
    "ChatResult",
    "Conversation",
    "Message",
    "PromptSettings",
    "RawPromptFormatter",
    "ResponseFormat",
    "Role",
    "FunctionDescriptor",
    "FunctionParameters",
    "ParameterDescriptor",
    "Tool",
    "ToolDescriptor",
    "ToolParameter",
]
