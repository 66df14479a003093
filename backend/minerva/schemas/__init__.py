from minerva.schemas.chat import (
    ChatMessageIn,
    CompletionChoice,
    CompletionMessage,
    CompletionRequest,
    CompletionResponse,
    PromptFrame,
)
from minerva.schemas.connection import ConnectionConfig
from minerva.schemas.provider import (
    ConfigField,
    GenerationParameter,
    HealthCheckResult,
    ModelSchema,
)

__all__ = [
    "ConnectionConfig",
    "ConfigField",
    "GenerationParameter",
    "ModelSchema",
    "HealthCheckResult",
    "ChatMessageIn",
    "CompletionRequest",
    "CompletionResponse",
    "CompletionChoice",
    "CompletionMessage",
    "PromptFrame",
]
