from typing import Any

from pydantic import BaseModel, Field

from minerva.schemas.connection import ConnectionConfig


class ChatMessageIn(BaseModel):
    role: str  # "user" | "assistant" | "system"
    content: str = ""


class CompletionRequest(BaseModel):
    connection: ConnectionConfig
    messages: list[ChatMessageIn]
    temperature: float | None = None
    max_tokens: int | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    stream: bool = False


class CompletionMessage(BaseModel):
    role: str = "assistant"
    content: str


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionResponse(BaseModel):
    choices: list[CompletionChoice]


class PromptFrame(BaseModel):
    """Client → server websocket frame that starts a generation."""

    type: str = "prompt"
    connection: ConnectionConfig
    messages: list[ChatMessageIn]
    system_instruction: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)
