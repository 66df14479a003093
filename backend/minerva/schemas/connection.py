import uuid

from pydantic import BaseModel, ConfigDict, Field


class ConnectionConfig(BaseModel):
    """Connection settings for one LLM provider.

    Persisted by the configuration layer with camelCase keys (``apiKey``,
    ``modelId``); snake_case input is accepted as well. Instances are frozen so
    adapters can hold them without copying.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "New Config"
    provider: str = "v1"  # "v1" | "gemini"
    url: str = ""
    api_key: str = Field(default="", alias="apiKey")
    model_id: str = Field(default="", alias="modelId")
