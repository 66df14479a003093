"""Declarative descriptions of a provider's configuration surface.

These records carry no behaviour. They exist so a form-rendering client can
build connection and generation-parameter forms for each provider.
"""

from typing import Any

from pydantic import BaseModel, Field


class ConfigField(BaseModel):
    name: str
    label: str
    type: str  # "text" | "password"
    required: bool = False
    placeholder: str = ""


class GenerationParameter(BaseModel):
    name: str  # e.g. "temperature"
    label: str  # e.g. "Temperature"
    type: str  # form control: "range" | "number" | "text"
    options: dict[str, Any] = Field(default_factory=dict)  # min, max, step, default, placeholder


class ModelSchema(BaseModel):
    """Generation parameters supported by one specific model of a provider."""

    name: str  # e.g. "gemini-2.5-pro"
    parameters: list[GenerationParameter] = Field(default_factory=list)


class HealthCheckResult(BaseModel):
    ok: bool
    message: str
    data: Any | None = None
