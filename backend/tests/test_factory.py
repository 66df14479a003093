import pytest
from pydantic import ValidationError

from minerva.providers import PROVIDERS, ProviderAdapter, ProviderConfigError, generation_schemas, get_adapter, provider_schemas
from minerva.providers.deepseek import DeepSeekAdapter
from minerva.providers.gemini import GeminiAdapter
from minerva.providers.openai import OpenAIV1Adapter
from minerva.schemas.connection import ConnectionConfig
from minerva.schemas.provider import ModelSchema


def test_registry_keys():
    assert PROVIDERS == {"v1": OpenAIV1Adapter, "gemini": GeminiAdapter}


def test_get_adapter_by_provider_id(v1_config, gemini_config):
    assert isinstance(get_adapter(v1_config), OpenAIV1Adapter)
    assert isinstance(get_adapter(gemini_config), GeminiAdapter)


def test_get_adapter_keeps_config(v1_config):
    assert get_adapter(v1_config).config is v1_config


def test_unknown_provider():
    with pytest.raises(ProviderConfigError, match="Unsupported provider type: 'claude'"):
        get_adapter(ConnectionConfig(provider="claude", url="http://x", apiKey="k"))


def test_deepseek_is_not_registered():
    with pytest.raises(ProviderConfigError):
        get_adapter(ConnectionConfig(provider="deepseek", apiKey="k"))


def test_abstract_contract_cannot_be_instantiated(v1_config):
    with pytest.raises(TypeError):
        ProviderAdapter(v1_config)
    with pytest.raises(TypeError):
        DeepSeekAdapter(v1_config)


def test_deepseek_declares_generation_schema():
    names = [p.name for p in DeepSeekAdapter.get_generation_parameters_schema()]
    assert names == ["temperature", "top_p", "max_tokens", "stop"]
    assert DeepSeekAdapter.get_adapter_schema() == []


def test_provider_schemas_cover_registry():
    schemas = provider_schemas()
    assert set(schemas) == {"v1", "gemini"}
    assert [f.name for f in schemas["v1"]] == ["url", "apiKey", "modelId"]
    assert [f.name for f in schemas["gemini"]] == ["apiKey"]
    assert schemas["gemini"][0].required is True


def test_generation_schemas_describe_form_controls():
    schemas = generation_schemas()
    temperature = next(p for p in schemas["gemini"] if p.name == "temperature")
    assert temperature.type == "range"
    assert temperature.options == {"min": 0, "max": 2, "step": 0.1, "default": 0.9}
    assert "maxOutputTokens" in [p.name for p in schemas["gemini"]]
    assert "max_tokens" in [p.name for p in schemas["v1"]]


def test_schema_lists_are_copies():
    OpenAIV1Adapter.get_generation_parameters_schema().clear()
    assert OpenAIV1Adapter.get_generation_parameters_schema()


def test_connection_config_accepts_both_key_styles():
    camel = ConnectionConfig(provider="v1", url="http://x", apiKey="k", modelId="m")
    snake = ConnectionConfig(provider="v1", url="http://x", api_key="k", model_id="m")
    assert (camel.api_key, camel.model_id) == (snake.api_key, snake.model_id) == ("k", "m")


def test_connection_config_is_immutable(v1_config):
    with pytest.raises(ValidationError):
        v1_config.url = "http://elsewhere"


def test_model_schema_groups_parameters():
    schema = ModelSchema(name="gemini-2.5-pro", parameters=GeminiAdapter.get_generation_parameters_schema())
    assert schema.model_dump()["parameters"][0]["name"] == "temperature"
