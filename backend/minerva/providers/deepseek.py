from minerva.providers.base import ProviderAdapter
from minerva.schemas.provider import GenerationParameter


class DeepSeekAdapter(ProviderAdapter):
    """Schema declarations for DeepSeek.

    No call path exists yet, so the class stays abstract and is not
    registered; instantiating it raises ``TypeError``.
    """

    provider_id = "deepseek"
    label = "DeepSeek"
    generation_schema = (
        GenerationParameter(
            name="temperature", label="Temperature", type="range", options={"min": 0, "max": 2, "step": 0.1, "default": 0.7}
        ),
        GenerationParameter(name="top_p", label="Top P", type="range", options={"min": 0, "max": 1, "step": 0.05, "default": 0.95}),
        GenerationParameter(name="max_tokens", label="Max Tokens", type="number", options={"min": 1, "step": 1, "default": 2048}),
        GenerationParameter(name="stop", label="Stop Sequences", type="text", options={"placeholder": 'e.g., "Human:, AI:"'}),
    )
