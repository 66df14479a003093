"""One-shot completion endpoint used by client plugins.

POST /api/v1/completions — OpenAI-shaped, non-streaming. A leading ``system``
message becomes the system instruction.
"""

from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from minerva.http_client import get_http_client
from minerva.providers import ChatMessage, ProviderConfigError, ProviderHTTPError, get_adapter
from minerva.schemas.chat import CompletionChoice, CompletionMessage, CompletionRequest, CompletionResponse

router = APIRouter(prefix="/completions", tags=["completions"])

# Output-length parameter name, for providers that don't call it max_tokens
_MAX_TOKENS_PARAM = {"gemini": "maxOutputTokens"}

# Keyword arguments of ProviderAdapter.prompt() that are not generation parameters
_RESERVED_PARAMS = frozenset({"system_instruction", "signal", "stream"})


def generation_params(parameters: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in parameters.items() if k not in _RESERVED_PARAMS}


@router.post("", response_model=CompletionResponse)
async def create_completion(
    body: CompletionRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
) -> CompletionResponse:
    if body.stream:
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail="Streaming is not available on this endpoint; use /ws/chat",
        )

    try:
        adapter = get_adapter(body.connection, client)
    except ProviderConfigError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    params = generation_params(body.parameters)
    if body.temperature is not None:
        params["temperature"] = body.temperature
    if body.max_tokens is not None:
        params[_MAX_TOKENS_PARAM.get(body.connection.provider, "max_tokens")] = body.max_tokens

    messages = [ChatMessage(role=m.role, content=m.content) for m in body.messages]
    system_instruction = None
    if messages and messages[0].role == "system":
        system_instruction = messages[0].content
        messages = messages[1:]

    try:
        tokens = [
            token
            async for token in adapter.prompt(messages, system_instruction=system_instruction, stream=False, **params)
        ]
    except ProviderHTTPError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return CompletionResponse(choices=[CompletionChoice(message=CompletionMessage(content="".join(tokens)))])
