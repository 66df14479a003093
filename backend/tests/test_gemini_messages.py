"""Gemini message preparation: role mapping, first-turn and alternation rules."""

import random

import pytest

from minerva.providers import ChatMessage
from minerva.providers.gemini import GeminiAdapter
from minerva.schemas.connection import ConnectionConfig


@pytest.fixture
def adapter() -> GeminiAdapter:
    return GeminiAdapter(ConnectionConfig(provider="gemini", apiKey="g-key"))


def _msgs(*pairs: tuple[str, str]) -> list[ChatMessage]:
    return [ChatMessage(role=role, content=content) for role, content in pairs]


def test_roles_are_renamed(adapter):
    out = adapter.prepare_messages(_msgs(("user", "hi"), ("assistant", "hello")))
    assert out == [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "model", "parts": [{"text": "hello"}]},
    ]


def test_system_messages_count_as_user(adapter):
    out = adapter.prepare_messages(_msgs(("system", "be terse"), ("assistant", "ok")))
    assert [m["role"] for m in out] == ["user", "model"]


def test_empty_messages_are_skipped(adapter):
    out = adapter.prepare_messages(_msgs(("user", "a"), ("assistant", ""), ("user", "b")))
    assert out == [{"role": "user", "parts": [{"text": "a\n\nb"}]}]


def test_leading_model_turns_are_dropped(adapter):
    out = adapter.prepare_messages(
        _msgs(("assistant", "greeting"), ("assistant", "more greeting"), ("user", "hi"), ("assistant", "yo"))
    )
    assert out == [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "model", "parts": [{"text": "yo"}]},
    ]


def test_consecutive_same_role_turns_are_merged(adapter):
    out = adapter.prepare_messages(
        _msgs(("user", "one"), ("user", "two"), ("assistant", "three"), ("assistant", "four"), ("user", "five"))
    )
    assert out == [
        {"role": "user", "parts": [{"text": "one\n\ntwo"}]},
        {"role": "model", "parts": [{"text": "three\n\nfour"}]},
        {"role": "user", "parts": [{"text": "five"}]},
    ]


def test_only_model_turns_yields_nothing(adapter):
    assert adapter.prepare_messages(_msgs(("assistant", "a"), ("assistant", "b"))) == []


def test_input_is_not_mutated(adapter):
    messages = _msgs(("user", "one"), ("user", "two"))
    adapter.prepare_messages(messages)
    assert [m.content for m in messages] == ["one", "two"]


def _random_conversation(rng: random.Random) -> list[ChatMessage]:
    words = ["alpha", "beta", "gamma", "delta", ""]
    return [
        ChatMessage(role=rng.choice(["user", "assistant"]), content=rng.choice(words) + str(i) * rng.randint(0, 1))
        for i in range(rng.randint(0, 12))
    ]


@pytest.mark.parametrize("seed", range(200))
def test_alternation_and_content_preserved(adapter, seed):
    messages = _random_conversation(random.Random(seed))
    out = adapter.prepare_messages(messages)

    roles = [m["role"] for m in out]
    assert all(a != b for a, b in zip(roles, roles[1:]))
    if out:
        assert roles[0] == "user"

    # Everything after the leading model turns survives, in order.
    kept = [m for m in messages if m.content]
    while kept and kept[0].role == "assistant":
        kept.pop(0)
    assert "\n\n".join(m["parts"][0]["text"] for m in out) == "\n\n".join(m.content for m in kept)
