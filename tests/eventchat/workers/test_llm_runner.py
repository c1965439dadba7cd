"""LLMRunner against pydantic-ai's FunctionModel (no network)."""

import pytest
from pydantic_ai.messages import (
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models.function import AgentInfo, FunctionModel

from eventchat.config import Settings
from eventchat.schemas.bot import ContextTurn
from eventchat.workers.llm import (
    MAX_OUTPUT_TOKENS,
    LLMRunner,
    _context_to_message_list,
    build_llm_runner,
)


def test_context_to_message_list_orders_system_prompt_first():
    messages = _context_to_message_list(
        "Be brief.",
        [
            ContextTurn(role="user", content="hi"),
            ContextTurn(role="model", content="hello"),
            ContextTurn(role="user", content="   "),
        ],
    )
    assert len(messages) == 3
    assert isinstance(messages[0], ModelRequest)
    assert isinstance(messages[0].parts[0], SystemPromptPart)
    assert isinstance(messages[1].parts[0], UserPromptPart)
    assert isinstance(messages[2], ModelResponse)
    assert messages[2].parts[0].content == "hello"


@pytest.mark.asyncio
async def test_generate_sends_history_and_message():
    seen = {}

    def respond(messages, info: AgentInfo) -> ModelResponse:
        seen["messages"] = messages
        seen["settings"] = info.model_settings
        return ModelResponse(parts=[TextPart(content="  It is noon.  ")])

    runner = LLMRunner(model=FunctionModel(respond))
    reply = await runner.generate(
        "Be brief.",
        [ContextTurn(role="user", content="hi"), ContextTurn(role="model", content="hey")],
        "What time is it?",
    )

    assert reply == "It is noon."
    parts = [part for message in seen["messages"] for part in message.parts]
    assert isinstance(parts[0], SystemPromptPart)
    assert parts[0].content == "Be brief."
    assert parts[-1].content == "What time is it?"
    assert seen["settings"]["max_tokens"] == MAX_OUTPUT_TOKENS


def test_build_llm_runner_disabled_without_key():
    settings = Settings(environment="test", litellm_api_key=None)
    assert build_llm_runner(settings) is None


def test_build_llm_runner_with_key():
    settings = Settings(environment="test", litellm_api_key="sk-test")
    assert isinstance(build_llm_runner(settings), LLMRunner)
