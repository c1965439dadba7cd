from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from pydantic_ai import Agent
from pydantic_ai.messages import (
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.litellm import LiteLLMProvider
from pydantic_ai.settings import ModelSettings

from eventchat.config import Settings, get_settings
from eventchat.infra.logging_config import get_logger
from eventchat.schemas.bot import ContextTurn

logger = get_logger("llm")

MAX_OUTPUT_TOKENS = 500
TEMPERATURE = 0.7


class LanguageBackend(ABC):
    """Generates one reply from a system instruction, prior turns and a new message."""

    @abstractmethod
    async def generate(
        self,
        system_instruction: str,
        context: List[ContextTurn],
        message: str,
    ) -> str:
        ...


def _context_to_message_list(
    system_instruction: str, context: List[ContextTurn]
) -> List[Any]:
    """Build message_history with the system prompt first, then prior turns."""

    # https://github.com/pydantic/pydantic-ai/issues/4039
    # https://ai.pydantic.dev/agent/#system-prompts
    out: List[Any] = [ModelRequest(parts=[SystemPromptPart(content=system_instruction)])]
    for turn in context:
        content = turn.content.strip()
        if not content:
            continue
        if turn.role == "model":
            out.append(ModelResponse(parts=[TextPart(content=content)]))
        else:
            out.append(ModelRequest(parts=[UserPromptPart(content=content)]))
    return out


class LLMRunner(LanguageBackend):
    def __init__(
        self,
        model_name: str = "",
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        model: Optional[Model] = None,
    ) -> None:
        if model is None:
            provider = LiteLLMProvider(api_key=api_key, api_base=api_base)
            model = OpenAIChatModel(model_name, provider=provider)
            logger.info(f"Initializing LLM runner with model {model_name}")
        self._agent = Agent(model)
        self._model_settings = ModelSettings(
            max_tokens=MAX_OUTPUT_TOKENS, temperature=TEMPERATURE
        )

    async def generate(
        self,
        system_instruction: str,
        context: List[ContextTurn],
        message: str,
    ) -> str:
        message_history = _context_to_message_list(system_instruction, context)
        result = await self._agent.run(
            message,
            message_history=message_history,
            model_settings=self._model_settings,
        )
        return str(result.output).strip()


def build_llm_runner(settings: Optional[Settings] = None) -> Optional[LLMRunner]:
    """Return a runner, or None when no language backend key is configured."""
    settings = settings or get_settings()
    logger.info(
        "LLM runner config: model=%s, api_key=%s, api_base=%s",
        settings.llm_model,
        "set" if settings.litellm_api_key else "not set",
        settings.litellm_api_base or "(default)",
    )
    if not settings.bot_enabled:
        logger.warning("LITELLM_API_KEY is not set; the chat bot is disabled.")
        return None
    return LLMRunner(
        model_name=settings.llm_model,
        api_key=settings.litellm_api_key,
        api_base=settings.litellm_api_base,
    )
