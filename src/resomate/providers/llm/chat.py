import logging
from typing import Any, Protocol

from resomate.config import Settings
from resomate.generation.prompts import Messages
from resomate.utils.errors import extract_error_detail

logger = logging.getLogger(__name__)


class ChatCompleter(Protocol):
    async def complete(
        self,
        messages: Messages,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str: ...


class OpenAIChatClient:
    """OpenAI-compatible chat completions through langchain-openai."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._llms: dict[tuple[str, float, int], Any] = {}

    async def complete(
        self,
        messages: Messages,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        llm = self._get_llm(model, temperature, max_tokens)
        logger.info(
            "llm.request model=%s temperature=%.2f max_tokens=%d messages=%d",
            model,
            temperature,
            max_tokens,
            len(messages),
        )
        try:
            response = await llm.ainvoke(messages)
        except Exception as exc:
            logger.error(
                "llm.error model=%s type=%s detail=%s",
                model,
                exc.__class__.__name__,
                extract_error_detail(exc),
            )
            raise
        text = message_text(getattr(response, "content", response))
        logger.info("llm.response model=%s chars=%d", model, len(text))
        return text

    def _get_llm(self, model: str, temperature: float, max_tokens: int):
        key = (strip_provider_prefix(model), temperature, max_tokens)
        if key not in self._llms:
            from langchain_openai import ChatOpenAI

            self._llms[key] = ChatOpenAI(
                model=key[0],
                api_key=self.settings.openai_api_key or None,
                base_url=self.settings.openai_base_url,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=self.settings.llm_num_retries,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        return self._llms[key]


def message_text(content: Any) -> str:
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict):
                parts.append(str(item["text"]) if "text" in item else str(item))
            else:
                parts.append(str(item))
        return "\n".join(parts).strip()
    return str(content).strip()


def strip_provider_prefix(model: str) -> str:
    stripped = model.strip()
    if "/" not in stripped:
        return stripped
    return stripped.split("/", 1)[1]

