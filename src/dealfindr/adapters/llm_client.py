# src/dealfindr/adapters/llm_client.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from openai import OpenAI, OpenAIError

from dealfindr.adapters.config import AppConfig
from dealfindr.adapters.logging_utils import get_logger
from dealfindr.domain.ports import ChatMessage, TextGenerator

logger = get_logger(__name__)


class TextGenerationError(RuntimeError):
    pass


@dataclass(frozen=True)
class OpenAIChatGenerator:
    """
    Chat-completions client for any OpenAI-compatible endpoint.

    One attempt per call (max_retries=0): the narrative is optional output
    and the caller falls back to templated text on any failure.
    """

    api_key: str
    model: str
    base_url: str | None = None
    timeout_s: float = 30.0
    _client: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._client is None:
            client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_s,
                max_retries=0,
            )
            object.__setattr__(self, "_client", client)

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=list(messages),
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise TextGenerationError(f"chat completion failed: {e}") from e

        if not resp.choices:
            raise TextGenerationError("chat completion returned no choices")
        return resp.choices[0].message.content or ""


def make_text_generator(cfg: AppConfig) -> TextGenerator | None:
    """
    Build the provider handle once at startup.

    Returns None when no key is configured; assessments then use the
    templated narrative.
    """
    if not cfg.LLM_API_KEY:
        logger.info("text_generator_disabled", extra={"context": {"reason": "no api key"}})
        return None

    return OpenAIChatGenerator(
        api_key=cfg.LLM_API_KEY,
        model=cfg.LLM_MODEL,
        base_url=cfg.LLM_BASE_URL,
        timeout_s=cfg.LLM_TIMEOUT_S,
    )
