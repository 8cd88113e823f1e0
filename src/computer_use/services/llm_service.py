from __future__ import annotations

from openai import OpenAI
from tenacity import Retrying, stop_after_attempt, wait_exponential

from computer_use.config import ModelConfig, get_model_config, settings


def _create_openai_client(base_url: str = "") -> OpenAI:
    """Create an OpenAI client, optionally wrapped with PromptLayer."""
    url = base_url or settings.llm_base_url
    if settings.promptlayer_api_key:
        from promptlayer import PromptLayer

        promptlayer_client = PromptLayer(api_key=settings.promptlayer_api_key)
        return promptlayer_client.openai.OpenAI(
            api_key=settings.llm_api_key,
            base_url=url,
            timeout=settings.llm_timeout_sec,
        )
    return OpenAI(
        api_key=settings.llm_api_key,
        base_url=url,
        timeout=settings.llm_timeout_sec,
    )


class LLMService:
    def __init__(self, config: ModelConfig | None = None, max_attempts: int | None = None) -> None:
        if config is None:
            config = get_model_config()
        self._config = config
        self.client = _create_openai_client(config.base_url)
        self.model = config.model or settings.llm_model
        self._temperature = config.temperature
        self._max_tokens = config.max_tokens
        self._max_attempts = max_attempts or settings.llm_max_attempts

    def _get_temperature(self) -> float:
        return self._temperature if self._temperature is not None else 0.2

    def generate_with_tools(self, messages: list[dict], tools: list[dict]):
        kwargs: dict = {
            "model": self.model,
            "messages": messages,
            "temperature": self._get_temperature(),
        }
        if tools:
            kwargs["tools"] = tools
        if self._max_tokens is not None:
            kwargs["max_tokens"] = self._max_tokens
        if settings.promptlayer_api_key:
            kwargs["pl_tags"] = ["computer-use", "generate-with-tools"]

        # One attempt by default: a failed model call ends the run.
        retrying = Retrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(min=2, max=30),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                return self.client.chat.completions.create(**kwargs)
