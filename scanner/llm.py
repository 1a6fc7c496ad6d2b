import asyncio
import logging
from functools import partial
from typing import Optional

from anthropic import Anthropic

from .config import Settings
from .errors import AnalysisFailure
from .prompts import SYSTEM_MESSAGE

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_OUTPUT_TOKENS = 2048


def _extract_response_text(response: object) -> str:
    content = ""
    for block in getattr(response, "content", []) or []:
        text = getattr(block, "text", None)
        if text:
            content += text
    return content.strip()


class ModelClient:
    """
    Thin wrapper over the Anthropic Messages API.

    Built once per process and handed to the analyzer/aggregator. One call
    per `generate`; the caller owns any retry policy. Provider errors
    propagate untouched so the caller can classify them.
    """

    def __init__(self, api_key: str, model: str, *, timeout: float = 60.0):
        self.model = model
        self._client: Optional[Anthropic] = None
        if api_key:
            # SDK retries are disabled so a rate-limit reaches the caller at once
            self._client = Anthropic(api_key=api_key, max_retries=0, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelClient":
        if not settings.api_key_configured:
            logger.warning("ANTHROPIC_API_KEY is not set; AI analysis disabled, heuristics only")
        return cls(api_key=settings.anthropic_api_key.strip(), model=settings.model_name)

    @property
    def configured(self) -> bool:
        return self._client is not None

    def generate(
        self,
        prompt: str,
        *,
        temperature: float = DEFAULT_TEMPERATURE,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ) -> str:
        if self._client is None:
            raise AnalysisFailure("Model client is not configured (missing ANTHROPIC_API_KEY)")

        response = self._client.messages.create(
            model=self.model,
            max_tokens=max_output_tokens,
            system=SYSTEM_MESSAGE,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
        )
        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning("Model output hit max_tokens (model=%s); JSON may be truncated", self.model)

        text = _extract_response_text(response)
        logger.debug("Raw model output: %s", text)
        return text


async def call_model(client, prompt: str, **options) -> str:
    """Run the blocking `client.generate` in the default thread executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(client.generate, prompt, **options))
