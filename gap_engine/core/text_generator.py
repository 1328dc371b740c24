"""Text generation collaborator.

The composer only depends on the ``TextGenerator`` protocol, so tests can hand
in a deterministic stub. The OpenAI-backed implementation is constructed
explicitly via ``create_text_generator`` and fails fast when the API key is
missing, instead of living as a lazily initialized module-level client.
"""

from typing import Protocol

from openai import OpenAI, OpenAIError

from gap_engine.core.config import Settings
from gap_engine.core.errors import ConfigurationError, GenerationError
from gap_engine.core.logging import get_logger

logger = get_logger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt pair into prose."""

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: int,
        temperature: float,
    ) -> str:
        ...


class OpenAITextGenerator:
    """TextGenerator backed by the OpenAI chat completions API."""

    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model = model

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: int,
        temperature: float,
    ) -> str:
        """
        Generate prose for one prompt pair.

        Timeouts and retries are handled by the underlying client.

        Returns:
            The trimmed completion text

        Raises:
            GenerationError: If the API call fails or returns no text
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_output_tokens,
            )
        except OpenAIError as e:
            raise GenerationError(f"Text generation failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        text = (content or "").strip()
        if not text:
            raise GenerationError("Text generation returned an empty response")

        return text

    def ping(self) -> str:
        """Issue a tiny completion to check connectivity."""
        return self.generate(
            system_prompt="You are a connectivity check.",
            user_prompt="テスト: こんにちは",
            max_output_tokens=50,
            temperature=0.7,
        )


def create_text_generator(settings: Settings) -> OpenAITextGenerator:
    """
    Build the OpenAI text generator from settings.

    Raises:
        ConfigurationError: If OPENAI_API_KEY is empty
    """
    if not settings.OPENAI_API_KEY or not settings.OPENAI_API_KEY.strip():
        raise ConfigurationError("OPENAI_API_KEY is not set")

    client = OpenAI(
        api_key=settings.OPENAI_API_KEY,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
        max_retries=settings.OPENAI_MAX_RETRIES,
    )
    logger.info(
        f"Initialized OpenAI text generator with model {settings.ANALYSIS_MODEL}",
        extra={"extra_data": {"timeout": settings.OPENAI_TIMEOUT_SECONDS}},
    )
    return OpenAITextGenerator(client=client, model=settings.ANALYSIS_MODEL)
