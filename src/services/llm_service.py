import structlog
from typing import Optional

import openai

from ..exceptions import ConfigurationError, LLMServiceError

logger = structlog.get_logger(__name__)


class LLMService:
    """Single-turn OpenAI chat completions used for article summaries."""

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        openai_model_name: str = "gpt-4.1",
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float = 60.0,
        client=None,
    ):
        self.openai_api_key = openai_api_key
        self.openai_model_name = openai_model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.openai_client = client

        if self.openai_client is None and openai_api_key:
            self.openai_client = openai.OpenAI(api_key=openai_api_key, timeout=timeout)
            logger.info("OpenAI client initialized", model=openai_model_name)

    @property
    def is_configured(self) -> bool:
        return self.openai_client is not None

    def complete(self, prompt: str) -> str:
        """
        Send one user message and return the reply text (possibly empty).

        Raises:
            ConfigurationError: no API key, or the key was rejected
            LLMServiceError: any other failure talking to OpenAI
        """
        if not self.openai_client:
            raise ConfigurationError("OpenAI API key is not configured")

        try:
            response = self.openai_client.chat.completions.create(
                model=self.openai_model_name,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.AuthenticationError as e:
            raise ConfigurationError(f"OpenAI authentication failed: {str(e)}") from e
        except openai.OpenAIError as e:
            raise LLMServiceError(str(e)) from e

        if not response.choices:
            return ""
        result = response.choices[0].message.content or ""
        logger.info("OpenAI generation completed", model=self.openai_model_name, response_length=len(result))
        return result
