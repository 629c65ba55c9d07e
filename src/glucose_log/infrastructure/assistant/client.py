"""
OpenAI completion client for the glucose assistant.

Wraps a single Responses API call and normalizes every failure into
AssistantServiceError.
"""

import logging
import os

from openai import OpenAI, OpenAIError

from glucose_log.utils.exceptions import AssistantServiceError
from glucose_log.utils.parameters import AssistantConfig

logger = logging.getLogger(__name__)


class AssistantClient:
    """Text-completion client backed by the OpenAI Responses API."""

    def __init__(self, config: AssistantConfig, client: OpenAI | None = None) -> None:
        """
        Initialize assistant client.

        Args:
            config: Assistant configuration.
            client: Optional preconfigured OpenAI client. If None, one is
                created lazily from the API key environment variable.
        """
        self.config = config
        self._client = client

    def _get_client(self) -> OpenAI:
        if self._client is None:
            api_key = os.getenv(self.config.api_key_env)
            if not api_key:
                raise AssistantServiceError(
                    f"Set {self.config.api_key_env} to enable the AI assistant."
                )
            self._client = OpenAI(api_key=api_key)
        return self._client

    def complete(self, instructions: str, prompt: str) -> str:
        """
        Request a completion.

        Args:
            instructions: System-level behavioral instruction.
            prompt: User-level input (data context plus question).

        Returns:
            Response text, possibly empty.

        Raises:
            AssistantServiceError: If the request fails for any reason.
        """
        client = self._get_client()

        try:
            resp = client.responses.create(
                model=self.config.model,
                instructions=instructions,
                input=prompt,
                temperature=self.config.temperature,
            )
        except OpenAIError as e:
            raise AssistantServiceError(f"Assistant request failed: {e}") from e

        logger.debug(f"Assistant response received from {self.config.model}")
        return resp.output_text or ""
