"""
Completion provider: complete(system_prompt, user_message) -> text.
"""
import openai

from . import config
from .errors import ProviderError
from .logging_config import logger


class OpenAICompletionProvider:

    def __init__(self, client, model: str = config.OPENAI_MODEL,
                 temperature: float = 0.7, max_tokens: int = 1000):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def complete(self, system_prompt: str, user_message: str) -> str:
        logger.info("Sent request to OpenAI API", model=self.model)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            logger.error("Completion request failed", model=self.model, error=str(e))
            raise ProviderError(f"Completion request failed: {e}") from e

        return response.choices[0].message.content or ""
