# router/openai_adapter.py
import logging

import openai

from termlens.router.base import BaseModel
from termlens.router.models import ModelConfig, ModelResponse
from termlens.router.usage import UsageTracker

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gpt-4o"

_RETRYABLE_ERRORS = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
)


class OpenAIAdapter(BaseModel):

    def __init__(self, config: ModelConfig, usage: UsageTracker):
        super().__init__(config, usage)
        self._client = openai.OpenAI(
            api_key = config.api_key,
            timeout = config.timeout_seconds,
        )

    def classify(self, text: str, system_prompt: str) -> ModelResponse:
        try:
            response = self._client.chat.completions.create(
                model           = self._config.model or _DEFAULT_MODEL,
                messages        = [
                    {"role": "system", "content": system_prompt},
                    {"role": "user",   "content": text},
                ],
                response_format = {"type": "json_object"},
                temperature     = self._config.temperature,
            )
        except _RETRYABLE_ERRORS as e:
            logger.warning("OpenAI error retryable: %s", e)
            self._start_cooldown()
            raise

        except openai.BadRequestError as e:
            logger.error("OpenAI BadRequest en ventana: %s", e)
            raise

        # content puede venir None (p.ej. respuesta filtrada): el normalizer
        # lo trata como respuesta vacía → cero términos para la ventana
        raw_text = response.choices[0].message.content or ""
        usage    = response.usage
        tokens_input  = usage.prompt_tokens if usage else 0
        tokens_output = usage.completion_tokens if usage else 0

        self._usage.add(self.name, tokens_input + tokens_output)

        return ModelResponse(
            content       = raw_text,
            model_used    = self.name,
            tokens_input  = tokens_input,
            tokens_output = tokens_output,
        )
