# router/claude.py
import logging

import anthropic

from termlens.router.base import BaseModel
from termlens.router.models import ModelConfig, ModelResponse
from termlens.router.usage import UsageTracker

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "claude-haiku-4-5-20251001"

# Errores que activan failover hacia otro modelo
_RETRYABLE_ERRORS = (
    anthropic.RateLimitError,
    anthropic.APITimeoutError,
    anthropic.APIConnectionError,
)


class ClaudeAdapter(BaseModel):

    def __init__(self, config: ModelConfig, usage: UsageTracker):
        super().__init__(config, usage)
        self._client = anthropic.Anthropic(
            api_key = config.api_key,
            timeout = config.timeout_seconds,
        )

    def classify(self, text: str, system_prompt: str) -> ModelResponse:
        try:
            response = self._client.messages.create(
                model       = self._config.model or _DEFAULT_MODEL,
                max_tokens  = 4096,
                temperature = self._config.temperature,
                system      = system_prompt,
                messages    = [{"role": "user", "content": text}],
            )
        except _RETRYABLE_ERRORS as e:
            logger.warning("Claude error retryable: %s", e)
            self._start_cooldown()
            raise   # El Router captura esto y hace failover

        except anthropic.BadRequestError as e:
            # La ventana en sí tiene problemas (ej: contenido bloqueado)
            # No es un error de disponibilidad, es un error de contenido
            logger.error("Claude BadRequest en ventana: %s", e)
            raise

        raw_text      = response.content[0].text if response.content else ""
        tokens_input  = response.usage.input_tokens
        tokens_output = response.usage.output_tokens

        self._usage.add(self.name, tokens_input + tokens_output)

        return ModelResponse(
            content       = raw_text,
            model_used    = self.name,
            tokens_input  = tokens_input,
            tokens_output = tokens_output,
        )
