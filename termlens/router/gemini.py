# router/gemini.py
import logging

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from termlens.router.base import BaseModel
from termlens.router.models import ModelConfig, ModelResponse
from termlens.router.usage import UsageTracker

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gemini-2.0-flash"

_RETRYABLE_ERRORS = (
    google_exceptions.ResourceExhausted,   # 429
    google_exceptions.DeadlineExceeded,    # timeout
    google_exceptions.ServiceUnavailable,
)


class GeminiAdapter(BaseModel):

    def __init__(self, config: ModelConfig, usage: UsageTracker):
        super().__init__(config, usage)
        genai.configure(api_key=config.api_key)
        self._model_name = config.model or _DEFAULT_MODEL

    def classify(self, text: str, system_prompt: str) -> ModelResponse:
        # El system prompt viaja como system_instruction, la ventana como contenido
        model = genai.GenerativeModel(
            model_name         = self._model_name,
            system_instruction = system_prompt,
            generation_config  = genai.GenerationConfig(
                temperature        = self._config.temperature,
                response_mime_type = "application/json",   # Gemini soporta forzar JSON nativo
            ),
        )

        try:
            response = model.generate_content(
                text,
                request_options={"timeout": self._config.timeout_seconds},
            )
        except _RETRYABLE_ERRORS as e:
            logger.warning("Gemini error retryable: %s", e)
            self._start_cooldown()
            raise

        raw_text      = response.text
        # Gemini devuelve tokens en usage_metadata
        tokens_input  = response.usage_metadata.prompt_token_count
        tokens_output = response.usage_metadata.candidates_token_count

        self._usage.add(self.name, tokens_input + tokens_output)

        return ModelResponse(
            content       = raw_text,
            model_used    = self.name,
            tokens_input  = tokens_input,
            tokens_output = tokens_output,
        )
