# termlens/router/router.py
import logging
from typing import Optional

from termlens.router.base import BaseModel
from termlens.router.models import ModelResponse

logger = logging.getLogger(__name__)


class ClassifierCallError(Exception):
    """
    La llamada al clasificador falló del todo (red, auth, rate limit,
    timeout). Distinta de ParseError: aquí no hubo respuesta utilizable.
    El core no reintenta; la política de reintentos es del caller.
    """

    def __init__(self, message: str, window_index: Optional[int] = None):
        super().__init__(message)
        self.window_index = window_index


class AllModelsExhaustedError(ClassifierCallError):
    """Ningún modelo estaba disponible o todos fallaron con error retryable."""

    def __init__(self, attempts: dict[str, str]):
        detail = "; ".join(f"{name}: {reason}" for name, reason in attempts.items())
        super().__init__(f"Ningún modelo pudo clasificar la ventana ({detail or 'sin modelos'})")
        self.attempts = attempts


class Router:
    """
    Elige el adaptador para cada llamada, en orden de prioridad.

    - Un modelo en cooldown o sin presupuesto se salta sin tocar la red.
    - Un error retryable (red, rate limit, timeout) pasa al siguiente.
    - Un error de contenido se propaga: otro modelo fallaría igual.

    Los adaptadores nunca se llaman directamente; todo pasa por aquí.
    """

    def __init__(self, models: list[BaseModel]):
        if not models:
            raise ValueError("El Router necesita al menos un modelo")
        self._models = models   # ya ordenados por prioridad desde el config

    def classify(self, text: str, system_prompt: str) -> ModelResponse:
        """
        Raises:
            AllModelsExhaustedError: si ningún modelo devolvió respuesta.
        """
        attempts: dict[str, str] = {}

        for model in self._models:
            if not model.is_available():
                attempts[model.name] = "no disponible"
                logger.info("%s en cooldown o sin presupuesto, se salta", model.name)
                continue

            try:
                response = model.classify(text, system_prompt)
            except Exception as e:
                if _is_content_error(e):
                    logger.error("%s rechazó la ventana, sin failover: %s", model.name, e)
                    raise
                attempts[model.name] = f"{type(e).__name__}: {e}"
                logger.warning("%s falló (%s), probando el siguiente modelo", model.name, e)
                continue

            logger.info(
                "Ventana clasificada con %s | tokens: %d+%d",
                response.model_used, response.tokens_input, response.tokens_output,
            )
            return response

        raise AllModelsExhaustedError(attempts)

    def available_models(self) -> list[str]:
        """Nombres de los modelos que aceptarían una llamada ahora mismo."""
        return [m.name for m in self._models if m.is_available()]

    def model_names(self) -> list[str]:
        return [m.name for m in self._models]


def _is_content_error(e: Exception) -> bool:
    """
    Errores del contenido de la ventana, no de disponibilidad del modelo.
    ValueError cubre las respuestas bloqueadas de Gemini (response.text
    sin candidatos).
    """
    import anthropic
    import google.api_core.exceptions as google_ex
    import openai

    return isinstance(e, (
        anthropic.BadRequestError,
        openai.BadRequestError,
        google_ex.InvalidArgument,
        ValueError,
    ))
