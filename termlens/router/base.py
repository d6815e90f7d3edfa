# router/base.py
import time
from abc import ABC, abstractmethod

from termlens.router.models import ModelConfig, ModelResponse
from termlens.router.usage import UsageTracker

# Tras un error de red o rate limit el modelo descansa 5 minutos
COOLDOWN_SECONDS = 300


class BaseModel(ABC):
    """
    Contrato que deben cumplir todos los adaptadores.
    El Router y el clasificador solo hablan con esta interfaz.
    Nunca importan claude.py, gemini.py ni openai_adapter.py directamente.
    """

    def __init__(self, config: ModelConfig, usage: UsageTracker):
        self._config = config
        self._usage  = usage

    @property
    def name(self) -> str:
        """Identificador del modelo en el config ("claude", "gemini", "openai")."""
        return self._config.name

    @abstractmethod
    def classify(self, text: str, system_prompt: str) -> ModelResponse:
        """
        Envía el texto al modelo y devuelve el contenido crudo.
        No interpreta el JSON: eso es trabajo del normalizer.
        SÍ puede lanzar: TimeoutError, RateLimitError, APIError.
        El Router los captura y hace failover.
        """
        ...

    def is_available(self) -> bool:
        """
        Consulta cooldown y presupuesto de tokens antes de hacer cualquier
        llamada de red. Si no hay margen → False sin latencia.
        """
        if self._config._unavailable_until is not None:
            if time.time() < self._config._unavailable_until:
                return False
            self._config._unavailable_until = None  # cooldown expirado

        if self._config.token_budget is None:
            return True
        return self._usage.used(self.name) < self._config.token_budget

    def _start_cooldown(self) -> None:
        self._config._unavailable_until = time.time() + COOLDOWN_SECONDS
