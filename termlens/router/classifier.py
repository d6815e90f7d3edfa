# router/classifier.py
from typing import Optional

from termlens.router.prompt_builder import build_classify_prompt, build_window_message
from termlens.router.router import Router


class LLMClassifier:
    """
    Adapta el Router a la capacidad que consume el pipeline:
    texto de una ventana → contenido crudo del modelo.

    Los errores del Router (incluido AllModelsExhaustedError) se propagan
    tal cual; el ChunkAnalyzer los convierte en fallo de la ventana.
    """

    def __init__(self, router: Router, system_prompt: Optional[str] = None):
        self._router        = router
        self._system_prompt = system_prompt or build_classify_prompt()

    def __call__(self, window_text: str) -> str:
        response = self._router.classify(build_window_message(window_text), self._system_prompt)
        return response.content
