# analyzer/chunk_analyzer.py
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from termlens.analyzer.locator import locate
from termlens.analyzer.models import Term
from termlens.analyzer.normalizer import normalize_payload
from termlens.processor.chunker.models import Window
from termlens.router.response_parser import ParseError
from termlens.router.router import ClassifierCallError

logger = logging.getLogger(__name__)

# Capacidad externa: texto de la ventana → payload estructurado (o excepción)
Classifier = Callable[[str], Any]


@dataclass
class WindowAnalysis:
    """Resultado de analizar una ventana."""
    window_index: int
    terms:        list[Term] = field(default_factory=list)
    unresolved:   int = 0
    discarded:    int = 0                 # candidatos sin texto de término
    parse_error:  Optional[str] = None    # motivo si el payload no se pudo normalizar


class ChunkAnalyzer:
    """
    Una llamada al clasificador por ventana → términos con posición absoluta.

    - Fallo del clasificador (red, auth, rate limit, timeout): se propaga
      como ClassifierCallError. Abortar o saltar lo decide el pipeline.
    - Payload no normalizable (ParseError): cero términos para la ventana,
      se registra y se sigue.
    - Término que no aparece literalmente en la ventana: se conserva con
      posiciones None.
    """

    def __init__(self, classify: Classifier):
        self._classify = classify

    def analyze(self, window: Window) -> WindowAnalysis:
        analysis = WindowAnalysis(window_index=window.index)

        try:
            raw = self._classify(window.text)
        except ClassifierCallError as e:
            if e.window_index is None:
                e.window_index = window.index
            raise
        except Exception as e:
            raise ClassifierCallError(
                f"{type(e).__name__}: {e}",
                window_index = window.index,
            ) from e

        try:
            candidates = normalize_payload(raw, window)
        except ParseError as e:
            logger.warning("Ventana %d sin términos: respuesta no normalizable (%s)", window.index, e)
            analysis.parse_error = str(e)
            return analysis

        for candidate in candidates:
            if not candidate.term:
                analysis.discarded += 1
                logger.debug("Ventana %d: candidato sin término descartado", window.index)
                continue

            span = locate(candidate.term, window)
            if span is None:
                analysis.unresolved += 1
                logger.debug(
                    "Ventana %d: '%s' no aparece literalmente, posición sin resolver",
                    window.index, candidate.term,
                )

            analysis.terms.append(Term.from_candidate(candidate, span, window.index))

        return analysis
