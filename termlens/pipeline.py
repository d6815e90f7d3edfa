# termlens/pipeline.py
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional, Protocol

from termlens.analyzer.chunk_analyzer import ChunkAnalyzer, Classifier, WindowAnalysis
from termlens.analyzer.merger import merge_terms
from termlens.analyzer.models import Term
from termlens.processor.chunker.chunker import Chunker
from termlens.processor.chunker.models import ChunkConfig, Window
from termlens.scheduler import SequentialScheduler, WindowOutcome, WindowTask

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class WindowErrorPolicy(Enum):
    """Qué hacer cuando la llamada al clasificador de una ventana falla del todo."""
    ABORT = "abort"   # falla toda la ejecución (comportamiento por defecto)
    SKIP  = "skip"    # sigue, pero el resultado queda marcado como parcial


class Scheduler(Protocol):
    def run(
        self,
        windows:   list[Window],
        task:      WindowTask,
        cancelled: threading.Event,
    ) -> Iterator[WindowOutcome]: ...


# ------------------------------------------------------------------
# Eventos y resultado: lo que el CLI consume
# ------------------------------------------------------------------

@dataclass(frozen=True)
class ProgressEvent:
    completed:    int    # ventanas terminadas hasta ahora (monótono)
    total:        int
    window_index: int    # ventana que acaba de terminar
    terms_found:  int
    failed:       bool = False


@dataclass
class AnalysisResult:
    terms:             list[Term]
    total_windows:     int
    completed_windows: int
    failed_windows:    list[int] = field(default_factory=list)
    parse_failures:    list[int] = field(default_factory=list)
    cancelled:         bool = False

    @property
    def partial(self) -> bool:
        """True si alguna ventana no aportó resultado por fallo o cancelación."""
        return self.cancelled or bool(self.failed_windows)

    @property
    def unresolved(self) -> int:
        return sum(1 for t in self.terms if not t.is_resolved)


# ------------------------------------------------------------------
# Una ejecución concreta
# ------------------------------------------------------------------

class AnalysisRun:
    """
    Ejecución perezosa de un análisis.

    `events()` avanza el trabajo ventana a ventana y emite un ProgressEvent
    por cada una terminada. Al agotarse, `result` queda disponible.
    `cancel()` se puede llamar desde cualquier hilo: la ejecución se
    detiene entre llamadas al clasificador y el resultado se marca como
    cancelado con lo fusionado hasta ese momento. Un KeyboardInterrupt
    mientras se espera al clasificador se trata igual.
    """

    def __init__(
        self,
        windows:   list[Window],
        analyzer:  ChunkAnalyzer,
        scheduler: Scheduler,
        policy:    WindowErrorPolicy,
    ):
        self._windows   = windows
        self._analyzer  = analyzer
        self._scheduler = scheduler
        self._policy    = policy
        self._cancel    = threading.Event()
        self._result: Optional[AnalysisResult] = None
        self._started   = False

    @property
    def total_windows(self) -> int:
        return len(self._windows)

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def cancel(self) -> None:
        self._cancel.set()

    @property
    def result(self) -> AnalysisResult:
        if self._result is None:
            raise RuntimeError("El análisis todavía no terminó")
        return self._result

    def events(self) -> Iterator[ProgressEvent]:
        if self._started:
            raise RuntimeError("Esta ejecución ya fue iniciada")
        self._started = True

        total     = len(self._windows)
        analyses: dict[int, WindowAnalysis] = {}
        failed:   list[int] = []
        completed = 0

        outcomes = self._scheduler.run(self._windows, self._analyzer.analyze, self._cancel)
        try:
            for outcome in outcomes:
                completed += 1
                index = outcome.window.index

                if outcome.error is not None:
                    if self._policy is WindowErrorPolicy.ABORT:
                        logger.error("Ventana %d/%d falló, se aborta el análisis: %s", index + 1, total, outcome.error)
                        raise outcome.error
                    logger.warning("Ventana %d/%d falló, se omite: %s", index + 1, total, outcome.error)
                    failed.append(index)
                    yield ProgressEvent(completed, total, index, terms_found=0, failed=True)
                else:
                    analyses[index] = outcome.analysis
                    yield ProgressEvent(completed, total, index, terms_found=len(outcome.analysis.terms))

                if self._cancel.is_set():
                    break
        except KeyboardInterrupt:
            # Ctrl-C durante una llamada al clasificador equivale a cancel()
            logger.info("Interrupción recibida con %d/%d ventanas terminadas", completed, total)
            self._cancel.set()
        finally:
            outcomes.close()

        self._result = self._assemble(analyses, sorted(failed), completed)

    def wait(self) -> AnalysisResult:
        """Consume todos los eventos y devuelve el resultado."""
        for _ in self.events():
            pass
        return self.result

    def _assemble(
        self,
        analyses:  dict[int, WindowAnalysis],
        failed:    list[int],
        completed: int,
    ) -> AnalysisResult:
        # Orden de envío, no de finalización: el desempate "primero visto"
        # del merger no depende de qué hilo terminó antes
        ordered = [analyses[i] for i in sorted(analyses)]
        all_terms = [term for analysis in ordered for term in analysis.terms]
        merged = merge_terms(all_terms)

        result = AnalysisResult(
            terms             = merged,
            total_windows     = len(self._windows),
            completed_windows = completed,
            failed_windows    = failed,
            parse_failures    = [a.window_index for a in ordered if a.parse_error is not None],
            cancelled         = self._cancel.is_set(),
        )
        logger.info(
            "Análisis terminado: %d términos (%d detecciones, %d sin posición) en %d/%d ventanas",
            len(merged), len(all_terms), result.unresolved, completed, result.total_windows,
        )
        return result


# ------------------------------------------------------------------
# Pipeline
# ------------------------------------------------------------------

class AnalysisPipeline:
    """
    Dirige el análisis de extremo a extremo.
    No tiene lógica de negocio propia, solo coordina módulos.

    Chunker → ChunkAnalyzer por ventana (según el scheduler) → Merger.
    """

    def __init__(
        self,
        classify:        Classifier,
        chunker:         Optional[Chunker] = None,
        scheduler:       Optional[Scheduler] = None,
        on_window_error: WindowErrorPolicy = WindowErrorPolicy.ABORT,
    ):
        self._analyzer  = ChunkAnalyzer(classify)
        self._chunker   = chunker or Chunker()
        self._scheduler = scheduler or SequentialScheduler()
        self._policy    = on_window_error

    def start(self, document: str) -> AnalysisRun:
        windows = self._chunker.split(document)
        logger.info("Documento de %d caracteres dividido en %d ventanas", len(document), len(windows))
        return AnalysisRun(windows, self._analyzer, self._scheduler, self._policy)

    def run(self, document: str, on_progress: Optional[ProgressCallback] = None) -> AnalysisResult:
        """
        Ejecuta el análisis completo.
        Con la política ABORT, cualquier ClassifierCallError se propaga y no
        hay resultado parcial.
        """
        run = self.start(document)
        for event in run.events():
            if on_progress:
                on_progress(event.completed, event.total)
        return run.result


def analyze_text(
    document:     str,
    classify:     Classifier,
    on_progress:  Optional[ProgressCallback] = None,
    chunk_size:   int = 3000,
    overlap_size: int = 200,
) -> list[Term]:
    """
    Punto de entrada simple: términos ambiguos del documento, ordenados
    por posición y sin duplicados. Falla si alguna llamada al clasificador
    falla del todo.
    """
    pipeline = AnalysisPipeline(
        classify = classify,
        chunker  = Chunker(ChunkConfig(chunk_size=chunk_size, overlap_size=overlap_size)),
    )
    return pipeline.run(document, on_progress=on_progress).terms
