# termlens/scheduler.py
import logging
import queue
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from termlens.analyzer.chunk_analyzer import WindowAnalysis
from termlens.processor.chunker.models import Window
from termlens.router.router import ClassifierCallError

logger = logging.getLogger(__name__)

WindowTask = Callable[[Window], WindowAnalysis]


@dataclass
class WindowOutcome:
    """Lo que el scheduler entrega por cada ventana terminada."""
    window:   Window
    analysis: Optional[WindowAnalysis] = None
    error:    Optional[ClassifierCallError] = None


class SequentialScheduler:
    """
    Política por defecto: una ventana cada vez, en orden.
    Antes de cada llamada comprueba la cancelación. El límite de tiempo
    por llamada lo ponen los adaptadores (timeout_seconds del SDK).
    """

    def run(
        self,
        windows:   list[Window],
        task:      WindowTask,
        cancelled: threading.Event,
    ) -> Iterator[WindowOutcome]:
        for window in windows:
            if cancelled.is_set():
                logger.info("Cancelado antes de la ventana %d", window.index)
                return
            try:
                yield WindowOutcome(window=window, analysis=task(window))
            except ClassifierCallError as e:
                yield WindowOutcome(window=window, error=e)



class ThreadPoolScheduler:
    """
    Política concurrente: hasta `max_workers` ventanas en vuelo.

    Las ventanas se entregan en orden de finalización; el pipeline
    reordena por índice antes de fusionar. Una ventana que supera
    `window_timeout` segundos desde que se lanzó se da por fallida con
    ClassifierCallError y libera su puesto para la siguiente en cola.
    El hilo colgado no se puede matar: sigue vivo como daemon, así que
    no bloquea la salida del intérprete, y su resultado tardío se descarta.
    """

    def __init__(
        self,
        max_workers:    int = 4,
        window_timeout: Optional[float] = None,
        poll_interval:  float = 0.5,
    ):
        if max_workers < 1:
            raise ValueError("max_workers debe ser al menos 1")
        if window_timeout is not None and window_timeout <= 0:
            raise ValueError("window_timeout debe ser positivo")
        self._max_workers    = max_workers
        self._window_timeout = window_timeout
        self._poll_interval  = min(poll_interval, window_timeout) if window_timeout else poll_interval

    def run(
        self,
        windows:   list[Window],
        task:      WindowTask,
        cancelled: threading.Event,
    ) -> Iterator[WindowOutcome]:
        finished: queue.Queue = queue.Queue()
        waiting = deque(windows)
        running: dict[int, tuple[Window, float]] = {}   # índice → (ventana, lanzada en)

        def _work(window: Window) -> None:
            try:
                finished.put((window.index, task(window), None))
            except BaseException as e:
                # Se reenvía al hilo principal, que decide si es un outcome o se propaga
                finished.put((window.index, None, e))

        while waiting or running:
            if cancelled.is_set():
                logger.info("Cancelado con %d ventanas pendientes", len(waiting) + len(running))
                return

            while waiting and len(running) < self._max_workers:
                window = waiting.popleft()
                running[window.index] = (window, time.monotonic())
                threading.Thread(
                    target = _work,
                    args   = (window,),
                    name   = f"termlens-ventana-{window.index}",
                    daemon = True,
                ).start()

            try:
                index, analysis, error = finished.get(timeout=self._poll_interval)
            except queue.Empty:
                pass
            else:
                entry = running.pop(index, None)
                if entry is None:
                    logger.debug("Resultado tardío de la ventana %d descartado", index)
                elif error is None:
                    yield WindowOutcome(window=entry[0], analysis=analysis)
                elif isinstance(error, ClassifierCallError):
                    yield WindowOutcome(window=entry[0], error=error)
                else:
                    raise error

            for outcome in self._expire(running):
                yield outcome

    def _expire(self, running: dict[int, tuple[Window, float]]) -> list[WindowOutcome]:
        if self._window_timeout is None:
            return []

        now = time.monotonic()
        expired: list[WindowOutcome] = []
        for index in sorted(running):
            window, t0 = running[index]
            if now - t0 <= self._window_timeout:
                continue
            del running[index]
            logger.warning("Ventana %d superó el timeout de %.1fs", window.index, self._window_timeout)
            expired.append(WindowOutcome(
                window = window,
                error  = ClassifierCallError(
                    f"Timeout: sin respuesta tras {self._window_timeout:.1f}s",
                    window_index = window.index,
                ),
            ))
        return expired
