import json
from unittest.mock import MagicMock

import pytest

from termlens.pipeline import (
    AnalysisPipeline,
    ProgressEvent,
    WindowErrorPolicy,
    analyze_text,
)
from termlens.processor.chunker.chunker import Chunker, ChunkingError
from termlens.processor.chunker.models import ChunkConfig
from termlens.router.router import ClassifierCallError
from termlens.scheduler import ThreadPoolScheduler


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def make_document() -> str:
    """7000 caracteres con 'cell' una sola vez, en el offset 2900."""
    return "x" * 2900 + "cell" + "y" * (7000 - 2904)


def respond(*records) -> str:
    return json.dumps({"terms": list(records)})


def scripted(*responses):
    """Clasificador que devuelve (o lanza) las respuestas en orden."""
    classify = MagicMock(side_effect=list(responses))
    return classify


def make_pipeline(classify, policy=WindowErrorPolicy.ABORT, scheduler=None) -> AnalysisPipeline:
    return AnalysisPipeline(
        classify        = classify,
        chunker         = Chunker(ChunkConfig(chunk_size=3000, overlap_size=200)),
        scheduler       = scheduler,
        on_window_error = policy,
    )


CELL_70 = respond({"term": "cell", "confidence": 70, "context": "ventana 1"})
CELL_90 = respond({"term": "cell", "confidence": 90, "context": "ventana 2"})
EMPTY   = respond()


# ------------------------------------------------------------------
# Escenario de extremo a extremo
# ------------------------------------------------------------------

class TestEscenarioCompleto:

    def test_termino_en_el_solape_se_fusiona_con_la_mayor_confianza(self):
        pipeline = make_pipeline(scripted(CELL_70, CELL_90, EMPTY))

        result = pipeline.run(make_document())

        [term] = result.terms
        assert term.term == "cell"
        assert term.confidence == 90
        assert term.context == "ventana 2"
        assert term.window_index == 1
        assert term.position_start == 2900
        assert term.position_end == 2904
        assert result.total_windows == 3
        assert result.completed_windows == 3
        assert not result.partial

    def test_cada_ventana_recibe_su_texto(self):
        classify = scripted(EMPTY, EMPTY, EMPTY)
        document = make_document()

        make_pipeline(classify).run(document)

        texts = [c.args[0] for c in classify.call_args_list]
        assert texts == [document[0:3000], document[2800:5800], document[5600:7000]]

    def test_eventos_de_progreso(self):
        run = make_pipeline(scripted(CELL_70, CELL_90, EMPTY)).start(make_document())

        events = list(run.events())

        assert events == [
            ProgressEvent(completed=1, total=3, window_index=0, terms_found=1),
            ProgressEvent(completed=2, total=3, window_index=1, terms_found=1),
            ProgressEvent(completed=3, total=3, window_index=2, terms_found=0),
        ]
        assert run.result.terms[0].confidence == 90

    def test_callback_de_progreso(self):
        calls = []
        make_pipeline(scripted(EMPTY, EMPTY, EMPTY)).run(
            make_document(), on_progress=lambda done, total: calls.append((done, total))
        )
        assert calls == [(1, 3), (2, 3), (3, 3)]

    def test_documento_vacio_se_analiza_como_una_ventana(self):
        classify = scripted(EMPTY)

        result = make_pipeline(classify).run("")

        assert result.terms == []
        assert result.total_windows == 1
        classify.assert_called_once_with("")


# ------------------------------------------------------------------
# Fatal vs recuperable
# ------------------------------------------------------------------

class TestErrores:

    def test_error_de_transporte_aborta_toda_la_ejecucion(self):
        classify = scripted(CELL_70, ConnectionError("reset"), EMPTY)

        with pytest.raises(ClassifierCallError) as exc_info:
            make_pipeline(classify).run(make_document())

        assert exc_info.value.window_index == 1
        # No se llega a la tercera ventana
        assert classify.call_count == 2

    def test_sin_resultado_tras_abortar(self):
        run = make_pipeline(scripted(CELL_70, ConnectionError("reset"), EMPTY)).start(make_document())

        with pytest.raises(ClassifierCallError):
            list(run.events())

        with pytest.raises(RuntimeError):
            run.result

    def test_respuesta_no_parseable_sigue_con_las_demas(self):
        classify = scripted(
            respond({"term": "x" * 5, "confidence": 40}),
            "esto no es JSON",
            respond({"term": "yyy", "confidence": 55}),
        )

        result = make_pipeline(classify).run(make_document())

        assert [t.term for t in result.terms] == ["xxxxx", "yyy"]
        assert result.parse_failures == [1]
        assert result.completed_windows == 3
        assert not result.partial

    def test_politica_skip_marca_resultado_parcial(self):
        classify = scripted(CELL_70, ConnectionError("reset"), EMPTY)
        run = make_pipeline(classify, policy=WindowErrorPolicy.SKIP).start(make_document())

        events = list(run.events())

        assert [e.failed for e in events] == [False, True, False]
        result = run.result
        assert result.partial
        assert result.failed_windows == [1]
        assert [t.confidence for t in result.terms] == [70]

    def test_configuracion_invalida_falla_antes_de_clasificar(self):
        classify = MagicMock()
        with pytest.raises(ChunkingError):
            AnalysisPipeline(classify=classify, chunker=Chunker(ChunkConfig(100, 100)))
        classify.assert_not_called()


# ------------------------------------------------------------------
# Ciclo de vida de AnalysisRun
# ------------------------------------------------------------------

class TestAnalysisRun:

    def test_cancelar_detiene_entre_ventanas(self):
        classify = scripted(CELL_70, CELL_90, EMPTY)
        run = make_pipeline(classify).start(make_document())

        for event in run.events():
            run.cancel()

        result = run.result
        assert result.cancelled
        assert result.partial
        assert result.completed_windows == 1
        assert classify.call_count == 1
        assert [t.confidence for t in result.terms] == [70]

    def test_interrupcion_durante_la_llamada_cancela(self):
        classify = scripted(CELL_70, KeyboardInterrupt(), EMPTY)

        result = make_pipeline(classify).run(make_document())

        assert result.cancelled
        assert result.completed_windows == 1
        assert [t.confidence for t in result.terms] == [70]

    def test_resultado_antes_de_terminar_lanza_error(self):
        run = make_pipeline(scripted(EMPTY, EMPTY, EMPTY)).start(make_document())
        with pytest.raises(RuntimeError):
            run.result

    def test_eventos_solo_se_consumen_una_vez(self):
        run = make_pipeline(scripted(EMPTY, EMPTY, EMPTY)).start(make_document())
        run.wait()
        with pytest.raises(RuntimeError):
            list(run.events())

    def test_total_windows_antes_de_empezar(self):
        run = make_pipeline(MagicMock()).start(make_document())
        assert run.total_windows == 3


# ------------------------------------------------------------------
# Ejecución concurrente
# ------------------------------------------------------------------

class TestConcurrente:

    def test_mismo_resultado_que_secuencial(self):
        document = make_document()
        responses = {
            document[0:3000]:    CELL_70,
            document[2800:5800]: CELL_90,
            document[5600:7000]: EMPTY,
        }

        result = make_pipeline(
            responses.__getitem__,
            scheduler=ThreadPoolScheduler(max_workers=3, poll_interval=0.01),
        ).run(document)

        [term] = result.terms
        assert term.confidence == 90
        assert result.completed_windows == 3

    def test_empate_resuelto_por_orden_de_envio(self):
        import threading

        document = make_document()
        second_done = threading.Event()

        def classify(text):
            if text == document[0:3000]:
                # La primera ventana termina la última
                second_done.wait(timeout=5)
                return respond({"term": "cell", "confidence": 80, "context": "ventana 1"})
            if text == document[2800:5800]:
                try:
                    return respond({"term": "cell", "confidence": 80, "context": "ventana 2"})
                finally:
                    second_done.set()
            return EMPTY

        result = make_pipeline(
            classify,
            scheduler=ThreadPoolScheduler(max_workers=3, poll_interval=0.01),
        ).run(document)

        [term] = result.terms
        assert term.context == "ventana 1"

    def test_llamada_colgada_con_un_hilo_no_detiene_la_ejecucion(self):
        import threading

        never = threading.Event()
        calls = []

        def classify(text):
            calls.append(text[0])
            if text == "a" * 10:
                never.wait()
            return EMPTY

        pipeline = AnalysisPipeline(
            classify        = classify,
            chunker         = Chunker(ChunkConfig(chunk_size=10, overlap_size=2)),
            scheduler       = ThreadPoolScheduler(max_workers=1, window_timeout=0.2, poll_interval=0.02),
            on_window_error = WindowErrorPolicy.SKIP,
        )

        results = []
        runner = threading.Thread(target=lambda: results.append(pipeline.run("a" * 10 + "b" * 10)), daemon=True)
        runner.start()
        runner.join(timeout=5)
        never.set()

        assert not runner.is_alive()
        [result] = results
        assert result.failed_windows == [0]
        assert result.completed_windows == 3
        assert result.partial
        assert calls == ["a", "a", "b"]


class TestAnalyzeText:

    def test_devuelve_terminos_ordenados(self):
        classify = scripted(
            respond({"term": "yyy"}, {"term": "cell"}),
            EMPTY,
            EMPTY,
        )

        terms = analyze_text(make_document(), classify)

        assert [t.term for t in terms] == ["cell", "yyy"]

    def test_propaga_fallo_del_clasificador(self):
        with pytest.raises(ClassifierCallError):
            analyze_text("texto corto", scripted(TimeoutError("lento")))

    def test_tamanos_personalizados(self):
        classify = scripted(EMPTY, EMPTY)
        calls = []
        analyze_text("a" * 15, classify, on_progress=lambda d, t: calls.append(t), chunk_size=10, overlap_size=5)
        assert calls == [2, 2]
