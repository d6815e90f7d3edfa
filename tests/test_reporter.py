import json

from termlens.analyzer.models import PossibleMeaning, Term
from termlens.pipeline import AnalysisResult
from termlens.processor.models import RawDocument
from termlens.reporter import ReportWriter, build_report


def make_result(**overrides) -> AnalysisResult:
    terms = [
        Term(
            term                    = "cell",
            context                 = "the cell divides",
            position_start          = 4,
            position_end            = 8,
            possible_meanings       = [PossibleMeaning("Biology", "Unit of life")],
            likely_intended_meaning = "Unit of life",
            confidence              = 90,
            window_index            = 1,
        ),
        Term(term="kernel", context="", position_start=None, position_end=None),
    ]
    values = dict(terms=terms, total_windows=3, completed_windows=3)
    values.update(overrides)
    return AnalysisResult(**values)


DOCUMENT = RawDocument(title="Cell Theory: Revisited!", source_path="/tmp/cell.txt", text="The cell divides.")


class TestBuildReport:

    def test_estructura(self):
        report = build_report(make_result(), DOCUMENT)

        assert report["document"] == {
            "title":       "Cell Theory: Revisited!",
            "source_path": "/tmp/cell.txt",
            "characters":  17,
            "pages":       None,
        }
        assert report["run"]["total_windows"] == 3
        assert report["run"]["unresolved_terms"] == 1
        assert report["run"]["partial"] is False
        assert "generated_at" in report["run"]

    def test_terminos_serializados(self):
        cell, kernel = build_report(make_result(), DOCUMENT)["terms"]

        assert cell == {
            "term":                    "cell",
            "context":                 "the cell divides",
            "position_start":          4,
            "position_end":            8,
            "resolved":                True,
            "possible_meanings":       [{"field": "Biology", "definition": "Unit of life"}],
            "likely_intended_meaning": "Unit of life",
            "confidence":              90,
            "window_index":            1,
        }
        assert kernel["position_start"] is None
        assert kernel["resolved"] is False

    def test_resultado_parcial(self):
        report = build_report(make_result(failed_windows=[1], completed_windows=3), DOCUMENT)
        assert report["run"]["partial"] is True
        assert report["run"]["failed_windows"] == [1]


class TestReportWriter:

    def test_ruta_por_defecto_desde_titulo(self, tmp_path):
        path = ReportWriter(output_dir=tmp_path).write(make_result(), DOCUMENT)

        assert path == tmp_path / "cell_theory_revisited_terms.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert [t["term"] for t in data["terms"]] == ["cell", "kernel"]

    def test_ruta_explicita(self, tmp_path):
        target = tmp_path / "sub" / "reporte.json"

        path = ReportWriter(output_dir=tmp_path / "ignorado").write(make_result(), DOCUMENT, target)

        assert path == target
        assert target.exists()
        assert not (tmp_path / "ignorado").exists()

    def test_conserva_caracteres_no_ascii(self, tmp_path):
        document = RawDocument(title="Entropía", source_path="x.txt", text="entropía")
        path = ReportWriter(output_dir=tmp_path).write(make_result(terms=[]), document)

        assert "Entropía" in path.read_text(encoding="utf-8")
        assert path.name == "entropía_terms.json"
