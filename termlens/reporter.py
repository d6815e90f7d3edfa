# termlens/reporter.py
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from termlens.pipeline import AnalysisResult
from termlens.processor.models import RawDocument

logger = logging.getLogger(__name__)

_OUTPUT_DIR = Path.home() / ".termlens" / "output"


class ReportWriter:
    """
    Responsabilidad única: tomar el resultado de un análisis y escribir
    el reporte JSON.

    No sabe nada de modelos, parsers ni de cómo se obtuvieron los términos.
    """

    def __init__(self, output_dir: Path | None = None):
        self._output_dir = output_dir or _OUTPUT_DIR

    def write(
        self,
        result:      AnalysisResult,
        document:    RawDocument,
        output_path: Optional[Path] = None,
    ) -> Path:
        """Escribe el reporte y devuelve la ruta."""
        if output_path is None:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            output_path = self._output_dir / f"{_slugify(document.title) or 'document'}_terms.json"
        else:
            output_path.parent.mkdir(parents=True, exist_ok=True)

        output_path.write_text(
            json.dumps(build_report(result, document), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.info("Reporte escrito en: %s", output_path)
        return output_path


def build_report(result: AnalysisResult, document: RawDocument) -> dict:
    return {
        "document": {
            "title":       document.title,
            "source_path": document.source_path,
            "characters":  len(document.text),
            "pages":       document.page_count,
        },
        "run": {
            "generated_at":      datetime.now(timezone.utc).isoformat(),
            "total_windows":     result.total_windows,
            "completed_windows": result.completed_windows,
            "failed_windows":    result.failed_windows,
            "parse_failures":    result.parse_failures,
            "unresolved_terms":  result.unresolved,
            "partial":           result.partial,
            "cancelled":         result.cancelled,
        },
        "terms": [term.to_dict() for term in result.terms],
    }


def _slugify(title: str) -> str:
    """Convierte el título en un nombre de archivo seguro."""
    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s]+", "_", slug)
    return slug
