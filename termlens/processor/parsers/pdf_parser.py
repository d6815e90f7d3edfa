# termlens/processor/parsers/pdf_parser.py
import logging
import os
from typing import Optional

import fitz  # pymupdf

from termlens.processor.models import RawDocument
from termlens.processor.sanitizer import sanitize_text_preserve_formatting
from .base import BaseParser

logger = logging.getLogger(__name__)


class PdfParser(BaseParser):
    """
    Parser para archivos .pdf.

    Extrae el texto de cada página usando PyMuPDF (fitz) y lo concatena
    con un separador visible por página ("--- Page N ---"), de modo que
    el contexto que devuelve el análisis permita ubicar la página.
    """

    def can_handle(self, file_path: str) -> bool:
        return file_path.lower().endswith(".pdf")

    def parse(self, file_path: str, pages: Optional[list[int]] = None) -> RawDocument:
        with fitz.open(file_path) as doc:
            page_count = doc.page_count
            selected   = self._resolve_pages(pages, page_count)
            parts      = []
            for page_num in selected:
                page_text = doc.load_page(page_num - 1).get_text("text")
                # Normalizamos espacios dentro de la página como hace pdf.js
                page_text = " ".join(page_text.split())
                parts.append(f"\n--- Page {page_num} ---\n{page_text}\n")

        text = sanitize_text_preserve_formatting("".join(parts).strip())

        return RawDocument(
            title       = self._extract_title(file_path),
            source_path = file_path,
            text        = text,
            page_count  = page_count,
        )

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _resolve_pages(pages: Optional[list[int]], page_count: int) -> list[int]:
        """Páginas 1-indexed a extraer. Sin selección → todas."""
        if not pages:
            return list(range(1, page_count + 1))

        valid = [p for p in pages if 1 <= p <= page_count]
        dropped = sorted(set(pages) - set(valid))
        if dropped:
            logger.warning(
                "Páginas fuera de rango ignoradas (el PDF tiene %d): %s",
                page_count, dropped,
            )
        if not valid:
            raise ValueError(
                f"Ninguna de las páginas seleccionadas existe (el PDF tiene {page_count})"
            )
        return valid

    @staticmethod
    def _extract_title(file_path: str) -> str:
        return os.path.splitext(os.path.basename(file_path))[0]
