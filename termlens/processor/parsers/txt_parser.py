# termlens/processor/parsers/txt_parser.py
import logging
from pathlib import Path
from typing import Optional

from termlens.processor.models import RawDocument
from termlens.processor.sanitizer import sanitize_text_preserve_formatting
from .base import BaseParser

logger = logging.getLogger(__name__)

_TEXT_EXTENSIONS = (".txt", ".md")
_ENCODINGS       = ("utf-8", "latin-1")   # latin-1 nunca falla: último recurso
_MAX_TITLE_WORDS = 10


class TxtParser(BaseParser):
    """
    Texto plano y Markdown.

    El contenido se entrega entero: los offsets del análisis se cuentan
    sobre este texto, así que aquí no se reordena ni se trocea nada.
    """

    def can_handle(self, file_path: str) -> bool:
        return Path(file_path).suffix.lower() in _TEXT_EXTENSIONS

    def parse(self, file_path: str, pages: Optional[list[int]] = None) -> RawDocument:
        if pages:
            logger.warning("%s no tiene páginas: se ignora --pages", file_path)

        text = sanitize_text_preserve_formatting(self._decode(Path(file_path).read_bytes()))

        return RawDocument(
            title       = self._guess_title(text) or Path(file_path).stem,
            source_path = file_path,
            text        = text,
        )

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _decode(data: bytes) -> str:
        for encoding in _ENCODINGS[:-1]:
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                logger.debug("El archivo no es %s, probando el siguiente encoding", encoding)
        return data.decode(_ENCODINGS[-1])

    @staticmethod
    def _guess_title(text: str) -> Optional[str]:
        """
        Primera línea no vacía, sin '#' de Markdown, si parece un título:
        pocas palabras y sin punto final. Si no, None.
        """
        for line in text.splitlines():
            candidate = line.strip().lstrip("#").strip()
            if not candidate:
                continue
            if len(candidate.split()) <= _MAX_TITLE_WORDS and not candidate.endswith("."):
                return candidate
            return None
        return None
