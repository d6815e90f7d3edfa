# termlens/processor/parsers/factory.py
import os
from typing import Optional

from termlens.processor.models import RawDocument
from .base import BaseParser
from .pdf_parser import PdfParser
from .txt_parser import TxtParser


class UnsupportedFormatError(Exception):
    """Ningún parser registrado acepta la extensión del archivo."""
    pass


class ParserFactory:
    """
    Elige el parser de un documento según su extensión.

        document = ParserFactory.parse_file("paper.pdf", pages=[1, 2])

    Un parser propio se registra con `register()` y se consulta antes
    que los de serie, así puede reemplazar a cualquiera de ellos.
    """

    SUPPORTED_EXTENSIONS = (".md", ".pdf", ".txt")

    def __init__(self):
        self._parsers: list[BaseParser] = [PdfParser(), TxtParser()]

    def register(self, parser: BaseParser) -> None:
        self._parsers.insert(0, parser)

    def parser_for(self, file_path: str) -> BaseParser:
        """
        Raises:
            UnsupportedFormatError: si ningún parser acepta el archivo.
        """
        parser = next((p for p in self._parsers if p.can_handle(file_path)), None)
        if parser is None:
            extension = os.path.splitext(file_path)[1].lower() or "(sin extensión)"
            raise UnsupportedFormatError(
                f"Formato '{extension}' no soportado. "
                f"Formatos disponibles: {', '.join(self.SUPPORTED_EXTENSIONS)}"
            )
        return parser

    def parse(self, file_path: str, pages: Optional[list[int]] = None) -> RawDocument:
        """
        Raises:
            FileNotFoundError: si el archivo no existe.
            UnsupportedFormatError: si el formato no tiene parser.
        """
        if not os.path.isfile(file_path):
            raise FileNotFoundError(f"Archivo no encontrado: {file_path}")
        return self.parser_for(file_path).parse(file_path, pages=pages)

    @classmethod
    def parse_file(cls, file_path: str, pages: Optional[list[int]] = None) -> RawDocument:
        return cls().parse(file_path, pages=pages)
