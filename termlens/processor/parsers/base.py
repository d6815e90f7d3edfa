from abc import ABC, abstractmethod
from typing import Optional

from termlens.processor.models import RawDocument


class BaseParser(ABC):
    @abstractmethod
    def can_handle(self, file_path: str) -> bool:
        """Devuelve True si el parser puede manejar el archivo."""
        raise NotImplementedError

    @abstractmethod
    def parse(self, file_path: str, pages: Optional[list[int]] = None) -> RawDocument:
        """
        Parsea el archivo y devuelve un RawDocument saneado.
        `pages` (1-indexed) solo tiene sentido en formatos paginados.
        """
        raise NotImplementedError
