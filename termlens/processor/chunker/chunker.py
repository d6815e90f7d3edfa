# chunker/chunker.py
from .models import ChunkConfig, Window


class ChunkingError(ValueError):
    """Configuración de ventanas inválida. Se lanza antes de hacer trabajo alguno."""
    pass


def split_windows(document: str, chunk_size: int, overlap_size: int) -> list[Window]:
    """
    Divide el documento en ventanas solapadas con offsets conocidos.

    La primera ventana empieza en 0; cada siguiente empieza en
    `fin_anterior - overlap_size`. Se detiene en cuanto una ventana
    alcanza el final del documento, sin ventana vacía al final.
    Si el documento cabe en una ventana se devuelve exactamente una.
    """
    _validate(chunk_size, overlap_size)

    windows: list[Window] = []
    start = 0
    length = len(document)

    while True:
        end = min(start + chunk_size, length)
        windows.append(Window(index=len(windows), text=document[start:end], start_offset=start))
        if end >= length:
            break
        start = end - overlap_size

    return windows


def _validate(chunk_size: int, overlap_size: int) -> None:
    for name, value in (("chunk_size", chunk_size), ("overlap_size", overlap_size)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ChunkingError(f"{name} debe ser un entero, recibido: {value!r}")
        if value <= 0:
            raise ChunkingError(f"{name} debe ser positivo, recibido: {value}")

    if overlap_size >= chunk_size:
        raise ChunkingError(
            f"overlap_size ({overlap_size}) debe ser menor que chunk_size ({chunk_size})"
        )


class Chunker:

    def __init__(self, config: ChunkConfig | None = None):
        self._config = config or ChunkConfig()
        # Falla al construir, no a mitad de un análisis
        _validate(self._config.chunk_size, self._config.overlap_size)

    @property
    def config(self) -> ChunkConfig:
        return self._config

    def split(self, document: str) -> list[Window]:
        return split_windows(document, self._config.chunk_size, self._config.overlap_size)
