from dataclasses import dataclass


@dataclass(frozen=True)
class Window:
    """
    Unidad de trabajo del pipeline: un substring contiguo del documento
    con su offset absoluto de inicio.
    """
    index:        int
    text:         str
    start_offset: int

    @property
    def end_offset(self) -> int:
        return self.start_offset + len(self.text)


@dataclass
class ChunkConfig:
    """Configuracion del chunker. Centralizada y explicita."""
    chunk_size:   int = 3000   # caracteres por ventana
    overlap_size: int = 200    # solape entre ventanas consecutivas
