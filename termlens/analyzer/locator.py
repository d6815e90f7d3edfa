# analyzer/locator.py
import re
from typing import Optional

from termlens.analyzer.models import Span
from termlens.processor.chunker.models import Window


def locate(term: str, window: Window) -> Optional[Span]:
    """
    Busca la primera aparición de `term` en el texto de la ventana,
    sin distinguir mayúsculas, y la traduce a posición absoluta.

    Devuelve None si el término no aparece literalmente (el modelo lo
    parafraseó o lo inventó). Solo se busca dentro de la ventana que
    reportó el término, nunca en el documento completo.
    """
    if not term:
        return None

    # re.IGNORECASE compara carácter a carácter: los índices del match
    # son índices del texto de la ventana, sin desfases por lower()
    match = re.search(re.escape(term), window.text, re.IGNORECASE)
    if match is None:
        return None

    start = window.start_offset + match.start()
    return Span(start=start, end=start + len(term))
